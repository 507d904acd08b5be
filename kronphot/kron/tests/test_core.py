# Licensed under a 3-clause BSD style license - see LICENSE.rst
"""
Tests for the core module.
"""

import math

import numpy as np
import pytest
from astropy.modeling.models import AffineTransformation2D
from astropy.table import QTable
from numpy.testing import assert_allclose, assert_equal

from kronphot.aperture.ellipse import EllipseAxes, EllipticalAperture
from kronphot.kron.config import KronConfig
from kronphot.kron.core import KronPhotometry
from kronphot.kron.flags import KRON_FLAGS
from kronphot.kron.source import KronSource
from kronphot.psf.models import GaussianPsf
from kronphot.utils.exceptions import (BadKronIntegralError,
                                       KronConfigurationError, KronEdgeError,
                                       KronFailureWarning,
                                       KronRadiusUnderflowError)
from kronphot.utils.image import PixelImage

GAUSSIAN_KRON_FACTOR = math.sqrt(math.pi / 2.0)


def _identity():
    return AffineTransformation2D(matrix=[[1.0, 0.0], [0.0, 1.0]],
                                  translation=[0.0, 0.0])


class TestKronPhotometryMeasure:
    def test_gaussian(self, gaussian_image, gaussian_source):
        kronphot = KronPhotometry()
        result = kronphot.measure(gaussian_image, gaussian_source)

        assert gaussian_source.kron is result
        assert result.flags == 0
        assert not result.failure

        radius = GAUSSIAN_KRON_FACTOR * 3.0
        assert_allclose(result.radius, radius, rtol=0.02)
        assert_allclose(result.radius_for_radius, 18.0)
        assert_allclose(result.psf_radius, GAUSSIAN_KRON_FACTOR * 1.5)

        # flux of a Gaussian within 2.5 Kron radii
        fraction = 1.0 - np.exp(-(2.5 * radius / 3.0)**2 / 2.0)
        assert_allclose(result.flux, 1000.0 * fraction, rtol=0.01)

        area = np.pi * (2.5 * result.radius)**2
        assert result.flux_err < np.sqrt(area)
        assert result.flux_err > 0.95 * np.sqrt(area)

    def test_idempotent(self, gaussian_image, gaussian_source):
        kronphot = KronPhotometry()
        result1 = kronphot.measure(gaussian_image, gaussian_source)
        result2 = kronphot.measure(gaussian_image, gaussian_source)
        assert result1 == result2
        assert result1 is not result2

    def test_center(self, gaussian_image, gaussian_source):
        kronphot = KronPhotometry()
        result1 = kronphot.measure(gaussian_image, gaussian_source)
        result2 = kronphot.measure(gaussian_image, gaussian_source,
                                   center=(32, 32))
        assert result1 == result2

    def test_minimum_radius_floor(self, gaussian_image, gaussian_source):
        config = KronConfig(minimum_radius=5.0)
        result = KronPhotometry(config).measure(gaussian_image,
                                                gaussian_source)
        assert_allclose(result.radius, 5.0)
        assert result.flags == (KRON_FLAGS.SMALL_RADIUS
                                | KRON_FLAGS.USED_MINIMUM_RADIUS)
        assert not result.failure

        config = KronConfig(minimum_radius=2.0)
        result = KronPhotometry(config).measure(gaussian_image,
                                                gaussian_source)
        assert result.flags == 0
        assert result.radius > 2.0

    def test_psf_radius_floor(self, make_gaussian_image, gaussian_source):
        image = make_gaussian_image(psf=GaussianPsf(4.0))
        result = KronPhotometry().measure(image, gaussian_source)
        assert_allclose(result.radius, GAUSSIAN_KRON_FACTOR * 4.0)
        assert_allclose(result.psf_radius, GAUSSIAN_KRON_FACTOR * 4.0)
        assert result.flags == (KRON_FLAGS.SMALL_RADIUS
                                | KRON_FLAGS.USED_PSF_RADIUS)

    def test_no_floor(self, make_gaussian_image, gaussian_source):
        image = make_gaussian_image()
        match = 'No minimum radius and no PSF provided'
        with pytest.raises(KronConfigurationError, match=match):
            KronPhotometry().measure(image, gaussian_source)

        config = KronConfig(enforce_minimum_radius=False)
        result = KronPhotometry(config).measure(image, gaussian_source)
        assert result.flags == 0
        assert np.isnan(result.psf_radius)
        assert_allclose(result.radius, GAUSSIAN_KRON_FACTOR * 3.0,
                        rtol=0.02)

    def test_fallback_minimum_radius(self):
        image = PixelImage(np.zeros((64, 64)))
        source = KronSource((32.0, 32.0), EllipseAxes(4.0, 4.0))
        config = KronConfig(minimum_radius=2.0)
        result = KronPhotometry(config).measure(image, source)

        assert result.flags == (KRON_FLAGS.BAD_RADIUS
                                | KRON_FLAGS.USED_MINIMUM_RADIUS)
        assert not result.failure
        assert result.radius == 2.0
        assert result.flux == 0.0
        assert np.isnan(result.radius_for_radius)

    def test_fallback_psf_radius(self):
        psf = GaussianPsf(1.5)
        image = PixelImage(np.zeros((64, 64)), psf=psf)
        source = KronSource((32.0, 32.0), EllipseAxes(3.0, 2.0, 0.4))
        result = KronPhotometry().measure(image, source)

        assert result.get_flag('bad_radius')
        assert result.get_flag('used_psf_radius')
        assert not result.get_flag('used_minimum_radius')
        assert not result.failure
        assert_allclose(result.radius, GAUSSIAN_KRON_FACTOR * 1.5)

    def test_fallback_unavailable(self):
        image = PixelImage(np.zeros((64, 64)))
        source = KronSource((32.0, 32.0), EllipseAxes(3.0, 3.0))
        match = 'no minimum radius specified, and no PSF'
        with pytest.raises(BadKronIntegralError, match=match):
            KronPhotometry().measure(image, source)
        assert source.kron.get_flag('bad_radius')
        assert source.kron.failure

    def test_bad_shape(self, gaussian_image):
        source = KronSource((32.0, 32.0))
        result = KronPhotometry().measure(gaussian_image, source)
        assert result.flags == KRON_FLAGS.BAD_SHAPE | KRON_FLAGS.FAILURE
        assert result.failure

        # the solver starts from the PSF shape (sigma=1.5), so the
        # Gaussian is truncated at 3 sigma
        assert_allclose(result.radius, 3.69, rtol=0.02)
        assert np.isfinite(result.flux)

    def test_bad_shape_no_psf(self, make_gaussian_image):
        image = make_gaussian_image()
        source = KronSource((32.0, 32.0), EllipseAxes(3.0, 3.0),
                            shape_flag=True)
        with pytest.raises(KronConfigurationError, match='Bad shape and no '
                           'PSF'):
            KronPhotometry().measure(image, source)

    def test_degenerate_shape(self, gaussian_image):
        source = KronSource((32.0, 32.0), EllipseAxes(3.0, 0.0))
        config = KronConfig(minimum_radius=2.0)
        result = KronPhotometry(config).measure(gaussian_image, source)
        assert result.flags == (KRON_FLAGS.FAILURE | KRON_FLAGS.BAD_RADIUS
                                | KRON_FLAGS.USED_MINIMUM_RADIUS)
        assert result.radius == 2.0
        assert np.isfinite(result.flux)

    def test_edge_first_iteration(self, make_gaussian_image):
        image = make_gaussian_image(center=(5.0, 32.0), psf=GaussianPsf(1.5))
        source = KronSource((5.0, 32.0), EllipseAxes(3.0, 3.0))
        with pytest.raises(KronEdgeError, match='Determining Kron aperture'):
            KronPhotometry().measure(image, source)

        result = source.kron
        assert result.flags == KRON_FLAGS.EDGE | KRON_FLAGS.FAILURE
        assert np.isnan(result.flux)
        assert np.isnan(result.radius)

    def test_edge_flux_aperture(self, make_gaussian_image):
        image = make_gaussian_image(center=(20.0, 32.0),
                                    psf=GaussianPsf(1.5))
        source = KronSource((20.0, 32.0), EllipseAxes(3.0, 3.0))
        config = KronConfig(n_radius_for_flux=6.0, max_sinc_radius=30.0)
        with pytest.raises(KronEdgeError, match='Measuring Kron flux'):
            KronPhotometry(config).measure(image, source)
        assert source.kron.flags == KRON_FLAGS.EDGE | KRON_FLAGS.FAILURE

        # large apertures are summed over the pixels within the image
        config = KronConfig(n_radius_for_flux=6.0)
        result = KronPhotometry(config).measure(image, source)
        assert not result.failure
        assert np.isfinite(result.flux)

    def test_fixed(self, gaussian_image, gaussian_source):
        config = KronConfig(fixed=True)
        result = KronPhotometry(config).measure(gaussian_image,
                                                gaussian_source)
        assert result.radius == 3.0
        assert np.isnan(result.radius_for_radius)
        assert result.flags == 0

    def test_fixed_ignores_footprint_radius(self, make_gaussian_image):
        image = make_gaussian_image(shape=(100, 100), center=(50.0, 50.0),
                                    psf=GaussianPsf(1.5))
        footprint = EllipticalAperture((50.0, 50.0), 40.0,
                                       40.0).to_footprint()
        source = KronSource((50.0, 50.0), EllipseAxes(3.0, 3.0),
                            footprint=footprint)

        config = KronConfig(fixed=True, use_footprint_radius=True)
        result = KronPhotometry(config).measure(image, source)
        assert result.radius == 3.0
        assert np.isnan(result.radius_for_radius)
        assert result.flags == 0

    def test_radius_underflow(self, gaussian_image):
        source = KronSource((32.0, 32.0), EllipseAxes(1.0e-20, 1.0e-20))
        config = KronConfig(fixed=True, enforce_minimum_radius=False)
        with pytest.raises(KronRadiusUnderflowError):
            KronPhotometry(config).measure(gaussian_image, source)
        assert source.kron.flags == (KRON_FLAGS.FAILURE
                                     | KRON_FLAGS.BAD_RADIUS)

    def test_use_footprint_radius(self, make_gaussian_image):
        image = make_gaussian_image(shape=(100, 100), center=(50.0, 50.0),
                                    psf=GaussianPsf(1.5))
        footprint = EllipticalAperture((50.0, 50.0), 40.0,
                                       40.0).to_footprint()
        source = KronSource((50.0, 50.0), EllipseAxes(3.0, 3.0),
                            footprint=footprint)

        config = KronConfig(use_footprint_radius=True)
        result = KronPhotometry(config).measure(image, source)

        # the footprint radius sets the starting radius, which is larger
        # than the Kron radius of the Gaussian
        footprint_radius = (footprint.shape.scale(math.sqrt(2.0))
                            .determinant_radius)
        assert_allclose(result.radius_for_radius, footprint_radius)
        assert_allclose(result.radius, footprint_radius / 6.0)
        assert result.flags == 0

        # a small footprint does not change the starting radius
        footprint = EllipticalAperture((50.0, 50.0), 5.0,
                                       5.0).to_footprint()
        source = KronSource((50.0, 50.0), EllipseAxes(3.0, 3.0),
                            footprint=footprint)
        result = KronPhotometry(config).measure(image, source)
        assert_allclose(result.radius_for_radius, 18.0)

    def test_smoothing(self, gaussian_image, gaussian_source):
        config = KronConfig(smoothing_sigma=1.0)
        result = KronPhotometry(config).measure(gaussian_image,
                                                gaussian_source)
        assert_allclose(result.radius,
                        GAUSSIAN_KRON_FACTOR * math.sqrt(10.0), rtol=0.02)
        assert_allclose(result.psf_radius,
                        GAUSSIAN_KRON_FACTOR * math.hypot(1.5, 1.0))


class TestKronPhotometryForced:
    def test_identity(self, gaussian_image, gaussian_source):
        kronphot = KronPhotometry()
        ref_result = kronphot.measure(gaussian_image, gaussian_source)

        source = KronSource((32.0, 32.0))
        result = kronphot.measure_forced(gaussian_image, source,
                                         gaussian_source, _identity())
        assert source.kron is result
        assert result.flags == 0
        assert_allclose(result.flux, ref_result.flux, rtol=1.0e-10)
        assert_allclose(result.flux_err, ref_result.flux_err, rtol=1.0e-10)
        assert_allclose(result.radius, ref_result.radius, rtol=1.0e-10)
        assert np.isnan(result.radius_for_radius)
        assert_allclose(result.psf_radius, ref_result.psf_radius)

    def test_translation(self, make_gaussian_image, gaussian_image,
                         gaussian_source):
        kronphot = KronPhotometry()
        ref_result = kronphot.measure(gaussian_image, gaussian_source)

        image = make_gaussian_image(center=(37.0, 35.0))
        affine = AffineTransformation2D(matrix=[[1.0, 0.0], [0.0, 1.0]],
                                        translation=[5.0, 3.0])
        source = KronSource((37.0, 35.0))
        result = kronphot.measure_forced(image, source, gaussian_source,
                                         affine)
        assert_allclose(result.flux, ref_result.flux, rtol=1.0e-10)
        assert np.isnan(result.psf_radius)

    def test_scale(self, gaussian_image, gaussian_source):
        kronphot = KronPhotometry()
        ref_result = kronphot.measure(gaussian_image, gaussian_source)

        affine = AffineTransformation2D(matrix=[[2.0, 0.0], [0.0, 2.0]],
                                        translation=[-32.0, -32.0])
        source = KronSource((32.0, 32.0))
        result = kronphot.measure_forced(gaussian_image, source,
                                         gaussian_source, affine)
        assert_allclose(result.radius, 2.0 * ref_result.radius)
        assert result.flux > ref_result.flux

    def test_invalid_reference(self, gaussian_image):
        kronphot = KronPhotometry()
        source = KronSource((32.0, 32.0))

        reference = KronSource((32.0, 32.0))
        with pytest.raises(KronConfigurationError, match='no shape'):
            kronphot.measure_forced(gaussian_image, source, reference,
                                    _identity())

        reference = KronSource((32.0, 32.0), EllipseAxes(3.0, 3.0))
        with pytest.raises(KronConfigurationError, match='no Kron radius'):
            kronphot.measure_forced(gaussian_image, source, reference,
                                    _identity())

    def test_edge(self, gaussian_image, gaussian_source):
        kronphot = KronPhotometry()
        kronphot.measure(gaussian_image, gaussian_source)
        affine = AffineTransformation2D(matrix=[[1.0, 0.0], [0.0, 1.0]],
                                        translation=[-27.0, 0.0])
        source = KronSource((5.0, 32.0))
        with pytest.raises(KronEdgeError):
            kronphot.measure_forced(gaussian_image, source, gaussian_source,
                                    affine)
        assert source.kron.flags == KRON_FLAGS.EDGE | KRON_FLAGS.FAILURE


class TestKronPhotometryCatalog:
    def test_call(self, gaussian_image, gaussian_source):
        edge_source = KronSource((3.0, 32.0), EllipseAxes(3.0, 3.0))
        sources = [gaussian_source, edge_source]

        match = 'The Kron measurement failed for 1 of 2 sources'
        with pytest.warns(KronFailureWarning, match=match):
            table = KronPhotometry()(gaussian_image, sources)

        assert isinstance(table, QTable)
        assert len(table) == 2
        colnames = ['id', 'xcentroid', 'ycentroid', 'kron_flux',
                    'kron_fluxerr', 'kron_radius', 'kron_radius_for_radius',
                    'kron_psf_radius', 'flags']
        assert table.colnames == colnames
        assert_equal(table['id'], [1, 2])
        assert_allclose(table['xcentroid'], [32.0, 3.0])
        assert_equal(table['flags'], [0, KRON_FLAGS.EDGE
                                      | KRON_FLAGS.FAILURE])
        assert np.isfinite(table['kron_flux'][0])
        assert np.isnan(table['kron_flux'][1])
        assert table['kron_flux'][0] == gaussian_source.kron.flux
        assert 'version' in table.meta
        assert table.meta['kron_config']['n_radius_for_flux'] == 2.5
        assert 'date' in table.meta

    def test_call_single_source(self, gaussian_image, gaussian_source):
        table = KronPhotometry()(gaussian_image, gaussian_source)
        assert len(table) == 1
        assert table['flags'][0] == 0

    def test_call_ids(self, gaussian_image):
        sources = [KronSource((32.0, 32.0), EllipseAxes(3.0, 3.0), id=10),
                   KronSource((32.0, 32.0), EllipseAxes(3.0, 3.0))]
        table = KronPhotometry()(gaussian_image, sources)
        assert_equal(table['id'], [10, 2])

    def test_call_configuration_error(self, gaussian_image):
        source = KronSource((32.0, 32.0))
        image = PixelImage(gaussian_image.data)
        with pytest.warns(KronFailureWarning):
            table = KronPhotometry()(image, [source])
        assert table['flags'][0] == KRON_FLAGS.FAILURE

    def test_forced(self, gaussian_image, gaussian_source):
        kronphot = KronPhotometry()
        ref_table = kronphot(gaussian_image, [gaussian_source])

        sources = [KronSource((32.0, 32.0), id=1)]
        table = kronphot.forced(gaussian_image, sources, [gaussian_source],
                                _identity())
        assert_allclose(table['kron_flux'], ref_table['kron_flux'])
        assert_equal(table['flags'], [0])

        with pytest.raises(ValueError, match='same length'):
            kronphot.forced(gaussian_image, sources, [], _identity())

    def test_forced_repeated_source(self, gaussian_image):
        fixed = KronPhotometry(KronConfig(fixed=True,
                                          enforce_minimum_radius=False))
        references = [KronSource((32.0, 32.0), EllipseAxes(3.0, 3.0)),
                      KronSource((32.0, 32.0), EllipseAxes(6.0, 6.0))]
        for reference in references:
            fixed.measure(gaussian_image, reference)

        # the same source object is matched to each reference in turn
        source = KronSource((32.0, 32.0))
        table = KronPhotometry().forced(gaussian_image, [source, source],
                                        references, _identity())
        assert_allclose(table['kron_radius'], [3.0, 6.0])

    def test_forced_failure(self, gaussian_image, gaussian_source):
        kronphot = KronPhotometry()
        sources = [KronSource((32.0, 32.0)), KronSource((30.0, 30.0))]
        references = [gaussian_source, KronSource((30.0, 30.0))]
        with pytest.warns(KronFailureWarning):
            table = kronphot.forced(gaussian_image, sources, references,
                                    _identity())
        assert_equal(table['flags'], [KRON_FLAGS.FAILURE,
                                      KRON_FLAGS.FAILURE])

    def test_invalid_inputs(self, gaussian_image, gaussian_source):
        kronphot = KronPhotometry()
        with pytest.raises(TypeError):
            kronphot(gaussian_image.data, [gaussian_source])
        with pytest.raises(TypeError):
            kronphot(gaussian_image, [(32.0, 32.0)])
        with pytest.raises(TypeError):
            KronPhotometry(config={'minimum_radius': 2.0})


def test_psf_flux_factor(gaussian_image):
    kronphot = KronPhotometry()
    factor = kronphot.psf_flux_factor(gaussian_image, (32.0, 32.0), 3.0)
    assert 0.0 < factor < 1.0
    assert_allclose(factor, 1.0 - np.exp(-9.0 / (2.0 * 1.5**2)), rtol=0.03)

    image = PixelImage(gaussian_image.data)
    assert kronphot.psf_flux_factor(image, (32.0, 32.0), 3.0) == 1.0


def test_repr():
    kronphot = KronPhotometry(KronConfig(minimum_radius=1.0))
    assert 'minimum_radius=1.0' in repr(kronphot)

