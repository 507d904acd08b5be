# Licensed under a 3-clause BSD style license - see LICENSE.rst
"""
This module provides the class to measure Kron fluxes of sources.
"""

import math
import warnings

import numpy as np
from astropy import log
from astropy.table import QTable

from kronphot.aperture.ellipse import EllipseAxes, EllipticalAperture
from kronphot.aperture.photometry import integrate_aperture
from kronphot.kron.config import KronConfig
from kronphot.kron.flags import KRON_FLAGS
from kronphot.kron.psf_radius import psf_flux_factor, psf_kron_radius
from kronphot.kron.solver import determine_kron_aperture
from kronphot.kron.source import KronResult, KronSource
from kronphot.utils._misc import _get_meta
from kronphot.utils._progress_bars import iter_sources
from kronphot.utils.exceptions import (BadKronIntegralError,
                                       KronConfigurationError, KronEdgeError,
                                       KronError, KronFailureWarning,
                                       KronRadiusUnderflowError)
from kronphot.utils.image import PixelImage

__all__ = ['KronPhotometry']


def _rescaled_aperture(position, axes, radius):
    """
    Return an aperture with the orientation and axis ratio of ``axes``
    and the given determinant radius.

    A circular aperture is returned if ``axes`` has a zero determinant
    radius.
    """
    if axes.determinant_radius > 0:
        axes = axes.scale_to(radius)
    else:
        axes = EllipseAxes(radius, radius)
    return EllipticalAperture.from_axes(position, axes)


class KronPhotometry:
    """
    Class to measure the Kron flux of sources.

    The Kron radius is the flux-weighted mean elliptical radius of a
    source, measured within an ellipse grown from the source shape.
    The Kron flux is the flux within an elliptical aperture whose
    determinant radius is ``n_radius_for_flux`` times the Kron radius.

    If the Kron radius cannot be measured (e.g., the radial moment is
    not positive), a fallback radius is used: the configured minimum
    radius or, if that is zero, the Kron radius of the PSF. If enabled,
    the Kron radius is also increased to this floor if it is smaller.
    Each condition is recorded in the flags of the `KronResult`.

    Measurements are independent; the instance holds only the
    immutable configuration.

    Parameters
    ----------
    config : `~kronphot.kron.KronConfig`, optional
        The measurement configuration. If `None`, the default
        configuration is used.

    Examples
    --------
    >>> import numpy as np
    >>> from astropy.modeling.models import Gaussian2D
    >>> from kronphot.aperture import EllipseAxes
    >>> from kronphot.kron import KronPhotometry, KronSource
    >>> from kronphot.psf import GaussianPsf
    >>> from kronphot.utils import PixelImage
    >>> model = Gaussian2D(100.0, 32.0, 32.0, 3.0, 3.0)
    >>> yy, xx = np.mgrid[0:64, 0:64]
    >>> image = PixelImage(model(xx, yy), psf=GaussianPsf(1.5))
    >>> source = KronSource((32.0, 32.0), EllipseAxes(3.0, 3.0))
    >>> result = KronPhotometry().measure(image, source)
    >>> print(f'{result.radius:.1f}')
    3.8
    >>> result.failure
    False
    """

    def __init__(self, config=None):
        if config is None:
            config = KronConfig()
        if not isinstance(config, KronConfig):
            raise TypeError('config must be a KronConfig instance')
        self.config = config

    def __repr__(self):
        return f'{self.__class__.__name__}(config={self.config!r})'

    def _psf_radius(self, image, center):
        if image.psf is None:
            return None
        return psf_kron_radius(image.psf, center,
                               smoothing_sigma=self.config.smoothing_sigma)

    def _apply_aperture(self, image, aperture, result, source_id=None):
        """
        Measure the flux within the Kron aperture scaled by
        ``n_radius_for_flux`` and record it in ``result``.
        """
        radius = aperture.determinant_radius
        if radius < np.finfo(float).eps:
            result.set_flag(KRON_FLAGS.BAD_RADIUS)
            msg = f'Kron radius is < epsilon for source {source_id}'
            raise KronRadiusUnderflowError(msg)

        flux_aperture = aperture.scale(self.config.n_radius_for_flux)
        try:
            flux, flux_err = integrate_aperture(
                image, flux_aperture, self.config.max_sinc_radius,
                subpixels=self.config.subpixels)
        except KronEdgeError:
            result.set_flag(KRON_FLAGS.FAILURE)
            result.set_flag(KRON_FLAGS.EDGE)
            raise

        result.flux = flux
        result.flux_err = flux_err
        result.radius = radius

    def _fallback_aperture(self, source, axes, psf_radius, result, exc):
        """
        Return the source aperture scaled to the fallback radius.
        """
        result.set_flag(KRON_FLAGS.BAD_RADIUS)
        if self.config.minimum_radius > 0:
            radius = self.config.minimum_radius
            result.set_flag(KRON_FLAGS.USED_MINIMUM_RADIUS)
        elif psf_radius is not None and psf_radius > 0:
            radius = psf_radius
            result.set_flag(KRON_FLAGS.USED_PSF_RADIUS)
        else:
            exc.add_context('Bad Kron aperture, no minimum radius specified, '
                            'and no PSF')
            raise exc

        log.debug(f'Source {source.id}: using fallback Kron radius '
                  f'{radius:.4f} ({exc.__class__.__name__})')
        return _rescaled_aperture(source.centroid, axes, radius)

    def measure(self, image, source, center=None):
        """
        Measure the Kron flux of a source.

        The result is written to ``source.kron`` and returned. If an
        exception is raised, ``source.kron`` holds the partially filled
        result with the flags set so far.

        Parameters
        ----------
        image : `~kronphot.utils.PixelImage`
            The image. The PSF attached to the image (if any) is used
            for the bad-shape and fallback radius policies.

        source : `~kronphot.kron.KronSource`
            The source to measure.

        center : tuple of float, optional
            The ``(x, y)`` center of the source. If `None`, the source
            centroid is used.

        Returns
        -------
        result : `~kronphot.kron.KronResult`
            The measurement.

        Raises
        ------
        KronEdgeError
            If the Kron aperture or the flux aperture extends beyond
            the image.

        KronConfigurationError
            If the source shape is bad and the image has no PSF, or if
            the minimum radius is enforced but neither a minimum radius
            nor a PSF is available.

        KronRadiusUnderflowError
            If the final Kron radius is degenerate.

        KronError
            If the Kron radius cannot be measured and no fallback radius
            is available.
        """
        config = self.config
        result = KronResult()
        source.kron = result

        if center is None:
            center = source.centroid
        center = (float(center[0]), float(center[1]))

        # conditions that fundamentally prevent measuring the Kron flux
        # (bad shape or a failed solver), but not low signal-to-noise
        bad = False

        psf_radius = self._psf_radius(image, center)

        if not source.shape_flag:
            axes = source.shape
        else:
            bad = True
            if image.psf is None:
                raise KronConfigurationError('Bad shape and no PSF')
            axes = image.psf.compute_shape(center)
            result.set_flag(KRON_FLAGS.BAD_SHAPE)

        if config.use_footprint_radius and source.footprint is not None:
            # <r^2> = R^2 / 2 for a disk of radius R
            footprint_axes = source.footprint.shape.scale(math.sqrt(2.0))
            radius0 = axes.determinant_radius
            footprint_radius = footprint_axes.determinant_radius
            if footprint_radius > radius0 * config.n_sigma_for_radius:
                radius0 = footprint_radius / config.n_sigma_for_radius
                axes = axes.scale_to(radius0)

        radius_for_radius = np.nan
        if config.fixed:
            aperture = source.aperture
            if aperture is None:
                aperture = EllipticalAperture.from_axes(source.centroid, axes)
        else:
            try:
                aperture, radius_for_radius = determine_kron_aperture(
                    image, axes, center, config)
            except KronEdgeError:
                result.set_flag(KRON_FLAGS.EDGE)
                result.set_flag(KRON_FLAGS.FAILURE)
                raise
            except BadKronIntegralError as exc:
                aperture = self._fallback_aperture(source, axes, psf_radius,
                                                   result, exc)
            except KronError as exc:
                bad = True
                aperture = self._fallback_aperture(source, axes, psf_radius,
                                                   result, exc)

        if config.enforce_minimum_radius:
            radius = aperture.determinant_radius
            new_radius = radius
            if config.minimum_radius > 0:
                if radius < config.minimum_radius:
                    new_radius = config.minimum_radius
                    result.set_flag(KRON_FLAGS.USED_MINIMUM_RADIUS)
            elif psf_radius is None:
                raise KronConfigurationError('No minimum radius and no PSF '
                                             'provided')
            elif radius < psf_radius:
                new_radius = psf_radius
                result.set_flag(KRON_FLAGS.USED_PSF_RADIUS)

            if new_radius != radius:
                aperture = _rescaled_aperture(aperture.position,
                                              aperture.axes, new_radius)
                result.set_flag(KRON_FLAGS.SMALL_RADIUS)

        self._apply_aperture(image, aperture, result, source_id=source.id)
        result.radius_for_radius = radius_for_radius
        result.psf_radius = np.nan if psf_radius is None else psf_radius
        result.set_flag(KRON_FLAGS.FAILURE, bad)

        return result

    def measure_forced(self, image, source, reference, ref_to_meas,
                       center=None):
        """
        Measure the Kron flux of a source using the Kron aperture of a
        reference source.

        The aperture is centered on the reference centroid mapped
        through ``ref_to_meas``. Its shape is the reference shape scaled
        to the reference Kron radius and mapped through the linear part
        of ``ref_to_meas``.

        Parameters
        ----------
        image : `~kronphot.utils.PixelImage`
            The image.

        source : `~kronphot.kron.KronSource`
            The source to measure. Its ``kron`` attribute receives the
            result.

        reference : `~kronphot.kron.KronSource`
            The reference source, with a shape and a Kron measurement
            (``reference.kron``) from a previous `measure` call.

        ref_to_meas : `~astropy.modeling.models.AffineTransformation2D`
            The transformation from the reference pixel frame to the
            pixel frame of ``image``.

        center : tuple of float, optional
            The ``(x, y)`` center of the source, used to evaluate the
            PSF. If `None`, the source centroid is used.

        Returns
        -------
        result : `~kronphot.kron.KronResult`
            The measurement.

        Raises
        ------
        KronConfigurationError
            If the reference source has no shape or no finite Kron
            radius.

        KronEdgeError
            If the flux aperture extends beyond the image.

        KronRadiusUnderflowError
            If the transformed Kron radius is degenerate.
        """
        result = KronResult()
        source.kron = result

        if center is None:
            center = source.centroid
        center = (float(center[0]), float(center[1]))

        if reference.shape is None:
            raise KronConfigurationError('The reference source has no '
                                         'shape')
        ref_radius = np.nan
        if reference.kron is not None:
            ref_radius = reference.kron.radius
        if not np.isfinite(ref_radius):
            raise KronConfigurationError('The reference source has no Kron '
                                         'radius')

        ref_aperture = _rescaled_aperture(reference.centroid,
                                          reference.shape, ref_radius)
        aperture = ref_aperture.transform(ref_to_meas)

        self._apply_aperture(image, aperture, result, source_id=source.id)
        psf_radius = self._psf_radius(image, center)
        if psf_radius is not None:
            result.psf_radius = psf_radius
        result.set_flag(KRON_FLAGS.FAILURE, False)

        return result

    def psf_flux_factor(self, image, center, kron_radius):
        """
        Compute the fraction of the PSF flux within a circular aperture
        of radius ``kron_radius``.

        1.0 is returned if the image has no PSF.

        Parameters
        ----------
        image : `~kronphot.utils.PixelImage`
            The image whose PSF is used.

        center : tuple of float
            The ``(x, y)`` position at which to evaluate the PSF.

        kron_radius : float
            The aperture radius.

        Returns
        -------
        factor : float
            The PSF flux within the aperture.
        """
        return psf_flux_factor(image.psf, center, kron_radius,
                               max_sinc_radius=self.config.max_sinc_radius,
                               subpixels=self.config.subpixels)

    @staticmethod
    def _validate_inputs(image, sources):
        if not isinstance(image, PixelImage):
            raise TypeError('image must be a PixelImage instance')

        if isinstance(sources, KronSource):
            sources = [sources]
        sources = list(sources)
        for source in sources:
            if not isinstance(source, KronSource):
                raise TypeError('sources must contain only KronSource '
                                'instances')
        return sources

    def _measure_sources(self, sources, measure_func, progress_bar, desc):
        """
        Measure each source, catching Kron failures, and return the
        results table.

        ``measure_func`` is called with the index of the source in
        ``sources`` and the source itself.
        """
        nfailed = 0
        results = []
        for idx, source in enumerate(iter_sources(
                sources, progress_bar=progress_bar, desc=desc)):
            try:
                result = measure_func(idx, source)
            except KronError as exc:
                nfailed += 1
                result = source.kron
                log.debug(f'Kron measurement failed for source {source.id}: '
                          f'{exc}')
            results.append(result)

        if nfailed > 0:
            warnings.warn(f'The Kron measurement failed for {nfailed} of '
                          f'{len(sources)} sources. Their flags are set in '
                          'the output table.', KronFailureWarning)

        return self._make_table(sources, results)

    def _make_table(self, sources, results):
        table = QTable(meta=_get_meta(config=self.config))
        ids = [idx + 1 if source.id is None else source.id
               for idx, source in enumerate(sources)]
        table['id'] = ids
        centroids = np.array([source.centroid for source in sources],
                             dtype=float).reshape(-1, 2)
        table['xcentroid'] = centroids[:, 0]
        table['ycentroid'] = centroids[:, 1]

        columns = (('kron_flux', 'flux'), ('kron_fluxerr', 'flux_err'),
                   ('kron_radius', 'radius'),
                   ('kron_radius_for_radius', 'radius_for_radius'),
                   ('kron_psf_radius', 'psf_radius'))
        for column, attr in columns:
            table[column] = np.array([getattr(result, attr)
                                      for result in results], dtype=float)
        table['flags'] = np.array([result.flags for result in results],
                                  dtype=int)

        return table

    def __call__(self, image, sources, progress_bar=False):
        """
        Measure the Kron fluxes of sources.

        Each source is measured independently with `measure`. A
        `~kronphot.utils.exceptions.KronError` raised for a source is
        caught; the source row then holds the values and flags recorded
        before the failure. A single warning reports the number of
        failed sources.

        Parameters
        ----------
        image : `~kronphot.utils.PixelImage`
            The image.

        sources : list of `~kronphot.kron.KronSource`
            The sources to measure. A single source is also accepted.

        progress_bar : bool, optional
            Whether to display a progress bar. The progress bar
            requires that the `tqdm <https://tqdm.github.io/>`_
            optional dependency be installed.

        Returns
        -------
        table : `~astropy.table.QTable`
            A table of the Kron measurements with columns ``id``,
            ``xcentroid``, ``ycentroid``, ``kron_flux``,
            ``kron_fluxerr``, ``kron_radius``,
            ``kron_radius_for_radius``, ``kron_psf_radius``, and
            ``flags``.
        """
        sources = self._validate_inputs(image, sources)
        return self._measure_sources(
            sources, lambda idx, source: self.measure(image, source),
            progress_bar, 'Kron photometry')

    def forced(self, image, sources, references, ref_to_meas,
               progress_bar=False):
        """
        Measure forced Kron fluxes of sources using the Kron apertures
        of reference sources.

        Each source is measured with `measure_forced` using the
        reference source at the same index.

        Parameters
        ----------
        image : `~kronphot.utils.PixelImage`
            The image.

        sources : list of `~kronphot.kron.KronSource`
            The sources to measure.

        references : list of `~kronphot.kron.KronSource`
            The reference sources, with previous Kron measurements.
            Must have the same length as ``sources``.

        ref_to_meas : `~astropy.modeling.models.AffineTransformation2D`
            The transformation from the reference pixel frame to the
            pixel frame of ``image``.

        progress_bar : bool, optional
            Whether to display a progress bar.

        Returns
        -------
        table : `~astropy.table.QTable`
            A table of the forced Kron measurements with the same
            columns as returned by `__call__`.
        """
        sources = self._validate_inputs(image, sources)
        references = self._validate_inputs(image, references)
        if len(sources) != len(references):
            raise ValueError('sources and references must have the same '
                             'length')

        return self._measure_sources(
            sources,
            lambda idx, source: self.measure_forced(image, source,
                                                    references[idx],
                                                    ref_to_meas),
            progress_bar, 'Forced Kron photometry')
