# Licensed under a 3-clause BSD style license - see LICENSE.rst
"""
Tests for the photometry module.
"""

import numpy as np
import pytest
from numpy.testing import assert_allclose

from kronphot.aperture.ellipse import EllipticalAperture
from kronphot.aperture.photometry import (integrate_aperture,
                                          subpixel_aperture_flux)
from kronphot.utils.exceptions import KronEdgeError
from kronphot.utils.image import PixelImage


@pytest.fixture(name='flat_image')
def fixture_flat_image():
    return PixelImage(np.ones((40, 40)), variance=np.full((40, 40), 2.0))


@pytest.mark.parametrize('theta', (0.0, 0.4, 1.3))
def test_subpixel_aperture_flux(flat_image, theta):
    aper = EllipticalAperture((20.0, 20.0), 8.0, 5.0, theta=theta)
    flux, variance = subpixel_aperture_flux(flat_image, aper, subpixels=16)
    assert_allclose(flux, aper.area, rtol=5.0e-3)
    assert variance < 2.0 * flux
    assert variance > 0.85 * 2.0 * flux


def test_subpixel_aperture_flux_origin():
    data = np.zeros((40, 40))
    data[20, 20] = 5.0
    image = PixelImage(data, origin=(100, 50))
    aper = EllipticalAperture((120.0, 70.0), 3.0, 3.0)
    flux, _ = subpixel_aperture_flux(image, aper)
    assert_allclose(flux, 5.0)


def test_subpixel_aperture_flux_edge(flat_image):
    aper = EllipticalAperture((3.0, 20.0), 5.0, 5.0)
    with pytest.raises(KronEdgeError):
        subpixel_aperture_flux(flat_image, aper)


def test_integrate_aperture_direct_sum(flat_image):
    aper = EllipticalAperture((20.0, 20.0), 12.0, 11.0)
    flux, flux_err = integrate_aperture(flat_image, aper, max_sinc_radius=10.0)
    npixels = aper.to_footprint().npixels
    assert flux == npixels
    assert_allclose(flux_err, np.sqrt(2.0 * npixels))


def test_integrate_aperture_precise(flat_image):
    aper = EllipticalAperture((20.0, 20.0), 8.0, 6.0)
    flux, flux_err = integrate_aperture(flat_image, aper, max_sinc_radius=10.0)
    expected = subpixel_aperture_flux(flat_image, aper)
    assert flux == expected[0]
    assert_allclose(flux_err, np.sqrt(expected[1]))


def test_integrate_aperture_boundary(flat_image):
    """
    An aperture with b == max_sinc_radius uses the fractional-pixel
    integrator, which requires the aperture to be inside the image,
    while a slightly larger aperture is summed over the clipped
    footprint.
    """
    max_sinc_radius = 10.0
    eps = 1.0e-6
    position = (5.0, 20.0)

    for radius in (max_sinc_radius - eps, max_sinc_radius):
        aper = EllipticalAperture(position, radius, radius)
        match = r'Measuring Kron flux for object at \(5.000, 20.000\)'
        with pytest.raises(KronEdgeError, match=match):
            integrate_aperture(flat_image, aper, max_sinc_radius)

    radius = max_sinc_radius + eps
    aper = EllipticalAperture(position, radius, radius)
    flux, flux_err = integrate_aperture(flat_image, aper, max_sinc_radius)
    npixels = aper.to_footprint(clip_bbox=flat_image.bbox).npixels
    assert flux == npixels
    assert_allclose(flux_err, np.sqrt(2.0 * npixels))
