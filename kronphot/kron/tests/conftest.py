# Licensed under a 3-clause BSD style license - see LICENSE.rst
"""
Fixtures used in the kron tests.
"""

import numpy as np
import pytest
from astropy.modeling.models import Gaussian2D

from kronphot.aperture.ellipse import EllipseAxes
from kronphot.kron.source import KronSource
from kronphot.psf.models import GaussianPsf
from kronphot.utils.image import PixelImage


def _make_gaussian_image(shape=(64, 64), center=(32.0, 32.0), x_stddev=3.0,
                         y_stddev=None, theta=0.0, flux=1000.0, variance=1.0,
                         origin=(0, 0), psf=None):
    if y_stddev is None:
        y_stddev = x_stddev
    amplitude = flux / (2.0 * np.pi * x_stddev * y_stddev)
    model = Gaussian2D(amplitude, center[0], center[1], x_stddev, y_stddev,
                       theta=theta)
    yy, xx = np.mgrid[0:shape[0], 0:shape[1]]
    data = model(xx + origin[0], yy + origin[1])
    return PixelImage(data, variance=np.full(shape, variance),
                      origin=origin, psf=psf)


@pytest.fixture(name='make_gaussian_image')
def fixture_make_gaussian_image():
    """
    A function to create an image of a 2D Gaussian source.
    """
    return _make_gaussian_image


@pytest.fixture(name='gaussian_image')
def fixture_gaussian_image():
    """
    A 64x64 image of a circular Gaussian (sigma=3) at (32, 32) with a
    Gaussian PSF (sigma=1.5).
    """
    return _make_gaussian_image(psf=GaussianPsf(1.5))


@pytest.fixture(name='gaussian_source')
def fixture_gaussian_source():
    return KronSource((32.0, 32.0), EllipseAxes(3.0, 3.0), id=1)
