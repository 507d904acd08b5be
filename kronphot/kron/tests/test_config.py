# Licensed under a 3-clause BSD style license - see LICENSE.rst
"""
Tests for the config module.
"""

import dataclasses

import numpy as np
import pytest

from kronphot.kron.config import KronConfig


def test_config_defaults():
    config = KronConfig()
    assert config.smoothing_sigma == -1.0
    assert config.n_iter_for_radius == 1
    assert config.n_sigma_for_radius == 6.0
    assert config.minimum_radius == 0.0
    assert config.enforce_minimum_radius
    assert not config.fixed
    assert not config.use_footprint_radius
    assert config.n_radius_for_flux == 2.5
    assert config.max_sinc_radius == 10.0
    assert config.subpixels == 16


def test_config_frozen():
    config = KronConfig()
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.minimum_radius = 2.0


def test_config_replace():
    config = KronConfig()
    new_config = config.replace(minimum_radius=2.0, n_iter_for_radius=3)
    assert new_config.minimum_radius == 2.0
    assert new_config.n_iter_for_radius == 3
    assert config.minimum_radius == 0.0
    assert new_config != config
    assert config.replace() == config


@pytest.mark.parametrize('name', ['smoothing_sigma', 'n_sigma_for_radius',
                                  'minimum_radius', 'n_radius_for_flux',
                                  'max_sinc_radius'])
@pytest.mark.parametrize('value', [np.nan, np.inf, 'a', None, True])
def test_config_invalid_float(name, value):
    match = 'must be a finite scalar'
    with pytest.raises(ValueError, match=match):
        KronConfig(**{name: value})


@pytest.mark.parametrize('name', ['n_iter_for_radius', 'subpixels'])
@pytest.mark.parametrize('value', [1.0, '2', None, False])
def test_config_invalid_int(name, value):
    with pytest.raises(TypeError, match='must be an integer'):
        KronConfig(**{name: value})


@pytest.mark.parametrize('kwargs', [{'n_iter_for_radius': -1},
                                    {'subpixels': 0},
                                    {'n_sigma_for_radius': 0.0},
                                    {'n_radius_for_flux': -1.0},
                                    {'minimum_radius': -0.5},
                                    {'max_sinc_radius': -1.0}])
def test_config_invalid_range(kwargs):
    with pytest.raises(ValueError):
        KronConfig(**kwargs)


def test_config_numpy_values():
    config = KronConfig(minimum_radius=np.float32(2.0),
                        n_iter_for_radius=np.int64(2))
    assert config.minimum_radius == 2.0
    assert config.n_iter_for_radius == 2
