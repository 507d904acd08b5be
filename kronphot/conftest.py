# Licensed under a 3-clause BSD style license - see LICENSE.rst
"""
Configuration file for the pytest test suite.
"""

from importlib.util import find_spec

# package names and import names shown in the test header
HEADER_MODULES = {'NumPy': 'numpy', 'SciPy': 'scipy', 'Astropy': 'astropy',
                  'tqdm': 'tqdm'}


def pytest_configure(config):
    if find_spec('pytest_astropy_header') is None:
        return

    from pytest_astropy_header.display import (PYTEST_HEADER_MODULES,
                                               TESTED_VERSIONS)

    from kronphot import __version__

    config.option.astropy_header = True
    PYTEST_HEADER_MODULES.clear()
    PYTEST_HEADER_MODULES.update(HEADER_MODULES)
    TESTED_VERSIONS['kronphot'] = __version__
