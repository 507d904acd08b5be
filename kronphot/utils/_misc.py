# Licensed under a 3-clause BSD style license - see LICENSE.rst
"""
This module provides the metadata attached to output tables.
"""

import dataclasses
import importlib
import platform
from datetime import datetime, timezone

_VERSION_PACKAGES = ('kronphot', 'astropy', 'numpy', 'scipy')


def _get_version_info():
    """
    Return the Python version and the installed versions of kronphot
    and its dependencies (`None` for packages that cannot be imported).
    """
    versions = {'Python': platform.python_version()}
    for package in _VERSION_PACKAGES:
        try:
            module = importlib.import_module(package)
        except ImportError:
            versions[package] = None
        else:
            versions[package] = getattr(module, '__version__', None)

    return versions


def _get_meta(config=None, utc=False):
    """
    Return the metadata for a Kron photometry table.

    Parameters
    ----------
    config : `~kronphot.kron.KronConfig`, optional
        The measurement configuration. If input, its parameters are
        stored under the ``'kron_config'`` key.

    utc : bool, optional
        Whether to report the date in UTC instead of the local
        timezone.

    Returns
    -------
    meta : dict
        A dictionary with the ``'date'`` and ``'version'`` keys and,
        optionally, ``'kron_config'``.
    """
    now = datetime.now(timezone.utc) if utc else datetime.now().astimezone()
    meta = {'date': now.strftime('%Y-%m-%d %H:%M:%S %Z'),
            'version': _get_version_info()}
    if config is not None:
        meta['kron_config'] = dataclasses.asdict(config)

    return meta
