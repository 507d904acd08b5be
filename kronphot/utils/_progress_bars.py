# Licensed under a 3-clause BSD style license - see LICENSE.rst
"""
This module provides a progress bar for loops over sources.
"""

import importlib.util
import warnings

from astropy.utils.exceptions import AstropyUserWarning


def _has_tqdm():
    """
    Return whether the optional tqdm package is installed.
    """
    return importlib.util.find_spec('tqdm') is not None


def iter_sources(sources, progress_bar=False, desc=None):
    """
    Return an iterable over sources, optionally wrapped in a progress
    bar.

    Parameters
    ----------
    sources : list
        The sources.

    progress_bar : bool, optional
        Whether to display a progress bar. The progress bar requires
        the optional `tqdm <https://tqdm.github.io/>`_ package. If it is
        not installed, a warning is emitted and ``sources`` is returned.

    desc : str, optional
        The prefix string for the progress bar.

    Returns
    -------
    result : iterable
        ``sources`` or a ``tqdm`` progress bar over them. In a notebook
        with ipywidgets installed, the progress bar is a widget.
    """
    if not progress_bar:
        return sources

    if not _has_tqdm():
        warnings.warn('progress_bar=True requires the optional tqdm '
                      'package; no progress bar is shown.',
                      AstropyUserWarning)
        return sources

    from tqdm.auto import tqdm

    return tqdm(sources, desc=desc, total=len(sources), unit='source')
