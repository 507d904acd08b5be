# Licensed under a 3-clause BSD style license - see LICENSE.rst
"""
This subpackage contains PSF models that provide the PSF shape and a
rendered PSF image at a given position.
"""

from .models import *  # noqa: F401, F403
