# Licensed under a 3-clause BSD style license - see LICENSE.rst
"""
Subpackage providing the image container, exceptions, and general
utility functions used by the other subpackages.
"""

from ._convolution import *  # noqa: F401, F403
from .exceptions import *  # noqa: F401, F403
from .image import *  # noqa: F401, F403
