# Licensed under a 3-clause BSD style license - see LICENSE.rst
"""
This subpackage contains tools to measure Kron radii and Kron fluxes
of sources.
"""

from .config import *  # noqa: F401, F403
from .core import *  # noqa: F401, F403
from .flags import *  # noqa: F401, F403
from .moments import *  # noqa: F401, F403
from .psf_radius import *  # noqa: F401, F403
from .solver import *  # noqa: F401, F403
from .source import *  # noqa: F401, F403
