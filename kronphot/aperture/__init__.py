# Licensed under a 3-clause BSD style license - see LICENSE.rst
"""
This subpackage contains tools to define elliptical apertures and pixel
footprints and to integrate image flux within them.
"""

from .bounding_box import *  # noqa: F401, F403
from .ellipse import *  # noqa: F401, F403
from .footprint import *  # noqa: F401, F403
from .mask import *  # noqa: F401, F403
from .photometry import *  # noqa: F401, F403
