"""
Hand Tracking Input Package

Turns per-frame skeletal hand sensor data into stable hand sessions with
canonical joint poses, a pinch (select) state and a pointer ray.
"""

__version__ = "1.0.0"

from . import data
from . import hand
from . import gesture
from . import tracking
from . import utils
