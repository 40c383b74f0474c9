"""
OpenRail - Candidate configurations for rail-mounted robots

Samples the travel of external positioning axes (linear tracks, gantries,
rotary stages) and solves the mounted robot's inverse kinematics at every
rail position to find joint configurations reaching a tool pose.
"""

__version__ = "0.1.0"
__author__ = "OpenRail Contributors"

from openrail.core.config import ConfigManager
from openrail.motion.sampler import RailedSampler, SampleResult

__all__ = [
    "__version__",
    "ConfigManager",
    "RailedSampler",
    "SampleResult",
]
