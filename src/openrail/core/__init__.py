"""
Core module - Shared utilities, configuration, and errors.
"""

from openrail.core.config import ConfigManager, RailAxisConfig, RailConfig, SamplerConfig
from openrail.core.exceptions import (
    CollisionRejected,
    ConfigurationError,
    GeometryError,
    InvalidCandidate,
    KinematicsError,
    MotionPlanningError,
    OpenRailError,
    ReachExceeded,
    UnreachablePose,
)
from openrail.core.transforms import (
    as_matrix,
    invert_transform,
    pose_from_xyzrpy,
    tool_pose_in_rail_frame,
    translation_norm,
)

__all__ = [
    # Config
    "ConfigManager",
    "RailAxisConfig",
    "RailConfig",
    "SamplerConfig",
    # Exceptions
    "OpenRailError",
    "ConfigurationError",
    "GeometryError",
    "KinematicsError",
    "MotionPlanningError",
    "UnreachablePose",
    "ReachExceeded",
    "InvalidCandidate",
    "CollisionRejected",
    # Transforms
    "as_matrix",
    "invert_transform",
    "pose_from_xyzrpy",
    "tool_pose_in_rail_frame",
    "translation_norm",
]
