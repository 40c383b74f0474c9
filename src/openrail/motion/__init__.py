"""
Motion module - Rail kinematics and candidate configuration sampling.

This module provides:
- Rail forward kinematics and the rail sample grid
- Kinematics and collision capability interfaces
- A numerical IK backend (scipy) and a clearance-based collision checker
- Tool-pose samplers for axially symmetric tools
- The railed sampler itself
"""

from openrail.motion.collision import (
    ClearanceCollisionChecker,
    CollisionInterface,
    SphereObstacle,
    SphereObstacleField,
)
from openrail.motion.external_axes import (
    ExternalAxis,
    ExternalAxisType,
    RailKinematics,
    build_rail_grid,
    create_gantry,
    create_linear_track,
    rail_from_config,
    rail_grid_size,
)
from openrail.motion.kinematics import (
    ForwardKinematics,
    InverseKinematics,
    NumericalIKSolver,
    joint_limits_validator,
)
from openrail.motion.sampler import (
    BestClearanceStrategy,
    CollectAllStrategy,
    RailedSampler,
    SampleResult,
    SearchMode,
    SearchStats,
    iter_rail_points,
    search_passes,
    search_workload,
)
from openrail.motion.tool_pose import (
    identity_tool_pose_sampler,
    make_z_axis_tool_pose_sampler,
)

__all__ = [
    "ClearanceCollisionChecker",
    "CollisionInterface",
    "SphereObstacle",
    "SphereObstacleField",
    "ExternalAxis",
    "ExternalAxisType",
    "RailKinematics",
    "build_rail_grid",
    "create_gantry",
    "create_linear_track",
    "rail_from_config",
    "rail_grid_size",
    "ForwardKinematics",
    "InverseKinematics",
    "NumericalIKSolver",
    "joint_limits_validator",
    "BestClearanceStrategy",
    "CollectAllStrategy",
    "RailedSampler",
    "SampleResult",
    "SearchMode",
    "SearchStats",
    "iter_rail_points",
    "search_passes",
    "search_workload",
    "identity_tool_pose_sampler",
    "make_z_axis_tool_pose_sampler",
]
