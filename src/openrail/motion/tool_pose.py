"""
Tool-pose samplers.

A tool-pose sampler turns one nominal tool pose into the ordered list of
poses the process accepts. An axially symmetric tool (torch, nozzle,
spindle) works at any rotation about its own z axis, so every rotation is a
valid target.
"""

import math
from typing import Callable, List

import numpy as np
from scipy.spatial.transform import Rotation

from openrail.core.exceptions import ConfigurationError
from openrail.core.transforms import Pose, as_matrix

ToolPoseSampler = Callable[[Pose], List[np.ndarray]]


def identity_tool_pose_sampler(tool_pose: Pose) -> List[np.ndarray]:
    """Only the nominal pose."""
    return [as_matrix(tool_pose)]


def make_z_axis_tool_pose_sampler(resolution: float) -> ToolPoseSampler:
    """
    Sample rotations of the tool about its own z axis.

    Angles start at -pi and advance by ``resolution`` while they stay
    below pi. -pi and pi are the same rotation, so pi itself is never
    sampled.

    Args:
        resolution: Angular step (rad)

    Returns:
        Tool-pose sampler

    Raises:
        ConfigurationError: If resolution is not positive
    """
    if not resolution > 0:
        raise ConfigurationError(
            "Tool pose resolution must be positive", details={"resolution": resolution}
        )

    count = int(math.ceil(2.0 * math.pi / resolution - 1e-9))
    angles = -math.pi + resolution * np.arange(count)

    def sampler(tool_pose: Pose) -> List[np.ndarray]:
        nominal = as_matrix(tool_pose)
        poses = []
        for angle in angles:
            spin = np.eye(4)
            spin[:3, :3] = Rotation.from_euler("z", angle).as_matrix()
            poses.append(nominal @ spin)
        return poses

    return sampler
