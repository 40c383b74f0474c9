"""
Rigid transform helpers for OpenRail.

Poses cross the public API as COMPAS ``Transformation`` or ``Frame`` objects,
or as plain 4x4 homogeneous matrices. Internally every pose is a
``numpy.ndarray`` of shape (4, 4) so the search loop does plain matrix math.
"""

from typing import Any, Sequence

import numpy as np
from compas.geometry import Frame, Transformation
from scipy.spatial.transform import Rotation

from openrail.core.exceptions import GeometryError

Pose = Any  # Transformation | Frame | array-like (4, 4)


def as_matrix(pose: Pose) -> np.ndarray:
    """
    Convert a pose to a 4x4 homogeneous matrix.

    Args:
        pose: COMPAS Transformation, COMPAS Frame, or array-like (4, 4)

    Returns:
        New float array of shape (4, 4)

    Raises:
        GeometryError: If the pose cannot be read as a 4x4 matrix
    """
    if isinstance(pose, Transformation):
        matrix = np.array(pose.matrix, dtype=float)
    elif isinstance(pose, Frame):
        matrix = np.array(Transformation.from_frame(pose).matrix, dtype=float)
    else:
        try:
            matrix = np.array(pose, dtype=float)
        except (TypeError, ValueError) as e:
            raise GeometryError(f"Cannot interpret pose: {e}") from e

    if matrix.shape != (4, 4):
        raise GeometryError(
            "Pose must be a 4x4 homogeneous matrix",
            details={"shape": list(matrix.shape)},
        )
    return matrix


def invert_transform(matrix: np.ndarray) -> np.ndarray:
    """Inverse of a rigid transform (R^T, -R^T t)."""
    rotation = matrix[:3, :3]
    inverse = np.eye(4)
    inverse[:3, :3] = rotation.T
    inverse[:3, 3] = -rotation.T @ matrix[:3, 3]
    return inverse


def translation_norm(matrix: np.ndarray) -> float:
    """Distance of the transform's origin from its parent frame origin."""
    return float(np.linalg.norm(matrix[:3, 3]))


def pose_from_xyzrpy(values: Sequence[float]) -> np.ndarray:
    """
    Build a pose from ``[x, y, z, rx, ry, rz]``.

    Rotations are fixed-axis XYZ Euler angles in radians, the same layout as
    a tool's ``tcp_offset`` in configuration files.

    Raises:
        GeometryError: If ``values`` does not hold six numbers
    """
    values = np.asarray(values, dtype=float)
    if values.shape != (6,):
        raise GeometryError(
            "Expected [x, y, z, rx, ry, rz]", details={"length": int(values.size)}
        )

    matrix = np.eye(4)
    matrix[:3, :3] = Rotation.from_euler("xyz", values[3:]).as_matrix()
    matrix[:3, 3] = values[:3]
    return matrix


def tool_pose_in_rail_frame(
    tool_pose: Pose,
    world_to_rail_base: Pose,
    tcp_offset: Pose,
) -> np.ndarray:
    """
    Express a world-frame tool pose in the rail base frame.

    The tool-center-point offset is removed so the result is the pose the
    robot's kinematic tip has to reach::

        inverse(world_to_rail_base) * tool_pose * inverse(tcp_offset)

    Args:
        tool_pose: Desired tool pose in world coordinates
        world_to_rail_base: Pose of the rail base link in world coordinates
        tcp_offset: Transform from the robot tip to the tool working point

    Returns:
        Tip target as a 4x4 matrix in rail base coordinates
    """
    return (
        invert_transform(as_matrix(world_to_rail_base))
        @ as_matrix(tool_pose)
        @ invert_transform(as_matrix(tcp_offset))
    )
