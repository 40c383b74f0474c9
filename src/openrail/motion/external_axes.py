"""
External axes (rails) for robotic systems.

This module provides:
- Axis descriptions for linear tracks, gantries and rotary stages
- Forward kinematics of a chain of external axes (``RailKinematics``)
- The rail grid: a discretization of every rail joint's travel

Units are SI: linear axes in metres, rotary axes in radians.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence

import numpy as np
from scipy.spatial.transform import Rotation

from openrail.core.config import RailConfig
from openrail.core.exceptions import ConfigurationError
from openrail.core.logging import get_logger
from openrail.core.transforms import Pose, as_matrix
from openrail.motion.kinematics import ForwardKinematics

logger = get_logger(__name__)


class ExternalAxisType(Enum):
    """Types of external axes."""

    LINEAR = "linear"  # Linear track / gantry axis
    ROTARY = "rotary"  # Turntable style rotation


@dataclass
class ExternalAxis:
    """
    Represents one external axis of a rail.

    Attributes:
        name: Axis name/identifier
        axis_type: Type of external axis
        min_limit: Minimum position (m or rad)
        max_limit: Maximum position (m or rad)
        direction: Translation direction (linear) or rotation axis (rotary)
    """

    name: str
    axis_type: ExternalAxisType
    min_limit: float
    max_limit: float
    direction: List[float] = field(default_factory=lambda: [1.0, 0.0, 0.0])

    def __post_init__(self) -> None:
        if self.min_limit > self.max_limit:
            raise ConfigurationError(
                f"Axis '{self.name}' has inverted limits",
                details={"min_limit": self.min_limit, "max_limit": self.max_limit},
            )
        norm = float(np.linalg.norm(self.direction))
        if len(self.direction) != 3 or norm == 0.0:
            raise ConfigurationError(
                f"Axis '{self.name}' needs a non-zero 3D direction",
                details={"direction": list(self.direction)},
            )

    @property
    def unit_direction(self) -> np.ndarray:
        direction = np.asarray(self.direction, dtype=float)
        return direction / np.linalg.norm(direction)


class RailKinematics(ForwardKinematics):
    """
    Forward kinematics for a serial chain of external axes.

    Axes are applied in order starting at the rail base: a linear axis
    translates along its direction, a rotary axis rotates about its
    direction through the current origin. ``tip_offset`` is the fixed
    transform from the last axis to the robot mounting flange.
    """

    def __init__(
        self,
        axes: Sequence[ExternalAxis],
        base_link_name: str = "rail_base",
        tip_offset: Optional[Pose] = None,
    ):
        """
        Initialize rail kinematics.

        Args:
            axes: External axes from base to robot mount
            base_link_name: Environment link the rail is attached to
            tip_offset: Transform from the last axis to the robot base
        """
        self.axes = list(axes)
        self._base_link_name = base_link_name
        self.tip_offset = np.eye(4) if tip_offset is None else as_matrix(tip_offset)

    @property
    def num_joints(self) -> int:
        return len(self.axes)

    @property
    def base_link_name(self) -> str:
        return self._base_link_name

    @property
    def limits(self) -> np.ndarray:
        return np.array(
            [[axis.min_limit, axis.max_limit] for axis in self.axes], dtype=float
        ).reshape(-1, 2)

    def is_within_limits(self, axis_values: Sequence[float]) -> bool:
        """
        Check if axis values are within limits.

        Args:
            axis_values: Values for each axis

        Returns:
            True if all values are within limits
        """
        for value, axis in zip(axis_values, self.axes):
            if value < axis.min_limit or value > axis.max_limit:
                return False
        return True

    def forward(self, joint_values: np.ndarray) -> Optional[np.ndarray]:
        """
        Get the robot mounting pose for the given axis positions.

        Args:
            joint_values: Current axis positions

        Returns:
            4x4 pose in rail base coordinates, or None outside the limits
        """
        joint_values = self._check_length(joint_values)
        if not self.is_within_limits(joint_values):
            return None

        pose = np.eye(4)
        for value, axis in zip(joint_values, self.axes):
            step = np.eye(4)
            if axis.axis_type == ExternalAxisType.LINEAR:
                step[:3, 3] = axis.unit_direction * value
            else:
                step[:3, :3] = Rotation.from_rotvec(axis.unit_direction * value).as_matrix()
            pose = pose @ step

        return pose @ self.tip_offset


def build_rail_grid(limits, resolution) -> List[np.ndarray]:
    """
    Discretize every rail joint's travel into evenly spaced samples.

    For joint i the sample count is ``ceil(|high_i - low_i| / resolution_i)``
    and the samples run from ``low_i`` to ``high_i`` inclusive.

    Args:
        limits: Rail limits, shape (rail_dof, 2) as (low, high) rows
        resolution: Positive sample step per rail joint, length rail_dof

    Returns:
        One 1-D array of samples per rail joint

    Raises:
        ConfigurationError: On mismatched shapes, non-positive resolution
            or inverted limits
    """
    limits = np.asarray(limits, dtype=float)
    resolution = np.asarray(resolution, dtype=float).ravel()

    if limits.ndim != 2 or limits.shape[1] != 2:
        raise ConfigurationError(
            "Rail limits must have shape (rail_dof, 2)",
            details={"shape": list(limits.shape)},
        )
    if limits.shape[0] != resolution.size:
        raise ConfigurationError(
            "Rail sample resolution must have one entry per rail joint",
            details={"rail_dof": limits.shape[0], "resolution": resolution.tolist()},
        )

    grid = []
    for dof, ((low, high), step) in enumerate(zip(limits, resolution)):
        if not step > 0:
            raise ConfigurationError(
                "Rail sample resolution must be positive",
                details={"dof": dof, "resolution": float(step)},
            )
        if low > high:
            raise ConfigurationError(
                "Rail limits are inverted",
                details={"dof": dof, "low": float(low), "high": float(high)},
            )

        count = int(math.ceil(abs(high - low) / step))
        if count == 0:
            logger.warning("rail_dof_has_no_samples", dof=dof, low=float(low), high=float(high))
        grid.append(np.linspace(low, high, count))

    return grid


def rail_grid_size(grid: Sequence[np.ndarray]) -> int:
    """Number of rail sample points in the Cartesian product of the grid."""
    return math.prod(len(samples) for samples in grid)


def create_linear_track(
    length: float = 3.0,
    direction: Sequence[float] = (1.0, 0.0, 0.0),
    base_link_name: str = "rail_base",
    mount_height: float = 0.0,
) -> RailKinematics:
    """
    Create a single-axis linear track.

    Args:
        length: Track travel (m), starting at 0
        direction: Travel direction in rail base coordinates
        base_link_name: Environment link of the track base
        mount_height: Height of the robot flange above the carriage (m)

    Returns:
        Rail kinematics for the track
    """
    linear_axis = ExternalAxis(
        name="linear_track",
        axis_type=ExternalAxisType.LINEAR,
        min_limit=0.0,
        max_limit=length,
        direction=list(direction),
    )

    tip_offset = np.eye(4)
    tip_offset[2, 3] = mount_height
    return RailKinematics([linear_axis], base_link_name=base_link_name, tip_offset=tip_offset)


def create_gantry(
    x_length: float = 3.0,
    y_length: float = 2.0,
    base_link_name: str = "gantry_base",
) -> RailKinematics:
    """
    Create a two-axis (X/Y) gantry.

    Args:
        x_length: X travel (m)
        y_length: Y travel (m)
        base_link_name: Environment link of the gantry base

    Returns:
        Rail kinematics for the gantry
    """
    axes = [
        ExternalAxis("gantry_x", ExternalAxisType.LINEAR, 0.0, x_length, [1.0, 0.0, 0.0]),
        ExternalAxis("gantry_y", ExternalAxisType.LINEAR, 0.0, y_length, [0.0, 1.0, 0.0]),
    ]
    return RailKinematics(axes, base_link_name=base_link_name)


def rail_from_config(config: RailConfig) -> RailKinematics:
    """Build rail kinematics from a validated ``RailConfig``."""
    axes = [
        ExternalAxis(
            name=axis.name,
            axis_type=ExternalAxisType(axis.type),
            min_limit=axis.min_limit,
            max_limit=axis.max_limit,
            direction=list(axis.direction),
        )
        for axis in config.axes
    ]
    return RailKinematics(axes, base_link_name=config.base_link)
