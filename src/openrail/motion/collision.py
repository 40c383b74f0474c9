"""
Collision capability for candidate configurations.

The sampler asks two questions about a full joint vector (rail + robot):

- ``validate``: is it collision-free?
- ``distance``: how much clearance does it have? Larger means more
  separation from obstacles, negative means penetration.

``ClearanceCollisionChecker`` answers both from one signed-distance function.
``SphereObstacleField`` is such a function for probe points tested against
spherical obstacles.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, List, Sequence

import numpy as np


class CollisionInterface(ABC):
    """Collision checking of full joint vectors."""

    @abstractmethod
    def validate(self, joint_values: np.ndarray) -> bool:
        """True if the configuration is collision-free."""

    @abstractmethod
    def distance(self, joint_values: np.ndarray) -> float:
        """Signed clearance of the configuration (negative = penetrating)."""


class ClearanceCollisionChecker(CollisionInterface):
    """
    Collision checking from a signed-distance function.

    A configuration is collision-free when its clearance is at least
    ``margin``.
    """

    def __init__(
        self,
        distance_fn: Callable[[np.ndarray], float],
        margin: float = 0.0,
    ):
        """
        Initialize collision checker.

        Args:
            distance_fn: Full joint vector -> signed clearance (m)
            margin: Minimum clearance for a configuration to count as free
        """
        self.distance_fn = distance_fn
        self.margin = margin

    def distance(self, joint_values: np.ndarray) -> float:
        return float(self.distance_fn(np.asarray(joint_values, dtype=float)))

    def validate(self, joint_values: np.ndarray) -> bool:
        return self.distance(joint_values) >= self.margin


@dataclass
class SphereObstacle:
    """Spherical obstacle in world coordinates."""

    center: Sequence[float]
    radius: float


class SphereObstacleField:
    """
    Signed distance between probe points and spherical obstacles.

    ``probe_points`` maps a full joint vector to the world positions of
    points on the robot (link origins, tool tip, ...). The clearance is the
    smallest ``|p - c| - (r + probe_radius)`` over all probe/obstacle pairs.
    """

    def __init__(
        self,
        probe_points: Callable[[np.ndarray], np.ndarray],
        obstacles: List[SphereObstacle],
        probe_radius: float = 0.0,
    ):
        self.probe_points = probe_points
        self.obstacles = list(obstacles)
        self.probe_radius = probe_radius

    def __call__(self, joint_values: np.ndarray) -> float:
        if not self.obstacles:
            return float("inf")

        points = np.asarray(self.probe_points(joint_values), dtype=float).reshape(-1, 3)
        centers = np.array([obstacle.center for obstacle in self.obstacles], dtype=float)
        radii = np.array([obstacle.radius for obstacle in self.obstacles], dtype=float)

        # (n_points, n_obstacles)
        gaps = np.linalg.norm(points[:, None, :] - centers[None, :, :], axis=2)
        gaps -= radii[None, :] + self.probe_radius
        return float(gaps.min())
