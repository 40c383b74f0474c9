"""
Unit tests for collision checking.
"""

import math

import numpy as np
import pytest

from openrail.motion.collision import (
    ClearanceCollisionChecker,
    CollisionInterface,
    SphereObstacle,
    SphereObstacleField,
)


def base_probe(joint_values):
    """Robot base position on an x-axis rail."""
    return np.array([[joint_values[0], 0.0, 0.0]])


class TestClearanceCollisionChecker:
    """Tests for ClearanceCollisionChecker."""

    def test_is_collision_interface(self):
        checker = ClearanceCollisionChecker(lambda q: 1.0)
        assert isinstance(checker, CollisionInterface)

    def test_distance_passthrough(self):
        checker = ClearanceCollisionChecker(lambda q: float(q[0]) - 1.0)
        assert checker.distance([0.25]) == pytest.approx(-0.75)

    def test_validate_against_margin(self):
        checker = ClearanceCollisionChecker(lambda q: float(q[0]), margin=0.1)
        assert checker.validate([0.1])
        assert checker.validate([0.5])
        assert not checker.validate([0.05])
        assert not checker.validate([-0.2])

    def test_zero_margin_touching_is_free(self):
        checker = ClearanceCollisionChecker(lambda q: 0.0)
        assert checker.validate([0.0])


class TestSphereObstacleField:
    """Tests for SphereObstacleField."""

    def test_no_obstacles_is_infinitely_clear(self):
        field = SphereObstacleField(base_probe, [])
        assert field(np.array([0.0])) == math.inf

    def test_clearance_to_single_sphere(self):
        field = SphereObstacleField(base_probe, [SphereObstacle([2.0, 0.0, 0.0], 0.5)])
        assert field(np.array([0.0])) == pytest.approx(1.5)
        assert field(np.array([2.0])) == pytest.approx(-0.5)

    def test_probe_radius(self):
        field = SphereObstacleField(
            base_probe, [SphereObstacle([2.0, 0.0, 0.0], 0.5)], probe_radius=0.25
        )
        assert field(np.array([0.0])) == pytest.approx(1.25)

    def test_minimum_over_obstacles_and_probes(self):
        def two_probes(joint_values):
            return np.array([[joint_values[0], 0.0, 0.0], [joint_values[0], 0.0, 1.0]])

        obstacles = [
            SphereObstacle([3.0, 0.0, 0.0], 0.5),
            SphereObstacle([0.0, 0.0, 1.5], 0.1),
        ]
        field = SphereObstacleField(two_probes, obstacles)

        # Upper probe is 0.5 from the second sphere centre
        assert field(np.array([0.0])) == pytest.approx(0.4)

    def test_drives_checker(self):
        field = SphereObstacleField(base_probe, [SphereObstacle([1.0, 0.0, 0.0], 0.3)])
        checker = ClearanceCollisionChecker(field)
        assert checker.validate([0.0])
        assert not checker.validate([0.9])
        assert checker.distance([0.9]) == pytest.approx(-0.2)
