"""
Unit tests for tool-pose samplers.
"""

import math

import numpy as np
import pytest
from compas.geometry import Frame

from openrail.core.exceptions import ConfigurationError
from openrail.motion.tool_pose import (
    identity_tool_pose_sampler,
    make_z_axis_tool_pose_sampler,
)


class TestIdentityToolPoseSampler:
    def test_returns_nominal_pose(self):
        pose = np.eye(4)
        pose[:3, 3] = [1.0, 2.0, 3.0]
        poses = identity_tool_pose_sampler(pose)
        assert len(poses) == 1
        np.testing.assert_array_equal(poses[0], pose)

    def test_accepts_frame(self):
        poses = identity_tool_pose_sampler(Frame([1.0, 0.0, 0.5], [1, 0, 0], [0, 1, 0]))
        np.testing.assert_allclose(poses[0][:3, 3], [1.0, 0.0, 0.5])


class TestZAxisToolPoseSampler:
    """Tests for rotation sampling about the tool z axis."""

    def test_quarter_turn_count(self):
        """pi/2 steps over [-pi, pi): pi itself repeats -pi and is skipped."""
        sampler = make_z_axis_tool_pose_sampler(math.pi / 2)
        assert len(sampler(np.eye(4))) == 4

    @pytest.mark.parametrize("resolution", [math.pi / 2, math.pi / 3, math.pi, 0.5])
    def test_no_duplicate_poses(self, resolution):
        poses = make_z_axis_tool_pose_sampler(resolution)(np.eye(4))
        for i, first in enumerate(poses):
            for second in poses[i + 1 :]:
                assert not np.allclose(first, second, atol=1e-9)

    def test_half_turn_count(self):
        sampler = make_z_axis_tool_pose_sampler(math.pi)
        assert len(sampler(np.eye(4))) == 2

    def test_angles_start_at_minus_pi(self):
        sampler = make_z_axis_tool_pose_sampler(math.pi / 2)
        poses = sampler(np.eye(4))
        # Rz(-pi) maps x to -x
        np.testing.assert_allclose(poses[0][:3, 0], [-1.0, 0.0, 0.0], atol=1e-12)
        # Rz(-pi/2) maps x to -y
        np.testing.assert_allclose(poses[1][:3, 0], [0.0, -1.0, 0.0], atol=1e-12)
        # Rz(0) is the nominal pose
        np.testing.assert_allclose(poses[2], np.eye(4), atol=1e-12)

    def test_rotation_about_tool_axis_keeps_position_and_z(self):
        nominal = np.eye(4)
        nominal[:3, :3] = [[1.0, 0.0, 0.0], [0.0, 0.0, -1.0], [0.0, 1.0, 0.0]]
        nominal[:3, 3] = [0.5, 0.2, 1.0]
        sampler = make_z_axis_tool_pose_sampler(0.5)

        for pose in sampler(nominal):
            np.testing.assert_allclose(pose[:3, 3], nominal[:3, 3])
            np.testing.assert_allclose(pose[:3, 2], nominal[:3, 2], atol=1e-12)

    def test_uneven_step_stays_within_pi(self):
        sampler = make_z_axis_tool_pose_sampler(1.0)
        # -pi, -pi+1, ..., -pi+6 (< pi)
        assert len(sampler(np.eye(4))) == 7

    def test_non_positive_resolution(self):
        with pytest.raises(ConfigurationError):
            make_z_axis_tool_pose_sampler(0.0)
