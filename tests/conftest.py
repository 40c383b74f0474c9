"""
Pytest configuration and shared fixtures.
"""

import tempfile
from pathlib import Path
from unittest.mock import MagicMock

import numpy as np
import pytest


def translation(x: float = 0.0, y: float = 0.0, z: float = 0.0) -> np.ndarray:
    """4x4 pure translation."""
    matrix = np.eye(4)
    matrix[:3, 3] = [x, y, z]
    return matrix


@pytest.fixture
def temp_dir():
    """Provide a temporary directory that is cleaned up after the test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_config_dir(temp_dir):
    """Create a sample configuration directory structure."""
    config_dir = temp_dir / "config"
    (config_dir / "rails").mkdir(parents=True)
    (config_dir / "samplers").mkdir(parents=True)

    rail_config = """
rail:
  name: "Floor Track"
  base_link: "track_base"
  axes:
    - name: "track_x"
      type: "linear"
      min_limit: 0.0
      max_limit: 1.0
      direction: [1.0, 0.0, 0.0]
"""
    (config_dir / "rails" / "floor_track.yaml").write_text(rail_config)

    sampler_config = """
sampler:
  rail_sample_resolution: [0.4]
  robot_reach: 2.5
  allow_collision: true
  tcp_offset: [0.0, 0.0, 0.15, 0.0, 0.0, 0.0]
"""
    (config_dir / "samplers" / "welding.yaml").write_text(sampler_config)

    budget_config = """
sampler:
  rail_sample_resolution: [0.4]
  robot_reach: 2.5
  tool_pose_resolution: 1.5707963267948966
  max_grid_points: 10
"""
    (config_dir / "samplers" / "tight_budget.yaml").write_text(budget_config)

    return config_dir


@pytest.fixture
def single_rail():
    """Mock one-joint rail on [0, 1] whose tip translates along x."""
    rail = MagicMock()
    rail.num_joints = 1
    rail.base_link_name = "rail_base"
    rail.limits = np.array([[0.0, 1.0]])
    rail.forward.side_effect = lambda q: translation(x=q[0])
    return rail


@pytest.fixture
def robot_ik():
    """Mock two-joint arm returning one branch everywhere."""
    ik = MagicMock()
    ik.num_joints = 2
    ik.inverse.return_value = np.array([0.1, 0.2])
    return ik


@pytest.fixture
def free_collision():
    """Mock collision capability reporting everything collision-free."""
    collision = MagicMock()
    collision.validate.return_value = True
    collision.distance.return_value = 1.0
    return collision
