"""
Demonstration of OpenRail railed sampling.

This script shows how to:
1. Build a linear track and a robot arm IK backend
2. Add a collision checker from spherical obstacles
3. Sample rail + arm configurations for one tool pose
4. Fall back to the least-penetrating configuration
"""

import numpy as np
from compas.geometry import Frame

from openrail.core.logging import configure_logging
from openrail.motion import (
    ClearanceCollisionChecker,
    NumericalIKSolver,
    RailedSampler,
    SphereObstacle,
    SphereObstacleField,
    create_linear_track,
    joint_limits_validator,
    make_z_axis_tool_pose_sampler,
)

ARM_LIMITS = [(-1.0, 1.0), (-1.0, 1.0), (-0.5, 1.0)]


def gantry_arm_fk(joint_values):
    """Three-axis Cartesian arm: the tip translates by the joint values."""
    pose = np.eye(4)
    pose[:3, 3] = joint_values
    return pose


def robot_base(joint_values):
    """World position of the robot base riding the track."""
    return np.array([[joint_values[0], 0.0, 0.0]])


def build_sampler(obstacle, allow_collision=False):
    track = create_linear_track(length=3.0)
    arm_ik = NumericalIKSolver(gantry_arm_fk, ARM_LIMITS, n_starts=2)
    collision = ClearanceCollisionChecker(SphereObstacleField(robot_base, [obstacle]))

    return RailedSampler(
        Frame([1.5, 0.2, 0.4], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0]),
        make_z_axis_tool_pose_sampler(np.pi),
        track,
        arm_ik,
        world_to_rail_base=np.eye(4),
        rail_sample_resolution=[0.25],
        robot_reach=1.2,
        is_valid=joint_limits_validator(np.vstack([track.limits, ARM_LIMITS])),
        collision=collision,
        allow_collision=allow_collision,
    )


def main():
    """Run railed sampling demonstration."""
    configure_logging(level="WARNING")

    print("=" * 60)
    print("OpenRail Railed Sampling Demo")
    print("=" * 60)

    # 1. Collision-free solutions
    print("\n1. Sampling around a small obstacle")
    sampler = build_sampler(SphereObstacle([2.0, 0.0, 0.0], 0.3))
    grid = sampler.rail_grid[0]
    print(f"   [OK] Rail grid: {len(grid)} samples from {grid[0]:.2f} to {grid[-1]:.2f} m")
    print(f"   [OK] Tool poses: {len(sampler.tool_pose_candidates())}")

    result = sampler.sample()
    print(f"   [OK] Solutions: {len(result)} (dof = {result.dof})")
    for solution in result.solutions[:5]:
        print(f"     rail {solution[0]:5.2f} | arm {np.round(solution[1:], 3).tolist()}")
    print(f"   Stats: {result.stats.as_dict()}")

    # 2. Fallback when everything collides
    print("\n2. Sampling inside a large obstacle")
    sampler = build_sampler(SphereObstacle([1.5, 0.0, 0.0], 2.0), allow_collision=True)
    result = sampler.sample()
    if result.success:
        solution = result.solutions[0]
        print(f"   [OK] Fallback used: {result.used_fallback}")
        print(f"   [OK] Best clearance: {result.best_distance:.3f} m at rail {solution[0]:.2f}")
    else:
        print("   [--] No configuration found")

    print("\n" + "=" * 60)
    print("[SUCCESS] Railed sampling demo completed successfully!")
    print("=" * 60)


if __name__ == "__main__":
    main()
