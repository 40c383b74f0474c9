"""
Kinematics capabilities used by the railed sampler.

The sampler only talks to the two abstract interfaces defined here:

- ``ForwardKinematics``: joint values -> tip pose (or None when unreachable)
- ``InverseKinematics``: target pose + seed -> zero or more joint branches,
  packed consecutively in one flat array (or None on failure)

Any object with the same attributes works (duck typing); subclassing the ABCs
is only needed to pick up the shared length check.

``NumericalIKSolver`` is a generic inverse-kinematics backend built on scipy's
optimizers for arms that have no analytic solver.
"""

from abc import ABC, abstractmethod
from typing import Callable, List, Optional

import numpy as np
from scipy.optimize import minimize

from openrail.core.exceptions import KinematicsError
from openrail.core.transforms import Pose, as_matrix

JointValidator = Callable[[np.ndarray], bool]


class ForwardKinematics(ABC):
    """Forward kinematics of a kinematic chain (e.g. a rail)."""

    @property
    @abstractmethod
    def num_joints(self) -> int:
        """Number of joints in the chain."""

    @property
    @abstractmethod
    def base_link_name(self) -> str:
        """Name of the chain's base link in the environment."""

    @property
    @abstractmethod
    def limits(self) -> np.ndarray:
        """Joint limits as an array of shape (num_joints, 2)."""

    @abstractmethod
    def forward(self, joint_values: np.ndarray) -> Optional[np.ndarray]:
        """Tip pose as a 4x4 matrix, or None if the joints are unreachable."""

    def _check_length(self, joint_values: np.ndarray) -> np.ndarray:
        joint_values = np.asarray(joint_values, dtype=float).ravel()
        if joint_values.size != self.num_joints:
            raise KinematicsError(
                f"Expected {self.num_joints} joint values, got {joint_values.size}",
                chain=self.base_link_name,
            )
        return joint_values


class InverseKinematics(ABC):
    """Inverse kinematics of a robot arm."""

    @property
    @abstractmethod
    def num_joints(self) -> int:
        """Number of joints in one solution branch."""

    @abstractmethod
    def inverse(self, pose: Pose, seed: np.ndarray) -> Optional[np.ndarray]:
        """
        Solve for all joint branches reaching ``pose``.

        Returns:
            Flat array of ``k * num_joints`` values (k >= 0), or None on failure
        """


class NumericalIKSolver(InverseKinematics):
    """
    Multi-start numerical IK using scipy optimization.

    Each start minimizes the squared position error plus the weighted
    Frobenius distance between target and current rotation. Converged,
    distinct results are returned as separate branches.

    Example:
        >>> solver = NumericalIKSolver(arm_fk, limits=[(-3.1, 3.1)] * 6)
        >>> branches = solver.inverse(target, seed=np.zeros(6))
    """

    def __init__(
        self,
        forward: Callable[[np.ndarray], np.ndarray],
        limits,
        n_starts: int = 8,
        method: str = "SLSQP",
        max_iterations: int = 200,
        position_tolerance: float = 1e-4,
        orientation_tolerance: float = 1e-3,
        orientation_weight: float = 0.1,
        duplicate_tolerance: float = 1e-2,
        random_seed: int = 42,
    ):
        """
        Initialize IK solver.

        Args:
            forward: Arm forward kinematics, joint values -> 4x4 tip pose
            limits: Joint limits, one (lower, upper) pair per joint
            n_starts: Number of optimizer starts (the seed is always the first)
            method: scipy.optimize.minimize method
            max_iterations: Maximum iterations per start
            position_tolerance: Maximum tip position error to accept (m)
            orientation_tolerance: Maximum tip rotation error to accept (rad)
            orientation_weight: Weight of the rotation term in the objective
            duplicate_tolerance: Joint-space distance under which two
                branches count as the same solution
            random_seed: Seed for the deterministic extra starts
        """
        self._forward = forward
        self._limits = np.asarray(limits, dtype=float).reshape(-1, 2)
        if n_starts < 1:
            raise KinematicsError("n_starts must be at least 1")
        self.n_starts = n_starts
        self.method = method
        self.max_iterations = max_iterations
        self.position_tolerance = position_tolerance
        self.orientation_tolerance = orientation_tolerance
        self.orientation_weight = orientation_weight
        self.duplicate_tolerance = duplicate_tolerance
        self.random_seed = random_seed

    @property
    def num_joints(self) -> int:
        return int(self._limits.shape[0])

    @property
    def limits(self) -> np.ndarray:
        return self._limits.copy()

    def inverse(self, pose: Pose, seed: np.ndarray) -> Optional[np.ndarray]:
        target = as_matrix(pose)
        seed = np.asarray(seed, dtype=float).ravel()
        if seed.size != self.num_joints:
            raise KinematicsError(
                f"IK seed has {seed.size} values, expected {self.num_joints}"
            )

        branches: List[np.ndarray] = []
        for start in self._starts(seed):
            solution = self._solve_from(target, start)
            if solution is None:
                continue
            if any(
                np.linalg.norm(solution - existing) < self.duplicate_tolerance
                for existing in branches
            ):
                continue
            branches.append(solution)

        if not branches:
            return None
        return np.concatenate(branches)

    def _starts(self, seed: np.ndarray) -> List[np.ndarray]:
        lower, upper = self._limits[:, 0], self._limits[:, 1]
        rng = np.random.default_rng(self.random_seed)
        starts = [np.clip(seed, lower, upper)]
        for _ in range(self.n_starts - 1):
            starts.append(rng.uniform(lower, upper))
        return starts

    def _solve_from(self, target: np.ndarray, start: np.ndarray) -> Optional[np.ndarray]:
        target_position = target[:3, 3]
        target_rotation = target[:3, :3]

        def objective(joint_values):
            current = np.asarray(self._forward(joint_values), dtype=float)
            position_error = np.sum((current[:3, 3] - target_position) ** 2)
            rotation_error = np.sum((current[:3, :3] - target_rotation) ** 2)
            return position_error + self.orientation_weight * rotation_error

        result = minimize(
            objective,
            start,
            method=self.method,
            bounds=[tuple(pair) for pair in self._limits],
            tol=1e-12,
            options={"maxiter": self.max_iterations},
        )

        solution = np.asarray(result.x, dtype=float)
        reached = np.asarray(self._forward(solution), dtype=float)
        position_error = np.linalg.norm(reached[:3, 3] - target_position)
        cos_angle = (np.trace(target_rotation.T @ reached[:3, :3]) - 1.0) / 2.0
        angle_error = np.arccos(np.clip(cos_angle, -1.0, 1.0))

        if position_error > self.position_tolerance:
            return None
        if angle_error > self.orientation_tolerance:
            return None
        return solution


def joint_limits_validator(limits) -> JointValidator:
    """
    Build a validity rule that checks a full joint vector against limits.

    Args:
        limits: One (lower, upper) pair per joint of the full vector

    Returns:
        Predicate returning True when every joint is within its limits
    """
    limits = np.asarray(limits, dtype=float).reshape(-1, 2)

    def is_valid(joint_values: np.ndarray) -> bool:
        joint_values = np.asarray(joint_values, dtype=float).ravel()
        if joint_values.size != limits.shape[0]:
            return False
        return bool(
            np.all(joint_values >= limits[:, 0]) and np.all(joint_values <= limits[:, 1])
        )

    return is_valid
