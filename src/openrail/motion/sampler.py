"""
Railed kinematics sampler.

Generates candidate joint configurations for a robot mounted on a rail
(external positioning axes) so that one tool pose can be reached:

1. The rail travel is discretized into a grid (``build_rail_grid``).
2. The tool-pose sampler expands the nominal tool pose into candidates.
3. For every candidate and every rail grid point the rail forward
   kinematics places the robot base. The target is re-expressed in the
   robot frame, checked against the robot reach, and handed to inverse
   kinematics.
4. Every IK branch is joined with the rail values into a full joint
   vector, filtered by the validity rule, and offered to a strategy:

   - collect-all keeps every collision-free vector
   - best-clearance keeps the single vector with the largest clearance

``RailedSampler.sample()`` runs collect-all over every candidate. If nothing
survives and collisions are tolerated, it reruns the same enumeration with
the best-clearance strategy.

The search is synchronous and has no timeout. Its cost is the product of
all per-joint grid sizes times the number of tool-pose candidates, doubled
when collisions are tolerated because the fallback reruns the grid.
``max_grid_points`` (or a coarser resolution) is the way to bound it.
"""

import itertools
import math
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Iterator, List, Mapping, Optional, Sequence

import numpy as np

from openrail.core.config import SamplerConfig
from openrail.core.exceptions import (
    CollisionRejected,
    ConfigurationError,
    InvalidCandidate,
    KinematicsError,
    ReachExceeded,
    UnreachablePose,
)
from openrail.core.logging import get_logger, search_context
from openrail.core.transforms import (
    Pose,
    as_matrix,
    invert_transform,
    pose_from_xyzrpy,
    tool_pose_in_rail_frame,
    translation_norm,
)
from openrail.motion.collision import CollisionInterface
from openrail.motion.external_axes import build_rail_grid, rail_grid_size
from openrail.motion.kinematics import ForwardKinematics, InverseKinematics, JointValidator
from openrail.motion.tool_pose import (
    ToolPoseSampler,
    identity_tool_pose_sampler,
    make_z_axis_tool_pose_sampler,
)

logger = get_logger(__name__)


class SearchMode(Enum):
    """What a search pass retains."""

    COLLECT_ALL = "collect_all"
    BEST_ONLY = "best_only"


@dataclass
class SearchStats:
    """Counters for one search pass."""

    rail_points: int = 0
    rail_unreachable: int = 0
    reach_exceeded: int = 0
    ik_calls: int = 0
    ik_failures: int = 0
    branches: int = 0
    invalid: int = 0
    in_collision: int = 0
    accepted: int = 0

    def as_dict(self) -> dict:
        return asdict(self)


class SolutionStrategy(ABC):
    """Decides which full joint vectors a search pass keeps."""

    mode: SearchMode

    def __init__(self) -> None:
        self.solutions: List[np.ndarray] = []

    @abstractmethod
    def offer(self, solution: np.ndarray) -> bool:
        """
        Offer a valid full joint vector.

        Returns:
            True if the vector was retained
        """


class CollectAllStrategy(SolutionStrategy):
    """Keep every collision-free configuration (all of them without a checker)."""

    mode = SearchMode.COLLECT_ALL

    def __init__(self, collision: Optional[CollisionInterface] = None) -> None:
        super().__init__()
        self.collision = collision

    def offer(self, solution: np.ndarray) -> bool:
        if self.collision is not None and not self.collision.validate(solution):
            raise CollisionRejected("Configuration is in collision")
        self.solutions.append(solution)
        return True


class BestClearanceStrategy(SolutionStrategy):
    """
    Keep only the configuration with the largest clearance.

    The running best starts at -inf so penetrating configurations still
    compete. A candidate replaces the current best only with a strictly
    larger clearance; on ties the first one found is kept.
    """

    mode = SearchMode.BEST_ONLY

    def __init__(self, collision: Optional[CollisionInterface]) -> None:
        if collision is None:
            raise ConfigurationError(
                "Best-clearance search requires a collision capability"
            )
        super().__init__()
        self.collision = collision
        self.best_distance = -math.inf

    def offer(self, solution: np.ndarray) -> bool:
        distance = float(self.collision.distance(solution))
        if distance > self.best_distance:
            self.best_distance = distance
            self.solutions = [solution]
            return True
        return False


@dataclass
class SampleResult:
    """Outcome of a sampling call."""

    solutions: List[np.ndarray]
    dof: int
    mode: SearchMode
    used_fallback: bool = False
    best_distance: Optional[float] = None
    stats: SearchStats = field(default_factory=SearchStats)
    fallback_stats: Optional[SearchStats] = None

    @property
    def success(self) -> bool:
        return bool(self.solutions)

    @property
    def flat(self) -> np.ndarray:
        """All solutions concatenated, ``len(flat) == len(self) * dof``."""
        if not self.solutions:
            return np.empty(0, dtype=float)
        return np.concatenate(self.solutions)

    def __len__(self) -> int:
        return len(self.solutions)


def iter_rail_points(grid: Sequence[np.ndarray]) -> Iterator[np.ndarray]:
    """
    Enumerate the Cartesian product of the rail grid.

    Same order as one nested loop per rail joint with the last joint
    innermost. A rail without joints yields a single empty point.
    """
    for values in itertools.product(*grid):
        yield np.array(values, dtype=float)


def search_passes(allow_collision: bool) -> int:
    """Worst-case number of full enumerations: the fallback reruns the grid."""
    return 2 if allow_collision else 1


def search_workload(grid_points: int, tool_poses: int, allow_collision: bool) -> int:
    """
    Worst-case rail forward-kinematics evaluations of one ``sample()`` call.

    This is the quantity ``max_grid_points`` bounds.
    """
    return grid_points * tool_poses * search_passes(allow_collision)


class RailedSampler:
    """
    Samples rail + robot configurations reaching one tool pose.

    One sampler is built per waypoint. ``sample()`` can be called any number
    of times; each call keeps its working state local, so concurrent calls
    on one instance do not interfere as long as the collaborators are safe
    to share.

    Example:
        >>> sampler = RailedSampler(
        ...     tool_pose,
        ...     identity_tool_pose_sampler,
        ...     create_linear_track(length=4.0),
        ...     arm_ik,
        ...     world_to_rail_base=np.eye(4),
        ...     rail_sample_resolution=[0.1],
        ...     robot_reach=2.6,
        ...     is_valid=lambda q: True,
        ... )
        >>> result = sampler.sample()
        >>> result.success, len(result)
    """

    def __init__(
        self,
        tool_pose: Pose,
        tool_pose_sampler: ToolPoseSampler,
        rail_kinematics: ForwardKinematics,
        robot_kinematics: InverseKinematics,
        *,
        world_to_rail_base: Pose,
        rail_sample_resolution: Sequence[float],
        robot_reach: float,
        is_valid: JointValidator,
        collision: Optional[CollisionInterface] = None,
        robot_tcp: Optional[Pose] = None,
        allow_collision: bool = False,
        ik_seed: Optional[Sequence[float]] = None,
        max_grid_points: Optional[int] = None,
    ):
        """
        Initialize railed sampler.

        Args:
            tool_pose: Nominal tool pose in world coordinates
            tool_pose_sampler: Expands the nominal pose into candidates
            rail_kinematics: Rail forward kinematics
            robot_kinematics: Robot arm inverse kinematics
            world_to_rail_base: Pose of the rail base link in world coordinates
            rail_sample_resolution: Grid step per rail joint
            robot_reach: Largest tip distance from the robot base (m)
            is_valid: Acceptance rule for full joint vectors
            collision: Collision capability (None = everything is free)
            robot_tcp: Transform from robot tip to tool working point
            allow_collision: Fall back to the best-clearance configuration
                when no collision-free one exists
            ik_seed: Seed for inverse kinematics (default: zeros)
            max_grid_points: Upper bound on ``search_workload``: grid points
                times tool-pose candidates, times two with ``allow_collision``

        Raises:
            ConfigurationError: On malformed limits, resolution, seed or reach,
                or when collisions are tolerated without a collision capability
        """
        if not callable(is_valid):
            raise ConfigurationError("is_valid must be callable")
        if allow_collision and collision is None:
            raise ConfigurationError(
                "allow_collision requires a collision capability",
                details={"allow_collision": allow_collision},
            )
        if not robot_reach > 0:
            raise ConfigurationError(
                "Robot reach must be positive", details={"robot_reach": robot_reach}
            )
        if max_grid_points is not None and max_grid_points < 1:
            raise ConfigurationError(
                "max_grid_points must be positive",
                details={"max_grid_points": max_grid_points},
            )

        self.tool_pose = as_matrix(tool_pose)
        self.tool_pose_sampler = tool_pose_sampler
        self.rail_kinematics = rail_kinematics
        self.robot_kinematics = robot_kinematics
        self.collision = collision
        self.world_to_rail_base = as_matrix(world_to_rail_base)
        self.robot_tcp = np.eye(4) if robot_tcp is None else as_matrix(robot_tcp)
        self.robot_reach = float(robot_reach)
        self.allow_collision = allow_collision
        self.is_valid = is_valid
        self.max_grid_points = max_grid_points

        self.rail_dof = int(rail_kinematics.num_joints)
        self.robot_dof = int(robot_kinematics.num_joints)
        self.dof = self.rail_dof + self.robot_dof
        if self.robot_dof < 1:
            raise ConfigurationError(
                "Robot kinematics must have at least one joint",
                details={"robot_dof": self.robot_dof},
            )

        self.rail_limits = np.asarray(rail_kinematics.limits, dtype=float)
        self.rail_sample_resolution = np.asarray(rail_sample_resolution, dtype=float).ravel()
        self.rail_grid = tuple(build_rail_grid(self.rail_limits, self.rail_sample_resolution))
        for samples in self.rail_grid:
            samples.setflags(write=False)

        if ik_seed is None:
            seed = np.zeros(self.robot_dof)
        else:
            seed = np.array(ik_seed, dtype=float).ravel()
            if seed.size != self.robot_dof:
                raise ConfigurationError(
                    "IK seed length must match the robot joint count",
                    details={"seed_length": int(seed.size), "robot_dof": self.robot_dof},
                )
        seed.setflags(write=False)
        self.ik_seed = seed

        logger.debug(
            "rail_grid_built",
            sizes=[len(samples) for samples in self.rail_grid],
            total_points=rail_grid_size(self.rail_grid),
        )

    @classmethod
    def from_environment_state(
        cls,
        transforms: Mapping[str, Pose],
        tool_pose: Pose,
        tool_pose_sampler: ToolPoseSampler,
        rail_kinematics: ForwardKinematics,
        robot_kinematics: InverseKinematics,
        **kwargs,
    ) -> "RailedSampler":
        """
        Build a sampler placing the rail from the current environment state.

        Args:
            transforms: World transforms of the environment links, by link name
            tool_pose, tool_pose_sampler, rail_kinematics, robot_kinematics:
                As for the constructor
            **kwargs: Remaining constructor keywords except world_to_rail_base

        Raises:
            ConfigurationError: If the rail base link is not in ``transforms``
        """
        base_link = rail_kinematics.base_link_name
        if base_link not in transforms:
            raise ConfigurationError(
                f"Environment state has no transform for rail base '{base_link}'",
                details={"available": sorted(transforms)},
            )
        return cls(
            tool_pose,
            tool_pose_sampler,
            rail_kinematics,
            robot_kinematics,
            world_to_rail_base=transforms[base_link],
            **kwargs,
        )

    @classmethod
    def from_config(
        cls,
        config: SamplerConfig,
        tool_pose: Pose,
        rail_kinematics: ForwardKinematics,
        robot_kinematics: InverseKinematics,
        world_to_rail_base: Pose,
        is_valid: JointValidator,
        collision: Optional[CollisionInterface] = None,
        tool_pose_sampler: Optional[ToolPoseSampler] = None,
    ) -> "RailedSampler":
        """
        Build a sampler from a validated ``SamplerConfig``.

        Without an explicit ``tool_pose_sampler`` the config's
        ``tool_pose_resolution`` selects z-axis sampling, and its absence
        selects the nominal pose only.
        """
        if tool_pose_sampler is None:
            if config.tool_pose_resolution is not None:
                tool_pose_sampler = make_z_axis_tool_pose_sampler(config.tool_pose_resolution)
            else:
                tool_pose_sampler = identity_tool_pose_sampler

        return cls(
            tool_pose,
            tool_pose_sampler,
            rail_kinematics,
            robot_kinematics,
            world_to_rail_base=world_to_rail_base,
            rail_sample_resolution=config.rail_sample_resolution,
            robot_reach=config.robot_reach,
            is_valid=is_valid,
            collision=collision,
            robot_tcp=pose_from_xyzrpy(config.tcp_offset),
            allow_collision=config.allow_collision,
            ik_seed=config.ik_seed,
            max_grid_points=config.max_grid_points,
        )

    def tool_pose_candidates(self) -> List[np.ndarray]:
        """Candidate tool poses (world coordinates) for the nominal pose."""
        return [as_matrix(pose) for pose in self.tool_pose_sampler(self.tool_pose)]

    def sample(self) -> SampleResult:
        """
        Find configurations reaching the tool pose.

        Returns:
            Every feasible configuration over all tool-pose candidates, or,
            when none is collision-free and collisions are tolerated, the one
            with the largest clearance. ``result.success`` is False when
            nothing was found.

        Raises:
            ConfigurationError: If the search exceeds ``max_grid_points``
        """
        tool_poses = self.tool_pose_candidates()
        self._check_budget(len(tool_poses))

        result = self.collect_solutions(tool_poses)
        if not result.success and self.allow_collision:
            fallback = self.find_best_solution(tool_poses)
            result = SampleResult(
                solutions=fallback.solutions,
                dof=self.dof,
                mode=SearchMode.BEST_ONLY,
                used_fallback=True,
                best_distance=fallback.best_distance,
                stats=result.stats,
                fallback_stats=fallback.stats,
            )

        logger.info(
            "sample_complete",
            success=result.success,
            solutions=len(result),
            used_fallback=result.used_fallback,
            best_distance=result.best_distance,
        )
        return result

    def sample_into(self, solution_set: List[float]) -> bool:
        """
        Append the flat solution set to ``solution_set``.

        Returns:
            True if at least one solution was appended
        """
        result = self.sample()
        solution_set.extend(result.flat.tolist())
        return result.success

    def collect_solutions(
        self, tool_poses: Optional[Sequence[Pose]] = None
    ) -> SampleResult:
        """Run only the collect-all pass."""
        if tool_poses is None:
            tool_poses = self.tool_pose_candidates()
        strategy = CollectAllStrategy(self.collision)
        stats = self._search(tool_poses, strategy)
        logger.info(
            "collect_all_pass_complete", solutions=len(strategy.solutions), **stats.as_dict()
        )
        return SampleResult(
            solutions=strategy.solutions,
            dof=self.dof,
            mode=SearchMode.COLLECT_ALL,
            stats=stats,
        )

    def find_best_solution(
        self, tool_poses: Optional[Sequence[Pose]] = None
    ) -> SampleResult:
        """
        Run only the best-clearance pass.

        Raises:
            ConfigurationError: If no collision capability is configured
        """
        if tool_poses is None:
            tool_poses = self.tool_pose_candidates()
        strategy = BestClearanceStrategy(self.collision)
        logger.info("fallback_search_started", tool_poses=len(tool_poses))
        stats = self._search(tool_poses, strategy)

        best_distance = strategy.best_distance if strategy.solutions else None
        logger.info(
            "fallback_search_complete",
            found=bool(strategy.solutions),
            best_distance=best_distance,
        )
        return SampleResult(
            solutions=strategy.solutions,
            dof=self.dof,
            mode=SearchMode.BEST_ONLY,
            best_distance=best_distance,
            stats=stats,
        )

    def _check_budget(self, n_tool_poses: int) -> None:
        if self.max_grid_points is None:
            return
        grid_points = rail_grid_size(self.rail_grid)
        workload = search_workload(grid_points, n_tool_poses, self.allow_collision)
        if workload > self.max_grid_points:
            raise ConfigurationError(
                "Rail grid exceeds the sampling budget",
                details={
                    "grid_points": grid_points,
                    "tool_poses": n_tool_poses,
                    "passes": search_passes(self.allow_collision),
                    "workload": workload,
                    "max_grid_points": self.max_grid_points,
                },
            )

    def _search(self, tool_poses: Sequence[Pose], strategy: SolutionStrategy) -> SearchStats:
        """Enumerate every rail grid point for every tool pose."""
        stats = SearchStats()
        with search_context(search_pass=strategy.mode.value):
            logger.debug("tool_pose_candidates", count=len(tool_poses))
            for index, tool_pose in enumerate(tool_poses):
                target = tool_pose_in_rail_frame(
                    tool_pose, self.world_to_rail_base, self.robot_tcp
                )
                with search_context(tool_pose_index=index):
                    for rail_point in iter_rail_points(self.rail_grid):
                        self._resolve_point(target, rail_point, strategy, stats)
        return stats

    def _resolve_point(
        self,
        target: np.ndarray,
        rail_point: np.ndarray,
        strategy: SolutionStrategy,
        stats: SearchStats,
    ) -> None:
        """Solve IK at one rail sample and offer every resulting branch."""
        stats.rail_points += 1
        try:
            robot_target = self._robot_target(target, rail_point)
        except UnreachablePose as e:
            stats.rail_unreachable += 1
            logger.debug("rail_point_skipped", rail=rail_point.tolist(), reason=e.message)
            return
        except ReachExceeded as e:
            stats.reach_exceeded += 1
            logger.debug(
                "rail_point_skipped", rail=rail_point.tolist(), distance=e.distance, reach=e.reach
            )
            return

        try:
            branches = self._solve_ik(robot_target, stats)
        except UnreachablePose as e:
            logger.debug("rail_point_skipped", rail=rail_point.tolist(), reason=e.message)
            return

        for branch in branches:
            solution = np.concatenate([rail_point, branch])
            stats.branches += 1
            try:
                if self._admit(solution, strategy):
                    stats.accepted += 1
            except InvalidCandidate:
                stats.invalid += 1
            except CollisionRejected:
                stats.in_collision += 1

    def _robot_target(self, target: np.ndarray, rail_point: np.ndarray) -> np.ndarray:
        rail_tip = self.rail_kinematics.forward(rail_point)
        if rail_tip is None:
            raise UnreachablePose("Rail forward kinematics failed")

        robot_target = invert_transform(as_matrix(rail_tip)) @ target
        distance = translation_norm(robot_target)
        if distance > self.robot_reach:
            raise ReachExceeded(
                "Target outside robot reach", distance=distance, reach=self.robot_reach
            )
        return robot_target

    def _solve_ik(self, robot_target: np.ndarray, stats: SearchStats) -> np.ndarray:
        stats.ik_calls += 1
        raw = self.robot_kinematics.inverse(robot_target, self.ik_seed)
        if raw is None:
            stats.ik_failures += 1
            raise UnreachablePose("Inverse kinematics failed")

        raw = np.asarray(raw, dtype=float).ravel()
        if raw.size % self.robot_dof != 0:
            raise KinematicsError(
                "Inverse kinematics returned a partial branch",
                details={"values": int(raw.size), "robot_dof": self.robot_dof},
            )
        return raw.reshape(-1, self.robot_dof)

    def _admit(self, solution: np.ndarray, strategy: SolutionStrategy) -> bool:
        if not self.is_valid(solution):
            raise InvalidCandidate("Validity rule rejected the configuration")
        return strategy.offer(solution)
