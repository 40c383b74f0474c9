"""
Custom exceptions for OpenRail.

All OpenRail exceptions inherit from OpenRailError for easy catching.

The MotionPlanningError subclasses describe why a single rail sample or IK
branch was skipped. The sampler raises and handles them internally; they
never reach the caller of ``RailedSampler.sample()``.
"""

from typing import Any


class OpenRailError(Exception):
    """Base exception for all OpenRail errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message


class ConfigurationError(OpenRailError):
    """Raised when configuration is invalid or missing."""

    pass


class GeometryError(OpenRailError):
    """Raised when a pose or transform is malformed."""

    pass


class KinematicsError(OpenRailError):
    """Raised when a kinematics implementation is used with bad input."""

    def __init__(
        self,
        message: str,
        chain: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.chain = chain


class MotionPlanningError(OpenRailError):
    """Raised when a candidate configuration cannot be produced."""

    pass


class UnreachablePose(MotionPlanningError):
    """Raised when forward or inverse kinematics fails at a rail sample."""

    pass


class ReachExceeded(MotionPlanningError):
    """Raised when a target lies outside the robot's reach."""

    def __init__(
        self,
        message: str,
        distance: float,
        reach: float,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.distance = distance
        self.reach = reach


class InvalidCandidate(MotionPlanningError):
    """Raised when the validity rule rejects an assembled solution."""

    pass


class CollisionRejected(MotionPlanningError):
    """Raised when an assembled solution is in collision."""

    pass
