"""
Configuration management for OpenRail.

Handles loading, validation, and access to rail and sampler configurations.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Annotated, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from openrail.core.exceptions import ConfigurationError


class RailAxisConfig(BaseModel):
    """One external axis of a rail (linear track or rotary stage)."""

    name: str
    type: Literal["linear", "rotary"] = "linear"
    min_limit: float
    max_limit: float
    direction: list[float] = Field(default_factory=lambda: [1.0, 0.0, 0.0])

    @field_validator("direction")
    @classmethod
    def _check_direction(cls, value: list[float]) -> list[float]:
        if len(value) != 3 or not any(value):
            raise ValueError("direction must be a non-zero 3-vector")
        return value

    @model_validator(mode="after")
    def _check_limits(self) -> "RailAxisConfig":
        if self.min_limit > self.max_limit:
            raise ValueError(
                f"min_limit {self.min_limit} exceeds max_limit {self.max_limit}"
            )
        return self


class RailConfig(BaseModel):
    """Rail (external positioning axes) configuration model."""

    name: str
    base_link: str = "rail_base"
    axes: list[RailAxisConfig] = Field(min_length=1)


class SamplerConfig(BaseModel):
    """Railed sampler configuration model."""

    rail_sample_resolution: list[float] = Field(min_length=1)
    robot_reach: float = Field(gt=0)
    allow_collision: bool = False
    tcp_offset: list[float] = Field(default_factory=lambda: [0.0] * 6)
    ik_seed: list[float] | None = None
    tool_pose_resolution: Annotated[float, Field(gt=0)] | None = None
    max_grid_points: Annotated[int, Field(gt=0)] | None = None

    @field_validator("rail_sample_resolution")
    @classmethod
    def _check_resolution(cls, value: list[float]) -> list[float]:
        if any(step <= 0 for step in value):
            raise ValueError("rail_sample_resolution entries must be positive")
        return value

    @field_validator("tcp_offset")
    @classmethod
    def _check_tcp_offset(cls, value: list[float]) -> list[float]:
        if len(value) != 6:
            raise ValueError("tcp_offset must be [x, y, z, rx, ry, rz]")
        return value


@dataclass
class ConfigManager:
    """
    Central configuration manager for OpenRail.

    Loads and validates configurations from YAML files laid out as::

        config/
          rails/<name>.yaml       # top-level key "rail"
          samplers/<name>.yaml    # top-level key "sampler"

    Example:
        >>> config = ConfigManager(config_dir=Path("config"))
        >>> rail = config.get_rail("floor_track")
        >>> sampler = config.get_sampler("welding")
    """

    config_dir: Path
    _rails: dict[str, RailConfig] = field(default_factory=dict, init=False)
    _samplers: dict[str, SamplerConfig] = field(default_factory=dict, init=False)
    _loaded: bool = field(default=False, init=False)

    def __post_init__(self) -> None:
        """Initialize configuration manager."""
        self.config_dir = Path(self.config_dir)
        if not self.config_dir.exists():
            raise ConfigurationError(
                f"Configuration directory not found: {self.config_dir}"
            )

    def load(self) -> None:
        """Load all configurations from disk."""
        self._rails = self._load_section("rails", "rail", RailConfig)
        self._samplers = self._load_section("samplers", "sampler", SamplerConfig)
        self._loaded = True

    def _load_section(self, subdir: str, key: str, model: type[BaseModel]) -> dict:
        section_dir = self.config_dir / subdir
        if not section_dir.exists():
            return {}

        loaded = {}
        for config_file in sorted(section_dir.glob("*.yaml")):
            try:
                with open(config_file) as f:
                    data = yaml.safe_load(f)

                if data and key in data:
                    loaded[config_file.stem] = model(**data[key])
            except (yaml.YAMLError, ValidationError) as e:
                raise ConfigurationError(
                    f"Failed to load {key} config: {config_file}",
                    details={"error": str(e)},
                )
        return loaded

    def get_rail(self, name: str) -> RailConfig:
        """
        Get rail configuration by name.

        Args:
            name: Rail configuration name (without .yaml extension)

        Returns:
            RailConfig instance

        Raises:
            ConfigurationError: If rail not found
        """
        if not self._loaded:
            self.load()

        if name not in self._rails:
            raise ConfigurationError(
                f"Rail configuration not found: {name}",
                details={"available": list(self._rails.keys())},
            )
        return self._rails[name]

    def get_sampler(self, name: str) -> SamplerConfig:
        """
        Get sampler configuration by name.

        Args:
            name: Sampler configuration name (without .yaml extension)

        Returns:
            SamplerConfig instance

        Raises:
            ConfigurationError: If sampler not found
        """
        if not self._loaded:
            self.load()

        if name not in self._samplers:
            raise ConfigurationError(
                f"Sampler configuration not found: {name}",
                details={"available": list(self._samplers.keys())},
            )
        return self._samplers[name]

    def list_rails(self) -> list[str]:
        """List available rail configurations."""
        if not self._loaded:
            self.load()
        return list(self._rails.keys())

    def list_samplers(self) -> list[str]:
        """List available sampler configurations."""
        if not self._loaded:
            self.load()
        return list(self._samplers.keys())
