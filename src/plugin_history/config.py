"""
Configuration system for plugin history reconstruction.
"""

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

DEFAULT_STATS_FILE = "community-plugin-stats.json"
DEFAULT_ROLLING_WINDOWS = (7, 30)


class FilterPolicy:
    """Anomaly filter policies."""

    SEQUENTIAL = "sequential"
    NEIGHBOR = "neighbor"

    @classmethod
    def choices(cls) -> list[str]:
        return [cls.SEQUENTIAL, cls.NEIGHBOR]


class OutputMode:
    """Shapes of the serialized history file."""

    # Object keyed by commit timestamp: {date, data: {downloads, dailyGrowth, ...}}
    TIMELINE = "timeline"
    # Array ordered by date: [{date, hash, downloads, versions}]
    DAILY = "daily"

    @classmethod
    def choices(cls) -> list[str]:
        return [cls.TIMELINE, cls.DAILY]


class Variant:
    """Named bundles of pipeline settings."""

    STRICT = "strict"
    SIMPLE = "simple"

    @classmethod
    def choices(cls) -> list[str]:
        return [cls.STRICT, cls.SIMPLE]


VARIANT_PRESETS: dict[str, dict[str, Any]] = {
    Variant.STRICT: {
        "filter_policy": FilterPolicy.NEIGHBOR,
        "dedup_by_day": False,
        "exclude_beta": True,
        "output_mode": OutputMode.TIMELINE,
    },
    Variant.SIMPLE: {
        "filter_policy": FilterPolicy.SEQUENTIAL,
        "dedup_by_day": True,
        "exclude_beta": False,
        "output_mode": OutputMode.DAILY,
    },
}


class ConfigError(ValueError):
    """Raised for invalid history configuration."""


@dataclass
class HistoryConfig:
    """Configuration for one history reconstruction run."""

    plugin_name: str
    stats_file: str = DEFAULT_STATS_FILE
    repo_path: Path = field(default_factory=Path.cwd)
    output_dir: Path = field(default_factory=Path.cwd)
    variant: str = Variant.STRICT
    filter_policy: str = FilterPolicy.NEIGHBOR
    dedup_by_day: bool = False
    exclude_beta: bool = True
    output_mode: str = OutputMode.TIMELINE
    rolling_windows: tuple[int, ...] = DEFAULT_ROLLING_WINDOWS
    render_chart: bool = True

    def __post_init__(self):
        """Validate settings and normalize paths."""
        if not self.plugin_name or not self.plugin_name.strip():
            raise ConfigError("Plugin name must not be empty")
        if self.variant not in Variant.choices():
            raise ConfigError(f"Unknown variant: {self.variant}")
        if self.filter_policy not in FilterPolicy.choices():
            raise ConfigError(f"Unknown filter policy: {self.filter_policy}")
        if self.output_mode not in OutputMode.choices():
            raise ConfigError(f"Unknown output mode: {self.output_mode}")
        if any(window < 1 for window in self.rolling_windows):
            raise ConfigError("Rolling windows must be positive")

        self.repo_path = Path(self.repo_path)
        self.output_dir = Path(self.output_dir)

    @classmethod
    def for_variant(
        cls, plugin_name: str, variant: str = Variant.STRICT, **overrides: Any
    ) -> "HistoryConfig":
        """Build a config from a variant preset.

        Args:
            plugin_name: Plugin display name
            variant: Preset name (strict or simple)
            **overrides: Explicit settings; ``None`` values keep the preset

        Returns:
            Validated configuration
        """
        if variant not in VARIANT_PRESETS:
            raise ConfigError(f"Unknown variant: {variant}")

        settings = dict(VARIANT_PRESETS[variant])
        settings.update({k: v for k, v in overrides.items() if v is not None})
        return cls(plugin_name=plugin_name, variant=variant, **settings)

    @classmethod
    def from_env(cls, plugin_name: str, **overrides: Any) -> "HistoryConfig":
        """Build a config using PLUGIN_STATS_FILE / PLUGIN_REPO_PATH defaults."""
        env_defaults: dict[str, Any] = {}
        if os.getenv("PLUGIN_STATS_FILE"):
            env_defaults["stats_file"] = os.environ["PLUGIN_STATS_FILE"]
        if os.getenv("PLUGIN_REPO_PATH"):
            env_defaults["repo_path"] = Path(os.environ["PLUGIN_REPO_PATH"])

        variant = overrides.pop("variant", None) or Variant.STRICT
        env_defaults.update({k: v for k, v in overrides.items() if v is not None})
        return cls.for_variant(plugin_name, variant, **env_defaults)

    def with_overrides(self, **changes: Any) -> "HistoryConfig":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)

    def describe(self) -> dict[str, Any]:
        """Settings recorded in result metadata."""
        return {
            "variant": self.variant,
            "filter_policy": self.filter_policy,
            "dedup_by_day": self.dedup_by_day,
            "exclude_beta": self.exclude_beta,
            "output_mode": self.output_mode,
            "stats_file": self.stats_file,
        }
