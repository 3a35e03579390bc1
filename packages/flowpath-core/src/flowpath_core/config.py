from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from flowpath_core.errors import ConfigError

# Accepted values for AnalysisConfig.negative_durations
NEGATIVE_DURATION_POLICIES = ("reject", "clamp")


def _load_toml(path: Path) -> dict:
    """Load a TOML file, returning empty dict if missing or unreadable."""
    if not path.exists():
        return {}
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError):
        return {}


def _deep_merge(base: dict, override: dict) -> dict:
    """Merge override into base (1 level deep for TOML sections)."""
    merged = dict(base)
    for key, val in override.items():
        if (
            key in merged
            and isinstance(merged[key], dict)
            and isinstance(val, dict)
        ):
            merged[key] = {**merged[key], **val}
        else:
            merged[key] = val
    return merged


def _pick(section: dict, dc: type) -> dict:
    fields = dc.__dataclass_fields__
    return {k: v for k, v in section.items() if k in fields}


@dataclass(frozen=True, slots=True)
class AnalysisConfig:
    """Cost policy and classification thresholds for trace analysis."""
    tool_action: str = "mcp_tool_call"
    failure_penalty: float = 3.0
    optimal_tolerance: float = 0.1  # seconds
    negative_durations: str = "reject"  # reject | clamp

    def validate(self) -> None:
        """Raise ConfigError if any value is out of range."""
        if not self.tool_action:
            msg = "analysis.tool_action must not be empty"
            raise ConfigError(msg)
        if self.failure_penalty < 1:
            msg = f"analysis.failure_penalty must be >= 1, got {self.failure_penalty}"
            raise ConfigError(msg)
        if self.optimal_tolerance < 0:
            msg = f"analysis.optimal_tolerance must be >= 0, got {self.optimal_tolerance}"
            raise ConfigError(msg)
        if self.negative_durations not in NEGATIVE_DURATION_POLICIES:
            msg = (
                "analysis.negative_durations must be one of "
                f"{', '.join(NEGATIVE_DURATION_POLICIES)}, got {self.negative_durations!r}"
            )
            raise ConfigError(msg)


@dataclass(frozen=True, slots=True)
class SearchConfig:
    limit: int = 10
    catalog_path: str | None = None
    min_similarity: float = 0.0


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    level: str = "WARNING"
    json: bool = False


@dataclass(frozen=True, slots=True)
class FlowpathConfig:
    """Top-level configuration, parsed from flowpath.toml."""
    project_name: str = "flowpath-project"
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_toml(
        cls, path: Path | str = "flowpath.toml"
    ) -> FlowpathConfig:
        path = Path(path)
        raw = _load_toml(path)
        return cls._from_raw(raw)

    @classmethod
    def load(
        cls, project_dir: Path | str | None = None
    ) -> FlowpathConfig:
        """Load config with global → project layering.

        Resolution order (later wins):
        1. Built-in defaults
        2. ~/.flowpath/config.toml (global)
        3. .flowpath/config.toml or flowpath.toml (project)
        """
        global_path = Path.home() / ".flowpath" / "config.toml"

        project_dir = (
            Path.cwd() if project_dir is None else Path(project_dir)
        )

        # Project config: .flowpath/config.toml takes priority
        project_path = project_dir / ".flowpath" / "config.toml"
        if not project_path.exists():
            project_path = project_dir / "flowpath.toml"

        global_raw = _load_toml(global_path)
        project_raw = _load_toml(project_path)
        merged = _deep_merge(global_raw, project_raw)

        return cls._from_raw(merged)

    @classmethod
    def _from_raw(cls, raw: dict) -> FlowpathConfig:
        """Build FlowpathConfig from a raw TOML dict."""
        analysis = AnalysisConfig(**_pick(raw.get("analysis", {}), AnalysisConfig))
        analysis.validate()

        return cls(
            project_name=raw.get("project", {}).get(
                "name", "flowpath-project"
            ),
            analysis=analysis,
            search=SearchConfig(**_pick(raw.get("search", {}), SearchConfig)),
            logging=LoggingConfig(**_pick(raw.get("logging", {}), LoggingConfig)),
        )
