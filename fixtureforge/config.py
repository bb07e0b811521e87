"""Configuration management for fixtureforge.

A FixtureConfig is an immutable value object passed to the value provider
(and through it to the factory). There is no process-wide config.

Config resolution order (highest priority first):
1. Programmatic (FixtureConfig constructed in code, or replace())
2. Environment variables (FIXTUREFORGE_ELEMENT_COUNT, ...; .env is honored)
3. Config file (~/.config/fixtureforge/config.yaml, or an explicit path)
4. Hardcoded defaults
"""

import logging
import os
from dataclasses import asdict, dataclass, field, fields, replace
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)


# =============================================================================
# Config file location
# =============================================================================

CONFIG_DIR = Path.home() / ".config" / "fixtureforge"
CONFIG_FILE = CONFIG_DIR / "config.yaml"

ENV_PREFIX = "FIXTUREFORGE_"


def type_key(cls: Any) -> str:
    """Key used for per-type settings: ``module.QualName``."""
    module = getattr(cls, "__module__", None)
    qualname = getattr(cls, "__qualname__", None) or repr(cls)
    return f"{module}.{qualname}" if module else qualname


# =============================================================================
# Config dataclass
# =============================================================================


@dataclass(frozen=True)
class FixtureConfig:
    """Top-level fixtureforge configuration.

    Per-type overrides in ``element_counts`` / ``max_depths`` are keyed by
    ``module.QualName`` or by the bare class name.

    Examples:
        # Package use
        config = FixtureConfig(max_depth=2, memoize=True, seed=7)

        # CLI use: file + env vars
        config = FixtureConfig.load()
        config = config.replace(element_count=3)
    """

    element_count: int = 5
    max_depth: int = 1
    string_length: int = 10
    memoize: bool = False
    seed: int | None = None
    element_counts: dict[str, int] = field(default_factory=dict)
    max_depths: dict[str, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.element_count < 0:
            raise ValueError(f"element_count must be >= 0, got {self.element_count}")
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {self.max_depth}")
        if self.string_length < 0:
            raise ValueError(
                f"string_length must be >= 0, got {self.string_length}"
            )

    @classmethod
    def load(cls, path: Path | str | None = None) -> "FixtureConfig":
        """Load config from file + env vars.

        Priority: env var values > config file values > defaults.
        """
        values: dict[str, Any] = {}

        # Layer 1: config file
        config_path = Path(path) if path is not None else CONFIG_FILE
        if config_path.exists():
            try:
                with open(config_path) as f:
                    data = yaml.safe_load(f) or {}
                if isinstance(data, dict):
                    values.update(_known_keys(data))
                else:
                    logger.warning(
                        "Ignoring config file %s: expected a mapping", config_path
                    )
            except (yaml.YAMLError, OSError) as exc:
                logger.warning("Failed to load config from %s: %s", config_path, exc)
        elif path is not None:
            raise FileNotFoundError(f"Config file not found: {config_path}")

        # Layer 2: env var overrides
        _ensure_dotenv()
        for name in ("element_count", "max_depth", "string_length", "seed"):
            env_var = f"{ENV_PREFIX}{name.upper()}"
            if val := os.environ.get(env_var):
                try:
                    values[name] = int(val)
                except ValueError:
                    logger.warning("Invalid %s=%r, ignoring", env_var, val)
        if val := os.environ.get(f"{ENV_PREFIX}MEMOIZE"):
            values["memoize"] = val.strip().lower() in ("1", "true", "yes", "on")

        return cls(**values)

    def replace(self, **changes: Any) -> "FixtureConfig":
        """Return a copy with ``changes`` applied."""
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for display."""
        return asdict(self)

    def save(self, path: Path | str | None = None) -> Path:
        """Write this config as YAML (defaults to ~/.config/fixtureforge/config.yaml)."""
        target = Path(path) if path is not None else CONFIG_FILE
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "w") as f:
            yaml.safe_dump(self.to_dict(), f, sort_keys=False)
        return target

    # ── Per-type resolution ──

    def element_count_for(self, cls: Any) -> int:
        return _lookup(self.element_counts, cls, self.element_count)

    def max_depth_for(self, cls: Any) -> int:
        return _lookup(self.max_depths, cls, self.max_depth)


def _lookup(table: dict[str, int], cls: Any, default: int) -> int:
    if not table:
        return default
    key = type_key(cls)
    if key in table:
        return table[key]
    return table.get(getattr(cls, "__name__", key), default)


def _known_keys(data: dict) -> dict[str, Any]:
    known = {f.name for f in fields(FixtureConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        logger.warning("Ignoring unknown config keys: %s", ", ".join(unknown))
    return {k: v for k, v in data.items() if k in known}


def _ensure_dotenv() -> None:
    """Load a .env file from the working directory tree, if any."""
    from dotenv import find_dotenv, load_dotenv

    dotenv_path = find_dotenv(usecwd=True)
    if dotenv_path:
        load_dotenv(dotenv_path=dotenv_path, override=False)
