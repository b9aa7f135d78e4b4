"""
Engine configuration.

Settings hierarchy (highest to lowest priority):
  1. Environment variables (CONLANG_EDITOR_*)
  2. YAML config file (explicit path, or $CONLANG_EDITOR_CONFIG)
  3. Defaults
"""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from conlang_editor.exceptions import ConfigError
from conlang_editor.substitution import (
    DEFAULT_GROWTH_FACTOR,
    DEFAULT_GROWTH_MARGIN,
    DEFAULT_MAX_ITERATIONS,
    Limits,
)

CONFIG_ENV = "CONLANG_EDITOR_CONFIG"
MAX_ITERATIONS_ENV = "CONLANG_EDITOR_MAX_ITERATIONS"
TRANSACTIONAL_ENV = "CONLANG_EDITOR_TRANSACTIONAL"

_TRUE = ("1", "true", "yes", "on")
_FALSE = ("0", "false", "no", "off")


@dataclass
class EngineConfig:
    """Tunable engine behaviour."""
    max_iterations: int = DEFAULT_MAX_ITERATIONS  # fixpoint cap per rule
    growth_factor: int = DEFAULT_GROWTH_FACTOR  # length cap relative to input
    growth_margin: int = DEFAULT_GROWTH_MARGIN
    transactional_derive: bool = True
    indent: int = 2  # JSON output

    def validate(self) -> Optional[str]:
        """Validate config. Returns error message or None if valid."""
        if not isinstance(self.max_iterations, int) or self.max_iterations < 1:
            return f"max_iterations must be a positive integer, got {self.max_iterations!r}"
        if not isinstance(self.growth_factor, int) or self.growth_factor < 1:
            return f"growth_factor must be a positive integer, got {self.growth_factor!r}"
        if not isinstance(self.growth_margin, int) or self.growth_margin < 0:
            return f"growth_margin must be a non-negative integer, got {self.growth_margin!r}"
        if not isinstance(self.transactional_derive, bool):
            return f"transactional_derive must be a boolean, got {self.transactional_derive!r}"
        if not isinstance(self.indent, int) or self.indent < 0:
            return f"indent must be a non-negative integer, got {self.indent!r}"
        return None

    def limits(self) -> Limits:
        return Limits(
            max_iterations=self.max_iterations,
            growth_factor=self.growth_factor,
            growth_margin=self.growth_margin,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EngineConfig":
        """Create from dictionary, ignoring unknown keys."""
        defaults = cls()
        return cls(
            max_iterations=data.get("max_iterations", defaults.max_iterations),
            growth_factor=data.get("growth_factor", defaults.growth_factor),
            growth_margin=data.get("growth_margin", defaults.growth_margin),
            transactional_derive=data.get(
                "transactional_derive", defaults.transactional_derive
            ),
            indent=data.get("indent", defaults.indent),
        )


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ConfigError(f"{name} must be a boolean, got {value!r}")


def load_config(path: Union[str, Path, None] = None) -> EngineConfig:
    """Load configuration from defaults, a YAML file and the environment.

    Raises:
        ConfigError: If the file is malformed or a value is invalid
    """
    data: Dict[str, Any] = {}

    if path is None and os.environ.get(CONFIG_ENV):
        path = os.environ[CONFIG_ENV]
    if path is not None:
        config_path = Path(path)
        if not config_path.exists():
            raise ConfigError(f"Config file not found: {config_path}")
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                loaded = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e
        if not isinstance(loaded, dict):
            raise ConfigError("Config root must be a mapping (dictionary)")
        data.update(loaded)

    if os.environ.get(MAX_ITERATIONS_ENV):
        raw = os.environ[MAX_ITERATIONS_ENV]
        try:
            data["max_iterations"] = int(raw)
        except ValueError:
            raise ConfigError(
                f"{MAX_ITERATIONS_ENV} must be an integer, got {raw!r}"
            ) from None
    if os.environ.get(TRANSACTIONAL_ENV):
        data["transactional_derive"] = _parse_bool(
            TRANSACTIONAL_ENV, os.environ[TRANSACTIONAL_ENV]
        )

    config = EngineConfig.from_dict(data)
    error = config.validate()
    if error:
        raise ConfigError(error)
    return config
