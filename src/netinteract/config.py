"""netinteract configuration management."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from netinteract.models import (
    ACCESSOR_KINDS,
    DEFAULT_MAX_JUMP_DEPTH,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_USER_AGENT,
)


class NetInteractConfigError(Exception):
    """Raised when configuration is invalid or missing."""

    pass


@dataclass
class NetInteractConfig:
    """Configuration for a netinteract run."""

    project_dir: Path = field(default_factory=Path.cwd)

    # Network collaborator
    accessor: str = "http"
    user_agent: str = DEFAULT_USER_AGENT
    timeout: int = DEFAULT_REQUEST_TIMEOUT
    headless: bool = True

    # Engine
    max_jump_depth: int = DEFAULT_MAX_JUMP_DEPTH

    # Inputs applied to every run; command-line inputs take precedence
    inputs: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_file(cls, config_path: Path) -> NetInteractConfig:
        """Load config from a YAML file."""
        if not config_path.exists():
            raise NetInteractConfigError(f"Config file not found: {config_path}")
        with open(config_path, encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as exc:
                raise NetInteractConfigError(f"Invalid YAML in {config_path}: {exc}") from exc
        if not isinstance(data, dict):
            raise NetInteractConfigError(f"Config file must be a YAML mapping: {config_path}")
        return cls._from_dict(data, config_path.parent)

    @classmethod
    def _from_dict(cls, data: dict[str, Any], project_dir: Path) -> NetInteractConfig:
        """Create config from a dictionary."""
        config = cls()
        config.project_dir = project_dir

        if "accessor" in data:
            accessor = str(data["accessor"]).lower()
            if accessor not in ACCESSOR_KINDS:
                raise NetInteractConfigError(
                    f"Unknown accessor: {data['accessor']}\n\n"
                    f"Expected one of: {', '.join(ACCESSOR_KINDS)}"
                )
            config.accessor = accessor
        if "user_agent" in data:
            config.user_agent = str(data["user_agent"])
        if "timeout" in data:
            config.timeout = _as_int(data, "timeout")
        if "headless" in data:
            config.headless = bool(data["headless"])
        if "max_jump_depth" in data:
            config.max_jump_depth = _as_int(data, "max_jump_depth")
        if "inputs" in data:
            inputs = data["inputs"] or {}
            if not isinstance(inputs, dict):
                raise NetInteractConfigError("'inputs' must be a mapping of name to value")
            config.inputs = {str(k): "" if v is None else str(v) for k, v in inputs.items()}

        return config


def _as_int(data: dict[str, Any], key: str) -> int:
    try:
        return int(data[key])
    except (TypeError, ValueError) as exc:
        raise NetInteractConfigError(f"'{key}' must be an integer, got {data[key]!r}") from exc
