"""Script definitions: targets, actions and output rules.

A script is loaded once and never mutated. Actions are a closed set of
config variants; the engine maps each variant to the action that runs it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from netinteract.models import DEFAULT_ACCEPTED_STATUS_CODES


@dataclass(frozen=True)
class OutputRule:
    """Named extraction instruction applied to a fetched page."""

    name: str
    regex: str | None = None  # pattern with a group named after the rule
    xpath: str | None = None
    attr: str | None = None  # html() | text() | attribute name
    multiple: bool = False
    expected_value: str | None = None


@dataclass(frozen=True)
class FormOverride:
    """Value to place in a submitted form, literal or chosen by option text."""

    name: str
    value: str | None = None
    text: str | None = None


@dataclass(frozen=True)
class FetchConfig:
    url: str
    outputs: tuple[OutputRule, ...] = ()
    accepted_status_codes: tuple[int, ...] = DEFAULT_ACCEPTED_STATUS_CODES
    options: dict[str, str] = field(default_factory=dict, hash=False)


@dataclass(frozen=True)
class SubmitConfig:
    client_id: str | None = None
    form_name: str | None = None
    action: str | None = None
    form_index: int | None = None
    values: tuple[FormOverride, ...] = ()
    outputs: tuple[OutputRule, ...] = ()
    accepted_status_codes: tuple[int, ...] = DEFAULT_ACCEPTED_STATUS_CODES
    options: dict[str, str] = field(default_factory=dict, hash=False)


@dataclass(frozen=True)
class BranchConfig:
    """Run ``action`` only when ``property`` resolves to ``value`` (case-insensitive)."""

    property: str
    value: str
    action: ActionConfig


@dataclass(frozen=True)
class JumpConfig:
    target: str


ActionConfig = Union[FetchConfig, SubmitConfig, BranchConfig, JumpConfig]


@dataclass(frozen=True)
class Target:
    name: str
    actions: tuple[ActionConfig, ...] = ()


@dataclass(frozen=True)
class Script:
    targets: tuple[Target, ...]
    default_target: str | None = None

    def find_target(self, name: str) -> Target | None:
        """Look up a target by name, ignoring case."""
        wanted = name.casefold()
        for target in self.targets:
            if target.name.casefold() == wanted:
                return target
        return None

    @property
    def target_names(self) -> list[str]:
        return [t.name for t in self.targets]
