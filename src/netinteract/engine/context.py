"""Per-run state and action outcomes."""

from __future__ import annotations

import dataclasses
from typing import TYPE_CHECKING

from requests.structures import CaseInsensitiveDict

if TYPE_CHECKING:
    from netinteract.accessors.base import WebAccessor
    from netinteract.engine.page import Page


@dataclasses.dataclass
class InteractionResult:
    """Outcome of one action, or of a whole run.

    ``target`` is set only by a jump and asks the engine to run that target
    next. ``outputs`` is only filled on the result a run hands back.
    """

    ok: bool
    message: str | None = None
    target: str | None = None
    outputs: dict[str, str] | None = None

    @classmethod
    def success(cls) -> InteractionResult:
        return cls(ok=True)

    @classmethod
    def failure(cls, message: str) -> InteractionResult:
        return cls(ok=False, message=message)

    @classmethod
    def jump(cls, target: str) -> InteractionResult:
        return cls(ok=True, target=target)


@dataclasses.dataclass
class ExecutionContext:
    """Mutable state owned by exactly one run.

    Inputs are read-only for the run's lifetime. Outputs form one flat
    namespace; a later step writing an existing name replaces its value.
    Both are looked up by name without regard to case.
    """

    web_accessor: WebAccessor
    inputs: CaseInsensitiveDict = dataclasses.field(default_factory=CaseInsensitiveDict)
    outputs: CaseInsensitiveDict = dataclasses.field(default_factory=CaseInsensitiveDict)
    current_page: Page | None = None
    depth: int = 0  # current jump nesting

    def __post_init__(self) -> None:
        self.inputs = CaseInsensitiveDict(self.inputs)
        self.outputs = CaseInsensitiveDict(self.outputs)
