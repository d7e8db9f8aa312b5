"""Script model and loader."""

from netinteract.script.loader import (
    ACTION_BUILDERS,
    ScriptBuilder,
    build_script,
    find_unresolved_jumps,
    load_script,
    load_script_text,
)
from netinteract.script.model import (
    ActionConfig,
    BranchConfig,
    FetchConfig,
    FormOverride,
    JumpConfig,
    OutputRule,
    Script,
    SubmitConfig,
    Target,
)

__all__ = [
    "ACTION_BUILDERS",
    "ActionConfig",
    "BranchConfig",
    "FetchConfig",
    "FormOverride",
    "JumpConfig",
    "OutputRule",
    "Script",
    "ScriptBuilder",
    "SubmitConfig",
    "Target",
    "build_script",
    "find_unresolved_jumps",
    "load_script",
    "load_script_text",
]
