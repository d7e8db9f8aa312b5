"""netinteract engine — script execution core.

- InteractionExecutor: traverses targets, handles jumps and failures
- ExecutionContext / InteractionResult: per-run state and action outcomes
- Page / Form: fetched document and its forms
- OutputExtractor: regex / XPath output rules with expected-value checks
- Action variants: FetchAction, SubmitAction, BranchAction, JumpAction
"""

from netinteract.engine.actions import (
    ACTION_TYPES,
    Action,
    BranchAction,
    FetchAction,
    JumpAction,
    SubmitAction,
    build_action,
)
from netinteract.engine.context import ExecutionContext, InteractionResult
from netinteract.engine.executor import InteractionExecutor
from netinteract.engine.extractor import OutputExtractor
from netinteract.engine.forms import merge_form_values, resolve_submit_url, select_form
from netinteract.engine.page import Form, Page
from netinteract.engine.resolver import resolve

__all__ = [
    "ACTION_TYPES",
    "Action",
    "BranchAction",
    "ExecutionContext",
    "FetchAction",
    "Form",
    "InteractionExecutor",
    "InteractionResult",
    "JumpAction",
    "OutputExtractor",
    "Page",
    "SubmitAction",
    "build_action",
    "merge_form_values",
    "resolve",
    "resolve_submit_url",
    "select_form",
]
