"""Fatal script errors.

These signal a malformed script (or a script that cannot be applied to the
page it reached) and abort a run. Ordinary step failures are never raised;
they come back as an ``InteractionResult`` with ``ok=False``.
"""

from __future__ import annotations


class ScriptError(Exception):
    """Base class for errors that abort a run."""

    pass


class ScriptLoadError(ScriptError):
    """Raised when a script document cannot be parsed into targets."""

    pass


class UnknownActionError(ScriptError):
    """Raised for an action kind (or config type) with no registered builder."""

    pass


class DuplicateTargetError(ScriptError):
    """Raised when two targets share a name (case-insensitive)."""

    pass


class MissingTargetError(ScriptError):
    """Raised when neither the caller nor the script names an entry target."""

    pass


class TargetNotFoundError(ScriptError):
    """Raised when an entry or jump target does not exist in the script."""

    def __init__(self, name: str, context: str = "target") -> None:
        self.name = name
        super().__init__(f"{context} cannot be found: {name}")


class JumpDepthExceededError(ScriptError):
    """Raised when jump targets nest deeper than the configured limit."""

    pass


class FormNotFoundError(ScriptError):
    """Raised when a submit action cannot locate its form on the current page."""

    pass


class SelectNotFoundError(ScriptError, LookupError):
    """Raised when a select-by-text override names a select the form lacks."""

    pass


class OptionNotFoundError(ScriptError, LookupError):
    """Raised when no option of a select has the requested visible text."""

    pass


class InvalidOutputRuleError(ScriptError):
    """Raised when an output rule's regex or XPath cannot be compiled or evaluated."""

    pass
