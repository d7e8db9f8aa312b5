"""Template resolution for ``${output}`` and ``$(input)`` placeholders."""

from __future__ import annotations

from collections.abc import Mapping

from netinteract.engine.context import ExecutionContext

# opening delimiter -> (closing delimiter, which mapping it reads)
_PLACEHOLDERS = {
    "${": ("}", "outputs"),
    "$(": (")", "inputs"),
}


def _lookup(values: Mapping[str, str] | None, name: str) -> str:
    if not values:
        return ""
    value = values.get(name)
    return "" if value is None else str(value)


def _next_placeholder(text: str) -> tuple[int, int, str, str] | None:
    """Find the earliest terminated placeholder as ``(start, end, name, source)``."""
    best: tuple[int, int, str, str] | None = None
    for opener, (closer, source) in _PLACEHOLDERS.items():
        start = text.find(opener)
        if start < 0 or (best is not None and start > best[0]):
            continue
        # No closer after the first opening means none after later ones either
        end = text.find(closer, start + len(opener))
        if end < 0:
            continue
        best = (start, end, text[start + len(opener) : end], source)
    return best


def resolve(text: str | None, context: ExecutionContext) -> str:
    """Substitute every placeholder in ``text`` against ``context``.

    The earliest placeholder is replaced first and scanning restarts from the
    beginning of the rewritten string, so substituted values that themselves
    contain placeholders are resolved too. Names match without regard to
    case and missing names resolve to ``""``; an opening delimiter without a
    closer is kept as literal text.
    """
    if not text:
        return ""

    value = text
    while True:
        found = _next_placeholder(value)
        if found is None:
            return value
        start, end, name, source = found
        replacement = _lookup(getattr(context, source), name)
        value = value[:start] + replacement + value[end + 1 :]


def lookup_property(prop: str | None, context: ExecutionContext) -> str:
    """Value a branch compares: the property string with placeholders resolved."""
    return resolve(prop, context)
