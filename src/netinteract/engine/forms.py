"""Form selection, value merging and submission URL resolution."""

from __future__ import annotations

from collections.abc import Iterable
from urllib.parse import urlsplit

from netinteract.engine.context import ExecutionContext
from netinteract.engine.page import Form, Page
from netinteract.engine.resolver import resolve
from netinteract.errors import FormNotFoundError
from netinteract.script.model import FormOverride, SubmitConfig


def select_form(page: Page | None, config: SubmitConfig) -> Form:
    """Pick the form a submit action targets.

    The first criterion set wins: client id, form name, action, then
    position (defaulting to the first form). Name matching ignores case.
    """
    if page is None:
        raise FormNotFoundError("No page has been fetched yet, so there is no form to submit")

    if config.client_id:
        return _first(page.forms, lambda f: f.client_id, config.client_id, "ClientID")
    if config.form_name:
        return _first(page.forms, lambda f: f.name, config.form_name, "FormName")
    if config.action:
        return _first(page.forms, lambda f: f.action, config.action, "Action")

    index = config.form_index if config.form_index is not None else 0
    if index < 0 or index >= len(page.forms):
        raise FormNotFoundError(f"Form index is out of range: {index} (page has {len(page.forms)} form(s))")
    return page.forms[index]


def _first(forms: Iterable[Form], attr, wanted: str, label: str) -> Form:
    wanted_folded = wanted.casefold()
    for form in forms:
        if attr(form).casefold() == wanted_folded:
            return form
    raise FormNotFoundError(f"Cannot find a form by {label}: {wanted}")


def merge_form_values(
    form: Form,
    overrides: Iterable[FormOverride],
    context: ExecutionContext,
) -> dict[str, str]:
    """Form's seeded values with the script's overrides applied.

    A literal value always wins over the seeded value. A text override is
    mapped to the underlying value of the option with that visible text;
    lookup failures propagate. Override names match seeded fields without
    regard to case and the field keeps the name the form gave it.
    """
    values = dict(form.values)
    names = {name.casefold(): name for name in values}
    for override in overrides:
        name = names.setdefault(override.name.casefold(), override.name)
        if override.value:
            values[name] = resolve(override.value, context)
        elif override.text:
            values[name] = form.selected_value_by_text(name, resolve(override.text, context))
    return values


def resolve_submit_url(page_url: str, action: str) -> str:
    """Absolute URL a form with ``action`` posts to from ``page_url``.

    - absolute http(s) actions are used verbatim
    - ``/``-rooted actions are resolved against the page's scheme and host
    - other relative actions replace the last segment of the page path
    - an empty action posts back to the page itself
    """
    if not action:
        return page_url
    if action.lower().startswith(("http://", "https://")):
        return action
    parts = urlsplit(page_url)
    if action.startswith("/"):
        return f"{parts.scheme}://{parts.netloc}{action}"
    path = parts.path or "/"
    return f"{parts.scheme}://{parts.netloc}{path[: path.rfind('/') + 1]}{action}"
