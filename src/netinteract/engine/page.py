"""Fetched page snapshot and the forms found in it."""

from __future__ import annotations

import logging
from typing import Any

import lxml.html
from lxml import etree

from netinteract.errors import OptionNotFoundError, SelectNotFoundError

logger = logging.getLogger("netinteract.engine.page")


def _option_value(option: Any) -> str:
    value = option.get("value")
    return value if value is not None else option.text_content().strip()


def _parse(html: str) -> Any:
    try:
        return lxml.html.document_fromstring(html)
    except ValueError:
        # str input carrying an XML encoding declaration
        return lxml.html.document_fromstring(html.encode("utf-8"))


class Form:
    """A ``<form>`` element with the values a browser would submit as-is."""

    def __init__(self, element: Any) -> None:
        self._element = element
        self.name: str = element.get("name", "")
        self.client_id: str = element.get("id", "")
        self.action: str = element.get("action", "")
        self.values: dict[str, str] = self._collect_values()

    def __repr__(self) -> str:
        return f"Form(name={self.name!r}, client_id={self.client_id!r}, action={self.action!r})"

    def _collect_values(self) -> dict[str, str]:
        """Seed name -> value from the form's fields.

        Checkboxes and radios contribute only checked values; repeated names
        are joined with commas. A select contributes its option marked
        ``selected`` and nothing when no option is.
        """
        grouped: dict[str, list[Any]] = {}
        for field in self._element.iter("input"):
            name = field.get("name")
            if name:
                grouped.setdefault(name, []).append(field)

        values: dict[str, str] = {}
        for name, fields in grouped.items():
            kind = (fields[0].get("type") or "").lower()
            if kind in ("checkbox", "radio"):
                chosen = [f.get("value", "on") for f in fields if f.get("checked") is not None]
            else:
                chosen = [f.get("value", "") for f in fields]
            values[name] = ",".join(chosen)

        for area in self._element.iter("textarea"):
            name = area.get("name")
            if name:
                values[name] = area.text or ""

        for select in self._element.iter("select"):
            name = select.get("name")
            if not name:
                continue
            selected = [o for o in select.iter("option") if o.get("selected") is not None]
            if not selected:
                continue
            if select.get("multiple") is not None:
                values[name] = ",".join(_option_value(o) for o in selected)
            else:
                values[name] = _option_value(selected[0])

        return values

    def selected_value_by_text(self, field_name: str, text: str) -> str:
        """Return the value of the option whose visible text matches ``text``.

        Raises:
            SelectNotFoundError: the form has no select named ``field_name``.
            OptionNotFoundError: no option's trimmed text equals ``text`` (case-insensitive).
        """
        wanted_name = field_name.casefold()
        select = next(
            (s for s in self._element.iter("select") if (s.get("name") or "").casefold() == wanted_name),
            None,
        )
        if select is None:
            raise SelectNotFoundError(f"the select with the name {field_name} cannot be found.")

        wanted = text.casefold()
        for option in select.iter("option"):
            if option.text_content().strip().casefold() == wanted:
                value = _option_value(option)
                if value:
                    return value
        raise OptionNotFoundError(f"the select {field_name} doesn't have a option with the text '{text}'.")


class Page:
    """Immutable snapshot of a fetched resource."""

    def __init__(self, url: str, html: str) -> None:
        self.url = url
        self.html = html
        self.document = _parse(html) if html.strip() else None
        self.forms: tuple[Form, ...] = (
            tuple(Form(el) for el in self.document.iter("form")) if self.document is not None else ()
        )
        logger.debug("Parsed page %s: %d form(s)", url, len(self.forms))

    def __repr__(self) -> str:
        return f"Page(url={self.url!r}, forms={len(self.forms)})"

    def xpath(self, query: str | etree.XPath) -> list[Any]:
        """Evaluate an XPath query, as text or precompiled, against the document.

        Always returns a list: elements, strings for attribute/text queries,
        or a single scalar wrapped for numeric/boolean expressions.
        """
        if self.document is None:
            return []
        result = query(self.document) if isinstance(query, etree.XPath) else self.document.xpath(query)
        if isinstance(result, list):
            return result
        return [result]
