"""Output extraction: turn a fetched page into named output values.

Each ``OutputRule`` may define a regular expression (the value is the group
named after the rule), an XPath query, or both. Regex rules run first and
XPath rules second, so when both write the same name the XPath value wins.
Multi-valued rules join every value with a comma in document order.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from typing import Any

import lxml.html
from lxml import etree
from requests.structures import CaseInsensitiveDict

from netinteract.engine.page import Page
from netinteract.errors import InvalidOutputRuleError
from netinteract.script.model import OutputRule

logger = logging.getLogger("netinteract.engine.extractor")

RAW_MARKUP_ATTR = "html()"
TEXT_ATTR = "text()"

# ``(?<name>...)`` named groups are rewritten to Python's ``(?P<name>...)``;
# lookbehinds ``(?<=`` and ``(?<!`` are left alone.
_NAMED_GROUP = re.compile(r"\(\?<(?![=!])")


def compile_rule_pattern(pattern: str) -> re.Pattern[str]:
    try:
        return re.compile(_NAMED_GROUP.sub("(?P<", pattern), re.IGNORECASE | re.MULTILINE)
    except re.error as exc:
        raise InvalidOutputRuleError(f"Invalid regex {pattern!r}: {exc}") from exc


def compile_rule_xpath(rule: OutputRule) -> etree.XPath:
    try:
        return etree.XPath(rule.xpath)
    except etree.XPathError as exc:
        raise InvalidOutputRuleError(f"Invalid XPath {rule.xpath!r} for output {rule.name}: {exc}") from exc


def _inner_markup(element: Any) -> str:
    parts = [element.text or ""]
    parts.extend(lxml.html.tostring(child, encoding="unicode") for child in element)
    return "".join(parts).strip()


def node_value(node: Any, attr: str | None) -> str:
    """Value of one XPath result under the rule's attribute selector."""
    if not hasattr(node, "tag") or not isinstance(node.tag, str):
        # attribute/text results, numbers, booleans, comments
        return str(node).strip()

    selector = (attr or "").lower()
    if selector == RAW_MARKUP_ATTR:
        return _inner_markup(node)
    if selector in (TEXT_ATTR, ""):
        return node.text_content().strip()
    return node.get(attr, "")


class OutputExtractor:
    """Applies a fixed set of output rules to pages.

    Patterns and queries are compiled once, so a malformed rule is reported
    when the extractor is built rather than when a page is first seen.
    """

    def __init__(self, rules: Iterable[OutputRule]) -> None:
        self.rules: tuple[OutputRule, ...] = tuple(rules)
        self._regexes: list[tuple[OutputRule, re.Pattern[str]]] = [
            (rule, compile_rule_pattern(rule.regex)) for rule in self.rules if rule.regex
        ]
        self._xpaths: list[tuple[OutputRule, etree.XPath]] = [
            (rule, compile_rule_xpath(rule)) for rule in self.rules if rule.xpath
        ]

    def extract(self, page: Page) -> CaseInsensitiveDict:
        values = CaseInsensitiveDict()

        for rule, pattern in self._regexes:
            if rule.name not in pattern.groupindex:
                logger.debug("Regex for output %s has no group named %s; skipped", rule.name, rule.name)
                continue
            if rule.multiple:
                found = [m.group(rule.name) or "" for m in pattern.finditer(page.html)]
                if found:
                    values[rule.name] = ",".join(found)
            else:
                match = pattern.search(page.html)
                if match is not None:
                    values[rule.name] = match.group(rule.name) or ""

        for rule, query in self._xpaths:
            try:
                nodes = page.xpath(query)
            except etree.XPathError as exc:
                raise InvalidOutputRuleError(f"Invalid XPath {rule.xpath!r} for output {rule.name}: {exc}") from exc
            if not nodes:
                logger.debug("XPath for output %s matched nothing: %s", rule.name, rule.xpath)
                continue
            if rule.multiple:
                values[rule.name] = ",".join(node_value(n, rule.attr) for n in nodes)
            else:
                values[rule.name] = node_value(nodes[0], rule.attr)

        return values

    def validate(self, outputs: Mapping[str, str]) -> tuple[bool, str]:
        """Check every rule's expected value against ``outputs`` (case-insensitive)."""
        outputs = CaseInsensitiveDict(outputs)
        for rule in self.rules:
            if not rule.expected_value:
                continue
            actual = outputs.get(rule.name) or ""
            if rule.expected_value.casefold() != actual.casefold():
                return False, f"Expected:{rule.expected_value}, but the actual value is: {actual}"
        return True, ""
