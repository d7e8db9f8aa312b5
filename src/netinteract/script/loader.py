"""Script loading.

Loading happens in two phases. PyYAML first turns the document into a plain
node tree (dicts, lists, scalars); ``ScriptBuilder`` then walks that tree and
builds the frozen config variants bottom-up. Each action node is a single-key
mapping whose key names the action kind::

    - fetch:
        url: "$(BaseUrl)/products"
        outputs:
          - {name: title, xpath: "//title"}
    - branch:
        property: "$(ShouldLogin)"
        value: "true"
        action:
          jump: {target: Login}

The kind is resolved through ``ACTION_BUILDERS``, so a branch's nested action
goes through the same lookup as a top-level one.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable

import yaml

from netinteract.errors import DuplicateTargetError, ScriptLoadError, UnknownActionError
from netinteract.models import DEFAULT_ACCEPTED_STATUS_CODES
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

logger = logging.getLogger("netinteract.script.loader")


def _text(node: dict[str, Any], key: str, *aliases: str) -> str | None:
    """Return the first present key among ``key`` and ``aliases`` as a string."""
    for name in (key, *aliases):
        if name in node and node[name] is not None:
            return str(node[name])
    return None


def _require(node: dict[str, Any], key: str, kind: str) -> str:
    value = _text(node, key)
    if not value:
        raise ScriptLoadError(f"'{kind}' action is missing required field '{key}'")
    return value


def _as_mapping(node: Any, what: str) -> dict[str, Any]:
    if node is None:
        return {}
    if not isinstance(node, dict):
        raise ScriptLoadError(f"{what} must be a mapping, got {type(node).__name__}")
    return node


def _as_list(node: Any, what: str) -> list[Any]:
    if node is None:
        return []
    if not isinstance(node, list):
        raise ScriptLoadError(f"{what} must be a list, got {type(node).__name__}")
    return node


def parse_status_codes(raw: Any) -> tuple[int, ...]:
    """Parse ``[200, 302]`` or ``"200, 302"`` into a tuple of ints."""
    if raw is None or raw == "" or raw == []:
        return DEFAULT_ACCEPTED_STATUS_CODES
    items = raw.split(",") if isinstance(raw, str) else raw
    if isinstance(items, int):
        items = [items]
    try:
        return tuple(int(str(item).strip()) for item in items)
    except (TypeError, ValueError) as exc:
        raise ScriptLoadError(f"Invalid status code list: {raw!r}") from exc


def _parse_bool(raw: Any) -> bool:
    if isinstance(raw, str):
        return raw.strip().lower() in ("true", "yes", "1")
    return bool(raw)


class ScriptBuilder:
    """Builds a ``Script`` from a loosely-typed node tree."""

    def build(self, data: Any) -> Script:
        root = _as_mapping(data, "Script document")
        root = _as_mapping(root.get("script", root), "'script'")

        default_target = _text(root, "default_target", "defaultTarget")
        targets: list[Target] = []
        seen: set[str] = set()
        for index, node in enumerate(_as_list(root.get("targets"), "'targets'")):
            target = self.build_target(_as_mapping(node, f"targets[{index}]"))
            key = target.name.casefold()
            if key in seen:
                raise DuplicateTargetError(f"Duplicate target name: {target.name}")
            seen.add(key)
            targets.append(target)

        if not targets:
            raise ScriptLoadError("Script defines no targets")

        logger.debug("Built script with targets %s (default=%s)", [t.name for t in targets], default_target)
        return Script(targets=tuple(targets), default_target=default_target)

    def build_target(self, node: dict[str, Any]) -> Target:
        name = _text(node, "name")
        if not name:
            raise ScriptLoadError("Target is missing required field 'name'")
        actions = tuple(
            self.build_action(action_node) for action_node in _as_list(node.get("actions"), f"target '{name}' actions")
        )
        return Target(name=name, actions=actions)

    def build_action(self, node: Any) -> ActionConfig:
        """Resolve an action node ``{kind: params}`` through the kind registry."""
        if isinstance(node, dict) and "kind" in node:
            kind, params = node["kind"], {k: v for k, v in node.items() if k != "kind"}
        elif isinstance(node, dict) and len(node) == 1:
            kind, params = next(iter(node.items()))
        else:
            raise ScriptLoadError(f"Action must be a single-key mapping of kind to parameters, got: {node!r}")

        builder = ACTION_BUILDERS.get(str(kind).lower())
        if builder is None:
            raise UnknownActionError(f"Unknown action kind: {kind}")
        return builder(self, _as_mapping(params, f"'{kind}' parameters"))

    # -- Kind builders -------------------------------------------------------

    def _build_outputs(self, node: dict[str, Any]) -> tuple[OutputRule, ...]:
        rules: list[OutputRule] = []
        for index, raw in enumerate(_as_list(node.get("outputs"), "'outputs'")):
            rule = _as_mapping(raw, f"outputs[{index}]")
            name = _text(rule, "name")
            if not name:
                raise ScriptLoadError(f"outputs[{index}] is missing required field 'name'")
            rules.append(
                OutputRule(
                    name=name,
                    regex=_text(rule, "regex"),
                    xpath=_text(rule, "xpath"),
                    attr=_text(rule, "attr"),
                    multiple=_parse_bool(rule.get("multiple", rule.get("isMultipleValue", False))),
                    expected_value=_text(rule, "expected_value", "expectedValue"),
                )
            )
        return tuple(rules)

    @staticmethod
    def _build_options(node: dict[str, Any]) -> dict[str, str]:
        options = _as_mapping(node.get("options"), "'options'")
        return {str(k): "" if v is None else str(v) for k, v in options.items()}

    @staticmethod
    def _status_codes(node: dict[str, Any]) -> tuple[int, ...]:
        raw = node.get("expected_status", node.get("expectedHttpStatusCodes"))
        return parse_status_codes(raw)

    def build_fetch(self, node: dict[str, Any]) -> FetchConfig:
        return FetchConfig(
            url=_require(node, "url", "fetch"),
            outputs=self._build_outputs(node),
            accepted_status_codes=self._status_codes(node),
            options=self._build_options(node),
        )

    def build_submit(self, node: dict[str, Any]) -> SubmitConfig:
        form_index = node.get("form_index", node.get("formIndex"))
        overrides: list[FormOverride] = []
        for index, raw in enumerate(_as_list(node.get("values"), "'values'")):
            item = _as_mapping(raw, f"values[{index}]")
            name = _text(item, "name")
            if not name:
                raise ScriptLoadError(f"values[{index}] is missing required field 'name'")
            overrides.append(FormOverride(name=name, value=_text(item, "value"), text=_text(item, "text")))

        try:
            parsed_index = int(form_index) if form_index is not None else None
        except (TypeError, ValueError) as exc:
            raise ScriptLoadError(f"Invalid form_index: {form_index!r}") from exc

        return SubmitConfig(
            client_id=_text(node, "client_id", "clientID"),
            form_name=_text(node, "form_name", "formName"),
            action=_text(node, "action"),
            form_index=parsed_index,
            values=tuple(overrides),
            outputs=self._build_outputs(node),
            accepted_status_codes=self._status_codes(node),
            options=self._build_options(node),
        )

    def build_branch(self, node: dict[str, Any]) -> BranchConfig:
        if node.get("action") is None:
            raise ScriptLoadError("'branch' action requires exactly one nested 'action'")
        return BranchConfig(
            property=_require(node, "property", "branch"),
            value=_text(node, "value") or "",
            action=self.build_action(node["action"]),
        )

    def build_jump(self, node: dict[str, Any]) -> JumpConfig:
        return JumpConfig(target=_require(node, "target", "jump"))


# Action kind name -> builder. Aliases keep scripts written with the
# request-style vocabulary (get/post/if/call) loadable.
ACTION_BUILDERS: dict[str, Callable[[ScriptBuilder, dict[str, Any]], ActionConfig]] = {
    "fetch": ScriptBuilder.build_fetch,
    "get": ScriptBuilder.build_fetch,
    "submit": ScriptBuilder.build_submit,
    "post": ScriptBuilder.build_submit,
    "branch": ScriptBuilder.build_branch,
    "if": ScriptBuilder.build_branch,
    "jump": ScriptBuilder.build_jump,
    "call": ScriptBuilder.build_jump,
}


def build_script(data: Any) -> Script:
    """Build a script from an already-parsed node tree."""
    return ScriptBuilder().build(data)


def load_script_text(text: str) -> Script:
    """Parse YAML text into a script."""
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ScriptLoadError(f"YAML parse error: {exc}") from exc
    return build_script(data)


def load_script(path: Path | str) -> Script:
    """Load a script from a YAML file."""
    path = Path(path)
    if not path.is_file():
        raise ScriptLoadError(f"Script file not found: {path}")
    logger.info("Loading script %s", path)
    return load_script_text(path.read_text(encoding="utf-8"))


def _iter_jumps(action: ActionConfig):
    if isinstance(action, JumpConfig):
        yield action
    elif isinstance(action, BranchConfig):
        yield from _iter_jumps(action.action)


def find_unresolved_jumps(script: Script) -> list[tuple[str, str]]:
    """Return ``(target, jump_target)`` pairs whose jump target does not exist.

    The engine only checks jumps when it reaches them; this is a static
    pre-flight check for tooling.
    """
    missing: list[tuple[str, str]] = []
    for target in script.targets:
        for action in target.actions:
            for jump in _iter_jumps(action):
                if "$(" in jump.target or "${" in jump.target:
                    continue
                if script.find_target(jump.target) is None:
                    missing.append((target.name, jump.target))
    return missing
