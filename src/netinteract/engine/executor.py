"""netinteract execution engine — runs a script's target graph.

A run starts at one entry target and executes its actions in order against
a fresh ``ExecutionContext``. A failed action halts the run and its result
is returned as data. A jump runs the named target as a nested call with the
same context; when that call succeeds the calling target carries on with its
remaining actions.

Script errors (missing entry target, unknown jump target, unresolvable form,
jumps nested past ``max_jump_depth``) are raised, never returned.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from netinteract.accessors.base import WebAccessor
from netinteract.engine.actions import Action, build_action
from netinteract.engine.context import ExecutionContext, InteractionResult
from netinteract.errors import JumpDepthExceededError, MissingTargetError, TargetNotFoundError
from netinteract.models import DEFAULT_MAX_JUMP_DEPTH
from netinteract.script.model import Script, Target

logger = logging.getLogger("netinteract.engine.executor")


class InteractionExecutor:
    """Executes scripts with a bound network collaborator.

    The executor holds no per-run state, so one instance may serve
    concurrent runs; only the collaborator's session is shared between them.
    Actions are built once per target and reused by every later traversal.
    """

    def __init__(self, web_accessor: WebAccessor, max_jump_depth: int = DEFAULT_MAX_JUMP_DEPTH) -> None:
        if web_accessor is None:
            raise ValueError("web_accessor is required")
        self._web_accessor = web_accessor
        self._max_jump_depth = max_jump_depth
        self._actions: dict[Target, tuple[Action[Any], ...]] = {}

    def actions_for(self, target: Target) -> tuple[Action[Any], ...]:
        """Executable actions of ``target``, built on first request."""
        actions = self._actions.get(target)
        if actions is None:
            actions = self._actions[target] = tuple(build_action(config) for config in target.actions)
        return actions

    def prepare(self, script: Script) -> None:
        """Build every target's actions so malformed rules fail before any I/O."""
        for target in script.targets:
            self.actions_for(target)

    async def run(
        self,
        script: Script,
        inputs: Mapping[str, str] | None = None,
        target: str | None = None,
    ) -> InteractionResult:
        """Execute ``script`` from ``target`` (or its default target).

        Args:
            script: Loaded script.
            inputs: Caller-supplied values for ``$(name)`` placeholders.
            target: Entry target name; overrides ``script.default_target``.

        Returns:
            The last executed action's result carrying the run's final outputs.

        Raises:
            MissingTargetError: no entry target was given or declared.
            TargetNotFoundError: the entry or a jump target does not exist.
            InvalidOutputRuleError: an output rule has a malformed regex or XPath.
        """
        name = target or script.default_target
        if not name:
            raise MissingTargetError("No target is specified.")

        entry = script.find_target(name)
        if entry is None:
            raise TargetNotFoundError(name)

        self.prepare(script)
        context = ExecutionContext(
            web_accessor=self._web_accessor,
            inputs=inputs or {},
        )
        logger.info("Run starting at target %s", entry.name)

        result = await self._execute_target(entry, context, script)
        result.outputs = dict(context.outputs)

        logger.info(
            "Run finished: ok=%s%s outputs=%s",
            result.ok,
            f" message={result.message!r}" if result.message else "",
            sorted(result.outputs),
        )
        return result

    async def _execute_target(self, target: Target, context: ExecutionContext, script: Script) -> InteractionResult:
        logger.debug("Entering target %s (depth %d)", target.name, context.depth)
        last = InteractionResult.success()

        for index, action in enumerate(self.actions_for(target)):
            last = await action.execute(context)

            if not last.ok:
                logger.info("Target %s halted at action %d: %s", target.name, index, last.message)
                return last

            if not last.target:
                continue

            callee = script.find_target(last.target)
            if callee is None:
                raise TargetNotFoundError(last.target, context="jump target")

            if context.depth >= self._max_jump_depth:
                raise JumpDepthExceededError(
                    f"Jump from {target.name} to {callee.name} exceeds the maximum depth of {self._max_jump_depth}"
                )

            logger.debug("Target %s jumps to %s", target.name, callee.name)
            context.depth += 1
            try:
                last = await self._execute_target(callee, context, script)
            finally:
                context.depth -= 1

            if not last.ok:
                return last

        return last
