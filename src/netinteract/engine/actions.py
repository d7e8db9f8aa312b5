"""Action variants: Fetch, Submit, Branch and Jump.

Every action is built from its frozen config through ``ACTION_TYPES`` and
exposes one coroutine, ``execute(context) -> InteractionResult``.

Fetch and Submit share ``WebAction``: they call the network collaborator,
check the status code, store the new page on the context and extract
outputs. Transport and parsing problems become failed results; script
errors (an unresolvable form, a missing select option) propagate.
"""

from __future__ import annotations

import logging
from typing import Any, Generic, TypeVar

from netinteract.accessors.base import ResponseInfo, status_name
from netinteract.engine.context import ExecutionContext, InteractionResult
from netinteract.engine.extractor import OutputExtractor
from netinteract.engine.forms import merge_form_values, resolve_submit_url, select_form
from netinteract.engine.page import Page
from netinteract.engine.resolver import lookup_property, resolve
from netinteract.errors import ScriptError, UnknownActionError
from netinteract.script.model import (
    ActionConfig,
    BranchConfig,
    FetchConfig,
    JumpConfig,
    SubmitConfig,
)

logger = logging.getLogger("netinteract.engine.actions")

ConfigT = TypeVar("ConfigT")


class Action(Generic[ConfigT]):
    """Base class: an executable step bound to its config."""

    def __init__(self, config: ConfigT) -> None:
        self.config = config

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.config!r})"

    async def execute(self, context: ExecutionContext) -> InteractionResult:
        raise NotImplementedError


class WebAction(Action[ConfigT]):
    """Shared request / status check / extraction flow of Fetch and Submit."""

    def __init__(self, config: Any) -> None:
        super().__init__(config)
        self.extractor = OutputExtractor(config.outputs)
        self.accepted_status_codes: tuple[int, ...] = tuple(config.accepted_status_codes)

    async def make_request(self, context: ExecutionContext) -> ResponseInfo:
        raise NotImplementedError

    async def execute(self, context: ExecutionContext) -> InteractionResult:
        try:
            response = await self.make_request(context)
            if response.status_code not in self.accepted_status_codes:
                message = status_name(response.status_code)
                logger.info(
                    "%s: status %d not in %s (%s)",
                    type(self).__name__,
                    response.status_code,
                    list(self.accepted_status_codes),
                    response.url,
                )
                return InteractionResult.failure(message)
            page = Page(response.url, response.html)
        except ScriptError:
            raise
        except Exception as exc:
            logger.error("%s failed: %s", type(self).__name__, exc)
            return InteractionResult.failure(str(exc) or type(exc).__name__)

        context.current_page = page
        outputs = self.extractor.extract(page)
        context.outputs.update(outputs)
        logger.debug("%s extracted %s", type(self).__name__, sorted(outputs))

        ok, message = self.extractor.validate(outputs)
        if not ok:
            logger.info("%s output validation failed: %s", type(self).__name__, message)
            return InteractionResult.failure(message)
        return InteractionResult.success()


class FetchAction(WebAction[FetchConfig]):
    async def make_request(self, context: ExecutionContext) -> ResponseInfo:
        url = resolve(self.config.url, context)
        logger.info("Fetch %s", url)
        return await context.web_accessor.fetch(url, self.config.options)


class SubmitAction(WebAction[SubmitConfig]):
    async def make_request(self, context: ExecutionContext) -> ResponseInfo:
        page = context.current_page
        form = select_form(page, self.config)
        values = merge_form_values(form, self.config.values, context)
        url = resolve_submit_url(page.url, form.action)
        logger.info("Submit %r to %s (%d field(s))", form.name or form.client_id or "form", url, len(values))
        return await context.web_accessor.submit(url, values, self.config.options)


class BranchAction(Action[BranchConfig]):
    """Runs the nested action when the property matches the literal."""

    def __init__(self, config: BranchConfig) -> None:
        super().__init__(config)
        self.child = build_action(config.action)

    async def execute(self, context: ExecutionContext) -> InteractionResult:
        actual = lookup_property(self.config.property, context)
        if actual.casefold() != (self.config.value or "").casefold():
            logger.debug("Branch %s=%r does not match %r; skipped", self.config.property, actual, self.config.value)
            return InteractionResult.success()
        logger.debug("Branch %s matched %r", self.config.property, self.config.value)
        return await self.child.execute(context)


class JumpAction(Action[JumpConfig]):
    """Asks the engine to run another target; performs no I/O."""

    async def execute(self, context: ExecutionContext) -> InteractionResult:
        return InteractionResult.jump(resolve(self.config.target, context))


ACTION_TYPES: dict[type, type[Action[Any]]] = {
    FetchConfig: FetchAction,
    SubmitConfig: SubmitAction,
    BranchConfig: BranchAction,
    JumpConfig: JumpAction,
}


def build_action(config: ActionConfig) -> Action[Any]:
    """Instantiate the action registered for ``config``'s type."""
    action_type = ACTION_TYPES.get(type(config))
    if action_type is None:
        raise UnknownActionError(f"No action registered for config type {type(config).__name__}")
    return action_type(config)
