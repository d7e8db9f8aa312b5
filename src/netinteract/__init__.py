"""netinteract — declarative, target-graph web interaction scripts.

Typical use::

    from netinteract import HttpWebAccessor, InteractionExecutor, load_script

    script = load_script("shop.yaml")
    with HttpWebAccessor() as accessor:
        result = asyncio.run(InteractionExecutor(accessor).run(script, {"BaseUrl": url}))
"""

__version__ = "0.3.0"

from netinteract.accessors import HttpWebAccessor, ResponseInfo, WebAccessor, create_web_accessor  # noqa: E402
from netinteract.engine import ExecutionContext, InteractionExecutor, InteractionResult  # noqa: E402
from netinteract.errors import ScriptError  # noqa: E402
from netinteract.script import Script, load_script, load_script_text  # noqa: E402

__all__ = [
    "ExecutionContext",
    "HttpWebAccessor",
    "InteractionExecutor",
    "InteractionResult",
    "ResponseInfo",
    "Script",
    "ScriptError",
    "WebAccessor",
    "__version__",
    "create_web_accessor",
    "load_script",
    "load_script_text",
]
