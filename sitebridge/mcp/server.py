"""FastMCP server instance for sitebridge.

This module provides the MCP server that exposes the editor to LLM clients.
There is one tool per noun; each takes an ``action`` plus that noun's
parameters and returns the response envelope:

    {success, data?, error?, extra?, warnings?}

Usage:
    # STDIO mode (for desktop MCP clients)
    python -m sitebridge.mcp.server

    # HTTP mode
    python -m sitebridge.mcp.server --transport http --port 6807

    # Via CLI
    python . mcp run
    python . mcp serve --port 6807
"""

import argparse
import logging
import sys
from typing import Any

from fastmcp import FastMCP

from sitebridge.bridge import Bridge
from sitebridge.config import EnvVar, get_environment
from sitebridge.core import setup_logging
from sitebridge.dispatch import ACTIONS, ToolRequest

from .lib import (
    TransportType,
    create_bridge,
    get_server_version,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Server Instructions (LLM Guidance)
# =============================================================================

SERVER_INSTRUCTIONS = """\
## sitebridge MCP Server

Edits a website in a visual editor: pages, components, CSS rules, reusable
symbols and CMS content bindings.

### Quick Start
1. `status()` → check the editor is ready
2. `website(action='list')` then `website(action='open', website_id='...')`
3. `component(action='get_tree')` → see the page content
4. `component(action='add', html='<section class="hero">...</section>')`
5. `selector(action='create', selector='.hero')` → `style(action='set', properties={...})`
6. `editor(action='save')`

### How calls work
- Every tool takes `action` plus parameters. Unknown parameters are ignored
  with a warning.
- Actions without `component_id` act on the selected component. Select one
  with `component(action='select', component_id='...')`.
- Styles are never inline. Style a class selector on the current device.
- Every response carries `selection` (website, page, component, device,
  selector) and often `next_steps`.

### Errors
Failures return `success: false`, an `error` message and `extra.type`:
- `NotFoundError` → `extra.available` lists valid ids
- `NoSelectionError` → `extra.recovery` is the call to make first
- `SchemaResolutionError` → `extra.candidates` lists valid fields
- `StyleRejectedError` → `extra.valid` / `extra.invalid` properties
- `extra.status == 'not_ready'` → the editor or site API is not available yet

### Getting Help
- `help()` - List topics
- `help('workflow')` - Step-by-step guide
- `help('actions')` - Every action with its parameters
"""

# =============================================================================
# Server Instance
# =============================================================================

mcp = FastMCP(
    name="sitebridge",
    instructions=SERVER_INSTRUCTIONS,
)

_bridge: Bridge | None = None


def configure(bridge: Bridge | None) -> None:
    """Set the bridge that serves tool calls (None resets to the default)."""
    global _bridge
    _bridge = bridge


def get_bridge() -> Bridge:
    """Get the configured bridge, creating the demo bridge on first use."""
    global _bridge
    if _bridge is None:
        _bridge = create_bridge()
        logger.info(f"Created demo editor bridge ({_bridge.owner.document_id})")
    return _bridge


async def _call(noun: str, action: str, **params: Any) -> dict[str, Any]:
    """Forward one tool call to the bridge and return the wire envelope."""
    request = ToolRequest(
        noun=noun,
        action=action,
        params={key: value for key, value in params.items() if value is not None},
    )
    response = await get_bridge().handle(request)
    return response.to_wire()


# =============================================================================
# Document Tools
# =============================================================================


@mcp.tool
async def website(
    action: str,
    website_id: str | None = None,
    name: str | None = None,
) -> dict[str, Any]:
    """Manage websites in site storage and open one in the editor.

    Args:
        action: One of list, create, delete, rename, duplicate, open, dashboard.
        website_id: Target website (delete, rename, duplicate, open).
        name: Website name (create, rename).

    Returns:
        Envelope. ``list`` returns ``websites`` and the ``open`` website id.
    """
    return await _call("website", action, website_id=website_id, name=name)


@mcp.tool
async def page(
    action: str,
    page_id: str | None = None,
    name: str | None = None,
    slug: str | None = None,
    settings: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Manage the pages of the open website.

    Args:
        action: One of list, add, select, remove, rename, update_settings.
        page_id: Page id or name (select, remove; rename and
            update_settings default to the selected page).
        name: Page name (add, rename).
        slug: URL slug for a new page.
        settings: Page settings to merge; a null value deletes the key.
    """
    return await _call(
        "page", action, page_id=page_id, name=name, slug=slug, settings=settings
    )


@mcp.tool
async def component(
    action: str,
    component_id: str | None = None,
    html: str | None = None,
    position: str | None = None,
    target_id: str | None = None,
    content: str | None = None,
    attributes: dict[str, Any] | None = None,
    max_depth: int | None = None,
    max_count: int | None = None,
) -> dict[str, Any]:
    """Read and edit the component tree of the selected page.

    Components are created from HTML. Inline ``style`` attributes are
    stripped with a warning; style class selectors instead.

    Args:
        action: One of get_tree, get, add, update, move, remove, select.
        component_id: Target component (defaults to the selection).
        html: Markup for ``add``, e.g. ``<h1 class="title">Hello</h1>``.
        position: before, after or inside, relative to the selection (add)
            or to ``target_id`` (move). Default: inside.
        target_id: Reference component for ``move``.
        content: New text content (update).
        attributes: Attributes to merge (update); a null value removes one.
        max_depth: Depth limit for get_tree.
        max_count: Component limit for get_tree.

    Returns:
        Envelope. ``add`` returns the created ids and selects the first one.

    Example workflow:
        1. component(action='get_tree')
        2. component(action='select', component_id='c-3')
        3. component(action='add', html='<p>More</p>', position='after')
    """
    return await _call(
        "component",
        action,
        component_id=component_id,
        html=html,
        position=position,
        target_id=target_id,
        content=content,
        attributes=attributes,
        max_depth=max_depth,
        max_count=max_count,
    )


@mcp.tool
async def block(
    action: str,
    block_id: str | None = None,
    position: str | None = None,
) -> dict[str, Any]:
    """Browse and insert pre-built blocks (templates).

    Args:
        action: One of list, insert.
        block_id: Block to insert (see ``list``).
        position: before, after or inside, relative to the selection.
            Default: inside.
    """
    return await _call("block", action, block_id=block_id, position=position)


@mcp.tool
async def selector(action: str, selector: str | None = None) -> dict[str, Any]:
    """Manage the class selectors of the selected component.

    ``hero`` and ``.hero`` name the same selector.

    Args:
        action: One of list, select, create, delete.
        selector: Class selector (select, create, delete).
    """
    return await _call("selector", action, selector=selector)


@mcp.tool
async def style(
    action: str,
    properties: dict[str, Any] | None = None,
    css: str | None = None,
    selector: str | None = None,
    rules: list[dict[str, Any]] | None = None,
    name: str | None = None,
) -> dict[str, Any]:
    """Read and write CSS declarations of the active selector.

    Declarations apply to the active selector on the current device.
    Unknown properties are rejected, listing valid and invalid names.

    Args:
        action: One of get, set, set_batch, delete_property.
        properties: Declarations, e.g. ``{"color": "red", "padding": "8px"}``.
        css: Declarations as CSS text, e.g. ``"color: red; padding: 8px"``.
        selector: Must match the active selector when given (set).
        rules: For set_batch, a list of ``{selector, properties | css}``.
        name: Property to remove (delete_property).
    """
    return await _call(
        "style",
        action,
        properties=properties,
        css=css,
        selector=selector,
        rules=rules,
        name=name,
    )


@mcp.tool
async def symbol(
    action: str,
    label: str | None = None,
    component_id: str | None = None,
    html: str | None = None,
    icon: str | None = None,
    position: str | None = None,
    page_ids: list[str] | None = None,
) -> dict[str, Any]:
    """Manage reusable symbols (shared components such as headers).

    Args:
        action: One of list, create, place, delete.
        label: Symbol label (create, place, delete).
        component_id: Component to turn into a symbol (create).
        html: Markup for a new symbol, instead of component_id (create).
        icon: Icon class for the symbol (create).
        position: before, after or inside the selection (place).
        page_ids: Place on these pages instead of at the selection (place).
    """
    return await _call(
        "symbol",
        action,
        label=label,
        component_id=component_id,
        html=html,
        icon=icon,
        position=position,
        page_ids=page_ids,
    )


@mcp.tool
async def device(action: str, name: str | None = None) -> dict[str, Any]:
    """List devices or switch the breakpoint that styles apply to.

    Args:
        action: One of list, set.
        name: Device id or name (set).
    """
    return await _call("device", action, name=name)


@mcp.tool
async def site_settings(
    action: str, settings: dict[str, Any] | None = None
) -> dict[str, Any]:
    """Read or merge the website settings (title, description, ...).

    Args:
        action: One of get, set.
        settings: Settings to merge; a null value deletes the key.
    """
    return await _call("site_settings", action, settings=settings)


@mcp.tool
async def cms(
    action: str,
    expression: str | None = None,
    operator: str | None = None,
    value: str | int | float | bool | None = None,
    name: str | None = None,
    state_id: str | None = None,
    label: str | None = None,
    states: list[dict[str, Any]] | None = None,
    exported: bool | None = None,
    enabled: bool | None = None,
) -> dict[str, Any]:
    """Bind CMS content to the selected component.

    Expressions are dot paths through a data source:
    ``source.queryable.field.field``, e.g. ``blog.posts.title``.

    Args:
        action: One of list_sources, bind_content, set_condition, set_loop,
            expose_data, set_attribute, set_states, list_states,
            remove_state, refresh_preview.
        expression: Dot-path expression.
        operator: Condition operator (truthy, falsy, empty, not_empty,
            ==, !=, >, <, >=, <=). Default: truthy.
        value: Comparison value for binary operators, or a literal
            attribute value.
        name: Attribute name (set_attribute).
        state_id: State id (expose_data, remove_state).
        label: Display label for exposed data.
        states: For set_states, a list of ``{type, expression, ...}``
            applied all-or-nothing.
        exported: Target public states (remove_state).
        enabled: Turn the data preview on or off (refresh_preview).
    """
    return await _call(
        "cms",
        action,
        expression=expression,
        operator=operator,
        value=value,
        name=name,
        state_id=state_id,
        label=label,
        states=states,
        exported=exported,
        enabled=enabled,
    )


@mcp.tool
async def editor(action: str) -> dict[str, Any]:
    """Save the document or step through its history.

    Args:
        action: One of save, undo, redo.
    """
    return await _call("editor", action)


@mcp.tool
async def eval_code(code: str, output_file: str | None = None) -> dict[str, Any]:
    """Evaluate code inside the editor (when the editor supports it).

    Args:
        code: Code to evaluate.
        output_file: Write the result to this file instead of returning it.
    """
    return await _call("eval", "run", code=code, output_file=output_file)


@mcp.tool
async def feedback(
    action: str,
    description: str | None = None,
    context: str | None = None,
    workaround: str | None = None,
    limit: int | None = None,
) -> dict[str, Any]:
    """Report a problem with these tools, or list recent reports.

    Args:
        action: One of report, list.
        description: What went wrong (report).
        context: What you were trying to do.
        workaround: How you got around it, if you did.
        limit: Number of recent entries (list).
    """
    return await _call(
        "feedback",
        action,
        description=description,
        context=context,
        workaround=workaround,
        limit=limit,
    )


# =============================================================================
# Utility Tools
# =============================================================================


@mcp.tool
def status() -> dict[str, Any]:
    """Check server health and dependency status.

    Use this FIRST to verify the editor is ready.

    Returns:
        Dictionary with:
        - status: "healthy", "degraded", or "unhealthy"
        - version: Server version
        - services: editor, site_api, feedback_log
        - capabilities: Optional editor features (data_sources, evaluate,
          navigation, history)
        - selection: Current website, page, component, device, selector
        - action_required: What to fix if degraded/unhealthy
    """
    from .health import HealthStatus, get_server_health

    health = get_server_health(get_bridge())
    result = health.to_dict()

    actions = []
    if not health.can_edit:
        actions.append("Open the editor and wait for it to finish loading")
    if not health.can_manage_websites:
        actions.append("Start the site API or set SITE_API_URL in .env")
    if actions:
        result["action_required"] = actions

    if health.status == HealthStatus.HEALTHY:
        next_steps = ["Ready! Call website(action='list') to pick a website."]
    elif health.can_edit:
        next_steps = [
            "Editing works, website management is unavailable.",
            "Call component(action='get_tree') to see the open page.",
        ]
    else:
        next_steps = ["Editor not ready. Review action_required items above."]
    result["next_steps"] = next_steps

    return result


@mcp.tool
def help(topic: str | None = None) -> dict[str, Any]:
    """Get detailed help on using this server.

    Call without arguments to see available topics.

    Args:
        topic: Help topic (optional). One of:
            - "workflow": Step-by-step editing guide
            - "actions": Every action with its parameters
            - "styling": Selectors, devices and declarations
            - "cms": Content binding expressions
            - "troubleshooting": Common errors and fixes

    Returns:
        Dictionary with help content for the requested topic,
        or list of available topics if none specified.
    """
    topics = {
        "workflow": {
            "title": "Workflow Guide",
            "content": """
## Typical Workflow

1. **Check Status First**
   Call `status()`. If the editor is not ready, report it to the user.

2. **Open a Website**
   `website(action='list')` then `website(action='open', website_id='...')`.

3. **Inspect the Page**
   `component(action='get_tree')` shows ids, tags, classes and text.
   Use `max_depth` / `max_count` to see more.

4. **Add Content**
   Select a component, then
   `component(action='add', html='<div class="card"><h2>Title</h2></div>',
   position='after')`. The new component is selected.
   Pre-built templates: `block(action='list')` then
   `block(action='insert', block_id='section')`.

5. **Style It**
   `selector(action='create', selector='.card')`, then
   `style(action='set', properties={'padding': '16px'})`.

6. **Save**
   `editor(action='save')`. Use `editor(action='undo')` to revert a step.
""",
        },
        "actions": {
            "title": "Actions",
            "content": _get_actions_help(),
        },
        "styling": {
            "title": "Styling Guide",
            "content": """
## Styling

- Styles live in CSS rules keyed by class selector and device. Inline
  `style` attributes are stripped when components are added.
- `selector(action='select', selector='.hero')` makes `.hero` the active
  selector; `style` actions then read and write its rule.
- `device(action='set', name='Mobile')` switches the breakpoint. The same
  selector has one rule per device.
- Unknown CSS properties are rejected. The error lists which properties
  were valid and which were not; nothing is written.
- `style(action='set_batch', rules=[...])` styles several selectors in one
  call.
""",
        },
        "cms": {
            "title": "Content Binding",
            "content": """
## Content Binding

Expressions walk a data source: `source.queryable.field...`.
Call `cms(action='list_sources')` to see sources, queryables and fields.

- `bind_content`: the component renders the field value.
- `set_loop`: repeat the component for each item of a list field.
- `set_condition`: show the component when the condition holds.
- `set_attribute`: bind an attribute to a field or a literal `value`.
- `expose_data`: make data available to child components.
- `set_states`: apply several bindings at once; one bad entry writes nothing.

A bad segment returns `SchemaResolutionError` with the valid `candidates`
at that position.
""",
        },
        "troubleshooting": {
            "title": "Troubleshooting Guide",
            "content": """
## Common Issues

### "No website is open"
- **Fix**: `website(action='open', website_id='...')`

### "No component selected"
- **Fix**: `component(action='select', component_id='...')`. The error's
  `extra.recovery` names the exact call.

### `extra.status == 'not_ready'`
- **Cause**: The editor is still loading or the site API is unreachable
- **Fix**: Wait and retry; check `status()`

### `UnsupportedOperationError`
- **Cause**: The editor lacks the capability in `extra.capability`
- **Check**: `status()` lists the editor capabilities

### Something else is broken
- **Report it**: `feedback(action='report', description='...')`
""",
        },
    }

    if topic is None:
        return {
            "available_topics": list(topics.keys()),
            "usage": "Call help(topic='workflow') for detailed guidance",
        }

    if topic not in topics:
        return {
            "error": f"Unknown topic: {topic}",
            "available_topics": list(topics.keys()),
        }

    return topics[topic]


def _get_actions_help() -> str:
    """Generate the action reference from the dispatch table."""
    lines = ["## Actions", ""]
    for noun, actions in ACTIONS.items():
        tool = "eval_code" if noun == "eval" else noun
        lines.append(f"### {tool}")
        for action, spec in actions.items():
            params = [f"{name}*" for name in spec.required] + list(spec.optional)
            suffix = f"({', '.join(params)})" if params else "()"
            note = f" [needs {spec.capability}]" if spec.capability else ""
            lines.append(f"- `{action}`{suffix}{note}")
        lines.append("")
    lines.append("`*` marks required parameters.")
    return "\n".join(lines)


# =============================================================================
# Server Factory & Runner
# =============================================================================


def create_server(bridge: Bridge | None = None) -> FastMCP:
    """Create and configure the MCP server instance.

    Args:
        bridge: Bridge serving tool calls (default: demo editor bridge).

    Returns:
        Configured FastMCP server instance.
    """
    if bridge is not None:
        configure(bridge)
    return mcp


def run_server(
    transport: TransportType = TransportType.STDIO,
    host: str = "127.0.0.1",
    port: int = 6807,
) -> None:
    """Run the MCP server with specified transport.

    Args:
        transport: Transport type (stdio, http, sse).
        host: Bind address for HTTP/SSE.
        port: Port for HTTP/SSE.
    """
    from .health import log_startup_status

    logger.info(f"Starting sitebridge server v{get_server_version()}")
    logger.info(f"Transport: {transport.value}")

    log_startup_status(get_bridge())

    if transport == TransportType.STDIO:
        logger.info("Running in STDIO mode")
        mcp.run()
    elif transport == TransportType.HTTP:
        logger.info(f"Running in HTTP mode at http://{host}:{port}/mcp")
        mcp.run(
            transport="http",
            host=host,
            port=port,
            path="/mcp",
        )
    elif transport == TransportType.SSE:
        logger.info(f"Running in SSE mode at http://{host}:{port}")
        mcp.run(
            transport="sse",
            host=host,
            port=port,
        )
    else:
        raise ValueError(f"Unknown transport: {transport}")


# =============================================================================
# CLI Entry Point
# =============================================================================


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for MCP server.

    Args:
        argv: Command line arguments (uses sys.argv if None).

    Returns:
        Exit code (0 for success).
    """
    from .lib import ServerConfig

    config = ServerConfig.from_env()
    parser = argparse.ArgumentParser(
        prog="sitebridge",
        description="MCP server for driving a visual website editor",
    )
    parser.add_argument(
        "--transport",
        "-t",
        type=str,
        choices=["stdio", "http", "sse"],
        default="stdio",
        help="Transport type (default: stdio)",
    )
    parser.add_argument(
        "--host",
        type=str,
        default=config.host,
        help=f"Bind address for HTTP/SSE (default: {config.host})",
    )
    parser.add_argument(
        "--port",
        "-p",
        type=int,
        default=config.port,
        help=f"Port for HTTP/SSE (default: {config.port})",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args(argv)

    setup_logging(
        "DEBUG" if args.verbose else get_environment(EnvVar.SITEBRIDGE_LOG_LEVEL)
    )

    try:
        transport = TransportType(args.transport)
        run_server(
            transport=transport,
            host=args.host,
            port=args.port,
        )
        return 0
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
        return 0
    except Exception as e:
        logger.error(f"Server error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
