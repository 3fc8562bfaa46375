"""CLI entry point for sitebridge.

This module acts as the central entry point for the project's CLI tools.
It delegates commands to the appropriate submodules or runs specific tasks.
"""

import argparse
import json
import subprocess
import sys

from dotenv import load_dotenv

from sitebridge.config import (
    EnvVar,
    get_environment,
    get_environment_info,
    list_environment_variables,
)
from sitebridge.core import get_logger, setup_logging

# Load environment variables from .env file
load_dotenv()

logger = get_logger("cli")


# =============================================================================
# Call Command
# =============================================================================


def cmd_call(args: argparse.Namespace) -> int:
    """Dispatch one tool call against the demo editor and print the envelope."""
    from sitebridge.dispatch import ToolRequest
    from sitebridge.mcp import create_bridge

    try:
        params = json.loads(args.params) if args.params else {}
    except json.JSONDecodeError as e:
        logger.error(f"--params is not valid JSON: {e}")
        return 1
    if not isinstance(params, dict):
        logger.error("--params must be a JSON object")
        return 1

    bridge = create_bridge(website_id=args.website_id)
    request = ToolRequest(noun=args.noun, action=args.action, params=params)
    response = bridge.dispatcher.dispatch(request)
    print(json.dumps(response.to_wire(), indent=2, default=str))
    return 0 if response.success else 2


def handle_call_command(argv: list[str]) -> int:
    """Handle the call command."""
    parser = argparse.ArgumentParser(
        prog="python . call",
        description="Run one tool call against a fresh in-memory editor",
    )
    parser.add_argument("noun", help="Tool noun, e.g. component")
    parser.add_argument("action", help="Action, e.g. add")
    parser.add_argument(
        "--params",
        "-p",
        type=str,
        default=None,
        help='Parameters as a JSON object, e.g. \'{"html": "<h1>Hi</h1>"}\'',
    )
    parser.add_argument(
        "--website-id",
        type=str,
        default="demo",
        help="Website considered open (default: demo)",
    )
    return cmd_call(parser.parse_args(argv))


# =============================================================================
# Env Command
# =============================================================================


def cmd_env(args: argparse.Namespace) -> int:
    """List configuration variables with their effective values."""
    variables = list_environment_variables(args.category)
    if not variables:
        logger.error(f"No variables in category: {args.category}")
        return 1

    width = max(len(var.value.name) for var in variables)
    for var in variables:
        info = get_environment_info(var)
        print(f"{info.name:<{width}}  {get_environment(var)}")
        if args.verbose:
            print(f"{'':<{width}}  [{info.category}] {info.description}")
            print(f"{'':<{width}}  default: {info.default}")
    return 0


def handle_env_command(argv: list[str]) -> int:
    """Handle the env command."""
    parser = argparse.ArgumentParser(
        prog="python . env",
        description="Show configuration variables",
    )
    parser.add_argument(
        "--category",
        "-c",
        type=str,
        default=None,
        help="Filter by category (site, service, editor, feedback, logging)",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Show descriptions and defaults"
    )
    return cmd_env(parser.parse_args(argv))


# =============================================================================
# Test Command
# =============================================================================


def cmd_test(extra_args: list[str]) -> int:
    """Run pytest with provided arguments and test tier options.

    Usage:
        python . test                # Run all tests
        python . test --unit         # Run only unit tests
        python . test --mcp          # Run MCP protocol tests
        python . test --integration  # Run end-to-end scenarios
        python . test -k "style"     # Run tests matching pattern
    """
    tier_markers = {
        "--unit": ["-m", "unit"],
        "--mcp": ["-m", "mcp"],
        "--integration": ["-m", "integration"],
        "--all": [],
    }

    pytest_args: list[str] = []
    remaining_args: list[str] = []

    for arg in extra_args:
        if arg in tier_markers:
            pytest_args.extend(tier_markers[arg])
        else:
            remaining_args.append(arg)

    cmd = [sys.executable, "-m", "pytest", *pytest_args, *remaining_args]
    logger.info(f"Running: {' '.join(cmd)}")

    try:
        return subprocess.call(cmd)
    except KeyboardInterrupt:
        return 130


# =============================================================================
# MCP Command
# =============================================================================


def handle_mcp_command(argv: list[str]) -> int:
    """Handle MCP server commands.

    Usage:
        python . mcp run              # Start in STDIO mode
        python . mcp serve            # Start in HTTP mode
        python . mcp serve --port 8080
        python . mcp info             # Show server info
    """
    if not argv:
        print("MCP Server Commands")
        print("\nUsage: python . mcp {command} [options]")
        print("\nCommands:")
        print("  run                 Start server in STDIO mode")
        print("  serve               Start server in HTTP mode")
        print("  info                Show server information")
        print("\nOptions for 'serve':")
        print("  --host HOST         Bind address (default: MCP_HOST)")
        print("  --port PORT         Port number (default: MCP_PORT)")
        print("  --transport TYPE    Transport: http or sse (default: http)")
        print("\nExamples:")
        print("  python . mcp run                    # STDIO for desktop clients")
        print("  python . mcp serve --port 8080      # HTTP on custom port")
        return 1

    subcommand = argv[0]
    subargs = argv[1:]

    if subcommand == "run":
        from sitebridge.mcp import TransportType, run_server

        logger.info("Starting MCP server in STDIO mode...")
        run_server(transport=TransportType.STDIO)
        return 0

    elif subcommand == "serve":
        from sitebridge.mcp import ServerConfig, TransportType, run_server

        config = ServerConfig.from_env(transport=TransportType.HTTP)
        parser = argparse.ArgumentParser(prog="python . mcp serve")
        parser.add_argument("--host", type=str, default=config.host)
        parser.add_argument("--port", type=int, default=config.port)
        parser.add_argument(
            "--transport", type=str, choices=["http", "sse"], default="http"
        )
        args = parser.parse_args(subargs)
        transport = TransportType(args.transport)

        logger.info(f"Starting MCP server in {transport.value} mode...")
        logger.info(f"Listening on {args.host}:{args.port}")
        run_server(transport=transport, host=args.host, port=args.port)
        return 0

    elif subcommand == "info":
        from sitebridge.dispatch import ACTIONS
        from sitebridge.mcp import get_server_capabilities, get_server_version

        print("sitebridge MCP Server")
        print("=" * 40)
        print(f"Version: {get_server_version()}")
        print("\nCapabilities:")
        for cap, enabled in get_server_capabilities().items():
            status = "enabled" if enabled else "disabled"
            print(f"  {cap}: {status}")
        print("\nTools:")
        for noun, actions in ACTIONS.items():
            tool = "eval_code" if noun == "eval" else noun
            print(f"  - {tool}: {', '.join(actions)}")
        print("  - status, help")
        return 0

    else:
        logger.error(f"Unknown mcp command: {subcommand}")
        return handle_mcp_command([])


def show_help() -> None:
    """Display CLI help message."""
    print("Usage: python . {command} [args]")
    print("\n=== MCP Server ===")
    print("  mcp        Run MCP server (STDIO or HTTP mode)")
    print("\n=== Tools ===")
    print("  call       Run one tool call against an in-memory editor")
    print("  env        Show configuration variables")
    print("\n=== Development ===")
    print("  test       Run the test suite")
    print("\nExamples:")
    print("  python . mcp run")
    print("  python . mcp serve --port 6807")
    print("  python . call component add --params '{\"html\": \"<h1>Hi</h1>\"}'")
    print("  python . env --category site")
    print("  python . test --unit")


def main() -> int:
    """Main entry point for the CLI."""
    if len(sys.argv) < 2:
        show_help()
        return 1

    command = sys.argv[1]
    rest_args = sys.argv[2:]

    if command in ("-h", "--help"):
        show_help()
        return 0

    commands = {
        "mcp": lambda: handle_mcp_command(rest_args),
        "call": lambda: handle_call_command(rest_args),
        "env": lambda: handle_env_command(rest_args),
        "test": lambda: cmd_test(rest_args),
    }

    if command in commands:
        setup_logging(get_environment(EnvVar.SITEBRIDGE_LOG_LEVEL))
        return commands[command]()

    logger.error(f"Unknown command: {command}")
    show_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
