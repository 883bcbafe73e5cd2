#!/usr/bin/env python3
"""
gemini-cli-mcp CLI - Bridge MCP clients to the Gemini CLI.

Usage:
    gemini-cli-mcp                      # same as "serve"
    gemini-cli-mcp serve
    gemini-cli-mcp validate-config
    gemini-cli-mcp invoke send-prompt --param prompt="Explain asyncio"
    gemini-cli-mcp invoke list-models
"""

import argparse
import asyncio
import json
import logging
import sys

from dotenv import load_dotenv

from gemini_cli_mcp.exceptions import ConfigError


def _parse_params(pairs: list[str]) -> dict:
    """Turn key=value pairs into a parameter dict.

    Values are decoded as JSON when possible so numbers stay numbers.
    """
    params = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise argparse.ArgumentTypeError(f"Expected key=value, got {pair!r}")
        try:
            params[key] = json.loads(value)
        except json.JSONDecodeError:
            params[key] = value
    return params


def _cmd_serve(args):
    """Handle the serve subcommand."""
    from gemini_cli_mcp.mcp_server import main as serve

    serve()


def _cmd_validate_config(args):
    """Handle the validate-config subcommand."""
    from gemini_cli_mcp.config.loader import (
        _find_project_config,
        _get_user_config_path,
        get_config,
    )
    from gemini_cli_mcp.tools.gemini import GeminiCliTool

    project_path = _find_project_config()
    user_path = _get_user_config_path()
    print(f"Project config: {project_path or 'not found'}")
    print(f"User config: {user_path}{'' if user_path.exists() else ' (not found)'}")

    try:
        config = get_config()
    except ConfigError as e:
        print(f"\nConfig is invalid: {e.message}")
        sys.exit(1)

    print(f"\nResolved configuration (source: {config.source.value}):")
    for key, value in config.summary().items():
        print(f"  {key}: {value}")

    warnings = []
    if not config.project_id:
        warnings.append("GOOGLE_CLOUD_PROJECT is not set")
    if not config.api_key:
        warnings.append("No API key set; the CLI must already be logged in")

    tool = GeminiCliTool(config)
    available = tool.is_available()
    if available:
        version = tool.version_sync()
        print(f"\n  + {tool.name}: {tool.get_path()} (version {version or 'unknown'})")
    else:
        print(f"\n  - {tool.name}: {config.executable!r} not found")

    if warnings:
        print(f"\nWarnings ({len(warnings)}):")
        for warning in warnings:
            print(f"  ! {warning}")

    sys.exit(0 if available else 1)


def _cmd_invoke(args):
    """Handle the invoke subcommand: one adapter call, JSON on stdout."""
    from gemini_cli_mcp.adapter import ToolAdapter
    from gemini_cli_mcp.config import get_config

    try:
        params = _parse_params(args.param)
    except argparse.ArgumentTypeError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(2)

    try:
        config = get_config()
    except ConfigError as e:
        print(f"ERROR: {e.message}", file=sys.stderr)
        sys.exit(2)

    response = asyncio.run(ToolAdapter(config).invoke(args.operation, params))
    print(json.dumps(response.to_dict(), indent=2))
    sys.exit(0 if response.success else 1)


def main():
    parser = argparse.ArgumentParser(
        prog="gemini-cli-mcp",
        description="MCP server bridging tool calls to the Gemini CLI",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    subparsers = parser.add_subparsers(dest="command")

    serve_parser = subparsers.add_parser("serve", help="Run the MCP stdio server")
    serve_parser.set_defaults(func=_cmd_serve)

    validate_parser = subparsers.add_parser(
        "validate-config", help="Show resolved configuration and check the CLI"
    )
    validate_parser.set_defaults(func=_cmd_validate_config)

    invoke_parser = subparsers.add_parser(
        "invoke", help="Run a single tool call without an MCP client"
    )
    invoke_parser.add_argument(
        "operation", help="send-prompt, list-models or set-config"
    )
    invoke_parser.add_argument(
        "--param",
        "-p",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Tool parameter (repeatable)",
    )
    invoke_parser.set_defaults(func=_cmd_invoke)

    args = parser.parse_args()

    load_dotenv()
    if args.verbose:
        logging.getLogger("gemini_cli_mcp").setLevel(logging.DEBUG)
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr)

    func = getattr(args, "func", _cmd_serve)
    func(args)


if __name__ == "__main__":
    main()
