"""
CLI entry point for qalens.

Usage:
    qalens serve                        Serve the gateway over MCP stdio
    qalens resources                    List resource templates
    qalens resources --files            List concrete resource files
    qalens tools                        List tools and their input schemas
    qalens read <locator>               Print a qa:// resource
    qalens call <tool> --args JSON      Invoke a tool and print its result

Global options:
    --base-dir DIR      Directory the category offsets are relative to (default: cwd)
    --config FILE       YAML config file (default: <base-dir>/qalens.yaml if present)
"""

import argparse
import json
import sys

from qalens import logging as qlog
from qalens.config_loader import load_config
from qalens.errors import ConfigError, GatewayError
from qalens.gateway import Gateway


def _print_json(data):
    print(json.dumps(data, indent=2, ensure_ascii=False))


def cmd_serve(gateway, args):
    """Serve over stdio until the client disconnects."""
    from qalens.server import serve

    qlog.bootstrap(f"Starting {gateway.config.server_name} (base: {gateway.config.base_dir})")
    serve(gateway)
    return 0


def cmd_resources(gateway, args):
    if args.files:
        _print_json({"resources": gateway.list_concrete_resources(args.limit)})
    else:
        _print_json(gateway.list_resources())
    return 0


def cmd_tools(gateway, args):
    _print_json(gateway.list_tools())
    return 0


def cmd_read(gateway, args):
    """Print the resource text; exit 1 if it cannot be read."""
    try:
        result = gateway.context.read_locator(args.locator)
    except GatewayError as e:
        print(e.message, file=sys.stderr)
        return 1
    sys.stdout.write(result.content or "")
    return 0


def cmd_call(gateway, args):
    try:
        tool_args = json.loads(args.args) if args.args else {}
    except json.JSONDecodeError as e:
        print(f"Invalid --args JSON: {e}", file=sys.stderr)
        return 1

    result = gateway.invoke_tool(args.tool, tool_args)
    print(result.text)
    return 1 if result.is_error else 0


def build_parser():
    parser = argparse.ArgumentParser(
        prog="qalens",
        description="QA resource and tool gateway (MCP)",
    )
    parser.add_argument("--base-dir", help="Base directory for category roots (default: cwd)")
    parser.add_argument("--config", help="Path to a qalens.yaml config file")
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARN", "ERROR"],
                        help="Override QALENS_LOG_LEVEL")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    serve_p = subparsers.add_parser("serve", help="Serve over MCP stdio")
    serve_p.set_defaults(func=cmd_serve)

    resources_p = subparsers.add_parser("resources", help="List resources")
    resources_p.add_argument("--files", action="store_true", help="List concrete files instead of templates")
    resources_p.add_argument("--limit", type=int, default=50, help="Max files per category (with --files)")
    resources_p.set_defaults(func=cmd_resources)

    tools_p = subparsers.add_parser("tools", help="List tools")
    tools_p.set_defaults(func=cmd_tools)

    read_p = subparsers.add_parser("read", help="Read a qa:// resource")
    read_p.add_argument("locator", help="qa:// locator")
    read_p.set_defaults(func=cmd_read)

    call_p = subparsers.add_parser("call", help="Invoke a tool")
    call_p.add_argument("tool", help="Tool name")
    call_p.add_argument("--args", help="Tool arguments as a JSON object")
    call_p.set_defaults(func=cmd_call)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    try:
        config = load_config(base_dir=args.base_dir, config_path=args.config)
    except ConfigError as e:
        qlog.bootstrap(f"FATAL: {e.message}")
        print(e.message, file=sys.stderr)
        return 1

    qlog.configure(log_dir=config.log_dir, level=args.log_level)
    gateway = Gateway.from_config(config)
    return args.func(gateway, args)


if __name__ == "__main__":
    sys.exit(main())
