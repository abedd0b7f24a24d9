"""
Recharge CLI - Opinionated command-line interface.

This layer provides the user-facing CLI commands, using the SDK layer
for all operations. It handles:
- Argument parsing
- TTY detection for human vs machine output
- Pretty formatting for human output
- JSON output for piping/automation
"""

import argparse
import dataclasses
import json
import os
import sys
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from recharge_cli import webhooks
from recharge_cli.core.client import RechargeError, ValidationError
from recharge_cli.logging_config import configure_logging
from recharge_cli.sdk import RechargeClient

# =============================================================================
# Output Helpers
# =============================================================================


HUMAN_LIMIT = 20  # Default limit for human-readable output

# Columns shown in TTY tables: (header, attribute, width)
TABLE_COLUMNS: dict[str, list[tuple[str, str, int]]] = {
    "subscriptions": [("ID", "id", 12), ("Status", "status", 10), ("Product", "product_title", 40)],
    "customers": [("ID", "id", 12), ("Email", "email", 36), ("Name", "full_name", 30)],
    "charges": [("ID", "id", 12), ("Status", "status", 18), ("Scheduled", "scheduled_at", 20), ("Total", "total_price", 10)],
    "orders": [("ID", "id", 12), ("Status", "status", 18), ("Processed", "processed_at", 20), ("Total", "total_price", 10)],
    "discounts": [("ID", "id", 12), ("Code", "code", 24), ("Status", "status", 14), ("Used", "times_used", 6)],
    "webhooks": [("ID", "id", 12), ("Topic", "topic", 32), ("Address", "address", 50)],
}


def is_tty() -> bool:
    """Check if stdout is a TTY (human) or pipe (machine)."""
    return sys.stdout.isatty()


def to_jsonable(item: Any) -> Any:
    """Convert SDK dataclasses to plain dicts."""
    if dataclasses.is_dataclass(item) and not isinstance(item, type):
        return dataclasses.asdict(item)
    return item


def json_output(data: Any, pretty: bool = False) -> None:
    """Print JSON output."""
    indent = 2 if pretty or is_tty() else None
    print(json.dumps(data, indent=indent, default=str))


def error_output(error: RechargeError) -> None:
    """Print error and exit."""
    json_output(error.to_dict())
    sys.exit(1)


def success_output(data: Any) -> None:
    """Print success output."""
    json_output(data)


def _cell(value: Any) -> str:
    if value is None:
        return ""
    return str(getattr(value, "value", value))


def table_output(
    headers: list[str],
    rows: list[list[str]],
    widths: list[int],
) -> None:
    """Print a formatted table for human output."""
    # Header
    header_line = "  ".join(h.ljust(w) for h, w in zip(headers, widths))
    print(header_line)
    print("-" * len(header_line))

    # Rows
    for row in rows:
        print("  ".join(str(v)[:w].ljust(w) for v, w in zip(row, widths)))


# =============================================================================
# CLI Commands
# =============================================================================


def _list_params(args: argparse.Namespace) -> dict[str, Any]:
    params: dict[str, Any] = {}
    if getattr(args, "sort_by", None):
        params["sort_by"] = args.sort_by
    if getattr(args, "status", None):
        params["status"] = args.status
    if getattr(args, "page_size", None):
        params["limit"] = args.page_size
    for pair in getattr(args, "filter", None) or []:
        key, sep, value = pair.partition("=")
        if not sep:
            raise ValidationError(f"Filters must look like key=value, got {pair!r}")
        params[key] = value
    return params


def cmd_list(client: RechargeClient, args: argparse.Namespace) -> None:
    """List items of a resource."""
    resource = args.resource
    try:
        paginator = getattr(client, resource).list(**_list_params(args))

        if is_tty():
            items = paginator.take(args.limit if args.limit is not None else HUMAN_LIMIT)
            if not items:
                print(f"No {resource} found.")
                return

            columns = TABLE_COLUMNS[resource]
            table_output(
                [c[0] for c in columns],
                [[_cell(getattr(item, c[1], None)) for c in columns] for item in items],
                [c[2] for c in columns],
            )
            print(f"\nShowing {len(items)} {resource}")
        else:
            items = paginator.take(args.limit) if args.limit is not None else paginator.all()
            success_output({"data": [to_jsonable(i) for i in items], "count": len(items)})
    except RechargeError as e:
        error_output(e)


def cmd_get(client: RechargeClient, args: argparse.Namespace) -> None:
    """Get a single item by ID."""
    try:
        item = getattr(client, args.resource).get(args.id)
        success_output(to_jsonable(item))
    except RechargeError as e:
        error_output(e)


def cmd_count(client: RechargeClient, args: argparse.Namespace) -> None:
    """Server-side count of a resource."""
    try:
        params = {"status": args.status} if getattr(args, "status", None) else {}
        total = getattr(client, args.resource).count(**params)
        success_output({"resource": args.resource, "count": total})
    except RechargeError as e:
        error_output(e)


def cmd_store(client: RechargeClient, _args: argparse.Namespace) -> None:
    """Show store settings."""
    try:
        success_output(to_jsonable(client.store.get()))
    except RechargeError as e:
        error_output(e)


def cmd_webhooks_verify(_client: RechargeClient | None, args: argparse.Namespace) -> None:
    """Verify a webhook payload signature locally (no API call)."""
    secret = args.secret or os.environ.get("RECHARGE_CLIENT_SECRET")
    if not secret:
        error_output(ValidationError("Client secret required. Use --secret or set RECHARGE_CLIENT_SECRET"))
        return

    try:
        body = sys.stdin.buffer.read() if args.file == "-" else Path(args.file).read_bytes()
    except OSError as e:
        error_output(ValidationError(f"Cannot read payload {args.file}: {e.strerror or e}"))
        return

    valid = webhooks.validate(secret, body, args.signature)
    success_output({"valid": valid})
    if not valid:
        sys.exit(1)


# =============================================================================
# Parser
# =============================================================================


def _add_list_parser(
    sub: argparse._SubParsersAction,
    resource: str,
    status: bool = False,
) -> None:
    p_list = sub.add_parser("list", help=f"List {resource}")
    p_list.add_argument("--sort-by", "-s", help="Sort order, e.g. id-desc or created_at-asc")
    if status:
        p_list.add_argument("--status", help="Filter by status (any case)")
    p_list.add_argument("--limit", "-l", type=int, help="Max results (default 20 on a TTY, all when piped)")
    p_list.add_argument("--page-size", type=int, help="Items requested per page")
    p_list.add_argument("--filter", "-f", action="append", metavar="KEY=VALUE", help="Extra query filter")
    p_list.set_defaults(func=cmd_list, resource=resource)


def _add_resource(
    subparsers: argparse._SubParsersAction,
    resource: str,
    help_text: str,
    status: bool = False,
) -> argparse._SubParsersAction:
    parser = subparsers.add_parser(resource, help=help_text)
    parser.set_defaults(func=lambda _c, _a: parser.print_help())
    sub = parser.add_subparsers(dest="subcommand")

    _add_list_parser(sub, resource, status=status)

    p_get = sub.add_parser("get", help=f"Get one of {resource} by ID")
    p_get.add_argument("id", help="Resource ID")
    p_get.set_defaults(func=cmd_get, resource=resource)
    return sub


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="recharge",
        description="Recharge CLI - Command-line interface for the Recharge Payments API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Output Modes:
  TTY (human):  Pretty tables, limited rows
  Pipe:         Full JSON, auto-paginates all results

Examples:
  recharge subscriptions list --status active --sort-by created_at-desc
  recharge charges list --status queued | jq '.data[].id'
  recharge --api-version 2021-01 discounts count
  recharge webhooks verify payload.json --signature <hex> --secret <secret>
""",
    )
    parser.add_argument("--api-version", help="API version: 2021-01 or 2021-11 (overrides RECHARGE_API_VERSION)")
    parser.add_argument("--log-level", help="Log level (overrides RECHARGE_LOG_LEVEL, default WARNING)")
    parser.add_argument("--log-json", action="store_true", help="Emit logs as JSON")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    _add_resource(subparsers, "subscriptions", "List and inspect subscriptions", status=True)
    _add_resource(subparsers, "customers", "List and inspect customers")
    _add_resource(subparsers, "charges", "List and inspect charges", status=True)
    _add_resource(subparsers, "orders", "List and inspect orders", status=True)

    discounts_sub = _add_resource(subparsers, "discounts", "List, inspect and count discounts")
    d_count = discounts_sub.add_parser("count", help="Count discounts (uses the 2021-01 API)")
    d_count.add_argument("--status", help="Only count discounts with this status")
    d_count.set_defaults(func=cmd_count, resource="discounts")

    webhooks_sub = _add_resource(subparsers, "webhooks", "Manage and verify webhooks")
    w_verify = webhooks_sub.add_parser("verify", help="Verify a webhook payload signature")
    w_verify.add_argument("file", help="Raw payload file (or - for stdin)")
    w_verify.add_argument("--signature", required=True, help="Value of the X-Recharge-Hmac-Sha256 header")
    w_verify.add_argument("--secret", help="API client secret (or RECHARGE_CLIENT_SECRET env var)")
    w_verify.set_defaults(func=cmd_webhooks_verify, offline=True)

    store = subparsers.add_parser("store", help="Show store settings")
    store.set_defaults(func=cmd_store)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    load_dotenv()

    parser = create_parser()
    args = parser.parse_args(argv)

    log_level = args.log_level or os.environ.get("RECHARGE_LOG_LEVEL", "WARNING")
    try:
        configure_logging(log_level, json_format=args.log_json)
    except ValueError:
        error_output(ValidationError(f"Invalid log level: {log_level}"))
        return

    if not args.command:
        parser.print_help()
        sys.exit(0)

    # Offline commands never need credentials
    if getattr(args, "offline", False):
        args.func(None, args)
        return

    try:
        client = RechargeClient(api_version=args.api_version)
    except RechargeError as e:
        error_output(e)
        return

    # Run command (all subparsers have default funcs that print help)
    args.func(client, args)


if __name__ == "__main__":
    main()
