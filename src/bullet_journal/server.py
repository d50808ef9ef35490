"""Bullet journal command line and MCP server - main entry point."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from datetime import date, timedelta
from pathlib import Path
from typing import Any, Optional

# MCP imports are optional - only needed when running the server
try:
    from mcp.server import Server  # pragma: no cover
    from mcp.server.stdio import stdio_server  # pragma: no cover
    from mcp.types import Tool, TextContent  # pragma: no cover
    HAS_MCP = True  # pragma: no cover
except ImportError:
    HAS_MCP = False
    Server = None  # type: ignore
    Tool = None  # type: ignore
    TextContent = None  # type: ignore

from .config import JournalConfig, load_config
from .engine import JournalEngine, JournalError
from .models import Priority, parse_date, parse_priority, parse_time
from .notify import MeetingNotifier
from .tools import execute_tool, make_tools
from .views import format_entry, format_meeting, month_markers, render_month, render_week, week_summary


def create_server(config: JournalConfig) -> "Server":
    """Create and configure the MCP server.

    Raises:
        ImportError: If MCP package is not installed
    """
    if not HAS_MCP:
        raise ImportError(
            "MCP package not installed. Install with: pip install bullet-journal[mcp]"
        )

    server = Server("bullet-journal")
    engine = JournalEngine(config)
    tool_defs = make_tools(engine)

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        """Return list of available tools."""
        return [
            Tool(
                name=t["name"],
                description=t["description"],
                inputSchema=t["inputSchema"],
            )
            for t in tool_defs.values()
        ]

    @server.call_tool()
    async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
        """Handle tool invocation."""
        result = await execute_tool(engine, name, arguments or {})
        return [TextContent(type="text", text=json.dumps(result, indent=2, default=str))]

    return server


async def run_server(config: JournalConfig) -> None:
    """Run the MCP server with stdio transport."""
    if not HAS_MCP:
        raise ImportError(
            "MCP package not installed. Install with: pip install bullet-journal[mcp]"
        )

    server = create_server(config)  # pragma: no cover

    async with stdio_server() as (read_stream, write_stream):  # pragma: no cover
        await server.run(  # pragma: no cover
            read_stream,
            write_stream,
            server.create_initialization_options(),
        )


# ========== Command line ==========


def _day(engine: JournalEngine, value: Optional[str]) -> date:
    return parse_date(value) if value else engine.today()


def cmd_add(engine: JournalEngine, args: argparse.Namespace) -> None:
    day = _day(engine, args.date)
    engine.add(
        day,
        " ".join(args.text),
        priority=parse_priority(args.priority) or Priority.NONE,
        tags=args.tag,
        notes=args.note,
    )
    print(f"Added to {engine.config.get_day_path(day)}")


def cmd_list(engine: JournalEngine, args: argparse.Namespace) -> None:
    day = _day(engine, args.date)
    priority = parse_priority(args.priority)
    if not engine.entries(day):
        print(f"No bullets for {day}")
        return
    for entry in engine.list_entries(day, args.tag, priority):
        for line in format_entry(entry):
            print(line)


def cmd_done(engine: JournalEngine, args: argparse.Namespace) -> None:
    day = _day(engine, args.date)
    engine.complete(day, args.id)
    print(f"Marked done: {day} #{args.id}")


def cmd_delete(engine: JournalEngine, args: argparse.Namespace) -> None:
    day = _day(engine, args.date)
    engine.delete(day, args.id)
    print(f"Deleted: {day} #{args.id}")


def cmd_migrate(engine: JournalEngine, args: argparse.Namespace) -> None:
    to_day = _day(engine, args.to)
    from_day = parse_date(args.from_) if args.from_ else to_day - timedelta(days=1)
    if args.id is not None:
        engine.migrate_one(from_day, to_day, args.id)
        print(f"Migrated {from_day} #{args.id} to {to_day}")
        return
    if engine.migrate_open(from_day, to_day):
        print(f"Migrated open bullets from {from_day} to {to_day}")
    else:
        print(f"No open bullets to migrate from {from_day}")


def cmd_week(engine: JournalEngine, args: argparse.Namespace) -> None:
    base = _day(engine, args.date)
    print(render_week(week_summary(engine, base, args.tag, parse_priority(args.priority))))


def cmd_cal(engine: JournalEngine, args: argparse.Namespace) -> None:
    base = _day(engine, args.date)
    print(render_month(base, month_markers(engine, base)))


def cmd_meeting_add(engine: JournalEngine, args: argparse.Namespace) -> None:
    day = _day(engine, args.date)
    engine.add_meeting(
        day,
        parse_time(args.time),
        args.duration,
        " ".join(args.title),
        tags=args.tag,
        notes=args.note,
    )
    print(f"Added to {engine.config.get_day_path(day)}")


def cmd_meeting_list(engine: JournalEngine, args: argparse.Namespace) -> None:
    day = _day(engine, args.date)
    meetings = engine.meetings(day)
    if not meetings:
        print(f"No meetings for {day}")
        return
    for entry in meetings:
        print(format_meeting(day, entry))


def cmd_meeting_notify(engine: JournalEngine, args: argparse.Namespace) -> None:
    MeetingNotifier(engine).notify_upcoming(args.window)


def cmd_serve(engine: JournalEngine, args: argparse.Namespace) -> None:
    if not HAS_MCP:
        print("Error: MCP package not installed.", file=sys.stderr)
        print("Install with: pip install bullet-journal[mcp]", file=sys.stderr)
        sys.exit(1)
    asyncio.run(run_server(engine.config))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bj",
        description="Bullet journal: one Markdown file of bullets and meetings per day",
    )
    parser.add_argument(
        "--data-dir",
        type=Path,
        help="Directory holding day files (default: $BJ_DATA_DIR or ~/.local/share/bullet_journal)",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        help="Path to config file (default: auto-detect in data directory)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("add", help="Add a bullet to a date (default today)")
    p.add_argument("text", nargs="+", help="Bullet text")
    p.add_argument("-d", "--date", help="Date YYYY-MM-DD (default: today)")
    p.add_argument("-p", "--priority", help="Priority: low, med, high (or 1/2/3)")
    p.add_argument("-t", "--tag", action="append", default=[], help="Tag (can repeat)")
    p.add_argument("-n", "--note", action="append", default=[], help="Note line (can repeat)")
    p.set_defaults(func=cmd_add)

    p = sub.add_parser("list", help="List bullets for a date (default today)")
    p.add_argument("-d", "--date", help="Date YYYY-MM-DD (default: today)")
    p.add_argument("-t", "--tag", action="append", default=[], help="Filter by tag (can repeat)")
    p.add_argument("-p", "--priority", help="Filter by priority: low, med, high (or 1/2/3)")
    p.set_defaults(func=cmd_list)

    p = sub.add_parser("done", help="Mark a bullet done by ID")
    p.add_argument("id", type=int, help="Bullet ID (1-based visible index)")
    p.add_argument("-d", "--date", help="Date YYYY-MM-DD (default: today)")
    p.set_defaults(func=cmd_done)

    p = sub.add_parser("delete", help="Delete a bullet and its notes by ID")
    p.add_argument("id", type=int, help="Bullet ID (1-based visible index)")
    p.add_argument("-d", "--date", help="Date YYYY-MM-DD (default: today)")
    p.set_defaults(func=cmd_delete)

    p = sub.add_parser("migrate", help="Migrate open bullets to another date (default: yesterday to today)")
    p.add_argument("--from", dest="from_", help="Source date YYYY-MM-DD (default: day before --to)")
    p.add_argument("--to", help="Destination date YYYY-MM-DD (default: today)")
    p.add_argument("--id", type=int, help="Migrate only this bullet")
    p.set_defaults(func=cmd_migrate)

    p = sub.add_parser("week", help="Show the week containing a date")
    p.add_argument("-d", "--date", help="Any date in the target week (default: today)")
    p.add_argument("-t", "--tag", action="append", default=[], help="Filter by tag (can repeat)")
    p.add_argument("-p", "--priority", help="Filter by priority: low, med, high (or 1/2/3)")
    p.set_defaults(func=cmd_week)

    p = sub.add_parser("cal", help="Show a month calendar with markers for bullets/meetings")
    p.add_argument("-d", "--date", help="Any date in the month (default: today)")
    p.set_defaults(func=cmd_cal)

    meeting = sub.add_parser("meeting", help="Manage meetings: add/list/notify")
    msub = meeting.add_subparsers(dest="meeting_command", required=True)

    p = msub.add_parser("add", help="Add a meeting")
    p.add_argument("title", nargs="+", help="Title")
    p.add_argument("-t", "--time", required=True, help="Start time HH:MM (24h)")
    p.add_argument("-u", "--duration", type=int, help="Duration minutes (default: 60)")
    p.add_argument("-d", "--date", help="Date YYYY-MM-DD (default: today)")
    p.add_argument("-g", "--tag", action="append", default=[], help="Tag (can repeat)")
    p.add_argument("-n", "--note", action="append", default=[], help="Note line (can repeat)")
    p.set_defaults(func=cmd_meeting_add)

    p = msub.add_parser("list", help="List meetings for a date (default today)")
    p.add_argument("-d", "--date", help="Date YYYY-MM-DD (default: today)")
    p.set_defaults(func=cmd_meeting_list)

    p = msub.add_parser("notify", help="Notify meetings starting within N minutes")
    p.add_argument("-w", "--window", type=int, help="Window in minutes (default: 15)")
    p.set_defaults(func=cmd_meeting_notify)

    p = sub.add_parser("serve", help="Run the MCP server on stdio")
    p.set_defaults(func=cmd_serve)

    return parser


def main(argv: Optional[list[str]] = None) -> None:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        config = load_config(args.data_dir, args.config)
    except Exception as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(1)

    engine = JournalEngine(config)
    try:
        args.func(engine, args)
    except (JournalError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":  # pragma: no cover
    main()
