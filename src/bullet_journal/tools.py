"""MCP tool definitions wrapping the journal engine."""

from __future__ import annotations

from datetime import date
from typing import Any, Optional

from .engine import (
    AlreadyCompletedError,
    EntryNotFoundError,
    InvalidOperationError,
    JournalEngine,
    JournalError,
    StorageUnavailableError,
)
from .models import Priority, parse_date, parse_priority, parse_time
from .notify import MeetingNotifier
from .views import format_meeting


_DATE_PROPERTY = {
    "type": "string",
    "description": "Date YYYY-MM-DD (default: today)",
}

_TAGS_PROPERTY = {
    "type": "array",
    "items": {"type": "string"},
    "description": "Tags, without the leading #",
}

_NOTES_PROPERTY = {
    "type": "array",
    "items": {"type": "string"},
    "description": "Note lines attached under the bullet",
}

_PRIORITY_PROPERTY = {
    "type": "string",
    "enum": ["low", "med", "high", "1", "2", "3"],
    "description": "Priority: low, med, high (or 1/2/3)",
}

_ID_PROPERTY = {
    "type": "integer",
    "minimum": 1,
    "description": "Bullet ID (1-based position among the day's bullets)",
}


def make_tools(engine: JournalEngine) -> dict[str, dict]:
    """Create MCP tool definitions for the journal engine.

    Returns:
        Dict mapping tool names to their definitions.
    """

    tools = {}

    # ========== bj_add ==========
    tools["bj_add"] = {
        "name": "bj_add",
        "description": "Append a bullet to a day. New bullets always go to the end of the day.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "text": {"type": "string", "description": "Bullet text"},
                "date": _DATE_PROPERTY,
                "priority": _PRIORITY_PROPERTY,
                "tags": _TAGS_PROPERTY,
                "notes": _NOTES_PROPERTY,
            },
            "required": ["text"],
        },
    }

    # ========== bj_add_meeting ==========
    tools["bj_add_meeting"] = {
        "name": "bj_add_meeting",
        "description": "Add a meeting with a start time and duration.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "title": {"type": "string", "description": "Meeting title"},
                "time": {"type": "string", "description": "Start time HH:MM (24h)"},
                "duration": {
                    "type": "integer",
                    "minimum": 0,
                    "description": "Duration in minutes (default: 60)",
                },
                "date": _DATE_PROPERTY,
                "tags": _TAGS_PROPERTY,
                "notes": _NOTES_PROPERTY,
            },
            "required": ["title", "time"],
        },
    }

    # ========== bj_list ==========
    tools["bj_list"] = {
        "name": "bj_list",
        "description": "List the bullets of a day, optionally filtered by tags and priority.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "date": _DATE_PROPERTY,
                "tags": _TAGS_PROPERTY,
                "priority": _PRIORITY_PROPERTY,
            },
        },
    }

    # ========== bj_complete ==========
    tools["bj_complete"] = {
        "name": "bj_complete",
        "description": "Mark a bullet done. Completing a done bullet is a no-op.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "id": _ID_PROPERTY,
                "date": _DATE_PROPERTY,
            },
            "required": ["id"],
        },
    }

    # ========== bj_delete ==========
    tools["bj_delete"] = {
        "name": "bj_delete",
        "description": "Delete a bullet and its notes. Later bullets are renumbered.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "id": _ID_PROPERTY,
                "date": _DATE_PROPERTY,
            },
            "required": ["id"],
        },
    }

    # ========== bj_migrate ==========
    tools["bj_migrate"] = {
        "name": "bj_migrate",
        "description": "Move open bullets from one day to another. With id, move only that bullet. Notes are not carried over.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "from_date": {"type": "string", "description": "Source date YYYY-MM-DD"},
                "to_date": _DATE_PROPERTY,
                "id": _ID_PROPERTY,
            },
            "required": ["from_date"],
        },
    }

    # ========== bj_meetings ==========
    tools["bj_meetings"] = {
        "name": "bj_meetings",
        "description": "List the meetings of a day, earliest first.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "date": _DATE_PROPERTY,
            },
        },
    }

    # ========== bj_notify ==========
    tools["bj_notify"] = {
        "name": "bj_notify",
        "description": "Send alerts for today's meetings starting within the window. Each meeting is alerted once.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "window": {
                    "type": "integer",
                    "minimum": 0,
                    "description": "Window in minutes (default: from config, 15)",
                },
            },
        },
    }

    return tools


def _date_arg(engine: JournalEngine, value: Optional[str]) -> date:
    if value is None:
        return engine.today()
    return parse_date(value)


async def execute_tool(engine: JournalEngine, name: str, arguments: dict[str, Any]) -> dict[str, Any]:
    """Execute a journal tool and return the result.

    Args:
        engine: JournalEngine instance
        name: Tool name
        arguments: Tool arguments

    Returns:
        Result dict with success status and data or error
    """
    try:
        if name == "bj_add":
            day = _date_arg(engine, arguments.get("date"))
            entry = engine.add(
                day,
                arguments["text"],
                priority=parse_priority(arguments.get("priority")) or Priority.NONE,
                tags=arguments.get("tags", []),
                notes=arguments.get("notes", []),
            )
            return {
                "success": True,
                "date": day.isoformat(),
                "entry": entry.to_dict(),
                "path": str(engine.config.get_day_path(day)),
                "message": f"Added bullet {entry.visible_index} to {day}",
            }

        elif name == "bj_add_meeting":
            day = _date_arg(engine, arguments.get("date"))
            entry = engine.add_meeting(
                day,
                parse_time(arguments["time"]),
                arguments.get("duration"),
                arguments["title"],
                tags=arguments.get("tags", []),
                notes=arguments.get("notes", []),
            )
            return {
                "success": True,
                "date": day.isoformat(),
                "entry": entry.to_dict(),
                "message": f"Added meeting {entry.visible_index} to {day}",
            }

        elif name == "bj_list":
            day = _date_arg(engine, arguments.get("date"))
            entries = engine.list_entries(
                day,
                tags=arguments.get("tags", []),
                priority=parse_priority(arguments.get("priority")),
            )
            return {
                "success": True,
                "date": day.isoformat(),
                "count": len(entries),
                "entries": [e.to_dict() for e in entries],
            }

        elif name == "bj_complete":
            day = _date_arg(engine, arguments.get("date"))
            entry = engine.complete(day, arguments["id"])
            return {
                "success": True,
                "date": day.isoformat(),
                "entry": entry.to_dict(),
                "message": f"Marked done: {day} #{entry.visible_index}",
            }

        elif name == "bj_delete":
            day = _date_arg(engine, arguments.get("date"))
            entry = engine.delete(day, arguments["id"])
            return {
                "success": True,
                "date": day.isoformat(),
                "deleted": entry.to_dict(),
                "message": f"Deleted: {day} #{entry.visible_index}",
            }

        elif name == "bj_migrate":
            from_day = parse_date(arguments["from_date"])
            to_day = _date_arg(engine, arguments.get("to_date"))
            if arguments.get("id") is not None:
                moved = [engine.migrate_one(from_day, to_day, arguments["id"])]
            else:
                moved = engine.migrate_open(from_day, to_day)
            return {
                "success": True,
                "from_date": from_day.isoformat(),
                "to_date": to_day.isoformat(),
                "count": len(moved),
                "entries": [e.to_dict() for e in moved],
            }

        elif name == "bj_meetings":
            day = _date_arg(engine, arguments.get("date"))
            meetings = engine.meetings(day)
            return {
                "success": True,
                "date": day.isoformat(),
                "count": len(meetings),
                "meetings": [e.to_dict() for e in meetings],
                "lines": [format_meeting(day, e) for e in meetings],
            }

        elif name == "bj_notify":
            notifier = MeetingNotifier(engine)
            fired = notifier.notify_upcoming(arguments.get("window"))
            return {
                "success": True,
                "count": len(fired),
                "notifications": [
                    {"key": n.key, "message": n.message, "minutes_until": n.minutes_until}
                    for n in fired
                ],
            }

        else:
            return {
                "success": False,
                "error": f"Unknown tool: {name}",
                "error_type": "unknown_tool",
            }

    except EntryNotFoundError as e:
        return {"success": False, "error": str(e), "error_type": "not_found"}
    except AlreadyCompletedError as e:
        return {"success": False, "error": str(e), "error_type": "already_completed"}
    except InvalidOperationError as e:
        return {"success": False, "error": str(e), "error_type": "invalid_operation"}
    except StorageUnavailableError as e:
        return {"success": False, "error": str(e), "error_type": "storage_unavailable"}
    except JournalError as e:
        return {"success": False, "error": str(e), "error_type": "journal_error"}
    except (ValueError, KeyError) as e:
        return {"success": False, "error": str(e), "error_type": "invalid_argument"}
