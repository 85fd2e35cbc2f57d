from __future__ import annotations

from datetime import date
from typing import Any

DAY_TOKENS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def minutes_to_label(mins: int) -> str:
    hours, minutes = divmod(int(mins), 60)
    hh = hours % 24
    suffix = "PM" if hh >= 12 else "AM"
    h12 = 12 if hh % 12 == 0 else hh % 12
    return f"{h12}:{minutes:02d} {suffix}"


def build_system_prompt(today: date) -> str:
    return (
        "You are an assistant inside a planner app.\n"
        "Goal: propose a planning update based on the user's message.\n"
        "\n"
        "IMPORTANT: You must NOT apply changes. You only create:\n"
        "1) a concise preview summary\n"
        "2) an action object the app can apply after user confirmation.\n"
        "\n"
        f"Use today's date: {today.isoformat()}.\n"
        "If user gives times, convert to minutes since midnight. "
        f"Days must be one of: {' '.join(DAY_TOKENS)}.\n"
        "If a due date is relative (e.g. \"Friday\"), pick the next occurrence and output YYYY-MM-DD.\n"
        "If duration isn't given, infer a reasonable estimateMins (60-180).\n"
        "Return JSON exactly with keys: preview, action, confirmationToken.\n"
    )


PROPOSAL_SCHEMA: dict[str, Any] = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "preview": {"type": "string"},
        "confirmationToken": {"type": "string"},
        "action": {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "preferences": {
                    "type": "object",
                    "additionalProperties": False,
                    "properties": {
                        "startHour": {"type": "integer", "minimum": 0, "maximum": 23},
                        "endHour": {"type": "integer", "minimum": 1, "maximum": 24},
                        "workBlockMins": {"type": "integer", "minimum": 15, "maximum": 180},
                        "maxBlocksPerDay": {"type": "integer", "minimum": 1, "maximum": 12},
                    },
                },
                "addBusyBlocks": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "additionalProperties": False,
                        "properties": {
                            "day": {"type": "string", "enum": list(DAY_TOKENS)},
                            "startMin": {"type": "integer", "minimum": 0, "maximum": 1440},
                            "endMin": {"type": "integer", "minimum": 0, "maximum": 1440},
                            "label": {"type": "string"},
                        },
                        "required": ["day", "startMin", "endMin"],
                    },
                },
                "addTasks": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "additionalProperties": False,
                        "properties": {
                            "title": {"type": "string"},
                            "dueDate": {"type": "string"},
                            "priority": {"type": "string", "enum": ["low", "medium", "high"]},
                            "estimateMins": {"type": "integer", "minimum": 15, "maximum": 1440},
                        },
                        "required": ["title", "dueDate"],
                    },
                },
                "replan": {"type": "boolean"},
            },
        },
    },
    "required": ["preview", "action", "confirmationToken"],
}


def build_context_lines(snapshot: dict[str, Any]) -> list[str]:
    lines: list[str] = []

    preferences = snapshot.get("preferences") or {}
    if preferences:
        lines.append(
            "Preferences: "
            f"day {preferences.get('startHour')}:00-{preferences.get('endHour')}:00, "
            f"blocks of {preferences.get('workBlockMins')} min, "
            f"max {preferences.get('maxBlocksPerDay')} blocks/day"
        )

    busy = _summarize_busy_blocks(snapshot.get("busyBlocks"))
    if busy:
        lines.append(busy)

    tasks = _summarize_tasks(snapshot.get("tasks"))
    if tasks:
        lines.append(tasks)
    return lines


def _summarize_busy_blocks(blocks: Any) -> str | None:
    if not blocks:
        return None
    entries = [
        f"{b.get('day')} {minutes_to_label(b.get('startMin', 0))}-"
        f"{minutes_to_label(b.get('endMin', 0))} {b.get('label') or 'Busy'}"
        for b in blocks
        if isinstance(b, dict)
    ]
    return "Busy: " + "; ".join(entries) if entries else None


def _summarize_tasks(tasks: Any) -> str | None:
    if not tasks:
        return None
    entries = []
    for task in tasks:
        if not isinstance(task, dict) or task.get("done"):
            continue
        entries.append(
            f"{task.get('title')} [due {task.get('dueDate')}, "
            f"{task.get('priority', 'medium')}, {task.get('estimateMins')} min]"
        )
    return "Open tasks: " + "; ".join(entries) if entries else None
