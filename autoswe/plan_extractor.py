"""Extract an ordered task list from free-form model output."""

import re
from typing import List, Optional

from .errors import ExtractionFailure
from .state import Plan, Task

PLAN_MARKER = "PLAN:"

# "12. Do something" but not "1.5 GB of logs"
_NUMBERED_RE = re.compile(r"^(\d+)\.(?!\d)\s*(.*)$")
_BULLET_PREFIXES = ("- ", "* ")


def has_plan_marker(text: str) -> bool:
    return PLAN_MARKER in (text or "")


def parse_task_lines(plan_text: str, max_items: Optional[int] = None) -> List[str]:
    """Return task descriptions from prefix-matched lines, in source order.

    Numbered items whose ordinal exceeds ``max_items`` are dropped; ``None``
    or ``0`` means no ceiling.
    """
    descriptions = []
    for raw in plan_text.splitlines():
        line = raw.strip()
        if not line:
            continue

        m = _NUMBERED_RE.match(line)
        if m:
            if max_items and int(m.group(1)) > max_items:
                continue
            desc = m.group(2).strip()
        elif line.startswith(_BULLET_PREFIXES):
            desc = line[2:].strip()
        else:
            continue

        if desc:
            descriptions.append(desc)
    return descriptions


def extract_plan(text: str, max_items: Optional[int] = None) -> Optional[Plan]:
    """Parse a plan introduced by ``PLAN:``.

    Only the text between the first marker and the next one is read.
    Returns ``None`` when no marker is present (the model needs another pass).
    Raises ExtractionFailure when the marker is present but no task lines follow.
    """
    if not has_plan_marker(text):
        return None

    # a restated plan after a second marker is ignored
    plan_text = text.split(PLAN_MARKER)[1]
    descriptions = parse_task_lines(plan_text, max_items=max_items)
    if not descriptions:
        raise ExtractionFailure("Plan marker found but no numbered or bulleted tasks followed it")

    tasks = [
        Task(id=f"task-{i}", description=desc)
        for i, desc in enumerate(descriptions, 1)
    ]
    return Plan(tasks=tasks)
