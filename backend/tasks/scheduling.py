"""
Calendar helpers for TaskFlow.

Tasks with a due date are shown as all-day calendar events. Time blocks
are tasks tagged ``time-block`` whose due date is the block start and
whose estimated time is the block length in minutes.
"""

from datetime import date, datetime, time, timedelta, timezone as dt_timezone
from typing import Dict, List, Optional, Tuple

from django.utils import timezone

from .analytics import round_half_up


DEFAULT_EVENT_COLOR = '#3B82F6'
EVENT_TEXT_COLOR = '#FFFFFF'

WORKDAY_START_HOUR = 9
WORKDAY_END_HOUR = 17
SLOT_STEP_MINUTES = 30
DEFAULT_BLOCK_MINUTES = 60
MAX_AVAILABLE_SLOTS = 10


def minutes_between(start: datetime, end: datetime) -> int:
    return round_half_up((end - start).total_seconds() / 60)


def task_to_event(task) -> Dict:
    """Render a task as a calendar event."""
    project = task.project if task.project_id else None
    color = project.color if project else DEFAULT_EVENT_COLOR
    return {
        'id': task.pk,
        'title': task.title,
        'start': task.due_date,
        'end': task.due_date,
        'allDay': True,
        'backgroundColor': color,
        'borderColor': color,
        'textColor': EVENT_TEXT_COLOR,
        'extendedProps': {
            'taskId': task.pk,
            'description': task.description,
            'priority': task.priority,
            'status': task.status,
            'projectName': project.name if project else None,
            'timeSpent': task.time_spent,
            'estimatedTime': task.estimated_time,
        },
    }


def workday_bounds(day: date, tz=None) -> Tuple[datetime, datetime]:
    """Start and end of the working day in ``tz`` (the current time zone by default)."""
    tz = tz or timezone.get_current_timezone()
    start = datetime.combine(day, time(WORKDAY_START_HOUR), tzinfo=tz)
    end = datetime.combine(day, time(WORKDAY_END_HOUR), tzinfo=tz)
    return start, end


def _block_interval(block) -> Tuple[datetime, datetime]:
    length = block.estimated_time or DEFAULT_BLOCK_MINUTES
    return block.due_date, block.due_date + timedelta(minutes=length)


def find_available_slots(
    day: date,
    duration: int,
    existing_blocks,
    tz=None,
    limit: Optional[int] = MAX_AVAILABLE_SLOTS
) -> List[Dict]:
    """
    Find free slots of ``duration`` minutes inside the working day.

    Candidate slots start every 30 minutes from 09:00; a slot is free when
    it ends by 17:00 and does not overlap any existing block.

    Args:
        day: Calendar day to search
        duration: Slot length in minutes
        existing_blocks: Tasks scheduled on that day (``due_date`` is the start)
        tz: Time zone the working hours are expressed in
        limit: Maximum number of slots returned (None for all)
    """
    day_start, day_end = workday_bounds(day, tz)
    intervals = [_block_interval(block) for block in existing_blocks if block.due_date]

    slots = []
    slot_start = day_start
    while slot_start < day_end:
        slot_end = slot_start + timedelta(minutes=duration)
        has_conflict = any(
            slot_start < block_end and slot_end > block_start
            for block_start, block_end in intervals
        )
        if not has_conflict and slot_end <= day_end:
            slots.append({
                'start': slot_start.astimezone(dt_timezone.utc).isoformat(),
                'end': slot_end.astimezone(dt_timezone.utc).isoformat(),
                'duration': duration,
            })
        slot_start += timedelta(minutes=SLOT_STEP_MINUTES)

    return slots[:limit] if limit is not None else slots
