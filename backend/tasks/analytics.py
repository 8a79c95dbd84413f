"""
Productivity analytics for TaskFlow.

Pure aggregation over already-fetched tasks, projects and timer sessions:
counts, sums, groupings and percentages. Nothing in this module touches
the database, so every function can be exercised with plain objects.

Dates used for grouping are UTC calendar dates; the most productive
weekday uses the server's local time zone.
"""

from collections import OrderedDict
from datetime import datetime, timedelta, timezone as dt_timezone
from typing import Dict, List, Optional
import math

from django.utils import timezone

from .scoring import PriorityLevel, TaskStatus


DAY_NAMES = ['Sunday', 'Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday']

# Trend thresholds (percent change, recent week vs the week before)
PRODUCTIVITY_TREND_THRESHOLD = 10
COMPLETION_TREND_THRESHOLD = 15

MAX_WEEKLY_BUCKETS = 4
RECENT_SESSIONS_LIMIT = 10
RECENT_ACTIVITY_LIMIT = 10
RECENT_ACTIVITY_DAYS = 7


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return math.floor(value + 0.5)


def percentage(part: int, total: int) -> int:
    return round_half_up(part / total * 100) if total > 0 else 0


def utc_date_string(value: datetime) -> str:
    return value.astimezone(dt_timezone.utc).date().isoformat()


def _is_completed(task) -> bool:
    return task.status == TaskStatus.COMPLETED.value


def _total_time(tasks) -> int:
    return sum(task.time_spent for task in tasks)


def count_overdue(tasks, now: datetime) -> int:
    return sum(
        1 for task in tasks
        if task.due_date and task.due_date < now and not _is_completed(task)
    )


def priority_distribution(tasks) -> Dict[str, int]:
    return {
        level.value: sum(1 for task in tasks if task.priority == level.value)
        for level in (PriorityLevel.HIGH, PriorityLevel.MEDIUM, PriorityLevel.LOW)
    }


def most_productive_day(tasks) -> str:
    """
    Weekday on which the most tasks were completed.

    Ties go to the later weekday; Sunday is reported when nothing has been
    completed yet.
    """
    completions: Dict[int, int] = {}
    for task in tasks:
        if _is_completed(task):
            weekday = (timezone.localtime(task.updated_at).weekday() + 1) % 7
            completions[weekday] = completions.get(weekday, 0) + 1

    best = 0
    for weekday in sorted(completions):
        if not (best in completions and completions[best] > completions[weekday]):
            best = weekday
    return DAY_NAMES[best]


def build_daily_activity(tasks, period_days: int, now: datetime) -> List[Dict]:
    """One entry per day of the period, oldest first."""
    activity = []
    for offset in range(period_days - 1, -1, -1):
        day = utc_date_string(now - timedelta(days=offset))
        day_tasks = [t for t in tasks if utc_date_string(t.updated_at) == day]
        activity.append({
            'date': day,
            'tasksCompleted': sum(1 for t in day_tasks if _is_completed(t)),
            'timeSpent': _total_time(day_tasks),
            'tasksCreated': sum(1 for t in day_tasks if utc_date_string(t.created_at) == day),
        })
    return activity


def build_weekly_stats(tasks, period_days: int, now: datetime) -> List[Dict]:
    """Up to four rolling seven-day buckets, oldest first."""
    stats = []
    for week in range(min(MAX_WEEKLY_BUCKETS, period_days // 7)):
        week_start = now - timedelta(days=(week + 1) * 7)
        week_end = now - timedelta(days=week * 7)
        week_tasks = [t for t in tasks if week_start <= t.updated_at < week_end]
        stats.append({
            'week': f"Week {week + 1}",
            'tasksCompleted': sum(1 for t in week_tasks if _is_completed(t)),
            'timeSpent': _total_time(week_tasks),
        })
    stats.reverse()
    return stats


def _calculate_trend(daily_activity: List[Dict], key: str, threshold: float) -> str:
    if len(daily_activity) < 2:
        return 'stable'

    recent = daily_activity[-7:]
    previous = daily_activity[-14:-7]
    if not previous:
        return 'stable'

    recent_avg = sum(day[key] for day in recent) / len(recent)
    previous_avg = sum(day[key] for day in previous) / len(previous)

    if previous_avg == 0:
        return 'increasing' if recent_avg > 0 else 'stable'

    change = (recent_avg - previous_avg) / previous_avg * 100
    if change > threshold:
        return 'increasing'
    if change < -threshold:
        return 'decreasing'
    return 'stable'


def calculate_productivity_trend(daily_activity: List[Dict]) -> str:
    """Compare completed tasks per day over the last week against the week before."""
    return _calculate_trend(daily_activity, 'tasksCompleted', PRODUCTIVITY_TREND_THRESHOLD)


def calculate_completion_trend(daily_activity: List[Dict]) -> str:
    """Compare time spent per day over the last week against the week before."""
    return _calculate_trend(daily_activity, 'timeSpent', COMPLETION_TREND_THRESHOLD)


def build_project_stats(tasks, projects) -> List[Dict]:
    stats = []
    for project in projects:
        project_tasks = [t for t in tasks if t.project_id == project.pk]
        completed = sum(1 for t in project_tasks if _is_completed(t))
        stats.append({
            'id': project.pk,
            'name': project.name,
            'color': project.color,
            'totalTasks': len(project_tasks),
            'completedTasks': completed,
            'completionRate': percentage(completed, len(project_tasks)),
            'timeSpent': _total_time(project_tasks),
        })
    return sorted(stats, key=lambda s: s['timeSpent'], reverse=True)


def compute_analytics(tasks, projects, period_days: int = 30, now: Optional[datetime] = None) -> Dict:
    """
    Build the dashboard analytics for one user.

    Args:
        tasks: Every task of the user
        projects: Every project of the user
        period_days: Length of the reporting period in days
        now: Reference time (defaults to the current time)
    """
    if now is None:
        now = timezone.now()

    tasks = list(tasks)
    start_date = now - timedelta(days=period_days)
    period_tasks = [t for t in tasks if t.updated_at >= start_date]

    total_tasks = len(tasks)
    completed_tasks = sum(1 for t in tasks if _is_completed(t))

    completed_with_time = [t for t in tasks if _is_completed(t) and t.time_spent > 0]
    avg_task_time = (
        round_half_up(_total_time(completed_with_time) / len(completed_with_time))
        if completed_with_time else 0
    )

    daily_activity = build_daily_activity(tasks, period_days, now)

    return {
        'overview': {
            'totalTasks': total_tasks,
            'completedTasks': completed_tasks,
            'inProgressTasks': sum(1 for t in tasks if t.status == TaskStatus.IN_PROGRESS.value),
            'todoTasks': sum(1 for t in tasks if t.status == TaskStatus.TODO.value),
            'completionRate': percentage(completed_tasks, total_tasks),
            'totalTimeSpent': _total_time(tasks),
            'avgTaskTime': avg_task_time,
            'overdueTasks': count_overdue(tasks, now),
            'mostProductiveDay': most_productive_day(tasks),
        },
        'period': {
            'days': period_days,
            'timeSpent': _total_time(period_tasks),
            'tasksWorked': len(period_tasks),
            'tasksCompleted': sum(1 for t in period_tasks if _is_completed(t)),
        },
        'priorityStats': priority_distribution(tasks),
        'projectStats': build_project_stats(tasks, projects),
        'dailyActivity': daily_activity,
        'weeklyStats': build_weekly_stats(tasks, period_days, now),
        'trends': {
            'productivity': calculate_productivity_trend(daily_activity),
            'taskCompletion': calculate_completion_trend(daily_activity),
        },
    }


def compute_focus_analytics(sessions: List[Dict], period_days: int = 7) -> Dict:
    """
    Summarize timer sessions.

    Args:
        sessions: Session dictionaries with ``startTime`` (datetime),
            ``duration`` (minutes) and ``type`` keys, already limited to
            the period
        period_days: Length of the reporting period in days
    """
    by_day: Dict[str, List[Dict]] = OrderedDict()
    for session in sessions:
        by_day.setdefault(utc_date_string(session['startTime']), []).append(session)

    daily_metrics = []
    for day, day_sessions in by_day.items():
        work = [s['duration'] for s in day_sessions if s['type'] == 'work']
        daily_metrics.append({
            'date': day,
            'totalSessions': len(work),
            'totalFocusTime': sum(work),
            'averageSessionLength': round_half_up(sum(work) / len(work)) if work else 0,
            'longestSession': max(work) if work else 0,
        })
    daily_metrics.sort(key=lambda m: m['date'])

    work = [s['duration'] for s in sessions if s['type'] == 'work']
    total_focus = sum(work)

    recent = sorted(sessions, key=lambda s: s['startTime'], reverse=True)[:RECENT_SESSIONS_LIMIT]

    return {
        'period': {
            'days': period_days,
            'totalSessions': len(work),
            'totalFocusTime': total_focus,
            'averageSessionLength': round_half_up(total_focus / len(work)) if work else 0,
            'longestSession': max(work) if work else 0,
        },
        'dailyMetrics': daily_metrics,
        'recentSessions': recent,
    }


def compute_project_analytics(tasks, now: Optional[datetime] = None) -> Dict:
    """
    Per-project breakdown.

    ``recentActivity`` holds task objects; the caller serializes them.
    """
    if now is None:
        now = timezone.now()

    tasks = list(tasks)
    completed = sum(1 for t in tasks if _is_completed(t))
    total_time = _total_time(tasks)
    recent_cutoff = now - timedelta(days=RECENT_ACTIVITY_DAYS)

    return {
        'totalTasks': len(tasks),
        'completedTasks': completed,
        'inProgressTasks': sum(1 for t in tasks if t.status == TaskStatus.IN_PROGRESS.value),
        'todoTasks': sum(1 for t in tasks if t.status == TaskStatus.TODO.value),
        'overdueTasks': count_overdue(tasks, now),
        'totalTimeSpent': total_time,
        'averageTaskTime': round_half_up(total_time / len(tasks)) if tasks else 0,
        'priorityDistribution': priority_distribution(tasks),
        'completionRate': percentage(completed, len(tasks)),
        'recentActivity': sorted(
            (t for t in tasks if t.updated_at > recent_cutoff),
            key=lambda t: t.updated_at,
            reverse=True
        )[:RECENT_ACTIVITY_LIMIT],
    }


def build_daily_review_data(tasks_today, all_tasks, now: Optional[datetime] = None) -> Dict:
    """
    Collect the facts the daily review is written from.

    Args:
        tasks_today: Tasks updated since the start of today
        all_tasks: Every task of the user
    """
    if now is None:
        now = timezone.now()

    tasks_today = list(tasks_today)
    all_tasks = list(all_tasks)
    completed_today = [t for t in tasks_today if _is_completed(t)]

    return {
        'date': utc_date_string(now),
        'tasksWorkedOn': len(tasks_today),
        'tasksCompleted': len(completed_today),
        'totalFocusTime': _total_time(tasks_today),
        'completedTasks': [
            {
                'title': t.title,
                'project': t.project.name if t.project_id else None,
                'timeSpent': t.time_spent,
            }
            for t in completed_today
        ],
        'pendingHighPriority': sum(
            1 for t in all_tasks
            if t.priority == PriorityLevel.HIGH.value and not _is_completed(t)
        ),
        'overdueCount': count_overdue(all_tasks, now),
    }
