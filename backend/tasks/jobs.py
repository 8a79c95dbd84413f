"""
Scheduled maintenance jobs.

These are Celery tasks run by Celery beat (see ``CELERY_BEAT_SCHEDULE`` in
the settings). Each job logs what it did and returns the number of rows it
touched so the result backend records something useful.
"""

import logging
from datetime import timedelta

from celery import shared_task
from django.db.models import Q
from django.utils import timezone

from .models import Task
from .scoring import RuleBasedPrioritizer, TaskStatus


logger = logging.getLogger(__name__)


@shared_task
def cleanup_stuck_timers(max_hours: int = 12) -> int:
    """Stop timers that have been running for more than ``max_hours``."""
    now = timezone.now()
    stuck = Task.objects.filter(
        is_timer_running=True,
        timer_start_time__lt=now - timedelta(hours=max_hours)
    )

    stopped = 0
    for task in stuck:
        session = task.stop_timer(now)
        logger.info(
            "Stopped stuck timer on task %s after %s minutes",
            task.pk, session.duration
        )
        stopped += 1

    logger.info("Cleaned up %d stuck timers", stopped)
    return stopped


@shared_task
def refresh_priority_insights(batch_size: int = 100, max_age_days: int = 7) -> int:
    """Recompute ``ai_priority_score`` for active tasks with stale insights."""
    now = timezone.now()
    stale = Q(ai_last_analyzed__isnull=True) | Q(ai_last_analyzed__lt=now - timedelta(days=max_age_days))
    tasks = Task.objects.filter(
        stale,
        status__in=[TaskStatus.TODO.value, TaskStatus.IN_PROGRESS.value]
    ).order_by('ai_last_analyzed')[:batch_size]

    prioritizer = RuleBasedPrioritizer(jitter=False)
    refreshed = 0
    for task in tasks:
        score, _ = prioritizer.calculate_score(task.to_scoring_input(), now)
        Task.objects.filter(pk=task.pk).update(
            ai_priority_score=score,
            ai_last_analyzed=now
        )
        refreshed += 1

    logger.info("Refreshed priority insights for %d tasks", refreshed)
    return refreshed


@shared_task
def archive_completed_tasks(older_than_days: int = 90) -> int:
    """Archive tasks completed more than ``older_than_days`` ago."""
    now = timezone.now()
    archived = Task.objects.filter(
        status=TaskStatus.COMPLETED.value,
        completed_at__lt=now - timedelta(days=older_than_days)
    ).update(
        status=TaskStatus.ARCHIVED.value,
        archived_at=now,
        updated_at=now
    )

    logger.info("Archived %d old completed tasks", archived)
    return archived
