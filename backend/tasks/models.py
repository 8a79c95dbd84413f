"""
Models for TaskFlow.

This module defines projects, the tasks that belong to them and the timer
sessions recorded while working on a task.
"""

import math

from django.conf import settings
from django.db import models
from django.core.validators import RegexValidator
from django.utils import timezone

from .scoring import PriorityLevel, TaskStatus


PRIORITY_CHOICES = [
    (PriorityLevel.LOW.value, 'Low'),
    (PriorityLevel.MEDIUM.value, 'Medium'),
    (PriorityLevel.HIGH.value, 'High'),
]

TASK_STATUS_CHOICES = [
    (TaskStatus.TODO.value, 'To Do'),
    (TaskStatus.IN_PROGRESS.value, 'In Progress'),
    (TaskStatus.COMPLETED.value, 'Completed'),
    (TaskStatus.ARCHIVED.value, 'Archived'),
]

hex_color_validator = RegexValidator(
    regex=r'^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$',
    message='Please provide a valid hex color'
)

TIME_BLOCK_TAG = 'time-block'


class Project(models.Model):
    """
    A named, coloured group of tasks owned by one user.

    Attributes:
        name: Project name (max 100 characters)
        color: Hex colour used by the calendar and dashboards
        status: active, completed or archived
        is_public / allow_comments / default_task_priority: project settings
        deadline: Optional project deadline
        completed_at: Set when the project is saved as completed
    """

    class Status(models.TextChoices):
        ACTIVE = 'active', 'Active'
        COMPLETED = 'completed', 'Completed'
        ARCHIVED = 'archived', 'Archived'

    name = models.CharField(max_length=100)
    description = models.CharField(max_length=500, blank=True, default='')
    color = models.CharField(max_length=7, validators=[hex_color_validator])
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='projects'
    )
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.ACTIVE)
    is_public = models.BooleanField(default=False)
    allow_comments = models.BooleanField(default=True)
    default_task_priority = models.CharField(
        max_length=10,
        choices=PRIORITY_CHOICES,
        default=PriorityLevel.MEDIUM.value
    )
    deadline = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    archived_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['user', 'status'], name='project_user_status_idx'),
            models.Index(fields=['user', '-created_at'], name='project_user_created_idx'),
        ]

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if self.status == self.Status.COMPLETED:
            if self.completed_at is None:
                self.completed_at = timezone.now()
        else:
            self.completed_at = None
        super().save(*args, **kwargs)


class Task(models.Model):
    """
    A unit of work inside a project.

    Time is tracked in minutes: ``estimated_time`` is the user's estimate
    and ``time_spent`` accumulates every finished timer session.
    """

    title = models.CharField(max_length=200)
    description = models.CharField(max_length=1000, blank=True, default='')
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='tasks'
    )
    project = models.ForeignKey(Project, on_delete=models.CASCADE, related_name='tasks')
    status = models.CharField(
        max_length=20,
        choices=TASK_STATUS_CHOICES,
        default=TaskStatus.TODO.value
    )
    priority = models.CharField(
        max_length=10,
        choices=PRIORITY_CHOICES,
        default=PriorityLevel.MEDIUM.value
    )
    tags = models.JSONField(default=list, blank=True)
    due_date = models.DateTimeField(null=True, blank=True)
    estimated_time = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text="Estimated time in minutes"
    )
    time_spent = models.PositiveIntegerField(default=0, help_text="Time spent in minutes")
    is_timer_running = models.BooleanField(default=False)
    timer_start_time = models.DateTimeField(null=True, blank=True)
    dependencies = models.ManyToManyField(
        'self',
        symmetrical=False,
        blank=True,
        related_name='dependents'
    )
    ai_priority_score = models.IntegerField(null=True, blank=True)
    ai_estimated_completion = models.DateTimeField(null=True, blank=True)
    ai_suggestions = models.JSONField(default=list, blank=True)
    ai_last_analyzed = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    archived_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-updated_at']
        indexes = [
            models.Index(fields=['user', 'status'], name='task_user_status_idx'),
            models.Index(fields=['user', 'project'], name='task_user_project_idx'),
            models.Index(fields=['user', 'due_date'], name='task_user_due_date_idx'),
            models.Index(fields=['user', 'priority'], name='task_user_priority_idx'),
            models.Index(fields=['user', '-created_at'], name='task_user_created_idx'),
        ]

    def __str__(self):
        return f"{self.title} ({self.status})"

    def save(self, *args, **kwargs):
        if self.status == TaskStatus.COMPLETED.value:
            if self.completed_at is None:
                self.completed_at = timezone.now()
        else:
            self.completed_at = None
        super().save(*args, **kwargs)

    @property
    def is_overdue(self) -> bool:
        return bool(
            self.due_date
            and self.due_date < timezone.now()
            and self.status != TaskStatus.COMPLETED.value
        )

    @property
    def is_time_block(self) -> bool:
        return TIME_BLOCK_TAG in (self.tags or [])

    def to_scoring_input(self) -> dict:
        """Plain dictionary consumed by the rule-based prioritizer."""
        return {
            'id': str(self.pk),
            'due_date': self.due_date,
            'priority': self.priority,
            'time_spent': self.time_spent,
            'status': self.status,
        }

    def start_timer(self, now=None):
        now = now or timezone.now()
        self.is_timer_running = True
        self.timer_start_time = now
        self.status = TaskStatus.IN_PROGRESS.value
        self.save()

    def stop_timer(self, now=None) -> 'TimerSession':
        """
        Stop the running timer and credit the elapsed whole minutes.

        Returns:
            The recorded TimerSession
        """
        now = now or timezone.now()
        elapsed = math.floor((now - self.timer_start_time).total_seconds() / 60)
        elapsed = max(elapsed, 0)

        session = TimerSession.objects.create(
            task=self,
            start_time=self.timer_start_time,
            end_time=now,
            duration=elapsed,
            type=TimerSession.Type.WORK
        )

        self.is_timer_running = False
        self.timer_start_time = None
        self.time_spent = self.time_spent + elapsed
        self.save()
        return session


class TimerSession(models.Model):
    """A finished stretch of work (or break) on a task, in minutes."""

    class Type(models.TextChoices):
        WORK = 'work', 'Work'
        BREAK = 'break', 'Break'

    task = models.ForeignKey(Task, on_delete=models.CASCADE, related_name='timer_sessions')
    start_time = models.DateTimeField()
    end_time = models.DateTimeField(null=True, blank=True)
    duration = models.PositiveIntegerField(default=0)
    type = models.CharField(max_length=10, choices=Type.choices, default=Type.WORK)

    class Meta:
        ordering = ['-start_time']

    def __str__(self):
        return f"{self.task_id}: {self.duration}m {self.type}"
