"""
Serializers for TaskFlow.

This module provides serialization/deserialization for projects, tasks and
timer sessions, validation of query parameters and request bodies, and
validation of the JSON documents returned by the AI assistant.

All payloads use camelCase keys on the wire.
"""

from rest_framework import serializers
from django.utils import timezone

from .models import (
    PRIORITY_CHOICES,
    TASK_STATUS_CHOICES,
    Project,
    Task,
    TimerSession,
)
from .scoring import TaskStatus


HEX_COLOR_REGEX = r'^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$'

# camelCase sort keys accepted by the task list, mapped to model fields
TASK_SORT_FIELDS = {
    'updatedAt': 'updated_at',
    'createdAt': 'created_at',
    'dueDate': 'due_date',
    'priority': 'priority',
    'status': 'status',
    'title': 'title',
    'timeSpent': 'time_spent',
}


# ==================== Projects ====================

class ProjectSummarySerializer(serializers.ModelSerializer):
    """Compact project representation embedded in tasks."""

    class Meta:
        model = Project
        fields = ['id', 'name', 'color']


class ProjectSerializer(serializers.ModelSerializer):
    """
    Serializer for creating, updating and listing projects.

    ``taskCount`` and ``completedTaskCount`` come from queryset annotations
    when present and are counted on the fly otherwise.
    """

    name = serializers.CharField(max_length=100)
    description = serializers.CharField(max_length=500, required=False, allow_blank=True)
    color = serializers.RegexField(
        HEX_COLOR_REGEX,
        error_messages={'invalid': 'Please provide a valid hex color'}
    )
    isPublic = serializers.BooleanField(source='is_public', required=False)
    allowComments = serializers.BooleanField(source='allow_comments', required=False)
    defaultTaskPriority = serializers.ChoiceField(
        source='default_task_priority',
        choices=PRIORITY_CHOICES,
        required=False
    )
    deadline = serializers.DateTimeField(required=False, allow_null=True)
    completedAt = serializers.DateTimeField(source='completed_at', read_only=True)
    archivedAt = serializers.DateTimeField(source='archived_at', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)
    taskCount = serializers.SerializerMethodField()
    completedTaskCount = serializers.SerializerMethodField()

    class Meta:
        model = Project
        fields = [
            'id', 'name', 'description', 'color', 'status',
            'isPublic', 'allowComments', 'defaultTaskPriority', 'deadline',
            'completedAt', 'archivedAt', 'createdAt', 'updatedAt',
            'taskCount', 'completedTaskCount',
        ]

    def validate_name(self, value):
        """Ensure name is not just whitespace."""
        if not value.strip():
            raise serializers.ValidationError("Project name is required")
        return value.strip()

    def get_taskCount(self, obj) -> int:
        count = getattr(obj, 'task_count', None)
        return count if count is not None else obj.tasks.count()

    def get_completedTaskCount(self, obj) -> int:
        count = getattr(obj, 'completed_task_count', None)
        if count is not None:
            return count
        return obj.tasks.filter(status=TaskStatus.COMPLETED.value).count()


# ==================== Tasks ====================

class TimerSessionSerializer(serializers.ModelSerializer):
    startTime = serializers.DateTimeField(source='start_time')
    endTime = serializers.DateTimeField(source='end_time')

    class Meta:
        model = TimerSession
        fields = ['id', 'startTime', 'endTime', 'duration', 'type']


class TaskSerializer(serializers.ModelSerializer):
    """
    Serializer for task input and output.

    On create ``projectId`` is required and the status cannot be
    ``archived``; on update every field is optional.
    """

    title = serializers.CharField(max_length=200)
    description = serializers.CharField(max_length=1000, required=False, allow_blank=True)
    projectId = serializers.PrimaryKeyRelatedField(
        source='project',
        queryset=Project.objects.all()
    )
    project = ProjectSummarySerializer(read_only=True)
    status = serializers.ChoiceField(choices=TASK_STATUS_CHOICES, required=False)
    priority = serializers.ChoiceField(choices=PRIORITY_CHOICES, required=False)
    tags = serializers.ListField(
        child=serializers.CharField(max_length=30),
        required=False
    )
    dueDate = serializers.DateTimeField(source='due_date', required=False, allow_null=True)
    estimatedTime = serializers.IntegerField(
        source='estimated_time',
        min_value=0,
        required=False,
        allow_null=True
    )
    timeSpent = serializers.IntegerField(source='time_spent', min_value=0, required=False)
    isTimerRunning = serializers.BooleanField(source='is_timer_running', read_only=True)
    timerStartTime = serializers.DateTimeField(source='timer_start_time', read_only=True)
    isOverdue = serializers.BooleanField(source='is_overdue', read_only=True)
    aiInsights = serializers.SerializerMethodField()
    completedAt = serializers.DateTimeField(source='completed_at', read_only=True)
    archivedAt = serializers.DateTimeField(source='archived_at', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Task
        fields = [
            'id', 'title', 'description', 'projectId', 'project', 'status',
            'priority', 'tags', 'dueDate', 'estimatedTime', 'timeSpent',
            'isTimerRunning', 'timerStartTime', 'isOverdue', 'aiInsights',
            'completedAt', 'archivedAt', 'createdAt', 'updatedAt',
        ]

    def validate_title(self, value):
        """Ensure title is not empty or just whitespace."""
        if not value or not value.strip():
            raise serializers.ValidationError("Title is required and must be less than 200 characters")
        return value.strip()

    def validate_dueDate(self, value):
        if value is not None and value <= timezone.now():
            raise serializers.ValidationError("Due date must be in the future")
        return value

    def validate(self, attrs):
        creating = self.instance is None and not self.context.get('bulk')
        if creating and attrs.get('status') == TaskStatus.ARCHIVED.value:
            raise serializers.ValidationError({'status': 'New tasks cannot be archived'})
        return attrs

    def get_aiInsights(self, obj) -> dict:
        return {
            'priorityScore': obj.ai_priority_score,
            'estimatedCompletion': obj.ai_estimated_completion,
            'suggestions': obj.ai_suggestions or [],
            'lastAnalyzed': obj.ai_last_analyzed,
        }


class TaskListQuerySerializer(serializers.Serializer):
    """Validates the filtering, sorting and pagination parameters of the task list."""

    status = serializers.ChoiceField(choices=TASK_STATUS_CHOICES, required=False)
    priority = serializers.ChoiceField(choices=PRIORITY_CHOICES, required=False)
    projectId = serializers.IntegerField(min_value=1, required=False)
    search = serializers.CharField(required=False, allow_blank=True)
    sortBy = serializers.ChoiceField(choices=list(TASK_SORT_FIELDS), default='updatedAt')
    sortOrder = serializers.ChoiceField(choices=['asc', 'desc'], default='desc')
    page = serializers.IntegerField(min_value=1, default=1)
    limit = serializers.IntegerField(min_value=1, max_value=100, default=50)


class BulkTaskSerializer(serializers.Serializer):
    """
    Serializer for bulk task operations.
    """

    action = serializers.ChoiceField(
        choices=['delete', 'update', 'archive'],
        error_messages={'invalid_choice': 'Invalid bulk action'}
    )
    taskIds = serializers.ListField(
        child=serializers.IntegerField(),
        min_length=1,
        error_messages={'min_length': 'Task IDs array is required'}
    )
    updates = serializers.DictField(required=False, default=dict)

    def validate(self, attrs):
        if attrs['action'] == 'update':
            if not attrs['updates']:
                raise serializers.ValidationError({'updates': 'Updates are required for bulk update'})
            updates = TaskSerializer(
                data=attrs['updates'],
                partial=True,
                context={**self.context, 'bulk': True}
            )
            if not updates.is_valid():
                raise serializers.ValidationError({'updates': updates.errors})
            attrs['updates'] = updates.validated_data
        return attrs


# ==================== Analytics & calendar ====================

class AnalyticsQuerySerializer(serializers.Serializer):
    period = serializers.IntegerField(min_value=1, max_value=365, default=30)


class FocusSessionsQuerySerializer(serializers.Serializer):
    period = serializers.IntegerField(min_value=1, max_value=365, default=7)


class CalendarEventsQuerySerializer(serializers.Serializer):
    start = serializers.DateTimeField()
    end = serializers.DateTimeField()

    def validate(self, attrs):
        if attrs['end'] < attrs['start']:
            raise serializers.ValidationError({'end': 'End must not be before start'})
        return attrs


class TimeBlockSerializer(serializers.Serializer):
    """Input for creating a time block, optionally tied to an existing task."""

    taskId = serializers.IntegerField(required=False, allow_null=True)
    projectId = serializers.IntegerField(required=False, allow_null=True)
    title = serializers.CharField(max_length=200, required=False, allow_blank=True)
    startTime = serializers.DateTimeField()
    endTime = serializers.DateTimeField()

    def validate(self, attrs):
        if attrs['endTime'] <= attrs['startTime']:
            raise serializers.ValidationError({'endTime': 'End time must be after start time'})
        if not attrs.get('taskId') and not attrs.get('projectId'):
            raise serializers.ValidationError({'projectId': 'A project is required when no task is given'})
        return attrs


class TimeBlockUpdateSerializer(serializers.Serializer):
    startTime = serializers.DateTimeField()
    endTime = serializers.DateTimeField()

    def validate(self, attrs):
        if attrs['endTime'] <= attrs['startTime']:
            raise serializers.ValidationError({'endTime': 'End time must be after start time'})
        return attrs


class AvailableSlotsQuerySerializer(serializers.Serializer):
    date = serializers.DateField()
    duration = serializers.IntegerField(min_value=1, max_value=480, default=60)


# ==================== AI assistant ====================

class SuggestTasksRequestSerializer(serializers.Serializer):
    projectId = serializers.IntegerField()
    context = serializers.CharField(required=False, allow_blank=True, default='')


class AISuggestionSerializer(serializers.Serializer):
    """One prioritization suggestion as returned by the AI model."""

    taskId = serializers.CharField()
    suggestedPriority = serializers.ChoiceField(choices=['low', 'medium', 'high'])
    reason = serializers.CharField(allow_blank=True)
    confidence = serializers.FloatField(min_value=0, max_value=100)


class AIPrioritizationResponseSerializer(serializers.Serializer):
    suggestions = AISuggestionSerializer(many=True)
    insights = serializers.ListField(child=serializers.CharField(allow_blank=True))
    recommendations = serializers.ListField(
        child=serializers.CharField(allow_blank=True),
        required=False,
        default=list
    )


class AIDailyReviewResponseSerializer(serializers.Serializer):
    summary = serializers.CharField()
    achievements = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    recommendations = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    tomorrowFocus = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    motivationalNote = serializers.CharField(
        required=False,
        allow_blank=True,
        default='Keep up the great work!'
    )


class AITaskSuggestionSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=200)
    description = serializers.CharField(required=False, allow_blank=True, default='')
    priority = serializers.ChoiceField(choices=['low', 'medium', 'high'], default='medium')
    estimatedTime = serializers.IntegerField(min_value=0, required=False, allow_null=True)


class AITaskSuggestionsResponseSerializer(serializers.Serializer):
    suggestions = AITaskSuggestionSerializer(many=True)
