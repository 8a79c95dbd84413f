"""
API Views for TaskFlow.

This module provides the REST API endpoints for tasks, timers, projects,
the AI assistant, productivity analytics and the calendar. Every endpoint
requires a bearer token (see ``tasks.authentication``) and only ever
touches the authenticated user's own rows: another user's task or project
is reported as not found.
"""

import logging
import math
from datetime import timedelta

from django.db.models import Count, Q
from django.utils import timezone
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import extend_schema
from rest_framework import exceptions, status
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import UserRateThrottle

from .analytics import (
    build_daily_review_data,
    compute_analytics,
    compute_focus_analytics,
    compute_project_analytics,
)
from .assistant import AIAssistant, AIGatewayError
from .exceptions import ErrorCode, error_response
from .models import TIME_BLOCK_TAG, Project, Task, TimerSession
from .scheduling import find_available_slots, minutes_between, task_to_event, workday_bounds
from .scoring import PriorityLevel, TaskStatus
from .serializers import (
    TASK_SORT_FIELDS,
    AnalyticsQuerySerializer,
    AvailableSlotsQuerySerializer,
    BulkTaskSerializer,
    CalendarEventsQuerySerializer,
    FocusSessionsQuerySerializer,
    ProjectSerializer,
    SuggestTasksRequestSerializer,
    TaskListQuerySerializer,
    TaskSerializer,
    TimeBlockSerializer,
    TimeBlockUpdateSerializer,
)


logger = logging.getLogger(__name__)


# ============================================
# RATE LIMITING CLASSES
# ============================================

class ApiRateThrottle(UserRateThrottle):
    """General API rate limit (``API_RATE_LIMIT``, 400 requests per hour by default)."""
    scope = 'api'


class AIRateThrottle(UserRateThrottle):
    """Rate limit for AI endpoints (``AI_RATE_LIMIT``, 30 requests per minute by default)."""
    scope = 'ai'


# ============================================
# OWNERSHIP HELPERS
# ============================================

def get_user_task(request: Request, pk) -> Task:
    try:
        return Task.objects.select_related('project').get(pk=pk, user=request.user)
    except Task.DoesNotExist:
        raise exceptions.NotFound('Task not found')


def get_user_project(request: Request, pk) -> Project:
    try:
        return Project.objects.get(pk=pk, user=request.user)
    except Project.DoesNotExist:
        raise exceptions.NotFound('Project not found')


def ensure_project_owner(request: Request, project: Project) -> None:
    if project.user_id != request.user.pk:
        raise exceptions.NotFound('Project not found')


def get_user_time_block(request: Request, pk) -> Task:
    try:
        block = Task.objects.select_related('project').get(pk=pk, user=request.user)
    except Task.DoesNotExist:
        raise exceptions.NotFound('Time block not found')
    if not block.is_time_block:
        raise exceptions.NotFound('Time block not found')
    return block


# ============================================
# TASKS
# ============================================

@extend_schema(
    methods=['GET'],
    summary="List tasks",
    description="List the user's tasks with filtering, search, sorting and pagination.",
    parameters=[TaskListQuerySerializer],
    responses={200: OpenApiTypes.OBJECT},
    tags=['Tasks']
)
@extend_schema(
    methods=['POST'],
    summary="Create a task",
    request=TaskSerializer,
    responses={201: OpenApiTypes.OBJECT},
    tags=['Tasks']
)
@api_view(['GET', 'POST'])
@throttle_classes([ApiRateThrottle])
def task_list(request: Request) -> Response:
    """
    GET  /api/tasks/?status=&priority=&projectId=&search=&sortBy=&sortOrder=&page=&limit=
    POST /api/tasks/
    """
    if request.method == 'POST':
        return create_task(request)

    query = TaskListQuerySerializer(data=request.query_params)
    query.is_valid(raise_exception=True)
    params = query.validated_data

    tasks = Task.objects.filter(user=request.user).select_related('project')
    if params.get('status'):
        tasks = tasks.filter(status=params['status'])
    if params.get('priority'):
        tasks = tasks.filter(priority=params['priority'])
    if params.get('projectId'):
        tasks = tasks.filter(project_id=params['projectId'])
    if params.get('search'):
        tasks = tasks.filter(
            Q(title__icontains=params['search']) | Q(description__icontains=params['search'])
        )

    order = TASK_SORT_FIELDS[params['sortBy']]
    if params['sortOrder'] == 'desc':
        order = f"-{order}"
    tasks = tasks.order_by(order, '-pk')

    page, limit = params['page'], params['limit']
    total = tasks.count()
    offset = (page - 1) * limit

    return Response({
        'tasks': TaskSerializer(tasks[offset:offset + limit], many=True).data,
        'pagination': {
            'current': page,
            'pages': math.ceil(total / limit),
            'total': total,
            'limit': limit,
        }
    })


def create_task(request: Request) -> Response:
    serializer = TaskSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    ensure_project_owner(request, serializer.validated_data['project'])

    task = serializer.save(user=request.user)
    logger.info("User %s created task %s", request.user.pk, task.pk)

    return Response(
        {
            'message': 'Task created successfully',
            'task': TaskSerializer(task).data,
        },
        status=status.HTTP_201_CREATED
    )


@extend_schema(
    methods=['GET'],
    summary="Get a task",
    responses={200: OpenApiTypes.OBJECT},
    tags=['Tasks']
)
@extend_schema(
    methods=['PUT'],
    summary="Update a task",
    description="Partial update: only the given fields change.",
    request=TaskSerializer,
    responses={200: OpenApiTypes.OBJECT},
    tags=['Tasks']
)
@extend_schema(
    methods=['DELETE'],
    summary="Delete a task",
    responses={200: OpenApiTypes.OBJECT},
    tags=['Tasks']
)
@api_view(['GET', 'PUT', 'DELETE'])
@throttle_classes([ApiRateThrottle])
def task_detail(request: Request, pk: int) -> Response:
    """
    GET    /api/tasks/{id}/
    PUT    /api/tasks/{id}/
    DELETE /api/tasks/{id}/
    """
    task = get_user_task(request, pk)

    if request.method == 'DELETE':
        task.delete()
        return Response({'message': 'Task deleted successfully'})

    if request.method == 'PUT':
        serializer = TaskSerializer(task, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        if 'project' in serializer.validated_data:
            ensure_project_owner(request, serializer.validated_data['project'])
        task = serializer.save()
        return Response({
            'message': 'Task updated successfully',
            'task': TaskSerializer(task).data,
        })

    return Response({'task': TaskSerializer(task).data})


@extend_schema(
    summary="Start the task timer",
    description="Stops (and credits) any other running timer of the user, then starts this one.",
    request=None,
    responses={200: OpenApiTypes.OBJECT},
    tags=['Timer']
)
@api_view(['POST'])
@throttle_classes([ApiRateThrottle])
def start_timer(request: Request, pk: int) -> Response:
    """
    POST /api/tasks/{id}/timer/start/
    """
    task = get_user_task(request, pk)
    now = timezone.now()

    for running in Task.objects.filter(user=request.user, is_timer_running=True):
        running.stop_timer(now)
    if task.is_timer_running:
        task.refresh_from_db()

    task.start_timer(now)
    return Response({
        'message': 'Timer started successfully',
        'task': TaskSerializer(task).data,
    })


@extend_schema(
    summary="Stop the task timer",
    description="Records the elapsed whole minutes as a work session.",
    request=None,
    responses={200: OpenApiTypes.OBJECT},
    tags=['Timer']
)
@api_view(['POST'])
@throttle_classes([ApiRateThrottle])
def stop_timer(request: Request, pk: int) -> Response:
    """
    POST /api/tasks/{id}/timer/stop/
    """
    try:
        task = Task.objects.select_related('project').get(
            pk=pk, user=request.user, is_timer_running=True
        )
    except Task.DoesNotExist:
        raise exceptions.NotFound('Task not found or timer not running')

    session = task.stop_timer()
    return Response({
        'message': 'Timer stopped successfully',
        'task': TaskSerializer(task).data,
        'sessionDuration': session.duration,
    })


@extend_schema(
    summary="Bulk task operation",
    description="Delete, update or archive several tasks at once.",
    request=BulkTaskSerializer,
    responses={200: OpenApiTypes.OBJECT},
    tags=['Tasks']
)
@api_view(['POST'])
@throttle_classes([ApiRateThrottle])
def bulk_tasks(request: Request) -> Response:
    """
    POST /api/tasks/bulk/

    Request Body:
    {
        "action": "delete" | "update" | "archive",
        "taskIds": [1, 2, 3],
        "updates": {"priority": "high"}     // Required for "update"
    }
    """
    serializer = BulkTaskSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    action = serializer.validated_data['action']
    task_ids = serializer.validated_data['taskIds']

    tasks = Task.objects.filter(user=request.user, pk__in=task_ids)
    now = timezone.now()

    if action == 'delete':
        modified = tasks.count()
        tasks.delete()
    elif action == 'archive':
        modified = tasks.update(
            status=TaskStatus.ARCHIVED.value,
            archived_at=now,
            updated_at=now
        )
    else:
        updates = dict(serializer.validated_data['updates'])
        if 'project' in updates:
            ensure_project_owner(request, updates['project'])
        if updates.get('status') == TaskStatus.ARCHIVED.value:
            updates['archived_at'] = now
        elif 'status' in updates:
            updates['completed_at'] = now if updates['status'] == TaskStatus.COMPLETED.value else None
        modified = tasks.update(updated_at=now, **updates)

    logger.info("User %s bulk %s on %d tasks", request.user.pk, action, modified)
    return Response({
        'message': f"Bulk {action} completed successfully",
        'modifiedCount': modified,
    })


# ============================================
# PROJECTS
# ============================================

def _projects_with_counts(request: Request):
    return Project.objects.filter(user=request.user).annotate(
        task_count=Count('tasks'),
        completed_task_count=Count('tasks', filter=Q(tasks__status=TaskStatus.COMPLETED.value))
    )


@extend_schema(
    methods=['GET'],
    summary="List projects",
    description="Non-archived projects, newest first, with task counts.",
    responses={200: OpenApiTypes.OBJECT},
    tags=['Projects']
)
@extend_schema(
    methods=['POST'],
    summary="Create a project",
    request=ProjectSerializer,
    responses={201: OpenApiTypes.OBJECT},
    tags=['Projects']
)
@api_view(['GET', 'POST'])
@throttle_classes([ApiRateThrottle])
def project_list(request: Request) -> Response:
    """
    GET  /api/projects/
    POST /api/projects/
    """
    if request.method == 'POST':
        serializer = ProjectSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        project = serializer.save(user=request.user)
        return Response(
            {
                'message': 'Project created successfully',
                'project': ProjectSerializer(project).data,
            },
            status=status.HTTP_201_CREATED
        )

    projects = _projects_with_counts(request).exclude(
        status=Project.Status.ARCHIVED
    ).order_by('-created_at')
    return Response({'projects': ProjectSerializer(projects, many=True).data})


@extend_schema(
    methods=['GET'],
    summary="Get a project with its tasks",
    responses={200: OpenApiTypes.OBJECT},
    tags=['Projects']
)
@extend_schema(
    methods=['PUT'],
    summary="Update a project",
    request=ProjectSerializer,
    responses={200: OpenApiTypes.OBJECT},
    tags=['Projects']
)
@extend_schema(
    methods=['DELETE'],
    summary="Delete a project",
    description="Refused while the project still has tasks.",
    responses={200: OpenApiTypes.OBJECT, 400: OpenApiTypes.OBJECT},
    tags=['Projects']
)
@api_view(['GET', 'PUT', 'DELETE'])
@throttle_classes([ApiRateThrottle])
def project_detail(request: Request, pk: int) -> Response:
    """
    GET    /api/projects/{id}/
    PUT    /api/projects/{id}/
    DELETE /api/projects/{id}/
    """
    try:
        project = _projects_with_counts(request).get(pk=pk)
    except Project.DoesNotExist:
        raise exceptions.NotFound('Project not found')

    if request.method == 'DELETE':
        task_count = project.tasks.count()
        if task_count > 0:
            return error_response(
                ErrorCode.ERR_PROJECT_HAS_TASKS,
                'Cannot delete project with existing tasks. Please move or delete tasks first.',
                status.HTTP_400_BAD_REQUEST,
                taskCount=task_count
            )
        project.delete()
        return Response({'message': 'Project deleted successfully'})

    if request.method == 'PUT':
        serializer = ProjectSerializer(project, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        project = serializer.save()
        return Response({
            'message': 'Project updated successfully',
            'project': ProjectSerializer(project).data,
        })

    tasks = project.tasks.filter(user=request.user).select_related('project').order_by('-created_at')
    return Response({
        'project': ProjectSerializer(project).data,
        'tasks': TaskSerializer(tasks, many=True).data,
    })


@extend_schema(
    summary="Project analytics",
    description="Status totals, time spent, priority distribution and recent activity of one project.",
    responses={200: OpenApiTypes.OBJECT},
    tags=['Projects']
)
@api_view(['GET'])
@throttle_classes([ApiRateThrottle])
def project_analytics(request: Request, pk: int) -> Response:
    """
    GET /api/projects/{id}/analytics/
    """
    project = get_user_project(request, pk)
    tasks = project.tasks.filter(user=request.user).select_related('project')

    analytics = compute_project_analytics(tasks)
    analytics['recentActivity'] = TaskSerializer(analytics['recentActivity'], many=True).data
    return Response({'analytics': analytics})


# ============================================
# AI ASSISTANT
# ============================================

@extend_schema(
    summary="AI task prioritization",
    description="""
    Suggest a priority for every task that is not completed.

    The AI model is asked once; if it is unavailable or answers with
    anything but the expected JSON document, the rule-based prioritizer
    produces the suggestions instead.
    """,
    request=None,
    responses={200: OpenApiTypes.OBJECT},
    tags=['AI']
)
@api_view(['POST'])
@throttle_classes([AIRateThrottle])
def ai_prioritize(request: Request) -> Response:
    """
    POST /api/ai/prioritize/

    Response:
    {
        "suggestions": [{"taskId", "suggestedPriority", "reason", "confidence"}],
        "insights": [...],
        "recommendations": [...]
    }
    """
    tasks = Task.objects.filter(user=request.user).exclude(
        status=TaskStatus.COMPLETED.value
    ).select_related('project')

    assistant = AIAssistant.from_settings()
    return Response(assistant.prioritize(tasks))


@extend_schema(
    summary="AI daily review",
    description="Review of today's work; falls back to a rule-based review when the AI is unavailable.",
    request=None,
    responses={200: OpenApiTypes.OBJECT},
    tags=['AI']
)
@api_view(['POST'])
@throttle_classes([AIRateThrottle])
def ai_daily_review(request: Request) -> Response:
    """
    POST /api/ai/daily-review/
    """
    now = timezone.now()
    start_of_day = timezone.localtime(now).replace(hour=0, minute=0, second=0, microsecond=0)

    all_tasks = Task.objects.filter(user=request.user).select_related('project')
    tasks_today = all_tasks.filter(updated_at__gte=start_of_day)

    review_data = build_daily_review_data(tasks_today, all_tasks, now)
    assistant = AIAssistant.from_settings()
    return Response(assistant.daily_review(review_data))


@extend_schema(
    summary="AI task suggestions",
    description="Ask the AI model for five new tasks for a project. There is no offline fallback.",
    request=SuggestTasksRequestSerializer,
    responses={200: OpenApiTypes.OBJECT, 503: OpenApiTypes.OBJECT},
    tags=['AI']
)
@api_view(['POST'])
@throttle_classes([AIRateThrottle])
def ai_suggest_tasks(request: Request) -> Response:
    """
    POST /api/ai/suggest-tasks/

    Request Body:
    {
        "projectId": 1,
        "context": "Launch preparation"      // Optional
    }
    """
    serializer = SuggestTasksRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    project = get_user_project(request, serializer.validated_data['projectId'])
    existing_titles = list(
        project.tasks.filter(user=request.user).values_list('title', flat=True)
    )

    assistant = AIAssistant.from_settings()
    try:
        suggestions = assistant.suggest_tasks(
            project,
            existing_titles,
            serializer.validated_data['context']
        )
    except AIGatewayError as exc:
        logger.warning("AI task suggestions unavailable for project %s: %s", project.pk, exc)
        return error_response(
            ErrorCode.ERR_AI_UNAVAILABLE,
            'AI task suggestions are currently unavailable',
            status.HTTP_503_SERVICE_UNAVAILABLE
        )

    return Response(suggestions)


# ============================================
# ANALYTICS
# ============================================

@extend_schema(
    summary="Productivity analytics",
    parameters=[AnalyticsQuerySerializer],
    responses={200: OpenApiTypes.OBJECT},
    tags=['Analytics']
)
@api_view(['GET'])
@throttle_classes([ApiRateThrottle])
def analytics_overview(request: Request) -> Response:
    """
    GET /api/analytics/?period=30
    """
    query = AnalyticsQuerySerializer(data=request.query_params)
    query.is_valid(raise_exception=True)

    tasks = Task.objects.filter(user=request.user).select_related('project')
    projects = Project.objects.filter(user=request.user)

    analytics = compute_analytics(tasks, projects, query.validated_data['period'])
    return Response({'analytics': analytics})


@extend_schema(
    summary="Focus session analytics",
    parameters=[FocusSessionsQuerySerializer],
    responses={200: OpenApiTypes.OBJECT},
    tags=['Analytics']
)
@api_view(['GET'])
@throttle_classes([ApiRateThrottle])
def focus_sessions(request: Request) -> Response:
    """
    GET /api/analytics/focus-sessions/?period=7
    """
    query = FocusSessionsQuerySerializer(data=request.query_params)
    query.is_valid(raise_exception=True)
    period_days = query.validated_data['period']

    start_date = timezone.now() - timedelta(days=period_days)
    sessions = TimerSession.objects.filter(
        task__user=request.user,
        start_time__gte=start_date
    ).select_related('task__project')

    session_data = [
        {
            'taskId': session.task_id,
            'taskTitle': session.task.title,
            'projectName': session.task.project.name,
            'projectColor': session.task.project.color,
            'startTime': session.start_time,
            'endTime': session.end_time,
            'duration': session.duration,
            'type': session.type,
        }
        for session in sessions
    ]

    return Response({'focusAnalytics': compute_focus_analytics(session_data, period_days)})


# ============================================
# CALENDAR
# ============================================

@extend_schema(
    summary="Calendar events",
    description="Tasks due between start and end, as all-day events coloured by project.",
    parameters=[CalendarEventsQuerySerializer],
    responses={200: OpenApiTypes.OBJECT},
    tags=['Calendar']
)
@api_view(['GET'])
@throttle_classes([ApiRateThrottle])
def calendar_events(request: Request) -> Response:
    """
    GET /api/calendar/events/?start=&end=
    """
    query = CalendarEventsQuerySerializer(data=request.query_params)
    query.is_valid(raise_exception=True)

    tasks = Task.objects.filter(
        user=request.user,
        due_date__gte=query.validated_data['start'],
        due_date__lte=query.validated_data['end']
    ).select_related('project').order_by('due_date')

    return Response({'events': [task_to_event(task) for task in tasks]})


@extend_schema(
    summary="Create a time block",
    description="Time blocks are stored as tasks tagged 'time-block'.",
    request=TimeBlockSerializer,
    responses={201: OpenApiTypes.OBJECT},
    tags=['Calendar']
)
@api_view(['POST'])
@throttle_classes([ApiRateThrottle])
def create_time_block(request: Request) -> Response:
    """
    POST /api/calendar/time-blocks/

    Request Body:
    {
        "taskId": 1,                         // Optional: block time for this task
        "projectId": 2,                      // Required without taskId
        "title": "Deep work",                // Optional
        "startTime": "2024-01-15T09:00:00Z",
        "endTime": "2024-01-15T10:30:00Z"
    }
    """
    serializer = TimeBlockSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    task = get_user_task(request, data['taskId']) if data.get('taskId') else None
    if task is not None:
        project = task.project
        title = data.get('title') or f"Work on: {task.title}"
        description = f"Scheduled work time for: {task.description}"
        priority = task.priority
    else:
        project = get_user_project(request, data['projectId'])
        title = data.get('title') or 'Time Block'
        description = 'Scheduled time block'
        priority = PriorityLevel.MEDIUM.value

    block = Task.objects.create(
        title=title[:200],
        description=description[:1000],
        user=request.user,
        project=project,
        status=TaskStatus.TODO.value,
        priority=priority,
        due_date=data['startTime'],
        estimated_time=minutes_between(data['startTime'], data['endTime']),
        tags=[TIME_BLOCK_TAG],
    )

    return Response(
        {
            'message': 'Time block created successfully',
            'timeBlock': TaskSerializer(block).data,
        },
        status=status.HTTP_201_CREATED
    )


@extend_schema(
    methods=['PUT'],
    summary="Reschedule a time block",
    request=TimeBlockUpdateSerializer,
    responses={200: OpenApiTypes.OBJECT},
    tags=['Calendar']
)
@extend_schema(
    methods=['DELETE'],
    summary="Delete a time block",
    responses={200: OpenApiTypes.OBJECT},
    tags=['Calendar']
)
@api_view(['PUT', 'DELETE'])
@throttle_classes([ApiRateThrottle])
def time_block_detail(request: Request, pk: int) -> Response:
    """
    PUT    /api/calendar/time-blocks/{id}/
    DELETE /api/calendar/time-blocks/{id}/
    """
    block = get_user_time_block(request, pk)

    if request.method == 'DELETE':
        block.delete()
        return Response({'message': 'Time block deleted successfully'})

    serializer = TimeBlockUpdateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    start = serializer.validated_data['startTime']
    end = serializer.validated_data['endTime']

    block.due_date = start
    block.estimated_time = minutes_between(start, end)
    block.save()

    return Response({
        'message': 'Time block updated successfully',
        'timeBlock': TaskSerializer(block).data,
    })


@extend_schema(
    summary="Available time slots",
    description="Free slots of the given length between 09:00 and 17:00, on a 30 minute grid.",
    parameters=[AvailableSlotsQuerySerializer],
    responses={200: OpenApiTypes.OBJECT},
    tags=['Calendar']
)
@api_view(['GET'])
@throttle_classes([ApiRateThrottle])
def available_slots(request: Request) -> Response:
    """
    GET /api/calendar/available-slots/?date=2024-01-15&duration=60
    """
    query = AvailableSlotsQuerySerializer(data=request.query_params)
    query.is_valid(raise_exception=True)
    day = query.validated_data['date']

    day_start, day_end = workday_bounds(day)
    existing = Task.objects.filter(
        user=request.user,
        due_date__gte=day_start,
        due_date__lte=day_end
    )

    slots = find_available_slots(day, query.validated_data['duration'], existing)
    return Response({'availableSlots': slots})


# ============================================
# INFO
# ============================================

@extend_schema(
    summary="API information",
    description="Get API information and available endpoints.",
    responses={200: OpenApiTypes.OBJECT},
    tags=['Info']
)
@api_view(['GET'])
@permission_classes([AllowAny])
def api_info(request: Request) -> Response:
    """
    Return API information and available endpoints.

    GET /api/
    """
    return Response({
        'name': 'TaskFlow API',
        'version': '1.0.0',
        'documentation': '/api/docs/',
        'endpoints': {
            'GET|POST /api/tasks/': 'List or create tasks',
            'GET|PUT|DELETE /api/tasks/{id}/': 'Read, update or delete a task',
            'POST /api/tasks/{id}/timer/start/': 'Start the task timer',
            'POST /api/tasks/{id}/timer/stop/': 'Stop the task timer',
            'POST /api/tasks/bulk/': 'Bulk delete, update or archive',
            'GET|POST /api/projects/': 'List or create projects',
            'GET|PUT|DELETE /api/projects/{id}/': 'Read, update or delete a project',
            'GET /api/projects/{id}/analytics/': 'Project analytics',
            'POST /api/ai/prioritize/': 'AI task prioritization with rule-based fallback',
            'POST /api/ai/daily-review/': 'AI daily review with rule-based fallback',
            'POST /api/ai/suggest-tasks/': 'AI task suggestions for a project',
            'GET /api/analytics/': 'Productivity analytics',
            'GET /api/analytics/focus-sessions/': 'Focus session analytics',
            'GET /api/calendar/events/': 'Tasks as calendar events',
            'POST /api/calendar/time-blocks/': 'Create a time block',
            'PUT|DELETE /api/calendar/time-blocks/{id}/': 'Reschedule or delete a time block',
            'GET /api/calendar/available-slots/': 'Free slots in the working day',
            'GET /api/docs/': 'Interactive API documentation',
            'GET /api/schema/': 'OpenAPI schema',
        },
        'error_codes': {
            code.value: code.name for code in ErrorCode
        }
    })
