"""
URL configuration for the tasks app.
"""

from django.urls import path
from . import views

urlpatterns = [
    path('', views.api_info, name='api-info'),
    # Tasks
    path('tasks/', views.task_list, name='task-list'),
    path('tasks/bulk/', views.bulk_tasks, name='task-bulk'),
    path('tasks/<int:pk>/', views.task_detail, name='task-detail'),
    path('tasks/<int:pk>/timer/start/', views.start_timer, name='task-timer-start'),
    path('tasks/<int:pk>/timer/stop/', views.stop_timer, name='task-timer-stop'),
    # Projects
    path('projects/', views.project_list, name='project-list'),
    path('projects/<int:pk>/', views.project_detail, name='project-detail'),
    path('projects/<int:pk>/analytics/', views.project_analytics, name='project-analytics'),
    # AI assistant
    path('ai/prioritize/', views.ai_prioritize, name='ai-prioritize'),
    path('ai/daily-review/', views.ai_daily_review, name='ai-daily-review'),
    path('ai/suggest-tasks/', views.ai_suggest_tasks, name='ai-suggest-tasks'),
    # Analytics
    path('analytics/', views.analytics_overview, name='analytics'),
    path('analytics/focus-sessions/', views.focus_sessions, name='analytics-focus-sessions'),
    # Calendar
    path('calendar/events/', views.calendar_events, name='calendar-events'),
    path('calendar/time-blocks/', views.create_time_block, name='calendar-time-blocks'),
    path('calendar/time-blocks/<int:pk>/', views.time_block_detail, name='calendar-time-block-detail'),
    path('calendar/available-slots/', views.available_slots, name='calendar-available-slots'),
]
