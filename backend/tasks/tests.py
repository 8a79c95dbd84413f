"""
Unit Tests for TaskFlow.

This module contains tests for the rule-based prioritizer, the AI
assistant and its fallbacks, analytics, calendar scheduling, maintenance
jobs, authentication and the REST API endpoints.
"""

from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.test import TestCase, override_settings
from django.utils import timezone as dj_timezone
from rest_framework.test import APITestCase
from rest_framework import status
from datetime import date, datetime, timedelta, timezone
from types import SimpleNamespace
from unittest import mock
import importlib
import json
import os
import random

import openai

from .analytics import (
    build_daily_review_data,
    calculate_completion_trend,
    calculate_productivity_trend,
    compute_analytics,
    compute_focus_analytics,
    most_productive_day,
    percentage,
    round_half_up,
)
from .assistant import (
    AIAssistant,
    AIGateway,
    AIGatewayError,
    AIResponseError,
    AIUnavailableError,
    MOTIVATIONAL_NOTE,
    rule_based_daily_review,
)
from .authentication import create_access_token
from .jobs import archive_completed_tasks, cleanup_stuck_timers, refresh_priority_insights
from .models import TIME_BLOCK_TAG, Project, Task, TimerSession
from .scheduling import DEFAULT_EVENT_COLOR, find_available_slots, minutes_between, task_to_event
from .scoring import (
    DEFAULT_REASON,
    FALLBACK_RECOMMENDATIONS,
    NO_ACTIVE_TASKS_INSIGHT,
    ON_TRACK_INSIGHT,
    OVERDUE_INSIGHT,
    STATIC_INSIGHT,
    RuleBasedPrioritizer,
    days_until,
    parse_datetime_value,
    rule_based_prioritization,
)


User = get_user_model()

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def make_task(task_id=1, priority='medium', time_spent=0, status='todo', due_in_days=None):
    """Build a scoring input dictionary."""
    return {
        'id': str(task_id),
        'priority': priority,
        'time_spent': time_spent,
        'status': status,
        'due_date': NOW + timedelta(days=due_in_days) if due_in_days is not None else None,
    }


# ============================================
# RULE-BASED PRIORITIZER
# ============================================

class DeadlineScoreTests(TestCase):
    """Tests for the deadline rule."""

    def setUp(self):
        self.prioritizer = RuleBasedPrioritizer(jitter=False)

    def test_due_in_one_day_is_very_soon(self):
        points, reason = self.prioritizer.calculate_deadline_score(NOW + timedelta(days=1), NOW)
        self.assertEqual(points, 40)
        self.assertEqual(reason, "Due very soon")

    def test_overdue_counts_as_very_soon(self):
        points, reason = self.prioritizer.calculate_deadline_score(NOW - timedelta(days=5), NOW)
        self.assertEqual(points, 40)
        self.assertEqual(reason, "Due very soon")

    def test_partial_days_round_up(self):
        """1.5 days away is 2 whole days, which falls in the 3 day window."""
        self.assertEqual(days_until(NOW + timedelta(hours=36), NOW), 2)
        points, reason = self.prioritizer.calculate_deadline_score(NOW + timedelta(hours=36), NOW)
        self.assertEqual(points, 25)
        self.assertEqual(reason, "Due within 3 days")

    def test_due_within_week(self):
        points, reason = self.prioritizer.calculate_deadline_score(NOW + timedelta(days=7), NOW)
        self.assertEqual(points, 15)
        self.assertEqual(reason, "Due this week")

    def test_due_far_away_scores_nothing(self):
        self.assertEqual(
            self.prioritizer.calculate_deadline_score(NOW + timedelta(days=8), NOW),
            (0, None)
        )

    def test_no_due_date_scores_nothing(self):
        self.assertEqual(self.prioritizer.calculate_deadline_score(None, NOW), (0, None))

    def test_iso_string_with_z_suffix(self):
        points, _ = self.prioritizer.calculate_deadline_score('2024-06-02T12:00:00Z', NOW)
        self.assertEqual(points, 40)

    def test_unparsable_due_date_ignored(self):
        self.assertIsNone(parse_datetime_value('not a date'))
        self.assertEqual(self.prioritizer.calculate_deadline_score('not a date', NOW), (0, None))

    def test_plain_date_is_midnight_utc(self):
        self.assertEqual(
            parse_datetime_value(date(2024, 6, 3)),
            datetime(2024, 6, 3, tzinfo=timezone.utc)
        )


class ScoringRuleTests(TestCase):
    """Tests for the accumulated score and label mapping."""

    def setUp(self):
        self.prioritizer = RuleBasedPrioritizer(jitter=False)

    def test_concrete_scenario(self):
        """Medium, 150 minutes spent, in progress, due in 2 days."""
        task = make_task(priority='medium', time_spent=150, status='in-progress', due_in_days=2)
        score, reasons = self.prioritizer.calculate_score(task, NOW)
        suggestion = self.prioritizer.suggest(task, NOW)

        self.assertEqual(score, 75)
        self.assertEqual(suggestion.suggested_priority, 'high')
        self.assertEqual(
            suggestion.reason,
            "Due within 3 days, Significant time invested, Currently in progress"
        )
        self.assertEqual(reasons, [
            "Due within 3 days", "Significant time invested", "Currently in progress"
        ])

    def test_high_priority_alone_is_medium(self):
        task = make_task(priority='high', time_spent=120)
        score, reasons = self.prioritizer.calculate_score(task, NOW)
        self.assertEqual(score, 30)
        self.assertEqual(self.prioritizer.classify(score), 'medium')
        self.assertEqual(reasons, [])

    def test_low_priority_alone_is_low(self):
        suggestion = self.prioritizer.suggest(make_task(priority='low'), NOW)
        self.assertEqual(suggestion.score, 5)
        self.assertEqual(suggestion.suggested_priority, 'low')
        self.assertEqual(suggestion.reason, DEFAULT_REASON)

    def test_due_tomorrow_high_priority(self):
        suggestion = self.prioritizer.suggest(make_task(priority='high', due_in_days=1), NOW)
        self.assertEqual(suggestion.score, 70)
        self.assertEqual(suggestion.suggested_priority, 'high')

    def test_unknown_priority_adds_nothing(self):
        score, _ = self.prioritizer.calculate_score(make_task(priority='urgent'), NOW)
        self.assertEqual(score, 0)

    def test_time_threshold_is_exclusive(self):
        at_threshold, _ = self.prioritizer.calculate_score(make_task(time_spent=120), NOW)
        above, _ = self.prioritizer.calculate_score(make_task(time_spent=121), NOW)
        self.assertEqual(above - at_threshold, 20)

    def test_no_due_date_depends_only_on_other_fields(self):
        without_due = make_task(priority='medium', time_spent=200, status='in-progress')
        score_a, _ = self.prioritizer.calculate_score(without_due, NOW)
        score_b, _ = self.prioritizer.calculate_score(without_due, NOW + timedelta(days=300))
        self.assertEqual(score_a, score_b)
        self.assertEqual(score_a, 15 + 20 + 15)

    def test_monotonic_as_deadline_approaches(self):
        previous = None
        for days in range(10, 1, -1):
            score, _ = self.prioritizer.calculate_score(make_task(due_in_days=days), NOW)
            if previous is not None:
                self.assertGreaterEqual(score, previous)
            previous = score

    def test_label_thresholds(self):
        self.assertEqual(self.prioritizer.classify(60), 'high')
        self.assertEqual(self.prioritizer.classify(59), 'medium')
        self.assertEqual(self.prioritizer.classify(30), 'medium')
        self.assertEqual(self.prioritizer.classify(29), 'low')


class ConfidenceTests(TestCase):
    """Tests for the confidence value."""

    def test_without_jitter_is_clamped_score(self):
        prioritizer = RuleBasedPrioritizer(jitter=False)
        self.assertEqual(prioritizer.calculate_confidence(5), 60)
        self.assertEqual(prioritizer.calculate_confidence(75), 75)
        self.assertEqual(prioritizer.calculate_confidence(120), 95)

    def test_jitter_stays_in_bounds(self):
        prioritizer = RuleBasedPrioritizer(jitter=True, rng=random.Random(7))
        for score in (0, 30, 50, 70, 90, 150):
            confidence = prioritizer.calculate_confidence(score)
            self.assertGreaterEqual(confidence, 60)
            self.assertLessEqual(confidence, 95)


class PrioritizationResponseTests(TestCase):
    """Tests for the full fallback envelope."""

    def test_empty_input(self):
        self.assertEqual(
            rule_based_prioritization([], NOW),
            {'suggestions': [], 'insights': ["No active tasks found to prioritize."]}
        )

    def test_envelope_shape(self):
        tasks = [make_task(1, due_in_days=2), make_task(2, priority='low')]
        result = rule_based_prioritization(tasks, NOW, jitter=False)

        self.assertEqual([s['taskId'] for s in result['suggestions']], ['1', '2'])
        self.assertEqual(
            set(result['suggestions'][0]),
            {'taskId', 'suggestedPriority', 'reason', 'confidence'}
        )
        self.assertEqual(result['recommendations'], FALLBACK_RECOMMENDATIONS)
        self.assertEqual(result['insights'], [STATIC_INSIGHT, ON_TRACK_INSIGHT])

    def test_overdue_insight(self):
        tasks = [make_task(1, due_in_days=-1, status='todo')]
        result = rule_based_prioritization(tasks, NOW)
        self.assertEqual(result['insights'][1], OVERDUE_INSIGHT)

    def test_completed_overdue_task_is_not_overdue(self):
        tasks = [make_task(1, due_in_days=-1, status='completed')]
        result = rule_based_prioritization(tasks, NOW)
        self.assertEqual(result['insights'][1], ON_TRACK_INSIGHT)

    def test_idempotent_labels_and_reasons(self):
        tasks = [
            make_task(1, priority='high', due_in_days=3),
            make_task(2, time_spent=500, status='in-progress'),
            make_task(3, priority='low', due_in_days=30),
        ]
        first = rule_based_prioritization(tasks, NOW)
        second = rule_based_prioritization(tasks, NOW)

        for a, b in zip(first['suggestions'], second['suggestions']):
            self.assertEqual(a['suggestedPriority'], b['suggestedPriority'])
            self.assertEqual(a['reason'], b['reason'])

    def test_input_is_not_mutated(self):
        task = make_task(1, due_in_days=2)
        snapshot = dict(task)
        rule_based_prioritization([task], NOW)
        self.assertEqual(task, snapshot)


# ============================================
# MODELS
# ============================================

class ModelTests(TestCase):
    """Tests for completion stamps and timers."""

    def setUp(self):
        self.user = User.objects.create_user(username='alice', password='pw')
        self.project = Project.objects.create(name='Launch', color='#FF0000', user=self.user)

    def test_completed_at_follows_status(self):
        task = Task.objects.create(title='Write', user=self.user, project=self.project)
        self.assertIsNone(task.completed_at)

        task.status = 'completed'
        task.save()
        self.assertIsNotNone(task.completed_at)

        task.status = 'todo'
        task.save()
        self.assertIsNone(task.completed_at)

    def test_stop_timer_credits_whole_minutes(self):
        now = dj_timezone.now()
        task = Task.objects.create(title='Write', user=self.user, project=self.project, time_spent=10)
        task.start_timer(now - timedelta(minutes=45, seconds=50))

        session = task.stop_timer(now)

        self.assertEqual(session.duration, 45)
        self.assertEqual(session.type, 'work')
        self.assertEqual(task.time_spent, 55)
        self.assertFalse(task.is_timer_running)
        self.assertIsNone(task.timer_start_time)
        self.assertEqual(task.status, 'in-progress')

    def test_is_overdue(self):
        past = Task(title='Late', due_date=dj_timezone.now() - timedelta(days=1), status='todo')
        done = Task(title='Done', due_date=dj_timezone.now() - timedelta(days=1), status='completed')
        self.assertTrue(past.is_overdue)
        self.assertFalse(done.is_overdue)

    def test_scoring_input_uses_string_id(self):
        task = Task.objects.create(title='Write', user=self.user, project=self.project)
        self.assertEqual(task.to_scoring_input()['id'], str(task.pk))


# ============================================
# AI ASSISTANT
# ============================================

class FakeGateway:
    """Stands in for AIGateway: returns a canned reply or raises."""

    def __init__(self, reply=None, error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    def complete_json(self, system_prompt, prompt, temperature=0.7, max_tokens=2000):
        self.calls.append({'prompt': prompt, 'temperature': temperature, 'max_tokens': max_tokens})
        if self.error is not None:
            raise self.error
        return self.reply


def fake_client(content=None, error=None, captured=None):
    """Minimal object with the chat.completions.create shape of the OpenAI client."""

    def create(**kwargs):
        if captured is not None:
            captured.update(kwargs)
        if error is not None:
            raise error
        message = SimpleNamespace(content=content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])

    return SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))


class AIGatewayTests(TestCase):
    """Tests for the OpenAI wrapper."""

    def test_parses_json_reply(self):
        captured = {}
        gateway = AIGateway('key', model='gpt-4', client=fake_client('{"a": 1}', captured=captured))

        self.assertEqual(gateway.complete_json('system', 'prompt', 0.8, 1500), {'a': 1})
        self.assertEqual(captured['model'], 'gpt-4')
        self.assertEqual(captured['temperature'], 0.8)
        self.assertEqual(captured['max_tokens'], 1500)
        self.assertEqual(captured['messages'][0], {'role': 'system', 'content': 'system'})

    def test_missing_api_key(self):
        with self.assertRaises(AIUnavailableError):
            AIGateway('').complete_json('system', 'prompt')

    def test_transport_error(self):
        gateway = AIGateway('key', client=fake_client(error=openai.OpenAIError('boom')))
        with self.assertRaises(AIGatewayError):
            gateway.complete_json('system', 'prompt')

    def test_non_json_reply(self):
        gateway = AIGateway('key', client=fake_client('Sure! Here are your priorities.'))
        with self.assertRaises(AIResponseError):
            gateway.complete_json('system', 'prompt')

    def test_json_array_reply(self):
        gateway = AIGateway('key', client=fake_client('[1, 2, 3]'))
        with self.assertRaises(AIResponseError):
            gateway.complete_json('system', 'prompt')


class AIAssistantTests(TestCase):
    """Tests for the AI orchestration and its fallbacks."""

    def setUp(self):
        self.user = User.objects.create_user(username='alice', password='pw')
        self.project = Project.objects.create(name='Launch', color='#FF0000', user=self.user)
        self.task = Task.objects.create(
            title='Write launch post',
            user=self.user,
            project=self.project,
            priority='medium',
            status='in-progress',
            time_spent=150,
            due_date=dj_timezone.now() + timedelta(days=2),
        )
        self.prioritizer = RuleBasedPrioritizer(jitter=False)

    def test_ai_reply_is_returned(self):
        reply = {
            'suggestions': [{
                'taskId': str(self.task.pk),
                'suggestedPriority': 'high',
                'reason': 'Launch is close',
                'confidence': 80,
            }],
            'insights': ['Stay focused'],
        }
        gateway = FakeGateway(reply=reply)
        result = AIAssistant(gateway, self.prioritizer).prioritize([self.task])

        self.assertEqual(result['suggestions'][0]['reason'], 'Launch is close')
        self.assertEqual(result['insights'], ['Stay focused'])
        self.assertEqual(result['recommendations'], [])
        self.assertEqual(len(gateway.calls), 1)
        self.assertIn('Write launch post', gateway.calls[0]['prompt'])

    def test_gateway_failure_falls_back(self):
        gateway = FakeGateway(error=AIUnavailableError('no key'))
        result = AIAssistant(gateway, self.prioritizer).prioritize([self.task])

        self.assertEqual(len(gateway.calls), 1)
        suggestion = result['suggestions'][0]
        self.assertEqual(suggestion['taskId'], str(self.task.pk))
        self.assertEqual(suggestion['suggestedPriority'], 'high')
        self.assertEqual(
            suggestion['reason'],
            "Due within 3 days, Significant time invested, Currently in progress"
        )
        self.assertEqual(result['recommendations'], FALLBACK_RECOMMENDATIONS)

    def test_unexpected_reply_shape_falls_back(self):
        gateway = FakeGateway(reply={'answer': 'do everything now'})
        result = AIAssistant(gateway, self.prioritizer).prioritize([self.task])
        self.assertEqual(result['recommendations'], FALLBACK_RECOMMENDATIONS)
        self.assertEqual(result['insights'][0], STATIC_INSIGHT)

    def test_invalid_suggested_priority_falls_back(self):
        reply = {
            'suggestions': [{
                'taskId': str(self.task.pk),
                'suggestedPriority': 'critical',
                'reason': '',
                'confidence': 80,
            }],
            'insights': [],
        }
        result = AIAssistant(FakeGateway(reply=reply), self.prioritizer).prioritize([self.task])
        self.assertEqual(result['suggestions'][0]['suggestedPriority'], 'high')
        self.assertEqual(result['recommendations'], FALLBACK_RECOMMENDATIONS)

    def test_no_tasks_skips_the_gateway(self):
        gateway = FakeGateway(error=AssertionError('should not be called'))
        result = AIAssistant(gateway, self.prioritizer).prioritize([])

        self.assertEqual(result, {'suggestions': [], 'insights': [NO_ACTIVE_TASKS_INSIGHT]})
        self.assertEqual(gateway.calls, [])

    def test_daily_review_fallback(self):
        review_data = {
            'date': '2024-06-01',
            'tasksWorkedOn': 5,
            'tasksCompleted': 4,
            'totalFocusTime': 330,
            'completedTasks': [{'title': f'Task {i}', 'project': 'P', 'timeSpent': 10} for i in range(4)],
            'pendingHighPriority': 1,
            'overdueCount': 0,
        }
        result = AIAssistant(FakeGateway(error=AIGatewayError('down')), self.prioritizer).daily_review(review_data)

        self.assertEqual(
            result['summary'],
            "Today you worked on 5 tasks and completed 4. You spent 5 hours in focused work."
        )
        self.assertEqual(result['achievements'], [
            '✅ Completed "Task 0"', '✅ Completed "Task 1"', '✅ Completed "Task 2"'
        ])
        self.assertEqual(result['recommendations'], [
            'Great focus time today!', 'Excellent task completion rate!'
        ])
        self.assertEqual(result['tomorrowFocus'], [
            'Focus on high-priority items', 'Review overdue tasks', 'Plan your most important work'
        ])
        self.assertEqual(result['motivationalNote'], MOTIVATIONAL_NOTE)

    def test_daily_review_quiet_day(self):
        review = rule_based_daily_review({
            'tasksWorkedOn': 0,
            'tasksCompleted': 0,
            'totalFocusTime': 0,
            'completedTasks': [],
        })
        self.assertEqual(review['achievements'], [])
        self.assertEqual(review['recommendations'], [
            'Consider longer focus sessions tomorrow',
            'Try breaking larger tasks into smaller chunks',
        ])

    def test_daily_review_reply_is_normalized(self):
        gateway = FakeGateway(reply={'summary': 'Solid day'})
        result = AIAssistant(gateway, self.prioritizer).daily_review({'date': '2024-06-01'})

        self.assertEqual(result['summary'], 'Solid day')
        self.assertEqual(result['achievements'], [])
        self.assertEqual(result['motivationalNote'], 'Keep up the great work!')
        self.assertEqual(gateway.calls[0]['temperature'], 0.8)

    def test_daily_review_reply_without_summary_falls_back(self):
        review_data = {
            'tasksWorkedOn': 2,
            'tasksCompleted': 1,
            'totalFocusTime': 90,
            'completedTasks': [{'title': 'Ship it', 'project': 'P', 'timeSpent': 90}],
        }
        result = AIAssistant(FakeGateway(reply={}), self.prioritizer).daily_review(review_data)

        self.assertEqual(result, rule_based_daily_review(review_data))

    def test_suggest_tasks_has_no_fallback(self):
        assistant = AIAssistant(FakeGateway(error=AIUnavailableError('no key')), self.prioritizer)
        with self.assertRaises(AIGatewayError):
            assistant.suggest_tasks(self.project, ['Write launch post'])

    def test_suggest_tasks_prompt(self):
        reply = {'suggestions': [{'title': 'Draft FAQ', 'priority': 'low', 'estimatedTime': 30}]}
        gateway = FakeGateway(reply=reply)
        result = AIAssistant(gateway, self.prioritizer).suggest_tasks(self.project, ['Write launch post'])

        self.assertEqual(result['suggestions'][0]['title'], 'Draft FAQ')
        self.assertIn('General project tasks', gateway.calls[0]['prompt'])
        self.assertIn('Write launch post', gateway.calls[0]['prompt'])


# ============================================
# ANALYTICS
# ============================================

def analytics_task(status='todo', priority='medium', time_spent=0, updated_at=NOW,
                   created_at=None, due_date=None, project_id=None, title='Task'):
    return SimpleNamespace(
        title=title,
        status=status,
        priority=priority,
        time_spent=time_spent,
        updated_at=updated_at,
        created_at=created_at or updated_at,
        due_date=due_date,
        project_id=project_id,
        project=None,
    )


class AnalyticsHelperTests(TestCase):
    """Tests for rounding, weekdays and trends."""

    def test_rounding(self):
        self.assertEqual(round_half_up(2.5), 3)
        self.assertEqual(round_half_up(2.49), 2)
        self.assertEqual(percentage(1, 3), 33)
        self.assertEqual(percentage(2, 3), 67)
        self.assertEqual(percentage(5, 0), 0)

    def test_most_productive_day_defaults_to_sunday(self):
        self.assertEqual(most_productive_day([analytics_task()]), 'Sunday')

    def test_most_productive_day(self):
        wednesday = datetime(2024, 6, 5, 12, tzinfo=timezone.utc)
        monday = datetime(2024, 6, 3, 12, tzinfo=timezone.utc)
        tasks = [
            analytics_task(status='completed', updated_at=wednesday),
            analytics_task(status='completed', updated_at=wednesday),
            analytics_task(status='completed', updated_at=monday),
        ]
        self.assertEqual(most_productive_day(tasks), 'Wednesday')

    def test_most_productive_day_tie_goes_to_later_weekday(self):
        monday = datetime(2024, 6, 3, 12, tzinfo=timezone.utc)
        friday = datetime(2024, 6, 7, 12, tzinfo=timezone.utc)
        tasks = [
            analytics_task(status='completed', updated_at=monday),
            analytics_task(status='completed', updated_at=friday),
        ]
        self.assertEqual(most_productive_day(tasks), 'Friday')

    def test_trends(self):
        def days(previous, recent):
            return (
                [{'tasksCompleted': previous, 'timeSpent': previous}] * 7
                + [{'tasksCompleted': recent, 'timeSpent': recent}] * 7
            )

        self.assertEqual(calculate_productivity_trend(days(0, 2)), 'increasing')
        self.assertEqual(calculate_productivity_trend(days(0, 0)), 'stable')
        self.assertEqual(calculate_productivity_trend(days(10, 5)), 'decreasing')
        self.assertEqual(calculate_productivity_trend(days(10, 11)), 'stable')
        self.assertEqual(calculate_completion_trend(days(100, 112)), 'stable')
        self.assertEqual(calculate_completion_trend(days(100, 120)), 'increasing')
        self.assertEqual(calculate_productivity_trend(days(1, 1)[:1]), 'stable')


class ComputeAnalyticsTests(TestCase):
    """Tests for the dashboard analytics."""

    def test_overview(self):
        project = SimpleNamespace(pk=1, name='Launch', color='#FF0000')
        tasks = [
            analytics_task(status='completed', priority='high', time_spent=60, project_id=1),
            analytics_task(status='completed', time_spent=30, project_id=1),
            analytics_task(status='in-progress', time_spent=15),
            analytics_task(status='todo', priority='low', due_date=NOW - timedelta(days=1)),
        ]
        analytics = compute_analytics(tasks, [project], period_days=30, now=NOW)
        overview = analytics['overview']

        self.assertEqual(overview['totalTasks'], 4)
        self.assertEqual(overview['completedTasks'], 2)
        self.assertEqual(overview['inProgressTasks'], 1)
        self.assertEqual(overview['todoTasks'], 1)
        self.assertEqual(overview['completionRate'], 50)
        self.assertEqual(overview['totalTimeSpent'], 105)
        self.assertEqual(overview['avgTaskTime'], 45)
        self.assertEqual(overview['overdueTasks'], 1)
        self.assertEqual(analytics['priorityStats'], {'high': 1, 'medium': 2, 'low': 1})
        self.assertEqual(analytics['projectStats'][0]['completionRate'], 100)
        self.assertEqual(analytics['projectStats'][0]['timeSpent'], 90)

    def test_daily_and_weekly_buckets(self):
        analytics = compute_analytics([analytics_task()], [], period_days=30, now=NOW)

        self.assertEqual(len(analytics['dailyActivity']), 30)
        self.assertEqual(analytics['dailyActivity'][-1]['date'], '2024-06-01')
        self.assertEqual(analytics['dailyActivity'][-1]['tasksCreated'], 1)
        self.assertEqual([w['week'] for w in analytics['weeklyStats']],
                         ['Week 4', 'Week 3', 'Week 2', 'Week 1'])

    def test_short_period_has_one_week(self):
        analytics = compute_analytics([], [], period_days=10, now=NOW)
        self.assertEqual(len(analytics['weeklyStats']), 1)
        self.assertEqual(analytics['trends'], {'productivity': 'stable', 'taskCompletion': 'stable'})

    def test_focus_analytics(self):
        day_one = datetime(2024, 5, 30, 9, tzinfo=timezone.utc)
        day_two = datetime(2024, 5, 31, 9, tzinfo=timezone.utc)
        sessions = [
            {'startTime': day_two, 'duration': 50, 'type': 'work'},
            {'startTime': day_one, 'duration': 25, 'type': 'work'},
            {'startTime': day_one + timedelta(hours=1), 'duration': 35, 'type': 'work'},
            {'startTime': day_one + timedelta(hours=2), 'duration': 5, 'type': 'break'},
        ]
        result = compute_focus_analytics(sessions, period_days=7)

        self.assertEqual(result['period']['totalSessions'], 3)
        self.assertEqual(result['period']['totalFocusTime'], 110)
        self.assertEqual(result['period']['averageSessionLength'], 37)
        self.assertEqual(result['period']['longestSession'], 50)
        self.assertEqual([m['date'] for m in result['dailyMetrics']], ['2024-05-30', '2024-05-31'])
        self.assertEqual(result['dailyMetrics'][0]['averageSessionLength'], 30)
        self.assertEqual(result['recentSessions'][0]['startTime'], day_two)

    def test_daily_review_data(self):
        today = [
            analytics_task(status='completed', time_spent=90, title='Ship'),
            analytics_task(status='in-progress', time_spent=30),
        ]
        everything = today + [
            analytics_task(status='todo', priority='high', due_date=NOW - timedelta(days=2)),
        ]
        data = build_daily_review_data(today, everything, NOW)

        self.assertEqual(data['date'], '2024-06-01')
        self.assertEqual(data['tasksWorkedOn'], 2)
        self.assertEqual(data['tasksCompleted'], 1)
        self.assertEqual(data['totalFocusTime'], 120)
        self.assertEqual(data['completedTasks'], [{'title': 'Ship', 'project': None, 'timeSpent': 90}])
        self.assertEqual(data['pendingHighPriority'], 1)
        self.assertEqual(data['overdueCount'], 1)


# ============================================
# CALENDAR SCHEDULING
# ============================================

class SchedulingTests(TestCase):
    """Tests for calendar events and free slot search."""

    DAY = date(2030, 1, 15)

    def block(self, hour, minute=0, length=60):
        return SimpleNamespace(
            due_date=datetime(2030, 1, 15, hour, minute, tzinfo=timezone.utc),
            estimated_time=length,
        )

    def test_empty_day(self):
        slots = find_available_slots(self.DAY, 60, [], tz=timezone.utc, limit=None)
        self.assertEqual(len(slots), 15)
        self.assertEqual(slots[0]['start'], '2030-01-15T09:00:00+00:00')
        self.assertEqual(slots[-1]['end'], '2030-01-15T17:00:00+00:00')
        self.assertEqual(slots[0]['duration'], 60)

    def test_default_limit(self):
        self.assertEqual(len(find_available_slots(self.DAY, 60, [], tz=timezone.utc)), 10)

    def test_conflicts_are_skipped(self):
        slots = find_available_slots(self.DAY, 60, [self.block(12, length=90)], tz=timezone.utc, limit=None)
        starts = [slot['start'][11:16] for slot in slots]

        self.assertIn('11:00', starts)
        self.assertIn('13:30', starts)
        for blocked in ('11:30', '12:00', '12:30', '13:00'):
            self.assertNotIn(blocked, starts)

    def test_block_without_estimate_lasts_an_hour(self):
        slots = find_available_slots(self.DAY, 30, [self.block(9, length=None)], tz=timezone.utc, limit=None)
        self.assertEqual(slots[0]['start'], '2030-01-15T10:00:00+00:00')

    def test_minutes_between(self):
        start = datetime(2030, 1, 15, 9, tzinfo=timezone.utc)
        self.assertEqual(minutes_between(start, start + timedelta(minutes=90)), 90)

    def test_event_without_project_uses_default_color(self):
        task = SimpleNamespace(
            pk=3, title='Call', description='', priority='low', status='todo',
            due_date=NOW, time_spent=0, estimated_time=None, project_id=None, project=None,
        )
        event = task_to_event(task)
        self.assertEqual(event['backgroundColor'], DEFAULT_EVENT_COLOR)
        self.assertTrue(event['allDay'])
        self.assertIsNone(event['extendedProps']['projectName'])


# ============================================
# MAINTENANCE JOBS
# ============================================

class MaintenanceJobTests(TestCase):
    """Tests for the scheduled Celery jobs, run synchronously."""

    def setUp(self):
        self.user = User.objects.create_user(username='alice', password='pw')
        self.project = Project.objects.create(name='Launch', color='#FF0000', user=self.user)

    def create_task(self, **kwargs):
        return Task.objects.create(user=self.user, project=self.project, title='Task', **kwargs)

    def test_cleanup_stuck_timers(self):
        now = dj_timezone.now()
        stuck = self.create_task(is_timer_running=True, timer_start_time=now - timedelta(hours=13))
        fresh = self.create_task(is_timer_running=True, timer_start_time=now - timedelta(hours=1))

        self.assertEqual(cleanup_stuck_timers(), 1)

        stuck.refresh_from_db()
        fresh.refresh_from_db()
        self.assertFalse(stuck.is_timer_running)
        self.assertGreaterEqual(stuck.time_spent, 13 * 60)
        self.assertEqual(TimerSession.objects.filter(task=stuck).count(), 1)
        self.assertTrue(fresh.is_timer_running)

    def test_refresh_priority_insights(self):
        never = self.create_task(priority='high')
        recent = self.create_task(priority='high', ai_last_analyzed=dj_timezone.now() - timedelta(days=1))
        done = self.create_task(priority='high', status='completed')

        self.assertEqual(refresh_priority_insights(), 1)

        never.refresh_from_db()
        recent.refresh_from_db()
        done.refresh_from_db()
        self.assertEqual(never.ai_priority_score, 30)
        self.assertIsNotNone(never.ai_last_analyzed)
        self.assertIsNone(recent.ai_priority_score)
        self.assertIsNone(done.ai_priority_score)

    def test_archive_completed_tasks(self):
        old = self.create_task(status='completed')
        new = self.create_task(status='completed')
        long_ago = dj_timezone.now() - timedelta(days=100)
        Task.objects.filter(pk=old.pk).update(completed_at=long_ago)

        self.assertEqual(archive_completed_tasks(), 1)

        old.refresh_from_db()
        new.refresh_from_db()
        self.assertEqual(old.status, 'archived')
        self.assertIsNotNone(old.archived_at)
        self.assertEqual(old.completed_at, long_ago)
        self.assertEqual(new.status, 'completed')


# ============================================
# API ENDPOINTS
# ============================================

@override_settings(OPENAI_API_KEY='', PRIORITIZATION_CONFIDENCE_JITTER=False)
class APITestBase(APITestCase):
    """Authenticated client with one project; the AI model is never reachable."""

    def setUp(self):
        cache.clear()
        self.user = User.objects.create_user(username='alice', password='pw')
        self.other = User.objects.create_user(username='bob', password='pw')
        self.project = Project.objects.create(name='Launch', color='#FF0000', user=self.user)
        self.other_project = Project.objects.create(name='Private', color='#00FF00', user=self.other)
        self.authenticate(self.user)

    def authenticate(self, user):
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {create_access_token(user)}')

    def create_task(self, user=None, project=None, **kwargs):
        kwargs.setdefault('title', 'Task')
        return Task.objects.create(
            user=user or self.user,
            project=project or self.project,
            **kwargs
        )


class AuthenticationTests(APITestBase):
    """Tests for bearer token handling."""

    def test_missing_token(self):
        self.client.credentials()
        response = self.client.get('/api/tasks/')

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['message'], 'Access token required')
        self.assertEqual(response.data['error_code'], 'ERR_AUTHENTICATION')

    def test_expired_token(self):
        token = create_access_token(self.user, expires_in=timedelta(seconds=-10))
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')
        response = self.client.get('/api/tasks/')

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['message'], 'Token expired')

    def test_garbage_token(self):
        self.client.credentials(HTTP_AUTHORIZATION='Bearer not.a.jwt')
        response = self.client.get('/api/tasks/')

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['message'], 'Invalid token')

    def test_token_with_undecodable_bytes(self):
        self.client.credentials(HTTP_AUTHORIZATION='Bearer abc\xe9def')
        response = self.client.get('/api/tasks/')

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['message'], 'Invalid token')

    def test_deleted_user(self):
        ghost = User.objects.create_user(username='ghost', password='pw')
        self.authenticate(ghost)
        ghost.delete()
        response = self.client.get('/api/tasks/')

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['message'], 'Invalid token or user not found')

    def test_health_needs_no_token(self):
        self.client.credentials()
        response = self.client.get('/health')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()['status'], 'OK')
        self.assertIn('uptime', response.json())

    def test_unknown_route(self):
        response = self.client.get('/no/such/route')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.json(), {'message': 'Route not found'})

    def test_debug_is_off_unless_enabled(self):
        from taskflow import settings as project_settings

        with mock.patch.dict(os.environ):
            os.environ.pop('DJANGO_DEBUG', None)
            importlib.reload(project_settings)
            self.assertFalse(project_settings.DEBUG)

    def test_api_info_endpoint(self):
        """GET /api/ should return API information."""
        self.client.credentials()
        response = self.client.get('/api/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('endpoints', response.data)
        self.assertIn('ERR_AI_UNAVAILABLE', response.data['error_codes'])


class TaskAPITests(APITestBase):
    """Tests for task CRUD, listing and bulk operations."""

    def test_create_task(self):
        data = {
            'title': '  Write launch post  ',
            'projectId': self.project.pk,
            'priority': 'high',
            'tags': ['writing'],
            'dueDate': (dj_timezone.now() + timedelta(days=3)).isoformat(),
            'estimatedTime': 90,
        }
        response = self.client.post(
            '/api/tasks/',
            data=json.dumps(data),
            content_type='application/json'
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['message'], 'Task created successfully')
        task = response.data['task']
        self.assertEqual(task['title'], 'Write launch post')
        self.assertEqual(task['project']['name'], 'Launch')
        self.assertEqual(task['status'], 'todo')
        self.assertEqual(task['timeSpent'], 0)
        self.assertFalse(task['isOverdue'])

    def test_create_task_in_foreign_project(self):
        response = self.client.post('/api/tasks/', {
            'title': 'Sneaky', 'projectId': self.other_project.pk,
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['message'], 'Project not found')

    def test_create_task_validation(self):
        response = self.client.post('/api/tasks/', {
            'title': '',
            'projectId': self.project.pk,
            'priority': 'urgent',
            'dueDate': (dj_timezone.now() - timedelta(days=1)).isoformat(),
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error_code'], 'ERR_VALIDATION')
        for field in ('title', 'priority', 'dueDate'):
            self.assertIn(field, response.data['errors'])

    def test_list_filters_and_pagination(self):
        for i in range(5):
            self.create_task(title=f'Draft {i}', priority='high' if i % 2 else 'low')
        self.create_task(title='Review', description='draft review')
        self.create_task(user=self.other, project=self.other_project, title='Draft secret')

        response = self.client.get('/api/tasks/', {'search': 'draft', 'limit': 2, 'page': 2})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['pagination'], {'current': 2, 'pages': 3, 'total': 6, 'limit': 2})
        self.assertEqual(len(response.data['tasks']), 2)

        response = self.client.get('/api/tasks/', {'priority': 'high', 'sortBy': 'title', 'sortOrder': 'asc'})
        self.assertEqual([t['title'] for t in response.data['tasks']], ['Draft 1', 'Draft 3'])

    def test_list_rejects_bad_limit(self):
        response = self.client.get('/api/tasks/', {'limit': 500})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_foreign_task_is_not_found(self):
        task = self.create_task(user=self.other, project=self.other_project)

        url = f'/api/tasks/{task.pk}/'
        responses = [
            self.client.get(url),
            self.client.put(url, {'title': 'Mine now'}, format='json'),
            self.client.delete(url),
        ]
        for response in responses:
            self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
            self.assertEqual(response.data['message'], 'Task not found')
        task.refresh_from_db()
        self.assertEqual(task.title, 'Task')

    def test_update_is_partial(self):
        task = self.create_task(title='Keep me', priority='low')
        response = self.client.put(f'/api/tasks/{task.pk}/', {'status': 'completed'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['task']['title'], 'Keep me')
        self.assertEqual(response.data['task']['priority'], 'low')
        self.assertIsNotNone(response.data['task']['completedAt'])

    def test_delete(self):
        task = self.create_task()
        response = self.client.delete(f'/api/tasks/{task.pk}/')

        self.assertEqual(response.data, {'message': 'Task deleted successfully'})
        self.assertFalse(Task.objects.filter(pk=task.pk).exists())

    def test_bulk_archive(self):
        mine = [self.create_task(), self.create_task()]
        foreign = self.create_task(user=self.other, project=self.other_project)

        response = self.client.post('/api/tasks/bulk/', {
            'action': 'archive',
            'taskIds': [t.pk for t in mine] + [foreign.pk],
        }, format='json')

        self.assertEqual(response.data['message'], 'Bulk archive completed successfully')
        self.assertEqual(response.data['modifiedCount'], 2)
        for task in mine:
            task.refresh_from_db()
            self.assertEqual(task.status, 'archived')
            self.assertIsNotNone(task.archived_at)
        foreign.refresh_from_db()
        self.assertEqual(foreign.status, 'todo')

    def test_bulk_update(self):
        tasks = [self.create_task(), self.create_task()]
        response = self.client.post('/api/tasks/bulk/', {
            'action': 'update',
            'taskIds': [t.pk for t in tasks],
            'updates': {'priority': 'high', 'status': 'completed'},
        }, format='json')

        self.assertEqual(response.data['modifiedCount'], 2)
        for task in tasks:
            task.refresh_from_db()
            self.assertEqual(task.priority, 'high')
            self.assertIsNotNone(task.completed_at)

    def test_bulk_update_to_archived(self):
        task = self.create_task(status='completed')
        response = self.client.post('/api/tasks/bulk/', {
            'action': 'update',
            'taskIds': [task.pk],
            'updates': {'status': 'archived'},
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['modifiedCount'], 1)
        task.refresh_from_db()
        self.assertEqual(task.status, 'archived')
        self.assertIsNotNone(task.archived_at)
        self.assertIsNotNone(task.completed_at)

    def test_new_task_cannot_be_archived(self):
        response = self.client.post('/api/tasks/', {
            'title': 'Old news', 'projectId': self.project.pk, 'status': 'archived',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('status', response.data['errors'])

    def test_bulk_delete(self):
        tasks = [self.create_task(), self.create_task()]
        response = self.client.post('/api/tasks/bulk/', {
            'action': 'delete', 'taskIds': [t.pk for t in tasks],
        }, format='json')

        self.assertEqual(response.data['modifiedCount'], 2)
        self.assertEqual(Task.objects.filter(user=self.user).count(), 0)

    def test_bulk_validation(self):
        response = self.client.post('/api/tasks/bulk/', {'action': 'explode', 'taskIds': []}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('action', response.data['errors'])
        self.assertIn('taskIds', response.data['errors'])


class TimerAPITests(APITestBase):
    """Tests for starting and stopping timers."""

    def test_start_and_stop(self):
        task = self.create_task(time_spent=10)

        response = self.client.post(f'/api/tasks/{task.pk}/timer/start/')
        self.assertEqual(response.data['message'], 'Timer started successfully')
        self.assertTrue(response.data['task']['isTimerRunning'])
        self.assertEqual(response.data['task']['status'], 'in-progress')

        Task.objects.filter(pk=task.pk).update(
            timer_start_time=dj_timezone.now() - timedelta(minutes=90, seconds=20)
        )
        response = self.client.post(f'/api/tasks/{task.pk}/timer/stop/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['sessionDuration'], 90)
        self.assertEqual(response.data['task']['timeSpent'], 100)
        self.assertFalse(response.data['task']['isTimerRunning'])
        self.assertEqual(TimerSession.objects.get(task=task).duration, 90)

    def test_starting_a_timer_stops_the_running_one(self):
        running = self.create_task(
            is_timer_running=True,
            timer_start_time=dj_timezone.now() - timedelta(minutes=30, seconds=5)
        )
        task = self.create_task()

        self.client.post(f'/api/tasks/{task.pk}/timer/start/')

        running.refresh_from_db()
        self.assertFalse(running.is_timer_running)
        self.assertEqual(running.time_spent, 30)
        self.assertEqual(Task.objects.filter(user=self.user, is_timer_running=True).get(), task)

    def test_stop_without_running_timer(self):
        task = self.create_task()
        response = self.client.post(f'/api/tasks/{task.pk}/timer/stop/')

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['message'], 'Task not found or timer not running')


class ProjectAPITests(APITestBase):
    """Tests for project endpoints."""

    def test_list_excludes_archived_and_counts_tasks(self):
        Project.objects.create(name='Old', color='#000000', user=self.user, status='archived')
        self.create_task(status='completed')
        self.create_task()

        response = self.client.get('/api/projects/')

        self.assertEqual([p['name'] for p in response.data['projects']], ['Launch'])
        self.assertEqual(response.data['projects'][0]['taskCount'], 2)
        self.assertEqual(response.data['projects'][0]['completedTaskCount'], 1)

    def test_create_validates_color(self):
        response = self.client.post('/api/projects/', {'name': 'Web', 'color': 'blue'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('color', response.data['errors'])

        response = self.client.post('/api/projects/', {'name': 'Web', 'color': '#123abc'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['project']['status'], 'active')

    def test_detail_includes_tasks(self):
        self.create_task(title='First')
        response = self.client.get(f'/api/projects/{self.project.pk}/')

        self.assertEqual(response.data['project']['name'], 'Launch')
        self.assertEqual([t['title'] for t in response.data['tasks']], ['First'])

    def test_foreign_project_is_not_found(self):
        response = self.client.get(f'/api/projects/{self.other_project.pk}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['message'], 'Project not found')

    def test_delete_refused_while_tasks_exist(self):
        self.create_task()
        self.create_task()
        response = self.client.delete(f'/api/projects/{self.project.pk}/')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error_code'], 'ERR_PROJECT_HAS_TASKS')
        self.assertEqual(response.data['taskCount'], 2)

    def test_delete_empty_project(self):
        response = self.client.delete(f'/api/projects/{self.project.pk}/')
        self.assertEqual(response.data, {'message': 'Project deleted successfully'})

    def test_update_completed_stamps_completed_at(self):
        response = self.client.put(f'/api/projects/{self.project.pk}/', {'status': 'completed'}, format='json')
        self.assertIsNotNone(response.data['project']['completedAt'])

    def test_project_analytics(self):
        self.create_task(status='completed', time_spent=60, priority='high')
        self.create_task(time_spent=30, due_date=dj_timezone.now() - timedelta(days=1))

        response = self.client.get(f'/api/projects/{self.project.pk}/analytics/')
        analytics = response.data['analytics']

        self.assertEqual(analytics['totalTasks'], 2)
        self.assertEqual(analytics['completionRate'], 50)
        self.assertEqual(analytics['averageTaskTime'], 45)
        self.assertEqual(analytics['overdueTasks'], 1)
        self.assertEqual(len(analytics['recentActivity']), 2)


class AIAPITests(APITestBase):
    """Tests for the AI endpoints with the model unreachable."""

    def test_prioritize_falls_back(self):
        task = self.create_task(
            priority='medium',
            status='in-progress',
            time_spent=150,
            due_date=dj_timezone.now() + timedelta(days=2)
        )
        self.create_task(status='completed')

        response = self.client.post('/api/ai/prioritize/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['suggestions']), 1)
        suggestion = response.data['suggestions'][0]
        self.assertEqual(suggestion['taskId'], str(task.pk))
        self.assertEqual(suggestion['suggestedPriority'], 'high')
        self.assertEqual(suggestion['confidence'], 75)
        self.assertEqual(response.data['recommendations'], FALLBACK_RECOMMENDATIONS)

    def test_prioritize_without_active_tasks(self):
        self.create_task(status='completed')
        response = self.client.post('/api/ai/prioritize/')

        self.assertEqual(response.data, {
            'suggestions': [],
            'insights': ['No active tasks found to prioritize.'],
        })

    def test_daily_review_falls_back(self):
        self.create_task(title='Ship release', status='completed', time_spent=400)
        response = self.client.post('/api/ai/daily-review/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(
            response.data['summary'],
            "Today you worked on 1 tasks and completed 1. You spent 6 hours in focused work."
        )
        self.assertEqual(response.data['achievements'], ['✅ Completed "Ship release"'])

    def test_suggest_tasks_unavailable(self):
        response = self.client.post('/api/ai/suggest-tasks/', {'projectId': self.project.pk}, format='json')

        self.assertEqual(response.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)
        self.assertEqual(response.data['error_code'], 'ERR_AI_UNAVAILABLE')

    def test_suggest_tasks_foreign_project(self):
        response = self.client.post(
            '/api/ai/suggest-tasks/', {'projectId': self.other_project.pk}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class AnalyticsAPITests(APITestBase):
    """Tests for the analytics endpoints."""

    def test_analytics(self):
        self.create_task(status='completed', time_spent=20)
        response = self.client.get('/api/analytics/', {'period': 14})

        analytics = response.data['analytics']
        self.assertEqual(analytics['overview']['completedTasks'], 1)
        self.assertEqual(analytics['period']['days'], 14)
        self.assertEqual(len(analytics['dailyActivity']), 14)
        self.assertEqual(len(analytics['weeklyStats']), 2)

    def test_focus_sessions(self):
        task = self.create_task(title='Deep work')
        now = dj_timezone.now()
        TimerSession.objects.create(task=task, start_time=now - timedelta(hours=2), end_time=now, duration=45)
        TimerSession.objects.create(task=task, start_time=now - timedelta(days=30), end_time=now, duration=99)

        response = self.client.get('/api/analytics/focus-sessions/')
        focus = response.data['focusAnalytics']

        self.assertEqual(focus['period']['days'], 7)
        self.assertEqual(focus['period']['totalFocusTime'], 45)
        self.assertEqual(focus['recentSessions'][0]['taskTitle'], 'Deep work')

    def test_unexpected_error_is_logged_with_route(self):
        with mock.patch('tasks.views.compute_analytics', side_effect=RuntimeError('boom')):
            with self.assertLogs('tasks.exceptions', level='ERROR') as logs:
                response = self.client.get('/api/analytics/')

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data['error_code'], 'ERR_SERVER')
        self.assertIn('GET /api/analytics/', logs.output[0])


class CalendarAPITests(APITestBase):
    """Tests for calendar events and time blocks."""

    def test_events(self):
        soon = dj_timezone.now() + timedelta(days=2)
        self.create_task(title='Due soon', due_date=soon)
        self.create_task(title='Someday', due_date=soon + timedelta(days=60))

        response = self.client.get('/api/calendar/events/', {
            'start': dj_timezone.now().isoformat(),
            'end': (dj_timezone.now() + timedelta(days=7)).isoformat(),
        })

        self.assertEqual([e['title'] for e in response.data['events']], ['Due soon'])
        self.assertEqual(response.data['events'][0]['backgroundColor'], '#FF0000')

    def test_time_block_lifecycle(self):
        response = self.client.post('/api/calendar/time-blocks/', {
            'projectId': self.project.pk,
            'startTime': '2030-01-15T09:00:00Z',
            'endTime': '2030-01-15T10:30:00Z',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        block = response.data['timeBlock']
        self.assertEqual(block['title'], 'Time Block')
        self.assertEqual(block['estimatedTime'], 90)
        self.assertEqual(block['tags'], [TIME_BLOCK_TAG])

        response = self.client.put(f"/api/calendar/time-blocks/{block['id']}/", {
            'startTime': '2030-01-15T13:00:00Z',
            'endTime': '2030-01-15T14:00:00Z',
        }, format='json')
        self.assertEqual(response.data['timeBlock']['estimatedTime'], 60)

        response = self.client.delete(f"/api/calendar/time-blocks/{block['id']}/")
        self.assertEqual(response.data, {'message': 'Time block deleted successfully'})

    def test_time_block_for_task(self):
        task = self.create_task(title='Write', priority='high')
        response = self.client.post('/api/calendar/time-blocks/', {
            'taskId': task.pk,
            'startTime': '2030-01-15T09:00:00Z',
            'endTime': '2030-01-15T10:00:00Z',
        }, format='json')

        self.assertEqual(response.data['timeBlock']['title'], 'Work on: Write')
        self.assertEqual(response.data['timeBlock']['priority'], 'high')

    def test_plain_task_is_not_a_time_block(self):
        task = self.create_task()
        response = self.client.delete(f'/api/calendar/time-blocks/{task.pk}/')

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['message'], 'Time block not found')

    def test_available_slots(self):
        self.create_task(
            title='Standup',
            due_date=datetime(2030, 1, 15, 9, tzinfo=timezone.utc),
            estimated_time=60
        )
        response = self.client.get('/api/calendar/available-slots/', {'date': '2030-01-15'})

        slots = response.data['availableSlots']
        self.assertEqual(len(slots), 10)
        self.assertEqual(slots[0]['start'], '2030-01-15T10:00:00+00:00')
        self.assertEqual(slots[0]['duration'], 60)
