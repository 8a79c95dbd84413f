"""
AI assistant for TaskFlow.

The assistant sends prompts to a hosted chat-completion model and expects
JSON replies. The remote model is treated as unreliable: every call is
made once, and any failure (no API key, transport or HTTP error, a reply
that is not the expected JSON document) is answered by a deterministic
rule-based fallback where one exists.

Clients are constructed per request from settings and passed in
explicitly; nothing here keeps shared mutable state.
"""

import json
import logging
from datetime import datetime
from typing import Dict, List, Optional

import openai
from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder
from django.utils import timezone

from .scoring import RuleBasedPrioritizer, empty_prioritization_response
from .serializers import (
    AIDailyReviewResponseSerializer,
    AIPrioritizationResponseSerializer,
    AITaskSuggestionsResponseSerializer,
)


logger = logging.getLogger(__name__)


PRIORITIZE_SYSTEM_PROMPT = (
    "You are an expert productivity consultant and task management specialist. "
    "Provide clear, actionable advice based on data analysis."
)
DAILY_REVIEW_SYSTEM_PROMPT = (
    "You are a supportive productivity coach. "
    "Provide encouraging, specific, and actionable feedback."
)
SUGGEST_TASKS_SYSTEM_PROMPT = (
    "You are a project management expert. Suggest practical, actionable tasks."
)

DEFAULT_SUGGESTION_CONTEXT = 'General project tasks'

TOMORROW_FOCUS = [
    'Focus on high-priority items',
    'Review overdue tasks',
    'Plan your most important work',
]
MOTIVATIONAL_NOTE = 'Every step forward is progress. Keep up the great work!'


class AIGatewayError(Exception):
    """The AI model could not produce a usable answer."""


class AIUnavailableError(AIGatewayError):
    """No API key is configured."""


class AIResponseError(AIGatewayError):
    """The model replied, but not with the expected JSON document."""


class AIGateway:
    """
    Thin wrapper around the OpenAI chat-completions API.

    Args:
        api_key: OpenAI API key; calls fail with AIUnavailableError when empty
        model: Chat model name
        timeout: Request timeout in seconds (client default if None)
        client: Pre-built client, mainly for tests
    """

    def __init__(
        self,
        api_key: Optional[str],
        model: str = 'gpt-4',
        timeout: Optional[float] = None,
        client=None
    ):
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self._client = client

    @classmethod
    def from_settings(cls) -> 'AIGateway':
        return cls(
            api_key=settings.OPENAI_API_KEY,
            model=settings.OPENAI_MODEL,
            timeout=settings.OPENAI_TIMEOUT,
        )

    @property
    def client(self):
        if self._client is None:
            if not self.api_key:
                raise AIUnavailableError('OpenAI API key is not configured')
            options = {'api_key': self.api_key}
            if self.timeout is not None:
                options['timeout'] = self.timeout
            self._client = openai.OpenAI(**options)
        return self._client

    def complete_json(
        self,
        system_prompt: str,
        prompt: str,
        temperature: float = 0.7,
        max_tokens: int = 2000
    ) -> Dict:
        """
        Run one chat completion and parse the reply as a JSON object.

        Raises:
            AIUnavailableError: No API key configured
            AIGatewayError: The request failed
            AIResponseError: The reply is not a JSON object
        """
        try:
            completion = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {'role': 'system', 'content': system_prompt},
                    {'role': 'user', 'content': prompt},
                ],
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except openai.OpenAIError as exc:
            raise AIGatewayError(f"AI request failed: {exc}") from exc

        try:
            content = completion.choices[0].message.content or ''
        except (IndexError, AttributeError) as exc:
            raise AIResponseError("AI reply has no message content") from exc

        try:
            data = json.loads(content)
        except json.JSONDecodeError as exc:
            raise AIResponseError(f"AI reply is not valid JSON: {exc}") from exc

        if not isinstance(data, dict):
            raise AIResponseError("AI reply is not a JSON object")
        return data


def _validated(serializer_class, data: Dict) -> Dict:
    serializer = serializer_class(data=data)
    if not serializer.is_valid():
        raise AIResponseError(f"AI reply has an unexpected shape: {serializer.errors}")
    return json.loads(json.dumps(serializer.validated_data, cls=DjangoJSONEncoder))


def task_prompt_data(task) -> Dict:
    """Task fields shared with the model."""
    return {
        'id': str(task.pk),
        'title': task.title,
        'description': task.description,
        'priority': task.priority,
        'status': task.status,
        'dueDate': task.due_date,
        'timeSpent': task.time_spent,
        'estimatedTime': task.estimated_time,
        'projectName': task.project.name if task.project_id else None,
        'createdAt': task.created_at,
        'updatedAt': task.updated_at,
    }


def build_prioritization_prompt(tasks, now: datetime) -> str:
    task_data = json.dumps([task_prompt_data(t) for t in tasks], indent=2, cls=DjangoJSONEncoder)
    return f"""
    As an AI productivity assistant, analyze the following tasks and provide prioritization suggestions:

    Tasks: {task_data}

    Current Date: {now.isoformat()}

    Please provide:
    1. Priority suggestions for each task (high/medium/low) with reasoning
    2. General productivity insights
    3. Recommendations for better task management

    Consider:
    - Deadline urgency
    - Time already invested
    - Task dependencies
    - Current status
    - Project context

    Respond in JSON format:
    {{
      "suggestions": [
        {{
          "taskId": "string",
          "suggestedPriority": "high|medium|low",
          "reason": "string",
          "confidence": number (0-100)
        }}
      ],
      "insights": ["string array of general insights"],
      "recommendations": ["string array of actionable recommendations"]
    }}
    """


def build_daily_review_prompt(review_data: Dict) -> str:
    return f"""
    Generate a daily productivity review based on this data:
    {json.dumps(review_data, indent=2, cls=DjangoJSONEncoder)}

    Provide an encouraging and insightful review in JSON format:
    {{
      "summary": "Brief overview of the day's productivity",
      "achievements": ["List of specific accomplishments"],
      "recommendations": ["Actionable suggestions for improvement"],
      "tomorrowFocus": ["Suggested priorities for tomorrow"],
      "motivationalNote": "Encouraging message"
    }}
    """


def build_task_suggestions_prompt(project, existing_titles: List[str], context: str) -> str:
    return f"""
    Suggest 5 relevant tasks for this project:

    Project: {project.name}
    Description: {project.description}
    Context: {context or DEFAULT_SUGGESTION_CONTEXT}

    Existing tasks: {', '.join(existing_titles)}

    Provide task suggestions in JSON format:
    {{
      "suggestions": [
        {{
          "title": "Task title",
          "description": "Task description",
          "priority": "high|medium|low",
          "estimatedTime": number (in minutes)
        }}
      ]
    }}
    """


def rule_based_daily_review(review_data: Dict) -> Dict:
    """Daily review written from the collected facts alone."""
    hours = review_data['totalFocusTime'] // 60
    return {
        'summary': (
            f"Today you worked on {review_data['tasksWorkedOn']} tasks and completed "
            f"{review_data['tasksCompleted']}. You spent {hours} hours in focused work."
        ),
        'achievements': [
            f'✅ Completed "{task["title"]}"'
            for task in review_data['completedTasks'][:3]
        ],
        'recommendations': [
            'Great focus time today!' if review_data['totalFocusTime'] > 300
            else 'Consider longer focus sessions tomorrow',
            'Excellent task completion rate!' if review_data['tasksCompleted'] > 3
            else 'Try breaking larger tasks into smaller chunks',
        ],
        'tomorrowFocus': list(TOMORROW_FOCUS),
        'motivationalNote': MOTIVATIONAL_NOTE,
    }


class AIAssistant:
    """
    Request-scoped AI assistant with rule-based fallbacks.

    Each public method makes at most one call to the gateway.
    """

    def __init__(self, gateway: AIGateway, prioritizer: Optional[RuleBasedPrioritizer] = None):
        self.gateway = gateway
        self.prioritizer = prioritizer or RuleBasedPrioritizer(
            jitter=settings.PRIORITIZATION_CONFIDENCE_JITTER
        )

    @classmethod
    def from_settings(cls) -> 'AIAssistant':
        return cls(AIGateway.from_settings())

    def prioritize(self, tasks, now: Optional[datetime] = None) -> Dict:
        """
        Suggest priorities for the given eligible (not completed) tasks.

        Returns the model's suggestions when it answers with the expected
        document, and the rule-based prioritization otherwise.
        """
        tasks = list(tasks)
        if not tasks:
            return empty_prioritization_response()

        if now is None:
            now = timezone.now()

        try:
            data = self.gateway.complete_json(
                PRIORITIZE_SYSTEM_PROMPT,
                build_prioritization_prompt(tasks, now),
                temperature=0.7,
                max_tokens=2000,
            )
            return _validated(AIPrioritizationResponseSerializer, data)
        except AIGatewayError as exc:
            logger.warning("AI prioritization unavailable, using rule-based fallback: %s", exc)
            return self.prioritizer.build_response([t.to_scoring_input() for t in tasks], now)

    def daily_review(self, review_data: Dict) -> Dict:
        """Write the daily review, falling back to the rule-based one."""
        try:
            data = self.gateway.complete_json(
                DAILY_REVIEW_SYSTEM_PROMPT,
                build_daily_review_prompt(review_data),
                temperature=0.8,
                max_tokens=1500,
            )
            return _validated(AIDailyReviewResponseSerializer, data)
        except AIGatewayError as exc:
            logger.warning("AI daily review unavailable, using rule-based fallback: %s", exc)
            return rule_based_daily_review(review_data)

    def suggest_tasks(self, project, existing_titles: List[str], context: str = '') -> Dict:
        """
        Ask the model for new tasks for ``project``.

        Raises:
            AIGatewayError: There is no fallback for task suggestions
        """
        data = self.gateway.complete_json(
            SUGGEST_TASKS_SYSTEM_PROMPT,
            build_task_suggestions_prompt(project, existing_titles, context),
            temperature=0.7,
            max_tokens=1000,
        )
        return _validated(AITaskSuggestionsResponseSerializer, data)
