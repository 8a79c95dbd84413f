"""
Rule-Based Prioritization for TaskFlow.

This module implements the deterministic prioritization heuristic used
whenever the AI assistant cannot answer: the remote call fails, no API key
is configured, or the reply cannot be parsed. It is also the scoring used
by the weekly insight refresh job, so there is exactly one copy of it.

Algorithm Design Philosophy:
---------------------------
Each task accumulates an integer urgency score from independent rules.
Every rule is checked; only the three deadline rules are mutually
exclusive (first match wins):

- Deadline urgency (only when a due date is set), measured in whole days
  rounded up: due within 1 day (or overdue) +40, within 3 days +25,
  within 7 days +15
- Current priority label: high +30, medium +15, low +5 (no reason string)
- Time already invested above 120 minutes: +20
- Task currently in progress: +15

Label Mapping:
-------------
score >= 60 -> "high", 30 <= score < 60 -> "medium", otherwise "low".

Confidence:
----------
confidence = min(95, max(60, score + jitter)) where jitter is drawn from
[0, 20). The jitter can be disabled, in which case the confidence is the
score clamped to [60, 95].
"""

from datetime import date, datetime, time, timezone
from typing import Dict, List, Optional, Tuple
from dataclasses import dataclass, field
from enum import Enum
import math
import random


SECONDS_PER_DAY = 24 * 60 * 60


class PriorityLevel(Enum):
    """Priority labels shared by tasks, projects and suggestions."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TaskStatus(Enum):
    """Lifecycle states of a task."""
    TODO = "todo"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    ARCHIVED = "archived"


PRIORITY_WEIGHTS = {
    PriorityLevel.HIGH.value: 30,
    PriorityLevel.MEDIUM.value: 15,
    PriorityLevel.LOW.value: 5,
}

REASON_DUE_VERY_SOON = "Due very soon"
REASON_DUE_WITHIN_3_DAYS = "Due within 3 days"
REASON_DUE_THIS_WEEK = "Due this week"
REASON_TIME_INVESTED = "Significant time invested"
REASON_IN_PROGRESS = "Currently in progress"
DEFAULT_REASON = "Based on current workload analysis"

STATIC_INSIGHT = "Prioritization based on deadlines, time investment, and current status"
OVERDUE_INSIGHT = "You have overdue tasks that need immediate attention"
ON_TRACK_INSIGHT = "No overdue tasks - good job staying on track!"
NO_ACTIVE_TASKS_INSIGHT = "No active tasks found to prioritize."

FALLBACK_RECOMMENDATIONS = [
    "Focus on high-priority items first",
    "Break large tasks into smaller, manageable chunks",
    "Use time-blocking to allocate focused work periods",
    "Review and adjust priorities weekly",
]


@dataclass
class PrioritySuggestion:
    """A single task's suggested priority with the rules that produced it."""
    task_id: object
    suggested_priority: str
    reason: str
    confidence: float
    score: int = 0
    reasons: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            'taskId': self.task_id,
            'suggestedPriority': self.suggested_priority,
            'reason': self.reason,
            'confidence': self.confidence,
        }


def parse_datetime_value(value) -> Optional[datetime]:
    """
    Coerce a due date into an aware datetime.

    Accepts datetimes, dates (midnight UTC) and ISO 8601 strings, including
    the trailing "Z" form produced by JavaScript clients. Naive values are
    treated as UTC. Unparsable strings yield None.
    """
    if value is None or value == '':
        return None

    if isinstance(value, str):
        text = value.strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        try:
            value = datetime.fromisoformat(text)
        except ValueError:
            return None

    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)

    return None


def days_until(due_date: datetime, now: datetime) -> int:
    """Whole days until the due date, rounded up (negative when overdue)."""
    return math.ceil((due_date - now).total_seconds() / SECONDS_PER_DAY)


def is_task_overdue(task: Dict, now: datetime) -> bool:
    """A task is overdue when its due date has passed and it is not completed."""
    due_date = parse_datetime_value(task.get('due_date'))
    return (
        due_date is not None
        and due_date < now
        and task.get('status') != TaskStatus.COMPLETED.value
    )


class RuleBasedPrioritizer:
    """
    Deterministic task prioritizer.

    Tasks are plain dictionaries with the keys ``id``, ``due_date``,
    ``priority``, ``time_spent`` and ``status``. The scorer never mutates
    them and keeps no state between calls apart from its random source.
    """

    # Deadline windows (days, inclusive) and their points
    DUE_VERY_SOON_DAYS = 1
    DUE_SOON_DAYS = 3
    DUE_THIS_WEEK_DAYS = 7
    DUE_VERY_SOON_POINTS = 40
    DUE_SOON_POINTS = 25
    DUE_THIS_WEEK_POINTS = 15

    # Time investment
    SIGNIFICANT_TIME_MINUTES = 120
    TIME_INVESTED_POINTS = 20

    IN_PROGRESS_POINTS = 15

    # Label thresholds
    HIGH_THRESHOLD = 60
    MEDIUM_THRESHOLD = 30

    # Confidence bounds
    MIN_CONFIDENCE = 60
    MAX_CONFIDENCE = 95
    CONFIDENCE_JITTER = 20

    def __init__(self, jitter: bool = True, rng: Optional[random.Random] = None):
        """
        Args:
            jitter: Add a random [0, 20) offset to the confidence
            rng: Random source for the jitter (a fresh one if None)
        """
        self.jitter = jitter
        self.rng = rng if rng is not None else random.Random()

    def calculate_deadline_score(
        self,
        due_date,
        now: datetime
    ) -> Tuple[int, Optional[str]]:
        """
        Score the deadline rule.

        Returns:
            Tuple of (points, reason) where reason is None if no window matched
        """
        due = parse_datetime_value(due_date)
        if due is None:
            return (0, None)

        remaining = days_until(due, now)

        if remaining <= self.DUE_VERY_SOON_DAYS:
            return (self.DUE_VERY_SOON_POINTS, REASON_DUE_VERY_SOON)
        if remaining <= self.DUE_SOON_DAYS:
            return (self.DUE_SOON_POINTS, REASON_DUE_WITHIN_3_DAYS)
        if remaining <= self.DUE_THIS_WEEK_DAYS:
            return (self.DUE_THIS_WEEK_POINTS, REASON_DUE_THIS_WEEK)
        return (0, None)

    def calculate_priority_weight(self, priority: Optional[str]) -> int:
        return PRIORITY_WEIGHTS.get(priority, 0)

    def calculate_score(
        self,
        task: Dict,
        now: Optional[datetime] = None
    ) -> Tuple[int, List[str]]:
        """
        Calculate the urgency score of one task.

        Returns:
            Tuple of (score, triggered rule strings in evaluation order)
        """
        if now is None:
            now = datetime.now(timezone.utc)

        score = 0
        reasons: List[str] = []

        deadline_points, deadline_reason = self.calculate_deadline_score(
            task.get('due_date'), now
        )
        score += deadline_points
        if deadline_reason:
            reasons.append(deadline_reason)

        score += self.calculate_priority_weight(task.get('priority'))

        if (task.get('time_spent') or 0) > self.SIGNIFICANT_TIME_MINUTES:
            score += self.TIME_INVESTED_POINTS
            reasons.append(REASON_TIME_INVESTED)

        if task.get('status') == TaskStatus.IN_PROGRESS.value:
            score += self.IN_PROGRESS_POINTS
            reasons.append(REASON_IN_PROGRESS)

        return score, reasons

    def classify(self, score: int) -> str:
        """Map a score onto a priority label."""
        if score >= self.HIGH_THRESHOLD:
            return PriorityLevel.HIGH.value
        if score >= self.MEDIUM_THRESHOLD:
            return PriorityLevel.MEDIUM.value
        return PriorityLevel.LOW.value

    def calculate_confidence(self, score: int) -> float:
        offset = self.rng.random() * self.CONFIDENCE_JITTER if self.jitter else 0
        return min(self.MAX_CONFIDENCE, max(self.MIN_CONFIDENCE, score + offset))

    def suggest(self, task: Dict, now: Optional[datetime] = None) -> PrioritySuggestion:
        """Build the suggestion for a single task."""
        score, reasons = self.calculate_score(task, now)
        return PrioritySuggestion(
            task_id=task.get('id'),
            suggested_priority=self.classify(score),
            reason=", ".join(reasons) or DEFAULT_REASON,
            confidence=self.calculate_confidence(score),
            score=score,
            reasons=reasons,
        )

    def prioritize(
        self,
        tasks: List[Dict],
        now: Optional[datetime] = None
    ) -> List[PrioritySuggestion]:
        """Score every task, preserving input order."""
        if now is None:
            now = datetime.now(timezone.utc)
        return [self.suggest(task, now) for task in tasks]

    def generate_insights(
        self,
        tasks: List[Dict],
        now: Optional[datetime] = None
    ) -> List[str]:
        if now is None:
            now = datetime.now(timezone.utc)
        has_overdue = any(is_task_overdue(task, now) for task in tasks)
        return [
            STATIC_INSIGHT,
            OVERDUE_INSIGHT if has_overdue else ON_TRACK_INSIGHT,
        ]

    def build_response(
        self,
        tasks: List[Dict],
        now: Optional[datetime] = None
    ) -> Dict:
        """
        Produce the full prioritization envelope for the given tasks.

        An empty task list short-circuits to the fixed "no active tasks"
        envelope without scoring anything.
        """
        if not tasks:
            return empty_prioritization_response()

        if now is None:
            now = datetime.now(timezone.utc)

        return {
            'suggestions': [s.to_dict() for s in self.prioritize(tasks, now)],
            'insights': self.generate_insights(tasks, now),
            'recommendations': list(FALLBACK_RECOMMENDATIONS),
        }


def empty_prioritization_response() -> Dict:
    """Envelope returned when there is nothing to prioritize."""
    return {
        'suggestions': [],
        'insights': [NO_ACTIVE_TASKS_INSIGHT],
    }


def rule_based_prioritization(
    tasks: List[Dict],
    now: Optional[datetime] = None,
    jitter: bool = True,
    rng: Optional[random.Random] = None
) -> Dict:
    """Convenience wrapper: prioritize ``tasks`` with a fresh prioritizer."""
    return RuleBasedPrioritizer(jitter=jitter, rng=rng).build_response(tasks, now)
