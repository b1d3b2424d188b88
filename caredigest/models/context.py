"""
Context snapshot data model for Care Digest.

A ContextSnapshot is the read-only aggregate handed to the scorers and
rankers for one request: the subject's age, today's activity summary,
active reminders, the daycare report, recent events and the user's
interest vector. It is assembled outside the core (from a JSON document,
an HTTP body or upstream services) and never mutated afterwards.

Missing sections are represented as None or empty tuples; every scorer
treats them as neutral evidence rather than an error.
"""

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Any, Optional

from caredigest.models.interest import InterestVector


def parse_date(value: Any, field_name: str = "date") -> Optional[date]:
    """
    Parse a date from a date, datetime or ISO string.

    Raises:
        ValueError: If the value is present but not a recognizable date.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
        except ValueError:
            raise ValueError(f"{field_name} is not an ISO date: {value!r}") from None
    raise ValueError(f"{field_name} must be a date or ISO string, got {type(value).__name__}")


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes")
    return bool(value)


def _as_optional_int(value: Any, field_name: str) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{field_name} must be an integer, got {value!r}") from None


def _as_list(value: Any, field_name: str) -> list:
    if value is None:
        return []
    if not isinstance(value, (list, tuple)):
        raise ValueError(f"{field_name} must be a list, got {type(value).__name__}")
    return list(value)


def _as_dict(value: Any, field_name: str) -> dict:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"{field_name} must be an object, got {type(value).__name__}")
    return dict(value)


def _as_optional_float(value: Any, field_name: str) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{field_name} must be a number, got {value!r}") from None


# =============================================================================
# Snapshot Parts
# =============================================================================

@dataclass(frozen=True)
class TrendData:
    """Trend of one tracked metric over the past days."""
    metric: str
    trend: str
    change_percent: Optional[float] = None
    description: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "TrendData":
        data = _as_dict(data, "recent_trends entry")
        return cls(
            metric=str(data.get("metric") or ""),
            trend=str(data.get("trend") or ""),
            change_percent=_as_optional_float(data.get("change_percent"), "recent_trends.change_percent"),
            description=str(data.get("description") or ""),
        )


@dataclass(frozen=True)
class DailySummary:
    """
    Aggregated activity for the snapshot date.

    Attributes:
        total_events: Number of events logged today.
        has_incident: An incident was logged today.
        has_sickness: Sickness was logged today.
        recent_trends: Per-metric trend list.
        metrics: Raw metric values keyed by metric name.
    """
    total_events: int = 0
    has_incident: bool = False
    has_sickness: bool = False
    recent_trends: tuple[TrendData, ...] = ()
    metrics: dict = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> "DailySummary":
        data = _as_dict(data, "daily_summary")
        return cls(
            total_events=_as_optional_int(data.get("total_events"), "total_events") or 0,
            has_incident=_as_bool(data.get("has_incident")),
            has_sickness=_as_bool(data.get("has_sickness")),
            recent_trends=tuple(
                TrendData.from_dict(t) for t in _as_list(data.get("recent_trends"), "recent_trends")
            ),
            metrics=_as_dict(data.get("metrics"), "daily_summary.metrics"),
        )


@dataclass(frozen=True)
class Reminder:
    """An active caregiver reminder."""
    title: str = ""
    category: str = ""
    due_date: Optional[date] = None
    priority: str = ""
    can_snooze: bool = True
    id: Optional[str] = None
    description: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "Reminder":
        data = _as_dict(data, "reminders entry")
        return cls(
            id=str(data["id"]) if data.get("id") is not None else None,
            title=str(data.get("title") or ""),
            description=str(data.get("description") or ""),
            category=str(data.get("category") or ""),
            due_date=parse_date(data.get("due_date"), "reminder.due_date"),
            priority=str(data.get("priority") or ""),
            can_snooze=_as_bool(data.get("can_snooze", True)),
        )


@dataclass(frozen=True)
class DaycareReport:
    """
    Third-party (daycare) report for the snapshot date.

    Attributes:
        has_incident: The daycare flagged an incident.
        teacher_notes: Free-text notes from the teacher.
        meals: Structured meal data.
        naps: Structured nap data.
        activities: Activities the subject took part in.
        incident_description: Free-text description of the incident, if any.
    """
    has_incident: bool = False
    teacher_notes: str = ""
    meals: dict = field(default_factory=dict)
    naps: dict = field(default_factory=dict)
    activities: tuple[str, ...] = ()
    incident_description: str = ""
    report_date: Optional[date] = None

    @property
    def has_notes(self) -> bool:
        return bool(self.teacher_notes and self.teacher_notes.strip())

    @classmethod
    def from_dict(cls, data: dict) -> "DaycareReport":
        data = _as_dict(data, "report")
        return cls(
            has_incident=_as_bool(data.get("has_incident")),
            teacher_notes=str(data.get("teacher_notes") or ""),
            meals=_as_dict(data.get("meals"), "report.meals"),
            naps=_as_dict(data.get("naps"), "report.naps"),
            activities=tuple(str(a) for a in _as_list(data.get("activities"), "activities")),
            incident_description=str(data.get("incident_description") or ""),
            report_date=parse_date(data.get("report_date"), "report.report_date"),
        )


@dataclass(frozen=True)
class RecentEvent:
    """A discrete event from the subject's recent timeline."""
    event_type: str
    occurred_at: Optional[date] = None
    priority: str = ""
    risk_level: str = ""
    urgency_hours: Optional[int] = None
    id: Optional[str] = None

    @property
    def is_high_priority(self) -> bool:
        """True for events labelled "high" or "critical"."""
        return (self.priority or "").lower() in ("high", "critical")

    @classmethod
    def from_dict(cls, data: dict) -> "RecentEvent":
        data = _as_dict(data, "recent_events entry")
        return cls(
            id=str(data["id"]) if data.get("id") is not None else None,
            event_type=str(data.get("event_type") or ""),
            occurred_at=parse_date(data.get("occurred_at"), "event.occurred_at"),
            priority=str(data.get("priority") or ""),
            risk_level=str(data.get("risk_level") or ""),
            urgency_hours=_as_optional_int(data.get("urgency_hours"), "event.urgency_hours"),
        )


@dataclass(frozen=True)
class DailyMetrics:
    """Metric values recorded for one past day (chart data source)."""
    day: date
    metrics: dict = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> "DailyMetrics":
        data = _as_dict(data, "metric_history entry")
        day = parse_date(data.get("date"), "metric_history.date")
        if day is None:
            raise ValueError("metric_history entries require a date")
        return cls(day=day, metrics=_as_dict(data.get("metrics"), "metric_history.metrics"))


# =============================================================================
# Snapshot
# =============================================================================

@dataclass(frozen=True)
class ContextSnapshot:
    """
    Immutable input to every scoring and ranking function.

    Attributes:
        user_id: Caregiver the result is ranked for.
        subject_id: Monitored subject (child profile).
        date: The day being summarized; recency and due dates are relative to it.
        age_months: Subject age in months, None if unknown.
        subject_name: Display name used in titles and prompts.
        care_environment: home/daycare/preschool.
        daily_summary: Today's activity summary, None if unavailable.
        reminders: Active reminders.
        report: Daycare report, None if unavailable.
        recent_events: Recent discrete events.
        interest: The user's interest vector, None if unavailable.
        topic_trends: Explicit topic -> trend overrides.
        metric_history: Recent daily metrics used for chart data points.
    """
    user_id: str
    subject_id: str
    date: date
    age_months: Optional[int] = None
    subject_name: Optional[str] = None
    care_environment: Optional[str] = None
    daily_summary: Optional[DailySummary] = None
    reminders: tuple[Reminder, ...] = ()
    report: Optional[DaycareReport] = None
    recent_events: tuple[RecentEvent, ...] = ()
    interest: Optional[InterestVector] = None
    topic_trends: dict = field(default_factory=dict)
    metric_history: tuple[DailyMetrics, ...] = ()

    @property
    def has_daily_incident(self) -> bool:
        return bool(self.daily_summary and self.daily_summary.has_incident)

    @property
    def has_daily_sickness(self) -> bool:
        return bool(self.daily_summary and self.daily_summary.has_sickness)

    @property
    def high_priority_event_count(self) -> int:
        return sum(1 for e in self.recent_events if e.is_high_priority)

    def with_interest(self, interest: Optional[InterestVector]) -> "ContextSnapshot":
        """Return a copy of this snapshot carrying the given interest vector."""
        return replace(self, interest=interest)

    @classmethod
    def from_dict(cls, data: dict) -> "ContextSnapshot":
        """
        Build a snapshot from a JSON-style document.

        Missing sections become None or empty tuples. The snapshot date
        defaults to today.

        Raises:
            ValueError: If required ids are missing or a field has the wrong shape.
        """
        if not isinstance(data, dict):
            raise ValueError("context document must be an object")

        errors = []
        if data.get("user_id") in (None, ""):
            errors.append("user_id is required")
        if data.get("subject_id") in (None, ""):
            errors.append("subject_id is required")
        if errors:
            raise ValueError(f"ContextSnapshot validation failed: {'; '.join(errors)}")

        user_id = str(data["user_id"])
        subject_id = str(data["subject_id"])

        summary = data.get("daily_summary")
        report = data.get("report")
        interest = data.get("interest")
        if interest is not None:
            interest = InterestVector.from_dict(
                {"user_id": user_id, "subject_id": subject_id, **_as_dict(interest, "interest")}
            )
        topic_trends = _as_dict(data.get("topic_trends"), "topic_trends")

        return cls(
            user_id=user_id,
            subject_id=subject_id,
            date=parse_date(data.get("date"), "date") or date.today(),
            age_months=_as_optional_int(data.get("age_months"), "age_months"),
            subject_name=data.get("subject_name") or None,
            care_environment=data.get("care_environment") or None,
            daily_summary=DailySummary.from_dict(summary) if summary else None,
            reminders=tuple(
                Reminder.from_dict(r) for r in _as_list(data.get("reminders"), "reminders")
            ),
            report=DaycareReport.from_dict(report) if report else None,
            recent_events=tuple(
                RecentEvent.from_dict(e) for e in _as_list(data.get("recent_events"), "recent_events")
            ),
            interest=interest,
            topic_trends={str(k).lower(): str(v) for k, v in topic_trends.items()},
            metric_history=tuple(
                DailyMetrics.from_dict(m) for m in _as_list(data.get("metric_history"), "metric_history")
            ),
        )
