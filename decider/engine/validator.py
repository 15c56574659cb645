"""Constraint validation.

A constraint's stored ``value`` is parsed into one typed criterion per
constraint type. Each criterion checks only the option field it cares
about; a missing field is never a violation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Mapping, Sequence

from ..exceptions import ValidationError


def _fmt(number: float) -> str:
    if isinstance(number, float) and number.is_integer():
        return str(int(number))
    return str(number)


def _number(value: Mapping[str, Any], key: str, *, label: str) -> float:
    raw = value.get(key)
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise ValidationError(f"{label} requires a numeric '{key}'", {"value": {key: ["Not a number."]}})
    if raw < 0:
        raise ValidationError(f"{label} '{key}' must not be negative", {"value": {key: ["Must be >= 0."]}})
    return raw


def parse_day(raw: Any) -> date:
    """Parse an ISO date or datetime string down to its calendar day."""
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    if not isinstance(raw, str) or not raw.strip():
        raise ValueError("empty date")
    text = raw.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        return date.fromisoformat(text)


@dataclass(frozen=True)
class OptionDraft:
    """The parts of an option the validator looks at."""

    title: str
    description: str | None = None
    price: float | None = None
    date: date | None = None
    distance: float | None = None
    duration: float | None = None


@dataclass(frozen=True)
class BudgetMax:
    max: float
    type: str = field(default="budget_max", init=False)

    def check(self, draft: OptionDraft) -> str | None:
        if draft.price is not None and draft.price > self.max:
            return f"Price ${_fmt(draft.price)} exceeds budget of ${_fmt(self.max)}"
        return None

    def to_value(self) -> dict:
        return {"max": self.max}


@dataclass(frozen=True)
class DateRange:
    start: date
    end: date
    type: str = field(default="date_range", init=False)

    def check(self, draft: OptionDraft) -> str | None:
        if draft.date is not None and not (self.start <= draft.date <= self.end):
            return (
                f"Date {draft.date.isoformat()} falls outside allowed range "
                f"{self.start.isoformat()} to {self.end.isoformat()}"
            )
        return None

    def to_value(self) -> dict:
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}


@dataclass(frozen=True)
class Distance:
    max: float
    type: str = field(default="distance", init=False)

    def check(self, draft: OptionDraft) -> str | None:
        if draft.distance is not None and draft.distance > self.max:
            return f"Distance {_fmt(draft.distance)}mi exceeds limit of {_fmt(self.max)}mi"
        return None

    def to_value(self) -> dict:
        return {"max": self.max}


@dataclass(frozen=True)
class Duration:
    max: float
    type: str = field(default="duration", init=False)

    def check(self, draft: OptionDraft) -> str | None:
        if draft.duration is not None and draft.duration > self.max:
            return f"Duration {_fmt(draft.duration)}h exceeds limit of {_fmt(self.max)}h"
        return None

    def to_value(self) -> dict:
        return {"max": self.max}


@dataclass(frozen=True)
class Exclusion:
    text: str
    type: str = field(default="exclusion", init=False)

    def check(self, draft: OptionDraft) -> str | None:
        needle = self.text.lower()
        haystacks = (draft.title.lower(), (draft.description or "").lower())
        if any(needle in h for h in haystacks):
            return f'Contains excluded term: "{self.text}"'
        return None

    def to_value(self) -> dict:
        return {"text": self.text}


Criterion = BudgetMax | DateRange | Distance | Duration | Exclusion


def criterion_from_value(constraint_type: str, value: Mapping[str, Any] | None) -> Criterion:
    """Build the typed criterion for a constraint, raising ValidationError on a bad payload."""
    if not isinstance(value, Mapping):
        raise ValidationError("Constraint value must be an object", {"value": ["Not a valid mapping."]})

    if constraint_type == "budget_max":
        return BudgetMax(max=_number(value, "max", label="Budget constraint"))
    if constraint_type == "distance":
        return Distance(max=_number(value, "max", label="Distance constraint"))
    if constraint_type == "duration":
        return Duration(max=_number(value, "max", label="Duration constraint"))
    if constraint_type == "date_range":
        try:
            start = parse_day(value.get("start"))
            end = parse_day(value.get("end"))
        except ValueError:
            raise ValidationError(
                "Date range constraint requires ISO 'start' and 'end' dates",
                {"value": {"start": ["Not a valid date."], "end": ["Not a valid date."]}},
            )
        if start > end:
            raise ValidationError("Date range 'start' must not be after 'end'", {"value": {"end": ["Before start."]}})
        return DateRange(start=start, end=end)
    if constraint_type == "exclusion":
        text = value.get("text")
        if not isinstance(text, str) or not text.strip():
            raise ValidationError("Exclusion constraint requires non-empty 'text'", {"value": {"text": ["Required."]}})
        return Exclusion(text=text.strip())

    raise ValidationError(f"Unknown constraint type: {constraint_type}", {"type": ["Unknown constraint type."]})


def parse_metadata(metadata: Mapping[str, Any] | None) -> dict:
    """Normalise option metadata to the known keys, dropping empty ones."""
    if metadata is None:
        return {}
    if not isinstance(metadata, Mapping):
        raise ValidationError("Option metadata must be an object", {"metadata": ["Not a valid mapping."]})

    cleaned: dict[str, Any] = {}
    errors: dict[str, list[str]] = {}
    for key in ("price", "distance", "duration"):
        raw = metadata.get(key)
        if raw is None:
            continue
        if isinstance(raw, bool) or not isinstance(raw, (int, float)) or raw < 0:
            errors[key] = ["Must be a non-negative number."]
        else:
            cleaned[key] = raw
    if metadata.get("date") is not None:
        try:
            cleaned["date"] = parse_day(metadata["date"]).isoformat()
        except ValueError:
            errors["date"] = ["Not a valid date."]

    if errors:
        raise ValidationError("Invalid option metadata", {"metadata": errors})
    return cleaned


def draft_from(title: str, description: str | None, metadata: Mapping[str, Any] | None) -> OptionDraft:
    meta = parse_metadata(metadata)
    return OptionDraft(
        title=title,
        description=description,
        price=meta.get("price"),
        date=parse_day(meta["date"]) if "date" in meta else None,
        distance=meta.get("distance"),
        duration=meta.get("duration"),
    )


@dataclass(frozen=True)
class Rule:
    constraint_id: str
    criterion: Criterion


@dataclass(frozen=True)
class Verdict:
    passes: bool
    violations: tuple[dict, ...]

    def violations_list(self) -> list[dict] | None:
        return [dict(v) for v in self.violations] or None


def validate(draft: OptionDraft, rules: Sequence[Rule]) -> Verdict:
    violations = []
    for rule in rules:
        reason = rule.criterion.check(draft)
        if reason is not None:
            violations.append({"constraint_id": rule.constraint_id, "reason": reason})
    return Verdict(passes=not violations, violations=tuple(violations))
