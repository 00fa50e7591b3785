"""Pure operations for inspecting and editing a tax bracket schedule.

Every operation accepts a sequence of :class:`TaxBracket` instances (or raw
mappings using the ``min``/``max``/``rate``/``description`` keys) and returns a
:class:`BracketEditResult`. Inputs are never mutated: a successful edit hands
back a brand new tuple, a rejected edit hands back the original schedule along
with the issues that prevented the change.

Brackets cover the half-open range ``[min, max)`` so adjacent brackets share
their boundary (``next.min == previous.max``) and the final bracket is the only
one allowed to be unbounded.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Mapping, Sequence

from pydantic import ValidationError

from .schema import ConfigurationError, TaxBracket, coerce_decimal, coerce_upper_bound

_LOGGER = logging.getLogger(__name__)

DEFAULT_BRACKET_WIDTH = Decimal("1000000")
DEFAULT_RATE_STEP = Decimal("0.01")
MINIMUM_BRACKETS_FOR_REMOVAL = 3
TOP_BRACKET_DESCRIPTION = "Top Bracket"

_FIELD_ALIASES = {
    "min": "min",
    "lower_bound": "min",
    "max": "max",
    "upper_bound": "max",
    "rate": "rate",
    "description": "description",
}


@dataclass(frozen=True)
class BracketIssue:
    """Field-level problem detected while validating a schedule."""

    message: str
    index: int | None = None
    field: str | None = None

    def as_dict(self) -> dict[str, Any]:
        return {"index": self.index, "field": self.field, "message": self.message}


@dataclass(frozen=True)
class BracketEditResult:
    """Outcome of a schedule operation."""

    brackets: tuple[TaxBracket, ...]
    errors: tuple[BracketIssue, ...] = field(default_factory=tuple)
    warnings: tuple[BracketIssue, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return not self.errors


def _issue_from_validation_error(index: int, error: ValidationError) -> BracketIssue:
    details = error.errors()
    message = details[0].get("msg", "Invalid bracket") if details else str(error)
    if message.startswith("Value error, "):
        message = message[len("Value error, "):]
    location = details[0].get("loc", ()) if details else ()
    field_name = _FIELD_ALIASES.get(str(location[0])) if location else None
    return BracketIssue(message=message, index=index, field=field_name)


def _coerce_schedule(
    brackets: Sequence[TaxBracket | Mapping[str, Any]],
) -> tuple[tuple[TaxBracket, ...], list[BracketIssue]]:
    coerced: list[TaxBracket] = []
    issues: list[BracketIssue] = []
    for index, entry in enumerate(brackets):
        if isinstance(entry, TaxBracket):
            coerced.append(entry)
            continue
        try:
            coerced.append(TaxBracket.model_validate(entry))
        except ValidationError as error:
            issues.append(_issue_from_validation_error(index, error))
    return tuple(coerced), issues


def schedule_issues(brackets: Sequence[TaxBracket]) -> list[BracketIssue]:
    """Return structural invariant violations for ``brackets``."""

    if not brackets:
        return [BracketIssue(message="Schedule must contain at least one bracket")]

    issues: list[BracketIssue] = []
    last_index = len(brackets) - 1

    if brackets[0].lower_bound != 0:
        issues.append(
            BracketIssue(message="First bracket must start from 0", index=0, field="min")
        )

    for index, bracket in enumerate(brackets):
        if bracket.upper_bound is None and index != last_index:
            issues.append(
                BracketIssue(
                    message="Only the last bracket may be unbounded",
                    index=index,
                    field="max",
                )
            )
        if index == 0:
            continue

        previous = brackets[index - 1]
        if previous.upper_bound is None:
            continue
        if bracket.lower_bound > previous.upper_bound:
            issues.append(
                BracketIssue(
                    message=(
                        f"Gap between {previous.upper_bound} and {bracket.lower_bound}"
                    ),
                    index=index,
                    field="min",
                )
            )
        elif bracket.lower_bound < previous.upper_bound:
            issues.append(
                BracketIssue(
                    message=(
                        f"Overlaps previous bracket ending at {previous.upper_bound}"
                    ),
                    index=index,
                    field="min",
                )
            )

    if brackets[last_index].upper_bound is not None:
        issues.append(
            BracketIssue(
                message="Last bracket must be unbounded",
                index=last_index,
                field="max",
            )
        )

    return issues


def rate_warnings(brackets: Sequence[TaxBracket]) -> list[BracketIssue]:
    """Warn about brackets whose rate drops below the preceding bracket."""

    warnings: list[BracketIssue] = []
    for index in range(1, len(brackets)):
        previous_rate = brackets[index - 1].rate
        if brackets[index].rate < previous_rate:
            warnings.append(
                BracketIssue(
                    message=(
                        "Rate should not be less than previous bracket's rate "
                        f"({(previous_rate * 100).normalize():f}%)"
                    ),
                    index=index,
                    field="rate",
                )
            )
    return warnings


def validate_schedule(
    brackets: Sequence[TaxBracket | Mapping[str, Any]],
) -> BracketEditResult:
    """Report every invariant violation and rate warning for ``brackets``."""

    coerced, issues = _coerce_schedule(brackets)
    if not issues:
        issues = schedule_issues(coerced)
    return BracketEditResult(
        brackets=coerced,
        errors=tuple(issues),
        warnings=tuple(rate_warnings(coerced)),
    )


def _rebuild(bracket: TaxBracket, **changes: Any) -> TaxBracket:
    data = {
        "min": bracket.lower_bound,
        "max": bracket.upper_bound,
        "rate": bracket.rate,
        "description": bracket.description,
    }
    data.update(changes)
    return TaxBracket.model_validate(data)


def _rejected(
    original: tuple[TaxBracket, ...], issues: Sequence[BracketIssue]
) -> BracketEditResult:
    _LOGGER.debug("Rejected bracket operation: %s", [issue.message for issue in issues])
    return BracketEditResult(brackets=original, errors=tuple(issues))


def _accepted(updated: Sequence[TaxBracket], original: tuple[TaxBracket, ...]) -> BracketEditResult:
    schedule = tuple(updated)
    issues = schedule_issues(schedule)
    if issues:
        return _rejected(original, issues)
    return BracketEditResult(brackets=schedule, warnings=tuple(rate_warnings(schedule)))


def _edit_min(
    schedule: tuple[TaxBracket, ...], index: int, raw_value: Any
) -> list[TaxBracket] | list[BracketIssue]:
    try:
        value = coerce_decimal(raw_value, "Minimum")
    except ConfigurationError as exc:
        return [BracketIssue(message=str(exc), index=index, field="min")]

    bracket = schedule[index]
    errors: list[BracketIssue] = []

    if index == 0 and value != 0:
        errors.append(BracketIssue(message="First bracket must start from 0", index=index, field="min"))

    previous = schedule[index - 1] if index > 0 else None
    if previous is not None and previous.upper_bound is not None and value <= previous.upper_bound:
        errors.append(
            BracketIssue(
                message=(
                    "Minimum must be greater than previous bracket's maximum "
                    f"({previous.upper_bound})"
                ),
                index=index,
                field="min",
            )
        )

    if bracket.upper_bound is not None and value >= bracket.upper_bound:
        errors.append(
            BracketIssue(
                message=f"Minimum must be lower than maximum ({bracket.upper_bound})",
                index=index,
                field="min",
            )
        )

    if errors:
        return errors

    updated = list(schedule)
    updated[index] = _rebuild(bracket, min=value)
    if previous is not None:
        updated[index - 1] = _rebuild(previous, max=value)
    return updated


def _edit_max(
    schedule: tuple[TaxBracket, ...], index: int, raw_value: Any
) -> list[TaxBracket] | list[BracketIssue]:
    last_index = len(schedule) - 1
    try:
        value = coerce_upper_bound(raw_value)
    except ConfigurationError as exc:
        return [BracketIssue(message=str(exc), index=index, field="max")]

    bracket = schedule[index]

    if value is None:
        if index != last_index:
            return [
                BracketIssue(
                    message="Only the last bracket may be unbounded",
                    index=index,
                    field="max",
                )
            ]
        return list(schedule)

    if index == last_index:
        return [
            BracketIssue(message="Last bracket must be unbounded", index=index, field="max")
        ]

    errors: list[BracketIssue] = []
    if value <= bracket.lower_bound:
        errors.append(
            BracketIssue(
                message=f"Maximum must be greater than minimum ({bracket.lower_bound})",
                index=index,
                field="max",
            )
        )

    following = schedule[index + 1]
    if value >= following.lower_bound:
        errors.append(
            BracketIssue(
                message=(
                    "Maximum must be less than next bracket's minimum "
                    f"({following.lower_bound})"
                ),
                index=index,
                field="max",
            )
        )

    if errors:
        return errors

    updated = list(schedule)
    updated[index] = _rebuild(bracket, max=value)
    updated[index + 1] = _rebuild(following, min=value)
    return updated


def _edit_rate(
    schedule: tuple[TaxBracket, ...], index: int, raw_value: Any
) -> list[TaxBracket] | list[BracketIssue]:
    try:
        value = coerce_decimal(raw_value, "Rate")
    except ConfigurationError as exc:
        return [BracketIssue(message=str(exc), index=index, field="rate")]

    if value < 0 or value > 1:
        return [BracketIssue(message="Rate must be between 0% and 100%", index=index, field="rate")]

    updated = list(schedule)
    updated[index] = _rebuild(schedule[index], rate=value)
    return updated


def _edit_description(
    schedule: tuple[TaxBracket, ...], index: int, raw_value: Any
) -> list[TaxBracket] | list[BracketIssue]:
    text = "" if raw_value is None else str(raw_value).strip()
    if not text:
        return [
            BracketIssue(message="Description cannot be empty", index=index, field="description")
        ]

    updated = list(schedule)
    updated[index] = _rebuild(schedule[index], description=text)
    return updated


_EDITORS = {
    "min": _edit_min,
    "max": _edit_max,
    "rate": _edit_rate,
    "description": _edit_description,
}


def validate_and_apply_edit(
    brackets: Sequence[TaxBracket | Mapping[str, Any]],
    index: int,
    field_name: str,
    new_value: Any,
) -> BracketEditResult:
    """Validate a single field edit and return the updated schedule.

    Boundary edits keep the schedule contiguous: raising a bracket's minimum
    moves the previous bracket's maximum with it, and lowering a maximum moves
    the next bracket's minimum. The rate check only warns when a rate falls
    below the preceding bracket since a regressive band is unusual but legal.
    """

    schedule, issues = _coerce_schedule(brackets)
    if issues:
        return _rejected(schedule, issues)

    normalised_field = _FIELD_ALIASES.get(str(field_name))
    if normalised_field is None:
        return _rejected(
            schedule,
            [BracketIssue(message=f"Unknown bracket field '{field_name}'", index=index)],
        )

    if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(schedule):
        return _rejected(
            schedule,
            [
                BracketIssue(
                    message=f"Bracket index {index} is out of range",
                    index=index if isinstance(index, int) else None,
                    field=normalised_field,
                )
            ],
        )

    try:
        outcome = _EDITORS[normalised_field](schedule, index, new_value)
    except ValidationError as error:
        return _rejected(schedule, [_issue_from_validation_error(index, error)])

    if outcome and isinstance(outcome[0], BracketIssue):
        return _rejected(schedule, outcome)  # type: ignore[arg-type]

    return _accepted(outcome, schedule)  # type: ignore[arg-type]


def add_bracket(
    brackets: Sequence[TaxBracket | Mapping[str, Any]],
    *,
    width: Decimal = DEFAULT_BRACKET_WIDTH,
) -> BracketEditResult:
    """Insert a finite bracket immediately before the unbounded top bracket."""

    schedule, issues = _coerce_schedule(brackets)
    if not issues:
        issues = schedule_issues(schedule)
    if issues:
        return _rejected(schedule, issues)

    top = schedule[-1]
    previous = schedule[-2] if len(schedule) > 1 else None
    base_rate = previous.rate if previous is not None else top.rate
    new_rate = min(base_rate + DEFAULT_RATE_STEP, Decimal("1"))

    new_lower = top.lower_bound
    new_upper = new_lower + Decimal(width)

    try:
        inserted = TaxBracket.model_validate(
            {
                "min": new_lower,
                "max": new_upper,
                "rate": new_rate,
                "description": f"Additional Bracket {len(schedule)}",
            }
        )
        moved_top = _rebuild(top, min=new_upper)
    except ValidationError as error:
        return _rejected(schedule, [_issue_from_validation_error(len(schedule) - 1, error)])

    return _accepted([*schedule[:-1], inserted, moved_top], schedule)


def remove_bracket(
    brackets: Sequence[TaxBracket | Mapping[str, Any]],
    index: int,
) -> BracketEditResult:
    """Remove the bracket at ``index`` keeping the schedule contiguous.

    The previous bracket absorbs the removed range (the next bracket does when
    the first one is removed), and the final bracket is always left unbounded.
    """

    schedule, issues = _coerce_schedule(brackets)
    if issues:
        return _rejected(schedule, issues)

    if len(schedule) < MINIMUM_BRACKETS_FOR_REMOVAL:
        return _rejected(
            schedule,
            [
                BracketIssue(
                    message=(
                        "At least two brackets must remain (a zero-rate floor "
                        "and an unbounded top bracket)"
                    ),
                    index=index,
                )
            ],
        )

    if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(schedule):
        return _rejected(
            schedule,
            [BracketIssue(message=f"Bracket index {index} is out of range", index=index)],
        )

    removed = schedule[index]
    remaining = list(schedule[:index]) + list(schedule[index + 1:])

    try:
        if index == 0:
            remaining[0] = _rebuild(remaining[0], min=Decimal("0"))
        elif index < len(schedule) - 1:
            remaining[index - 1] = _rebuild(remaining[index - 1], max=removed.upper_bound)

        last = remaining[-1]
        if last.upper_bound is not None:
            remaining[-1] = _rebuild(last, max=None, description=TOP_BRACKET_DESCRIPTION)
    except ValidationError as error:
        return _rejected(schedule, [_issue_from_validation_error(index, error)])

    return _accepted(remaining, schedule)


__all__ = [
    "BracketEditResult",
    "BracketIssue",
    "DEFAULT_BRACKET_WIDTH",
    "add_bracket",
    "rate_warnings",
    "remove_bracket",
    "schedule_issues",
    "validate_and_apply_edit",
    "validate_schedule",
]
