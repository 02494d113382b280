"""Date Enforcement — cross-field and calendar rules for projects and tasks.

Invariants:
    - end_date, when present, is never earlier than start_date
    - start_date (project) and due_date (task) are not in the past when supplied
    - Checks run on EFFECTIVE values (current state overlaid with the patch)
"""

from datetime import date

from taskmanager.core.errors import InvalidArgumentError


END_BEFORE_START = "End date must be on or after start date."


def check_date_range(start_date: date, end_date: date | None) -> None:
    if end_date is not None and end_date < start_date:
        raise InvalidArgumentError(END_BEFORE_START, field="end_date")


def check_not_in_past(value: date | None, field: str, today: date) -> None:
    """FutureOrPresent: today is accepted."""
    if value is not None and value < today:
        raise InvalidArgumentError(
            "must be a date in the present or in the future", field=field,
        )
