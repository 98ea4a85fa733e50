from datetime import date


def urgency_factor(days_remaining: int) -> float:
    """Pressure multiplier for a task due in `days_remaining` whole days.

    Brackets are inclusive at their upper bound: 1 day -> 3.0, 3 -> 2.0, 7 -> 1.5.
    """
    if days_remaining < 0:
        return 3.5  # overdue
    elif days_remaining <= 1:
        return 3.0
    elif days_remaining <= 3:
        return 2.0
    elif days_remaining <= 7:
        return 1.5
    else:
        return 1.0


def task_pressure_score(difficulty_weight: int, urgency: float) -> float:
    return difficulty_weight * urgency


def days_until(deadline: date, today: date) -> int:
    """Whole days from `today` to `deadline`; negative once the deadline has passed."""
    return (deadline - today).days
