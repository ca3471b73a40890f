"""Threshold rule deciding whether a grade event warrants automated outreach.

Kept free of I/O so the counselor service, the performance routes and the
tests can all call it directly.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

LOW_GRADE_THRESHOLD = 50
DROP_THRESHOLD = 10

SATISFACTORY_REASON = "Grades satisfactory"


class InterventionLabel(str, Enum):
    FIRST_LOW_GRADE = "First Low Grade"
    LOW_GRADE = "Low Grade"
    GRADE_DROP = "Grade Drop"


@dataclass(frozen=True)
class InterventionDecision:
    trigger: bool
    reason: str
    label: Optional[InterventionLabel] = None


def evaluate(new_score: float, previous_score: Optional[float] = None) -> InterventionDecision:
    """Decide whether a newly recorded score should trigger a counseling message.

    A score below 50 always triggers. A drop of more than 10 points against
    the previous score for the same subject triggers too. A low score wins
    over a drop when both apply.
    """
    is_low = new_score < LOW_GRADE_THRESHOLD
    dropped = previous_score is not None and new_score < previous_score - DROP_THRESHOLD

    if not is_low and not dropped:
        return InterventionDecision(trigger=False, reason=SATISFACTORY_REASON)

    if is_low and previous_score is None:
        label = InterventionLabel.FIRST_LOW_GRADE
    elif is_low:
        label = InterventionLabel.LOW_GRADE
    else:
        label = InterventionLabel.GRADE_DROP

    return InterventionDecision(trigger=True, reason=label.value, label=label)
