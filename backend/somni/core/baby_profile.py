"""Baby Profile — the tracked subject and its age arithmetic.

Invariants:
    - baby_id doubles as the subject_id of its sleep sessions
    - Ages are whole units, truncated toward zero; "today" is passed in
"""

from dataclasses import dataclass
from datetime import date, datetime

from somni.core.domain_types import SubjectId

DAYS_PER_WEEK = 7
WEEKS_PER_MONTH = 4


@dataclass(frozen=True)
class BabyProfile:
    baby_id: SubjectId
    name: str
    birthdate: date
    created_at: datetime

    def age_in_weeks(self, today: date) -> int:
        days = (today - self.birthdate).days
        weeks = abs(days) // DAYS_PER_WEEK
        return -weeks if days < 0 else weeks

    def age_in_months(self, today: date) -> int:
        return int(self.age_in_weeks(today) / WEEKS_PER_MONTH)
