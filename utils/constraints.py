"""
Constraint Validator & Scorer
Decides whether an assembled timetable is acceptable and how good it is.

Hard constraints reject a candidate outright; soft preferences only move
its score away from the 100-point baseline.
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Sequence, Tuple

from models.slot import DAYS, PRACTICAL, is_valid_slot
from utils.exceptions import InvalidConstraintError


DEFAULT_MAX_HOURS_PER_DAY = 8

BASE_SCORE = 100.0
BACK_TO_BACK_PENALTY = 10.0
VARIANCE_WEIGHT = 2.0
FREE_DAY_BONUS = 5.0


def _sorted_cells(cells: Iterable[Tuple[str, int]]) -> List[Tuple[str, int]]:
    return sorted(cells, key=lambda cell: (DAYS.index(cell[0]), cell[1]))


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _list_field(data: Dict, name: str) -> list:
    value = data.get(name)
    if value is None:
        return []
    if not isinstance(value, (list, tuple)):
        raise InvalidConstraintError(name, 'must be a list')
    return value


@dataclass(frozen=True)
class GeneratorConstraints:
    """User constraints for timetable generation. Immutable once built."""
    max_hours_per_day: int = DEFAULT_MAX_HOURS_PER_DAY
    avoid_back_to_back: bool = False

    # Hard filters
    avoid_slots: FrozenSet[Tuple[str, int]] = frozenset()   # {(day, slot), ...}
    avoid_lab_days: FrozenSet[str] = frozenset()
    avoid_lab_slots: FrozenSet[int] = frozenset()
    avoid_instructors: Tuple[str, ...] = ()                 # case-insensitive substrings

    def __post_init__(self):
        if not _is_int(self.max_hours_per_day):
            raise InvalidConstraintError('max_hours_per_day', 'must be an integer')
        if self.max_hours_per_day < 1:
            raise InvalidConstraintError('max_hours_per_day', 'must be at least 1')
        if not isinstance(self.avoid_back_to_back, bool):
            raise InvalidConstraintError('avoid_back_to_back', 'must be true or false')

        for day, slot in self.avoid_slots:
            if day not in DAYS:
                raise InvalidConstraintError('avoid_slots', f"unknown day '{day}'")
            if not is_valid_slot(slot):
                raise InvalidConstraintError('avoid_slots', f"slot {slot!r} is outside 1-11")

        for day in self.avoid_lab_days:
            if day not in DAYS:
                raise InvalidConstraintError('avoid_lab_days', f"unknown day '{day}'")

        for slot in self.avoid_lab_slots:
            if not is_valid_slot(slot):
                raise InvalidConstraintError('avoid_lab_slots', f"slot {slot!r} is outside 1-11")

    @classmethod
    def from_dict(cls, data: Dict) -> 'GeneratorConstraints':
        """Build constraints from a JSON payload; missing keys take defaults."""
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise InvalidConstraintError('constraints', 'expected an object')

        max_hours = data.get('max_hours_per_day', DEFAULT_MAX_HOURS_PER_DAY)
        if isinstance(max_hours, str) and max_hours.strip().isdigit():
            max_hours = int(max_hours)

        avoid_slots = set()
        for entry in _list_field(data, 'avoid_slots'):
            if isinstance(entry, dict):
                day, slot = entry.get('day'), entry.get('slot')
            elif isinstance(entry, (list, tuple)) and len(entry) == 2:
                day, slot = entry
            else:
                raise InvalidConstraintError('avoid_slots', f'cannot read entry {entry!r}')
            if not isinstance(day, str) or not _is_int(slot):
                raise InvalidConstraintError('avoid_slots', f'cannot read entry {entry!r}')
            avoid_slots.add((day, slot))

        avoid_lab_days = set()
        for day in _list_field(data, 'avoid_lab_days'):
            if not isinstance(day, str):
                raise InvalidConstraintError('avoid_lab_days', f'{day!r} is not a day code')
            avoid_lab_days.add(day)

        avoid_lab_slots = set()
        for slot in _list_field(data, 'avoid_lab_slots'):
            if not _is_int(slot):
                raise InvalidConstraintError('avoid_lab_slots', f'{slot!r} is not a slot number')
            avoid_lab_slots.add(slot)

        # Keep first-seen order of patterns, drop blanks and repeats
        patterns = []
        for pattern in _list_field(data, 'avoid_instructors'):
            if not isinstance(pattern, str):
                raise InvalidConstraintError('avoid_instructors', f'{pattern!r} is not a string')
            pattern = pattern.strip()
            if pattern and pattern not in patterns:
                patterns.append(pattern)

        return cls(
            max_hours_per_day=max_hours,
            avoid_back_to_back=data.get('avoid_back_to_back', False),
            avoid_slots=frozenset(avoid_slots),
            avoid_lab_days=frozenset(avoid_lab_days),
            avoid_lab_slots=frozenset(avoid_lab_slots),
            avoid_instructors=tuple(patterns),
        )

    def to_dict(self):
        return {
            'max_hours_per_day': self.max_hours_per_day,
            'avoid_back_to_back': self.avoid_back_to_back,
            'avoid_slots': [
                {'day': day, 'slot': slot} for day, slot in _sorted_cells(self.avoid_slots)
            ],
            'avoid_lab_days': [day for day in DAYS if day in self.avoid_lab_days],
            'avoid_lab_slots': sorted(self.avoid_lab_slots),
            'avoid_instructors': list(self.avoid_instructors),
        }


def empty_hours() -> Dict[str, int]:
    return {day: 0 for day in DAYS}


@dataclass
class ValidationResult:
    """Outcome of checking one complete candidate."""
    valid: bool
    score: float = 0.0
    hours_per_day: Dict[str, int] = field(default_factory=empty_hours)


def calculate_hours_per_day(sections: Iterable) -> Dict[str, int]:
    """Sum meeting-hours per day; every academic day is present, idle days as 0."""
    hours = empty_hours()
    for section in sections:
        for day in section.days:
            if day in hours:
                hours[day] += len(section.slots)
    return hours


def same_logical_section(s1, s2) -> bool:
    """Blocks of one named section of one course are parts of a single choice."""
    return s1.course_code == s2.course_code and s1.section == s2.section


def sections_clash(s1, s2) -> bool:
    """Check if two sections occupy a common (day, slot) cell."""
    if set(s1.days).isdisjoint(s2.days):
        return False
    return not set(s1.slots).isdisjoint(s2.slots)


def back_to_back_days(s1, s2) -> int:
    """Count the shared days on which the two sections sit in neighbouring slots."""
    count = 0
    for day in s1.days:
        if day not in s2.days:
            continue
        if any(abs(slot1 - slot2) == 1 for slot1 in s1.slots for slot2 in s2.slots):
            count += 1
    return count


class TimetableValidator:
    """
    Hard-constraint checks and soft-preference scoring for one candidate.

    Checks run in a fixed order and the first failure rejects the candidate:
    clash, daily hours, avoided slots, lab placement, avoided instructors.
    """

    def __init__(self, constraints: GeneratorConstraints = None):
        self.constraints = constraints or GeneratorConstraints()
        self._patterns = [p.lower() for p in self.constraints.avoid_instructors]

    def validate(self, sections: Sequence) -> ValidationResult:
        if self.has_clash(sections):
            return ValidationResult(valid=False)

        hours_per_day = calculate_hours_per_day(sections)

        if self.exceeds_daily_hours(hours_per_day):
            return ValidationResult(valid=False, hours_per_day=hours_per_day)

        for section in sections:
            if self.occupies_avoided_slot(section):
                return ValidationResult(valid=False, hours_per_day=hours_per_day)

        for section in sections:
            if self.violates_lab_placement(section):
                return ValidationResult(valid=False, hours_per_day=hours_per_day)

        for section in sections:
            if self.has_avoided_instructor(section):
                return ValidationResult(valid=False, hours_per_day=hours_per_day)

        return ValidationResult(
            valid=True,
            score=self.score(sections, hours_per_day),
            hours_per_day=hours_per_day
        )

    # --- Hard constraints ---

    def has_clash(self, sections: Sequence) -> bool:
        for i, s1 in enumerate(sections):
            for s2 in sections[i + 1:]:
                if same_logical_section(s1, s2):
                    continue
                if sections_clash(s1, s2):
                    return True
        return False

    def exceeds_daily_hours(self, hours_per_day: Dict[str, int]) -> bool:
        return any(hours > self.constraints.max_hours_per_day for hours in hours_per_day.values())

    def occupies_avoided_slot(self, section) -> bool:
        avoid = self.constraints.avoid_slots
        if not avoid:
            return False
        return any((day, slot) in avoid for day in section.days for slot in section.slots)

    def violates_lab_placement(self, section) -> bool:
        if section.section_type != PRACTICAL:
            return False
        if any(day in self.constraints.avoid_lab_days for day in section.days):
            return True
        return any(slot in self.constraints.avoid_lab_slots for slot in section.slots)

    def has_avoided_instructor(self, section) -> bool:
        if not self._patterns:
            return False
        for instructor in section.instructor:
            name = instructor.lower()
            if any(pattern in name for pattern in self._patterns):
                return True
        return False

    def is_section_allowed(self, section) -> bool:
        """Checks that depend on one section alone (avoided slots, labs, instructors)."""
        return not (
            self.occupies_avoided_slot(section)
            or self.violates_lab_placement(section)
            or self.has_avoided_instructor(section)
        )

    # --- Soft preferences ---

    def score(self, sections: Sequence, hours_per_day: Dict[str, int]) -> float:
        """
        Score a valid timetable (higher is better, may go negative).

        - Back-to-back: -10 per pair of distinct sections per shared day with
          neighbouring slots, only when the constraint is enabled.
        - Balance: -2 x population variance of the six daily totals.
        - Free days: +5 per day with no classes.
        """
        score = BASE_SCORE

        if self.constraints.avoid_back_to_back:
            for i, s1 in enumerate(sections):
                for s2 in sections[i + 1:]:
                    if same_logical_section(s1, s2):
                        continue
                    score -= BACK_TO_BACK_PENALTY * back_to_back_days(s1, s2)

        day_values = [hours_per_day.get(day, 0) for day in DAYS]
        avg_hours = sum(day_values) / len(day_values)
        variance = sum((h - avg_hours) ** 2 for h in day_values) / len(day_values)
        score -= variance * VARIANCE_WEIGHT

        score += sum(1 for h in day_values if h == 0) * FREE_DAY_BONUS

        return score
