"""
Timetable Generator Module
Enumerates clash-free section combinations for the selected courses and
ranks the ones that satisfy the user's constraints.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Set, Tuple

from models.slot import DAYS
from utils.constraints import GeneratorConstraints, TimetableValidator, empty_hours


logger = logging.getLogger(__name__)

# Accepted-candidate cap; enumeration stops once this many timetables pass
DEFAULT_MAX_TIMETABLES = 100


@dataclass(frozen=True)
class SectionOption:
    """One meeting block of a named course section."""
    course_code: str
    section_type: str           # 'L', 'T' or 'P'
    section: str                # e.g. "L1", "P3"
    instructor: Tuple[str, ...]
    room: str
    days: Tuple[str, ...]
    slots: Tuple[int, ...]
    course_title: str = ''

    @property
    def logical_key(self) -> Tuple[str, str]:
        return (self.course_code, self.section)

    @property
    def cells(self) -> Set[Tuple[str, int]]:
        return {(day, slot) for day in self.days for slot in self.slots}

    def to_dict(self):
        return {
            'course_code': self.course_code,
            'course_title': self.course_title,
            'section_type': self.section_type,
            'section': self.section,
            'instructor': list(self.instructor),
            'room': self.room,
            'days': list(self.days),
            'slots': list(self.slots)
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'SectionOption':
        return cls(
            course_code=data['course_code'],
            section_type=data['section_type'],
            section=data['section'],
            instructor=tuple(data.get('instructor') or ()),
            room=data.get('room', ''),
            days=tuple(data.get('days') or ()),
            slots=tuple(data.get('slots') or ()),
            course_title=data.get('course_title', '')
        )


@dataclass(frozen=True)
class LogicalSection:
    """A named section with all of its meeting blocks; chosen or skipped as a unit."""
    course_code: str
    section_type: str
    section: str
    options: Tuple[SectionOption, ...]

    @property
    def cells(self) -> Set[Tuple[str, int]]:
        cells = set()
        for option in self.options:
            cells |= option.cells
        return cells

    @property
    def hours_per_day(self) -> Dict[str, int]:
        hours = {}
        for option in self.options:
            for day in option.days:
                hours[day] = hours.get(day, 0) + len(option.slots)
        return hours


@dataclass(frozen=True)
class CourseSelection:
    """A course the user wants scheduled, with the section types it needs."""
    course_code: str
    course_name: str
    credits: int
    required_sections: Tuple[str, ...]

    def to_dict(self):
        return {
            'course_code': self.course_code,
            'course_name': self.course_name,
            'credits': self.credits,
            'required_sections': list(self.required_sections)
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'CourseSelection':
        return cls(
            course_code=data['course_code'],
            course_name=data.get('course_name', ''),
            credits=data.get('credits', 0),
            required_sections=tuple(data.get('required_sections') or ())
        )


@dataclass(frozen=True)
class GeneratedTimetable:
    """A single accepted timetable combination."""
    sections: Tuple[SectionOption, ...]     # Chosen blocks, in enumeration order
    score: float                            # Quality score (higher is better)
    hours_per_day: Dict[str, int] = field(default_factory=empty_hours, hash=False)

    def to_dict(self):
        return {
            'sections': [s.to_dict() for s in self.sections],
            'score': self.score,
            'hours_per_day': {day: self.hours_per_day.get(day, 0) for day in DAYS}
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'GeneratedTimetable':
        return cls(
            sections=tuple(SectionOption.from_dict(s) for s in data.get('sections', [])),
            score=data.get('score', 0.0),
            hours_per_day=dict(data.get('hours_per_day') or empty_hours())
        )


def rank_timetables(timetables: Sequence[GeneratedTimetable]) -> List[GeneratedTimetable]:
    """Sort best first; equal scores keep discovery order."""
    return sorted(timetables, key=lambda t: t.score, reverse=True)


class TimetableGenerator:
    """
    Depth-first combination enumerator.

    The search tree has one level per (course, required section type) pair,
    courses in the order they were added and types in L, T, P order. Each
    level picks one logical section. Branches are cut as soon as a choice
    clashes with an earlier one, breaks the daily-hour cap, or contains a
    block the constraints forbid on its own; every complete candidate is
    still passed through the full validator before it is accepted.

    Enumeration stops after ``max_timetables`` accepted candidates. Rejected
    candidates do not count towards that limit.
    """

    def __init__(
        self,
        catalog,
        courses: List[CourseSelection],
        constraints: GeneratorConstraints = None,
        max_timetables: int = DEFAULT_MAX_TIMETABLES
    ):
        """
        Initialize generator with courses to schedule.

        Args:
            catalog: Object exposing ``logical_sections(course_code, section_type)``
            courses: Courses to schedule, in the order they were added
            constraints: Optional generation constraints
            max_timetables: Stop after this many accepted timetables
        """
        self.catalog = catalog
        self.courses = list(courses)
        self.constraints = constraints or GeneratorConstraints()
        self.max_timetables = max_timetables
        self.validator = TimetableValidator(self.constraints)

        # Run statistics, filled by generate()
        self.candidates_examined = 0
        self.truncated = False

        self._choice_groups: List[List[LogicalSection]] = self._build_choice_groups()

    def _build_choice_groups(self) -> List[List[LogicalSection]]:
        """One list of allowed logical sections per (course, section type) level."""
        groups = []
        for course in self.courses:
            for section_type in course.required_sections:
                choices = self.catalog.logical_sections(course.course_code, section_type)
                allowed = [
                    choice for choice in choices
                    if all(self.validator.is_section_allowed(o) for o in choice.options)
                ]
                if len(allowed) < len(choices):
                    logger.debug(
                        "Dropped %d of %d %s sections for %s before search",
                        len(choices) - len(allowed), len(choices), section_type, course.course_code
                    )
                groups.append(allowed)
        return groups

    def generate(self) -> List[GeneratedTimetable]:
        """
        Enumerate, validate and rank timetables.

        Returns:
            Accepted timetables sorted by score, best first. Empty when no
            combination satisfies the constraints.
        """
        self.candidates_examined = 0
        self.truncated = False

        if not self.courses:
            return []

        accepted: List[GeneratedTimetable] = []
        groups = self._choice_groups
        max_hours = self.constraints.max_hours_per_day

        def backtrack(
            index: int,
            selected: List[SectionOption],
            occupied: Set[Tuple[str, int]],
            hours: Dict[str, int]
        ) -> None:
            if len(accepted) >= self.max_timetables:
                return

            if index == len(groups):
                self.candidates_examined += 1
                result = self.validator.validate(selected)
                if result.valid:
                    accepted.append(GeneratedTimetable(
                        sections=tuple(selected),
                        score=result.score,
                        hours_per_day=result.hours_per_day
                    ))
                return

            for choice in groups[index]:
                if len(accepted) >= self.max_timetables:
                    return

                # Clash with an already chosen section
                cells = choice.cells
                if cells & occupied:
                    continue

                # Daily hour cap
                choice_hours = choice.hours_per_day
                if any(hours.get(day, 0) + h > max_hours for day, h in choice_hours.items()):
                    continue

                selected.extend(choice.options)
                occupied.update(cells)
                for day, h in choice_hours.items():
                    hours[day] = hours.get(day, 0) + h

                backtrack(index + 1, selected, occupied, hours)

                # Backtrack
                del selected[len(selected) - len(choice.options):]
                occupied.difference_update(cells)
                for day, h in choice_hours.items():
                    hours[day] -= h

        backtrack(0, [], set(), {})

        self.truncated = len(accepted) >= self.max_timetables
        ranked = rank_timetables(accepted)

        logger.info(
            "Generated %d timetables for %d courses (%d complete candidates examined%s)",
            len(ranked), len(self.courses), self.candidates_examined,
            ", cap reached" if self.truncated else ""
        )
        return ranked


class TimetableBrowser:
    """Navigation over a ranked list of timetables, plus Apply."""

    def __init__(self, timetables: Sequence[GeneratedTimetable], index: int = 0):
        self.timetables = list(timetables)
        self.index = self._clamp(index)

    @property
    def count(self) -> int:
        return len(self.timetables)

    @property
    def current(self) -> Optional[GeneratedTimetable]:
        if not self.timetables:
            return None
        return self.timetables[self.index]

    def _clamp(self, index: int) -> int:
        if not self.timetables:
            return 0
        return max(0, min(index, len(self.timetables) - 1))

    def next(self) -> int:
        self.index = self._clamp(self.index + 1)
        return self.index

    def previous(self) -> int:
        self.index = self._clamp(self.index - 1)
        return self.index

    def apply(self, store) -> Optional[GeneratedTimetable]:
        """
        Hand the current timetable's sections to the selected-schedule store.

        The store's ``replace`` receives the full section list and is expected
        to overwrite whatever it held. Returns the applied timetable, or None
        when there is nothing to apply.
        """
        timetable = self.current
        if timetable is None:
            return None
        store.replace(list(timetable.sections))
        return timetable
