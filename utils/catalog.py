"""
Catalog Adapter
Reads course catalog JSON and turns sections into generator section options.

Expected catalog shape:
    {
      "metadata": {"acadYear": 2025, "semester": 1},
      "courses": {
        "CS F211": {
          "course_name": "Data Structures & Algorithms",
          "units": 4,
          "sections": {
            "L1": {"instructor": ["..."],
                   "schedule": [{"room": "F102", "days": ["M", "W"], "hours": [3]}]},
            ...
          },
          "exams": [{"midsem": "...", "compre": "..."}]
        }
      }
    }
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from models.slot import DAYS, SECTION_TYPES, is_valid_slot
from utils.exceptions import (
    CatalogFormatError,
    CourseHasNoSectionsError,
    UnknownCourseError,
    UnknownSectionError,
)
from utils.timetable_generator import CourseSelection, LogicalSection, SectionOption


logger = logging.getLogger(__name__)

SEARCH_LIMIT = 50


@dataclass(frozen=True)
class MeetingBlock:
    room: str
    days: Tuple[str, ...]
    hours: Tuple[int, ...]


@dataclass(frozen=True)
class CatalogSection:
    name: str
    instructor: Tuple[str, ...]
    schedule: Tuple[MeetingBlock, ...]

    @property
    def section_type(self) -> Optional[str]:
        return section_type_of(self.name)


@dataclass
class CatalogCourse:
    code: str
    name: str
    units: int
    sections: Dict[str, CatalogSection] = field(default_factory=dict)
    exams: List[Dict] = field(default_factory=list)

    def to_dict(self):
        return {
            'code': self.code,
            'name': self.name,
            'units': self.units,
            'section_count': len(self.sections),
            'section_types': required_section_types(self),
            'exams': self.exams
        }


def section_type_of(section_name: str) -> Optional[str]:
    """Section type from the name prefix ('L1' -> 'L'); None for other prefixes."""
    if section_name and section_name[0] in SECTION_TYPES:
        return section_name[0]
    return None


def required_section_types(course: CatalogCourse) -> List[str]:
    """Section types present for a course, in L, T, P order."""
    present = {section_type_of(name) for name in course.sections}
    return [t for t in SECTION_TYPES if t in present]


def _parse_block(raw, code: str, section_name: str) -> MeetingBlock:
    if not isinstance(raw, dict):
        raise CatalogFormatError(f"schedule entry of section '{section_name}' is not an object", code)

    days = []
    for day in raw.get('days') or []:
        if day in DAYS:
            if day not in days:
                days.append(day)
        else:
            logger.debug("Dropping day %r from %s %s", day, code, section_name)

    hours = set()
    for hour in raw.get('hours') or []:
        if is_valid_slot(hour):
            hours.add(hour)
        else:
            logger.debug("Dropping hour %r from %s %s", hour, code, section_name)

    return MeetingBlock(
        room=str(raw.get('room') or ''),
        days=tuple(days),
        hours=tuple(sorted(hours))
    )


def _parse_course(code: str, raw) -> CatalogCourse:
    if not isinstance(raw, dict):
        raise CatalogFormatError('course record is not an object', code)

    raw_sections = raw.get('sections')
    if raw_sections is None:
        raw_sections = {}
    if not isinstance(raw_sections, dict):
        raise CatalogFormatError("'sections' must be an object", code)

    sections = {}
    for name, section in raw_sections.items():
        if not isinstance(section, dict):
            raise CatalogFormatError(f"section '{name}' is not an object", code)
        schedule = section.get('schedule') or []
        if not isinstance(schedule, list):
            raise CatalogFormatError(f"schedule of section '{name}' must be a list", code)
        sections[name] = CatalogSection(
            name=name,
            instructor=tuple(section.get('instructor') or ()),
            schedule=tuple(_parse_block(block, code, name) for block in schedule)
        )

    try:
        units = int(raw.get('units') or 0)
    except (TypeError, ValueError):
        raise CatalogFormatError(f"units {raw.get('units')!r} is not a number", code)

    return CatalogCourse(
        code=code,
        name=str(raw.get('course_name') or ''),
        units=units,
        sections=sections,
        exams=list(raw.get('exams') or [])
    )


class Catalog:
    """In-memory course catalog. Read-only once loaded."""

    def __init__(self, courses: Dict[str, CatalogCourse], metadata: Dict = None):
        self.courses = courses
        self.metadata = metadata or {}

    @classmethod
    def from_dict(cls, data) -> 'Catalog':
        if not isinstance(data, dict):
            raise CatalogFormatError('top level must be an object')
        raw_courses = data.get('courses')
        if not isinstance(raw_courses, dict):
            raise CatalogFormatError("missing 'courses' object")

        courses = {code: _parse_course(code, raw) for code, raw in raw_courses.items()}
        return cls(courses, data.get('metadata') or {})

    def __len__(self):
        return len(self.courses)

    def __contains__(self, course_code):
        return course_code in self.courses

    def get(self, course_code: str) -> Optional[CatalogCourse]:
        return self.courses.get(course_code)

    def _require(self, course_code: str) -> CatalogCourse:
        course = self.courses.get(course_code)
        if course is None:
            raise UnknownCourseError(course_code)
        return course

    def search(self, query: str = '', limit: int = SEARCH_LIMIT, exclude: Iterable[str] = ()) -> List[CatalogCourse]:
        """Search courses by code or name, skipping courses without sections."""
        query = (query or '').strip().lower()
        excluded = set(exclude)
        results = []

        for code, course in self.courses.items():
            if not course.sections or code in excluded:
                continue
            if query and query not in code.lower() and query not in course.name.lower():
                continue
            results.append(course)
            if len(results) >= limit:
                break

        return results

    def instructors(self) -> List[str]:
        """All unique instructor names in the catalog, sorted."""
        names = set()
        for course in self.courses.values():
            for section in course.sections.values():
                names.update(section.instructor)
        return sorted(names)

    def required_section_types(self, course_code: str) -> List[str]:
        return required_section_types(self._require(course_code))

    def course_selection(self, course_code: str) -> CourseSelection:
        """
        Build the generator entry for a course.

        Raises:
            UnknownCourseError: code not in the catalog
            CourseHasNoSectionsError: no L/T/P section to schedule
        """
        course = self._require(course_code)
        types = required_section_types(course)
        if not types:
            raise CourseHasNoSectionsError(course_code)
        return CourseSelection(
            course_code=course.code,
            course_name=course.name,
            credits=course.units,
            required_sections=tuple(types)
        )

    def section_options(self, course_code: str, section_name: str) -> List[SectionOption]:
        """Expand one named section into one SectionOption per meeting block."""
        course = self._require(course_code)
        section = course.sections.get(section_name)
        if section is None or section.section_type is None:
            raise UnknownSectionError(course_code, section_name)
        return _expand_section(course, section)

    def logical_sections(self, course_code: str, section_type: str) -> List[LogicalSection]:
        """All sections of one type as atomic choices, in catalog order."""
        course = self._require(course_code)
        choices = []
        for section in course.sections.values():
            if section.section_type != section_type:
                continue
            choices.append(LogicalSection(
                course_code=course.code,
                section_type=section_type,
                section=section.name,
                options=tuple(_expand_section(course, section))
            ))
        return choices


def _expand_section(course: CatalogCourse, section: CatalogSection) -> List[SectionOption]:
    return [
        SectionOption(
            course_code=course.code,
            section_type=section.section_type,
            section=section.name,
            instructor=section.instructor,
            room=block.room,
            days=block.days,
            slots=block.hours,
            course_title=course.name
        )
        for block in section.schedule
    ]


def load_catalog(path) -> Catalog:
    """Load a catalog JSON file."""
    with open(path, 'r', encoding='utf-8') as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise CatalogFormatError(f'not valid JSON ({e})')
    catalog = Catalog.from_dict(data)
    logger.info("Loaded catalog with %d courses from %s", len(catalog), path)
    return catalog
