"""Custom exceptions for the timetable generator."""

from typing import Optional


class TimetableError(Exception):
    """Base exception for generator errors."""

    pass


class UnknownCourseError(TimetableError):
    """Course code not present in the catalog."""

    def __init__(self, course_code: str):
        self.course_code = course_code
        super().__init__(f"Course '{course_code}' not found in catalog")


class CourseHasNoSectionsError(TimetableError):
    """Course exists but none of its sections is a Lecture, Tutorial or Practical."""

    def __init__(self, course_code: str):
        self.course_code = course_code
        super().__init__(
            f"Course '{course_code}' has no lecture, tutorial or practical sections "
            "and cannot be scheduled"
        )


class UnknownSectionError(TimetableError):
    """Section name not present for the course."""

    def __init__(self, course_code: str, section: str):
        self.course_code = course_code
        self.section = section
        super().__init__(f"Section '{section}' not found for course '{course_code}'")


class DuplicateCourseError(TimetableError):
    """Course already added to the generator."""

    def __init__(self, course_code: str):
        self.course_code = course_code
        super().__init__(f"Course '{course_code}' is already selected")


class InvalidConstraintError(TimetableError):
    """Constraint value out of range."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"Invalid constraint '{field}': {message}")


class CatalogFormatError(TimetableError):
    """Catalog data does not match the expected structure."""

    def __init__(self, message: str, course_code: Optional[str] = None):
        self.course_code = course_code
        location = f" in course '{course_code}'" if course_code else ""
        super().__init__(f"Invalid catalog data{location}: {message}")
