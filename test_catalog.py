"""Tests for the catalog adapter."""

import json

import pytest

from utils.catalog import Catalog, load_catalog, section_type_of
from utils.exceptions import (
    CatalogFormatError,
    CourseHasNoSectionsError,
    UnknownCourseError,
    UnknownSectionError,
)


class TestSectionType:

    def test_known_prefixes(self):
        assert section_type_of("L1") == "L"
        assert section_type_of("T12") == "T"
        assert section_type_of("P3") == "P"

    def test_other_prefixes_ignored(self):
        assert section_type_of("R1") is None
        assert section_type_of("") is None


class TestCatalogParsing:

    def test_courses_keep_file_order(self, catalog):
        assert list(catalog.courses) == ["CS F211", "MATH F211", "BITS F221", "HSS F222"]

    def test_course_fields(self, catalog):
        course = catalog.get("CS F211")
        assert course.name == "Data Structures & Algorithms"
        assert course.units == 4
        assert list(course.sections) == ["L1", "L2", "P1"]

    def test_out_of_range_hours_and_unknown_days_dropped(self):
        catalog = Catalog.from_dict({"courses": {"X": {
            "course_name": "X", "units": 1,
            "sections": {"L1": {"instructor": [], "schedule": [
                {"room": "R", "days": ["M", "Su", "M"], "hours": [0, 3, 12, 2, 3]}
            ]}},
        }}})
        block = catalog.get("X").sections["L1"].schedule[0]
        assert block.days == ("M",)
        assert block.hours == (2, 3)

    def test_missing_courses_rejected(self):
        with pytest.raises(CatalogFormatError):
            Catalog.from_dict({"metadata": {}})

    def test_bad_sections_rejected(self):
        with pytest.raises(CatalogFormatError) as exc:
            Catalog.from_dict({"courses": {"X": {"course_name": "X", "sections": []}}})
        assert exc.value.course_code == "X"

    def test_load_catalog_from_file(self, tmp_path, catalog_data):
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps(catalog_data), encoding="utf-8")
        catalog = load_catalog(path)
        assert len(catalog) == 4
        assert catalog.metadata == {"acadYear": 2025, "semester": 1}

    def test_load_catalog_invalid_json(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(CatalogFormatError):
            load_catalog(path)


class TestCatalogQueries:

    def test_search_by_code_and_name(self, catalog):
        assert [c.code for c in catalog.search("math")] == ["MATH F211"]
        assert [c.code for c in catalog.search("structures")] == ["CS F211"]

    def test_search_skips_courses_without_sections(self, catalog):
        codes = [c.code for c in catalog.search("")]
        assert "HSS F222" not in codes
        assert "BITS F221" in codes

    def test_search_exclude_and_limit(self, catalog):
        codes = [c.code for c in catalog.search("", exclude=["CS F211"], limit=1)]
        assert codes == ["MATH F211"]

    def test_instructors_sorted_unique(self, catalog):
        instructors = catalog.instructors()
        assert instructors == sorted(set(instructors))
        assert "Sharan Gopal" in instructors

    def test_required_section_types_in_declared_order(self, catalog):
        assert catalog.required_section_types("CS F211") == ["L", "P"]
        assert catalog.required_section_types("MATH F211") == ["L", "T"]


class TestCourseSelection:

    def test_builds_selection(self, catalog):
        selection = catalog.course_selection("MATH F211")
        assert selection.course_code == "MATH F211"
        assert selection.course_name == "Mathematics III"
        assert selection.credits == 3
        assert selection.required_sections == ("L", "T")

    def test_unknown_course(self, catalog):
        with pytest.raises(UnknownCourseError):
            catalog.course_selection("NOPE 101")

    def test_course_without_schedulable_sections(self, catalog):
        with pytest.raises(CourseHasNoSectionsError):
            catalog.course_selection("BITS F221")
        with pytest.raises(CourseHasNoSectionsError):
            catalog.course_selection("HSS F222")


class TestSectionExpansion:

    def test_one_option_per_meeting_block(self):
        catalog = Catalog.from_dict({"courses": {"CS F212": {
            "course_name": "Database Systems", "units": 4,
            "sections": {"L1": {"instructor": ["R Gururaj"], "schedule": [
                {"room": "F104", "days": ["M", "W"], "hours": [4]},
                {"room": "F105", "days": ["F"], "hours": [5]},
            ]}},
        }}})

        options = catalog.section_options("CS F212", "L1")

        assert len(options) == 2
        assert {o.section for o in options} == {"L1"}
        assert {o.section_type for o in options} == {"L"}
        assert options[0].days == ("M", "W")
        assert options[1].room == "F105"
        assert options[1].course_title == "Database Systems"

    def test_unknown_section(self, catalog):
        with pytest.raises(UnknownSectionError):
            catalog.section_options("CS F211", "L9")
        with pytest.raises(UnknownSectionError):
            catalog.section_options("BITS F221", "R1")

    def test_logical_sections_grouped_by_name(self, catalog):
        choices = catalog.logical_sections("CS F211", "L")
        assert [c.section for c in choices] == ["L1", "L2"]
        assert all(len(c.options) == 1 for c in choices)
        assert choices[0].cells == {("M", 3), ("W", 3)}

    def test_logical_sections_unknown_course(self, catalog):
        with pytest.raises(UnknownCourseError):
            catalog.logical_sections("NOPE 101", "L")
