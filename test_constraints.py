"""Tests for constraint validation and scoring."""

import pytest

from utils.constraints import (
    GeneratorConstraints,
    TimetableValidator,
    back_to_back_days,
    calculate_hours_per_day,
    sections_clash,
)
from utils.exceptions import InvalidConstraintError
from utils.timetable_generator import SectionOption


def option(course, section, days, slots, instructor=("Staff",)):
    return SectionOption(
        course_code=course,
        section_type=section[0],
        section=section,
        instructor=tuple(instructor),
        room="F101",
        days=tuple(days),
        slots=tuple(slots),
    )


class TestGeneratorConstraints:

    def test_defaults(self):
        constraints = GeneratorConstraints()
        assert constraints.max_hours_per_day == 8
        assert constraints.avoid_back_to_back is False
        assert constraints.avoid_slots == frozenset()

    def test_from_dict(self):
        constraints = GeneratorConstraints.from_dict({
            "max_hours_per_day": 4,
            "avoid_back_to_back": True,
            "avoid_slots": [{"day": "M", "slot": 1}, ["F", 11]],
            "avoid_lab_days": ["S"],
            "avoid_lab_slots": [10, 11],
            "avoid_instructors": [" gupta ", "", "gupta", "Hota"],
        })
        assert constraints.max_hours_per_day == 4
        assert constraints.avoid_slots == frozenset({("M", 1), ("F", 11)})
        assert constraints.avoid_lab_days == frozenset({"S"})
        assert constraints.avoid_instructors == ("gupta", "Hota")

    def test_to_dict_is_ordered(self):
        constraints = GeneratorConstraints(
            avoid_slots=frozenset({("F", 2), ("M", 5), ("M", 1)}),
            avoid_lab_days=frozenset({"S", "M"}),
        )
        data = constraints.to_dict()
        assert data["avoid_slots"] == [
            {"day": "M", "slot": 1}, {"day": "M", "slot": 5}, {"day": "F", "slot": 2}
        ]
        assert data["avoid_lab_days"] == ["M", "S"]
        assert GeneratorConstraints.from_dict(data) == constraints

    @pytest.mark.parametrize("payload, field", [
        ({"max_hours_per_day": 0}, "max_hours_per_day"),
        ({"max_hours_per_day": "many"}, "max_hours_per_day"),
        ({"max_hours_per_day": True}, "max_hours_per_day"),
        ({"avoid_slots": [{"day": "Su", "slot": 1}]}, "avoid_slots"),
        ({"avoid_slots": [{"day": "M", "slot": 12}]}, "avoid_slots"),
        ({"avoid_lab_days": ["X"]}, "avoid_lab_days"),
        ({"avoid_lab_slots": [0]}, "avoid_lab_slots"),
        ({"avoid_instructors": [3]}, "avoid_instructors"),
        ({"avoid_instructors": "Gupta"}, "avoid_instructors"),
        ({"avoid_lab_days": "MW"}, "avoid_lab_days"),
        ({"avoid_lab_slots": 7}, "avoid_lab_slots"),
        ({"avoid_slots": {"day": "M", "slot": 3}}, "avoid_slots"),
        ({"avoid_slots": [{"day": ["M"], "slot": 3}]}, "avoid_slots"),
        ({"avoid_slots": [["M", [3]]]}, "avoid_slots"),
        ({"avoid_lab_days": [["M"]]}, "avoid_lab_days"),
        ({"avoid_lab_slots": [[7]]}, "avoid_lab_slots"),
        ({"avoid_back_to_back": "false"}, "avoid_back_to_back"),
        ({"avoid_back_to_back": 1}, "avoid_back_to_back"),
    ])
    def test_invalid_values(self, payload, field):
        with pytest.raises(InvalidConstraintError) as exc:
            GeneratorConstraints.from_dict(payload)
        assert exc.value.field == field


class TestHelpers:

    def test_clash_needs_common_day_and_slot(self):
        a = option("A", "L1", ["M", "W"], [3])
        assert sections_clash(a, option("B", "L1", ["W"], [3]))
        assert not sections_clash(a, option("B", "L1", ["T"], [3]))
        assert not sections_clash(a, option("B", "L1", ["M"], [4]))

    def test_back_to_back_counted_per_day(self):
        a = option("A", "L1", ["M", "W"], [3])
        b = option("B", "L1", ["M", "W", "F"], [4])
        assert back_to_back_days(a, b) == 2
        assert back_to_back_days(a, option("B", "L1", ["M"], [5])) == 0

    def test_hours_per_day_includes_idle_days(self):
        hours = calculate_hours_per_day([
            option("A", "L1", ["M", "W"], [3]),
            option("A", "P1", ["M"], [7, 8]),
        ])
        assert hours == {"M": 3, "T": 0, "W": 1, "Th": 0, "F": 0, "S": 0}


class TestHardConstraints:

    def test_clash_rejected(self):
        validator = TimetableValidator()
        result = validator.validate([
            option("A", "L1", ["M"], [3]),
            option("B", "L1", ["M"], [3]),
        ])
        assert not result.valid
        assert result.score == 0

    def test_blocks_of_same_section_do_not_clash(self):
        validator = TimetableValidator()
        result = validator.validate([
            option("A", "L1", ["M"], [3]),
            option("A", "L1", ["M"], [3, 4]),
        ])
        assert result.valid

    def test_different_sections_of_same_course_clash(self):
        validator = TimetableValidator()
        result = validator.validate([
            option("A", "L1", ["M"], [3]),
            option("A", "T1", ["M"], [3]),
        ])
        assert not result.valid

    def test_daily_hour_cap(self):
        sections = [option("A", "L1", ["M"], [3, 4]), option("B", "L1", ["M"], [6])]
        assert TimetableValidator(GeneratorConstraints(max_hours_per_day=3)).validate(sections).valid
        assert not TimetableValidator(GeneratorConstraints(max_hours_per_day=2)).validate(sections).valid

    def test_avoided_slot(self):
        validator = TimetableValidator(GeneratorConstraints(avoid_slots=frozenset({("W", 3)})))
        assert not validator.validate([option("A", "L1", ["M", "W"], [3])]).valid
        assert validator.validate([option("A", "L1", ["M", "W"], [4])]).valid

    def test_lab_day_only_applies_to_practicals(self):
        validator = TimetableValidator(GeneratorConstraints(avoid_lab_days=frozenset({"M"})))
        assert validator.validate([option("A", "L1", ["M"], [3])]).valid
        assert not validator.validate([option("A", "P1", ["M"], [7, 8])]).valid

    def test_lab_slot(self):
        validator = TimetableValidator(GeneratorConstraints(avoid_lab_slots=frozenset({8})))
        assert not validator.validate([option("A", "P1", ["T"], [7, 8])]).valid
        assert validator.validate([option("A", "T1", ["T"], [8])]).valid

    def test_instructor_substring_case_insensitive(self):
        validator = TimetableValidator(GeneratorConstraints(avoid_instructors=("GUPTA",)))
        assert not validator.validate([
            option("A", "L1", ["M"], [3], instructor=["Apurba Das", "Manik Gupta"])
        ]).valid
        assert validator.validate([option("A", "L1", ["M"], [3], instructor=["Apurba Das"])]).valid

    def test_is_section_allowed(self):
        validator = TimetableValidator(GeneratorConstraints(
            avoid_slots=frozenset({("F", 1)}), avoid_lab_days=frozenset({"S"})
        ))
        assert validator.is_section_allowed(option("A", "L1", ["M"], [1]))
        assert not validator.is_section_allowed(option("A", "L1", ["F"], [1]))
        assert not validator.is_section_allowed(option("A", "P1", ["S"], [5]))


class TestScoring:

    def test_single_section_score(self):
        result = TimetableValidator().validate([option("A", "L1", ["M", "W"], [3])])
        # variance of [1, 0, 1, 0, 0, 0] is 2/9; four free days
        assert result.valid
        assert result.score == pytest.approx(100 - 2 * (2 / 9) + 20)

    def test_empty_week_score(self):
        assert TimetableValidator().validate([]).score == pytest.approx(130)

    def test_balanced_week_has_no_variance_penalty(self):
        result = TimetableValidator().validate([
            option("A", "L1", ["M", "T", "W", "Th", "F", "S"], [1]),
        ])
        assert result.score == pytest.approx(100)

    def test_back_to_back_penalty_only_when_enabled(self):
        sections = [option("A", "L1", ["M"], [3]), option("B", "L1", ["M"], [4])]
        plain = TimetableValidator().validate(sections).score
        penalised = TimetableValidator(GeneratorConstraints(avoid_back_to_back=True)).validate(sections).score
        assert plain - penalised == pytest.approx(10)

    def test_back_to_back_penalty_per_shared_day(self):
        sections = [option("A", "L1", ["M", "W"], [3]), option("B", "L1", ["M", "W"], [4])]
        plain = TimetableValidator().validate(sections).score
        penalised = TimetableValidator(GeneratorConstraints(avoid_back_to_back=True)).validate(sections).score
        assert plain - penalised == pytest.approx(20)

    def test_unbalanced_week_scores_below_baseline(self):
        sections = [
            option("A", "L1", ["M"], [1, 2, 3, 4]),
            option("B", "L1", ["M"], [5, 6, 7, 8]),
            option("C", "L1", ["M"], [9, 10, 11]),
        ]
        validator = TimetableValidator(GeneratorConstraints(max_hours_per_day=11, avoid_back_to_back=True))
        result = validator.validate(sections)
        assert result.valid
        assert result.score < 100
