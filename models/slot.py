"""Fixed academic-week tables shared by the generator and the schedule views."""

# Slot timing reference - maps slot index to its one-hour block
SLOT_MAP = {
    1: '08:00-09:00',
    2: '09:00-10:00',
    3: '10:00-11:00',
    4: '11:00-12:00',
    5: '12:00-13:00',
    6: '13:00-14:00',
    7: '14:00-15:00',
    8: '15:00-16:00',
    9: '16:00-17:00',
    10: '17:00-18:00',
    11: '18:00-19:00',
}

MIN_SLOT = 1
MAX_SLOT = 11

# Monday through Saturday; Sunday is not part of the academic week
DAYS = ['M', 'T', 'W', 'Th', 'F', 'S']

DAY_NAMES = {
    'M': 'Monday',
    'T': 'Tuesday',
    'W': 'Wednesday',
    'Th': 'Thursday',
    'F': 'Friday',
    'S': 'Saturday',
}

# Catalog-declared order, also the order types are enumerated in
SECTION_TYPES = ('L', 'T', 'P')

SECTION_TYPE_NAMES = {
    'L': 'Lecture',
    'T': 'Tutorial',
    'P': 'Practical',
}

PRACTICAL = 'P'


def get_slot_timing(slot):
    """Get the wall-clock block for a slot index."""
    return SLOT_MAP.get(slot, None)


def is_valid_slot(slot):
    return isinstance(slot, int) and not isinstance(slot, bool) and MIN_SLOT <= slot <= MAX_SLOT


def build_timetable_grid(sections):
    """
    Lay sections out on a day x slot grid.

    Args:
        sections: Iterable of objects (or dicts) with ``days`` and ``slots``.

    Returns:
        dict mapping each day code to ``{slot: section or None}`` for slots 1..11.
        A later section wins a cell shared with an earlier one.
    """
    grid = {day: {slot: None for slot in SLOT_MAP} for day in DAYS}

    for entry in sections:
        days = entry['days'] if isinstance(entry, dict) else entry.days
        slots = entry['slots'] if isinstance(entry, dict) else entry.slots
        for day in days:
            if day not in grid:
                continue
            for slot in slots:
                if slot in grid[day]:
                    grid[day][slot] = entry

    return grid
