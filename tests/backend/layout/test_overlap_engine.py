import itertools
import random
from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest

from backend.layout.overlap_engine import (
    build_overlap_groups,
    calculate_expanded_layout,
    calculate_layout,
    overlaps,
    sort_appointments,
)


def _appointment(appointment_id: str, start: tuple[int, int], end: tuple[int, int]) -> SimpleNamespace:
    return SimpleNamespace(
        id=appointment_id,
        start_time=datetime(2026, 1, 5, *start),
        end_time=datetime(2026, 1, 5, *end),
    )


def _columns(positioned) -> dict[str, tuple[int, int]]:
    return {item.id: (item.column, item.total_columns) for item in positioned}


def _random_day(seed: int, count: int = 12) -> list[SimpleNamespace]:
    rng = random.Random(seed)
    day_start = datetime(2026, 1, 5, 7, 0)
    appointments = []
    for index in range(count):
        start = day_start + timedelta(minutes=15 * rng.randint(0, 40))
        end = start + timedelta(minutes=15 * rng.randint(1, 8))
        appointments.append(SimpleNamespace(id=f'a{index}', start_time=start, end_time=end))
    return appointments


def _max_simultaneous(group) -> int:
    events = []
    for appointment in group:
        events.append((appointment.start_time, 1))
        events.append((appointment.end_time, -1))
    # Ends sort before starts at the same instant, so touching ranges do not count.
    events.sort(key=lambda event: (event[0], event[1]))
    current = best = 0
    for _, delta in events:
        current += delta
        best = max(best, current)
    return best


def test_calculate_layout_returns_empty_list_for_empty_input() -> None:
    assert calculate_layout([]) == []
    assert calculate_layout(None) == []


def test_calculate_layout_places_single_appointment_in_full_width() -> None:
    positioned = calculate_layout([_appointment('a', (9, 0), (10, 0))])

    assert _columns(positioned) == {'a': (0, 1)}


def test_calculate_layout_reuses_freed_column_within_group() -> None:
    positioned = calculate_layout([
        _appointment('a', (9, 0), (9, 30)),
        _appointment('b', (9, 15), (9, 45)),
        _appointment('c', (9, 40), (10, 0)),
    ])

    assert _columns(positioned) == {
        'a': (0, 2),
        'b': (1, 2),
        'c': (0, 2),
    }


def test_calculate_layout_treats_back_to_back_appointments_as_separate_groups() -> None:
    positioned = calculate_layout([
        _appointment('a', (9, 0), (9, 30)),
        _appointment('b', (9, 30), (10, 0)),
    ])

    assert _columns(positioned) == {'a': (0, 1), 'b': (0, 1)}


def test_calculate_layout_scopes_column_count_to_overlap_group() -> None:
    positioned = calculate_layout([
        _appointment('a', (8, 0), (9, 0)),
        _appointment('b', (10, 0), (11, 30)),
        _appointment('c', (10, 30), (11, 0)),
        _appointment('d', (14, 0), (15, 0)),
        _appointment('e', (14, 0), (15, 30)),
        _appointment('f', (14, 15), (14, 45)),
    ])

    assert _columns(positioned) == {
        'a': (0, 1),
        'b': (0, 2),
        'c': (1, 2),
        'd': (0, 3),
        'e': (1, 3),
        'f': (2, 3),
    }


def test_sort_appointments_breaks_ties_by_end_then_id() -> None:
    ordered = sort_appointments([
        _appointment('z', (9, 0), (10, 0)),
        _appointment('b', (9, 0), (9, 30)),
        _appointment('a', (9, 0), (9, 30)),
    ])

    assert [appointment.id for appointment in ordered] == ['a', 'b', 'z']


def test_calculate_layout_is_independent_of_input_order() -> None:
    appointments = _random_day(seed=7)
    expected = [(item.id, item.column, item.total_columns) for item in calculate_layout(appointments)]

    rng = random.Random(42)
    for _ in range(20):
        shuffled = list(appointments)
        rng.shuffle(shuffled)
        result = [(item.id, item.column, item.total_columns) for item in calculate_layout(shuffled)]
        assert result == expected


@pytest.mark.parametrize('seed', range(10))
def test_calculate_layout_holds_column_invariants(seed: int) -> None:
    appointments = _random_day(seed)
    positioned = calculate_layout(appointments)

    assert len(positioned) == len(appointments)
    for item in positioned:
        assert item.total_columns >= 1
        assert 0 <= item.column < item.total_columns


@pytest.mark.parametrize('seed', range(10))
def test_calculate_layout_uses_minimum_columns_per_group(seed: int) -> None:
    appointments = _random_day(seed)
    positioned = _columns(calculate_layout(appointments))

    for group in build_overlap_groups(sort_appointments(appointments)):
        totals = {positioned[appointment.id][1] for appointment in group}
        assert totals == {_max_simultaneous(group)}


@pytest.mark.parametrize('seed', range(10))
def test_calculate_layout_never_shares_column_between_overlapping_appointments(seed: int) -> None:
    positioned = calculate_layout(_random_day(seed))

    for first, second in itertools.combinations(positioned, 2):
        if overlaps(first.appointment, second.appointment):
            assert first.column != second.column


def test_overlaps_ignores_touching_ranges() -> None:
    first = _appointment('a', (9, 0), (9, 30))
    second = _appointment('b', (9, 30), (10, 0))

    assert not overlaps(first, second)
    assert not overlaps(second, first)
    assert overlaps(first, _appointment('c', (9, 29), (9, 45)))


def test_calculate_layout_keeps_malformed_ranges_without_raising() -> None:
    positioned = calculate_layout([
        _appointment('reversed', (9, 30), (9, 0)),
        _appointment('zero', (10, 0), (10, 0)),
        _appointment('normal', (9, 0), (9, 45)),
    ])

    columns = _columns(positioned)
    assert columns['zero'] == (0, 1)
    assert columns['normal'] == (0, 2)
    assert columns['reversed'] == (1, 2)


def test_calculate_expanded_layout_matches_basic_layout_for_conflicting_groups() -> None:
    appointments = [
        _appointment('a', (9, 0), (9, 30)),
        _appointment('b', (9, 15), (9, 45)),
        _appointment('c', (11, 0), (12, 0)),
    ]

    assert _columns(calculate_expanded_layout(appointments)) == {
        'a': (0, 2),
        'b': (1, 2),
        'c': (0, 1),
    }
