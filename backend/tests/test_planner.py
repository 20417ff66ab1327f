import pytest

from conftest import make_room
from sentrydash.core.errors import NotFoundError, ValidationError
from sentrydash.services import planner


def test_overflow_math():
    source = make_room("A101", capacity=30, current_count=35)

    assert planner.overflow(source) == 5
    assert planner.overflow(make_room(capacity=30, current_count=30)) == 0
    assert planner.overflow(make_room(capacity=30, current_count=3)) == 0


def test_available_never_negative():
    assert planner.available(make_room(capacity=40, current_count=33)) == 7
    assert planner.available(make_room(capacity=10, current_count=12)) == 0


def test_distance_treats_missing_location_as_origin():
    a = make_room("A", location=(3, 4))
    b = make_room("B")

    assert planner.distance(a, b) == pytest.approx(5.0)
    assert planner.distance(b, b) == 0.0


def test_candidate_threshold():
    rooms = [
        make_room("A101", capacity=30, current_count=35),
        make_room("B1", capacity=40, current_count=33, location=(1, 0)),
        make_room("B2", capacity=40, current_count=36, location=(2, 0)),
    ]

    ranked = planner.rank_candidates(rooms, "A101", min_available=5)

    assert [c.id for c in ranked] == ["B1"]
    assert ranked[0].available == 7


def test_scenario_nearest_room_too_small():
    rooms = [
        make_room("A101", capacity=30, current_count=35, location=(0, 0)),
        make_room("NEAR", capacity=20, current_count=17, location=(5, 0)),
        make_room("FAR", capacity=40, current_count=30, location=(50, 0)),
    ]

    suggestion = planner.suggest(rooms, "A101", planner.overflow(rooms[0]))

    assert suggestion is not None
    assert suggestion.id == "FAR"
    assert suggestion.available == 10
    assert suggestion.distance == pytest.approx(50.0)


def test_candidates_sorted_by_distance():
    rooms = [
        make_room("SRC", capacity=10, current_count=20, location=(0, 0)),
        make_room("R3", capacity=50, location=(30, 40)),
        make_room("R1", capacity=50, location=(1, 1)),
        make_room("R2", capacity=50, location=(-6, 8)),
    ]

    ranked = planner.rank_candidates(rooms, "SRC", 10)
    distances = [c.distance for c in ranked]

    assert [c.id for c in ranked] == ["R1", "R2", "R3"]
    assert distances == sorted(distances)


def test_ties_keep_input_order():
    rooms = [
        make_room("SRC", location=(0, 0)),
        make_room("EAST", location=(5, 0)),
        make_room("NORTH", location=(0, 5)),
        make_room("WEST", location=(-5, 0)),
    ]

    assert [c.id for c in planner.rank_candidates(rooms, "SRC", 1)] == ["EAST", "NORTH", "WEST"]
    assert planner.suggest(rooms, "SRC", 1).id == "EAST"


def test_repeated_calls_are_deterministic():
    rooms = [make_room("SRC", current_count=40)] + [
        make_room(f"R{i}", location=(i % 3, 0)) for i in range(6)
    ]

    first = planner.suggest(rooms, "SRC", 10)

    for _ in range(5):
        assert planner.suggest(rooms, "SRC", 10) == first


def test_zero_threshold_needs_a_free_seat():
    rooms = [
        make_room("SRC", location=(0, 0)),
        make_room("FULL", capacity=10, current_count=10, location=(1, 0)),
        make_room("OPEN", capacity=10, current_count=9, location=(9, 0)),
    ]

    assert planner.suggest(rooms, "SRC", 0).id == "OPEN"


def test_source_is_never_suggested():
    rooms = [make_room("SRC", capacity=100, current_count=0)]

    assert planner.suggest(rooms, "SRC", 0) is None


def test_no_qualifying_room_returns_none():
    rooms = [
        make_room("SRC", capacity=10, current_count=30),
        make_room("SMALL", capacity=10, current_count=5),
    ]

    assert planner.suggest(rooms, "SRC", 20) is None


def test_unknown_source():
    with pytest.raises(NotFoundError):
        planner.suggest([make_room("A")], "B", 1)


def test_negative_threshold_rejected():
    with pytest.raises(ValidationError):
        planner.rank_candidates([make_room("A")], "A", -1)
