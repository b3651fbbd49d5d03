"""Tests for leaderboard listings and best-ghost lookup."""

import pytest

from ghostboard.core.errors import NotFoundError
from ghostboard.services.leaderboard import attach_ghost, submit
from ghostboard.services.queries import (
    RecordFilters,
    best_ghost,
    list_records,
    open_best_ghost,
)

from .helpers import ghost_form, lap


@pytest.fixture
def populated(store):
    submit(store, lap(driver__steamID64="A", track=2, car=1, timing=95.0))
    submit(store, lap(driver__steamID64="B", track=2, car=3, timing=90.0, name=""))
    submit(store, lap(driver__steamID64="C", track=2, car=1, weather=4, timing=95.0))
    submit(store, lap(driver__steamID64="D", track=5, car=1, timing=10.0))
    return store


def test_wildcard_listing_sorted_by_timing(populated):
    out = list_records(populated, RecordFilters(car=-1, track=2, layout=-1, condition=-1, weather=-1))
    assert [r["driver__steamID64"] for r in out] == ["B", "A", "C"]
    timings = [r["timing"] for r in out]
    assert timings == sorted(timings)


def test_wildcard_equals_omitted(populated):
    explicit = list_records(populated, RecordFilters(car=-1, track=-1, layout=-1, condition=-1, weather=-1))
    omitted = list_records(populated, RecordFilters())
    assert explicit == omitted
    assert len(omitted) == 4


def test_exact_filters(populated):
    out = list_records(populated, RecordFilters(car=1, track=2, weather=0))
    assert [r["driver__steamID64"] for r in out] == ["A"]


def test_projection_hides_blob_fields_and_empty_name(populated):
    out = list_records(populated, RecordFilters(track=2, car=3))
    assert out == [
        {
            "id": 2,
            "driver__steamID64": "B",
            "car": 3,
            "track": 2,
            "layout": 0,
            "condition": 0,
            "weather": 0,
            "timing": 90.0,
        }
    ]
    named = list_records(populated, RecordFilters(car=1, track=5))[0]
    assert named["name"] == "Alice"
    assert "sha256" not in named and "ghostPath" not in named


def test_best_ghost_requires_attached_blob(populated, local_ghosts):
    combo = RecordFilters(car=1, track=2, layout=0, condition=0, weather=0)
    with pytest.raises(NotFoundError):
        best_ghost(populated, combo)

    slow, fast = b"slow ghost", b"fast ghost"
    attach_ghost(populated, local_ghosts, ghost_form(slow, driver__steamID64="A", timing="95.0"), slow)
    attach_ghost(populated, local_ghosts, ghost_form(fast, driver__steamID64="E", timing="80.0"), fast)

    assert best_ghost(populated, combo).driver_id == "E"
    assert best_ghost(populated, combo, driver_id="A").driver_id == "A"
    with pytest.raises(NotFoundError):
        best_ghost(populated, combo, driver_id="B")

    record, blob = open_best_ghost(populated, local_ghosts, combo)
    assert record.driver_id == "E"
    assert blob.length == len(fast)
    assert blob.read() == fast
