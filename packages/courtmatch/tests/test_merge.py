"""Tests for fill-gaps-only and overwrite merging."""

from courtmatch.merge import is_absent, merge_fields

LINKED = {
    "indoor_courts": "indoor_court_count",
    "price_peak_cents": "price_per_hour_cents",
}


def test_existing_value_is_kept_in_fill_gaps_mode():
    existing = {"surface_type": "Artificial Grass"}
    research = {"surface_type": "Turf"}
    assert merge_fields(existing, research) == {}


def test_existing_value_is_overwritten_with_overwrite():
    existing = {"surface_type": "Artificial Grass"}
    research = {"surface_type": "Turf"}
    assert merge_fields(existing, research, overwrite=True) == {"surface_type": "Turf"}


def test_gaps_are_filled():
    existing = {"surface_type": None, "total_courts": 0, "price_per_hour_cents": 6000}
    research = {"surface_type": "Artificial Grass", "total_courts": 4, "price_per_hour_cents": 8000}
    assert merge_fields(existing, research) == {
        "surface_type": "Artificial Grass",
        "total_courts": 4,
    }


def test_missing_column_counts_as_gap():
    assert merge_fields({}, {"total_courts": 3}) == {"total_courts": 3}


def test_none_research_values_are_never_written():
    assert merge_fields({"surface_type": None}, {"surface_type": None}, overwrite=True) == {}


def test_follower_written_with_leader():
    existing = {"price_per_hour_cents": None, "price_peak_cents": 9000}
    research = {"price_per_hour_cents": 6000, "price_peak_cents": 8000}
    payload = merge_fields(existing, research, linked=LINKED)
    assert payload == {"price_per_hour_cents": 6000, "price_peak_cents": 8000}


def test_follower_not_written_without_leader():
    existing = {"price_per_hour_cents": 6000, "price_peak_cents": None}
    research = {"price_per_hour_cents": 7000, "price_peak_cents": 8000}
    assert merge_fields(existing, research, linked=LINKED) == {}


def test_boolean_follower():
    existing = {"indoor_court_count": None, "indoor_courts": False}
    research = {"indoor_court_count": 4, "indoor_courts": True}
    payload = merge_fields(existing, research, linked=LINKED)
    assert payload == {"indoor_court_count": 4, "indoor_courts": True}


def test_unlinked_fields_merge_independently():
    existing = {"price_per_hour_cents": 6000, "price_peak_cents": None}
    research = {"price_per_hour_cents": 7000, "price_peak_cents": 8000}
    assert merge_fields(existing, research) == {"price_peak_cents": 8000}


class TestIsAbsent:
    def test_gaps(self):
        assert is_absent(None)
        assert is_absent("")
        assert is_absent(0)
        assert is_absent(0.0)

    def test_values(self):
        assert not is_absent(False)
        assert not is_absent("Artificial Grass")
        assert not is_absent(4)
        assert not is_absent(True)
