"""Tests for the deactivation denylist."""

import json
from pathlib import Path

import pytest

from courtmatch.denylist import Denylist, should_deactivate


def test_exact_name_is_deactivated():
    assert should_deactivate("Court 3", ["Court 3"]) is True


def test_superstring_is_not_deactivated():
    assert should_deactivate("Tennis Court 3 Club", ["Court 3"]) is False


def test_prefix_is_not_deactivated():
    assert should_deactivate("Golden Padel Club", ["Golden Padel"]) is False


def test_case_and_punctuation_insensitive():
    assert should_deactivate("PICKLEBALL-LAB", ["pickleball lab"]) is True


def test_empty_denylist():
    assert should_deactivate("Court 3", []) is False


class TestDenylist:
    def test_contains(self):
        denylist = Denylist(["Court 3", "Prime Padel Shop"])
        assert "court 3" in denylist
        assert "Prime Padel Shop" in denylist
        assert "Prime Padel Shop Miami" not in denylist
        assert len(denylist) == 2

    def test_should_deactivate_matches_function(self):
        names = ["Padel Courts", "Turf and Courts"]
        denylist = Denylist(names)
        for candidate in ["Padel Courts", "padel-courts", "Padel Courts Farmington", "Turf & Courts"]:
            assert denylist.should_deactivate(candidate) == should_deactivate(candidate, names)

    def test_load(self, tmp_path: Path):
        path = tmp_path / "junk.json"
        path.write_text(json.dumps(["Court 1", "Court 2"]))
        denylist = Denylist.load(path)
        assert denylist.names == ["Court 1", "Court 2"]

    def test_load_rejects_non_list(self, tmp_path: Path):
        path = tmp_path / "junk.json"
        path.write_text(json.dumps({"names": ["Court 1"]}))
        with pytest.raises(ValueError):
            Denylist.load(path)

    def test_load_missing_file(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            Denylist.load(tmp_path / "missing.json")
