"""Tests for the path accessor."""

import pytest

from worldsheet_kernel.paths.accessor import MISSING, get_path, has_path, last_segment


PLANET = {
    "stellarEnvironment": {"starType": "K-type", "tidalLocking": False},
    "atmosphericComposition": {"primaryGases": ["N2", "O2"], "notes": None},
    "dayLength": 26,
}


class TestGetPath:
    def test_top_level_field(self):
        assert get_path(PLANET, "dayLength") == 26

    def test_nested_field(self):
        assert get_path(PLANET, "stellarEnvironment.starType") == "K-type"

    def test_false_is_a_value(self):
        assert get_path(PLANET, "stellarEnvironment.tidalLocking") is False

    def test_null_is_a_value(self):
        assert get_path(PLANET, "atmosphericComposition.notes") is None
        assert has_path(PLANET, "atmosphericComposition.notes")

    def test_list_is_returned_whole(self):
        assert get_path(PLANET, "atmosphericComposition.primaryGases") == ["N2", "O2"]

    def test_missing_leaf(self):
        assert get_path(PLANET, "stellarEnvironment.luminosity") is MISSING

    def test_missing_branch(self):
        assert get_path(PLANET, "hydrosphere.waterPresence") is MISSING

    def test_default_is_returned_when_missing(self):
        assert get_path(PLANET, "hydrosphere.waterPresence", default="") == ""


class TestPathTotality:
    @pytest.mark.parametrize("record", [{}, None, [], "text", 42, {"a": None}])
    def test_never_raises_on_any_record(self, record):
        assert get_path(record, "a.b.c") is MISSING

    def test_lists_are_not_indexed(self):
        assert get_path(PLANET, "atmosphericComposition.primaryGases.0") is MISSING

    def test_path_longer_than_record(self):
        assert get_path(PLANET, "dayLength.hours.minutes") is MISSING

    def test_through_scalar(self):
        assert get_path(PLANET, "stellarEnvironment.starType.length") is MISSING

    def test_empty_path(self):
        assert get_path(PLANET, "") is MISSING

    def test_non_string_path(self):
        assert get_path(PLANET, None) is MISSING

    def test_missing_is_falsy(self):
        assert not MISSING
        assert repr(MISSING) == "MISSING"


class TestLastSegment:
    def test_nested(self):
        assert last_segment("sensoryArchitecture.primaryModalities") == "primaryModalities"

    def test_flat(self):
        assert last_segment("gravity") == "gravity"
