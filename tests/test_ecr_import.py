"""Tests for importing ECR parameters into xenomythology form state."""

from datetime import datetime, timezone

from worldsheet_kernel.implications.engine import ImplicationEngine
from worldsheet_kernel.links.ecr_import import (
    import_from_ecr,
    import_preview,
    mapped_parameters,
    merge_import,
)
from worldsheet_kernel.models.worksheet import Worksheet


def _make_ecr(parameter: dict, synthesis=None) -> Worksheet:
    now = datetime.now(timezone.utc)
    return Worksheet(
        id="ecr_1",
        world_id="world_1",
        tool_type="environmental-chain-reaction",
        title="Locked World",
        data={"parameter": parameter, "synthesis": synthesis or {}},
        created_at=now,
        updated_at=now,
    )


class TestMappedParameters:
    def test_single_mode_uses_specific_value(self):
        params = mapped_parameters({"parameter": {"mode": "single", "type": "rotation", "specificValue": "locked"}})
        assert [(p.field, p.value, p.source) for p in params] == [
            ("dayNightCycle", "tidally-locked", "rotation: locked"),
        ]

    def test_single_mode_without_specific_value(self):
        params = mapped_parameters({"parameter": {"mode": "single", "type": "stellar", "specificValue": ""}})
        assert params[0].value == "g-class"
        assert params[0].source == "stellar: selected"

    def test_multiple_mode(self):
        params = mapped_parameters({
            "parameter": {
                "mode": "multiple",
                "types": ["hydrosphere", "tilt", "unknown"],
                "specificValues": {"hydrosphere": "desert", "tilt": "chaotic"},
            }
        })
        assert [(p.field, p.value) for p in params] == [
            ("planetType", "desert"),
            ("seasonalVariation", "chaotic"),
        ]

    def test_multiple_mode_source_falls_back_to_type(self):
        params = mapped_parameters({
            "parameter": {
                "mode": "multiple",
                "types": ["rotation", "stellar"],
                "specificValues": {"rotation": "locked"},
            }
        })
        assert [p.source for p in params] == ["rotation: locked", "stellar: stellar"]

    def test_malformed_payload_imports_nothing(self):
        assert mapped_parameters({}) == []
        assert mapped_parameters({"parameter": "rotation"}) == []
        assert mapped_parameters({"parameter": {"mode": "multiple", "types": "rotation"}}) == []


class TestImportPreview:
    def test_story_potential_adds_sky_row(self):
        data = {
            "parameter": {"mode": "single", "type": "gravity", "specificValue": "high"},
            "synthesis": {"storyPotential": "Giants"},
        }
        fields = [p.field for p in import_preview(data)]
        assert fields == ["planetType", "skyAppearance"]


class TestImportFromEcr:
    def test_later_mapping_overwrites_same_field(self):
        ecr = _make_ecr({
            "mode": "multiple",
            "types": ["gravity", "hydrosphere"],
            "specificValues": {"gravity": "high", "hydrosphere": "ocean"},
        })
        imported = import_from_ecr(ecr, link=False)
        assert imported["planetaryConditions"]["planetType"] == "ocean-world"
        assert "_linkedWorksheets" not in imported

    def test_link_stamp(self):
        ecr = _make_ecr({"mode": "single", "type": "rotation", "specificValue": "locked"})
        now = datetime(2026, 5, 1, tzinfo=timezone.utc)
        imported = import_from_ecr(ecr, link=True, now=now)
        assert imported["_linkedWorksheets"] == {
            "ecrWorksheetId": "ecr_1",
            "lastSyncedAt": now.isoformat(),
        }

    def test_blank_fields_are_present(self):
        ecr = _make_ecr({"mode": "single", "type": "rotation", "specificValue": "locked"})
        conditions = import_from_ecr(ecr, link=False)["planetaryConditions"]
        assert conditions["stellarEnvironment"] == ""
        assert len(conditions) == 8


class TestMergeImport:
    def test_blank_import_values_keep_user_values(self):
        form = {"planetaryConditions": {"geographicDiversity": "fragmented", "dayNightCycle": "regular"}}
        ecr = _make_ecr({"mode": "single", "type": "rotation", "specificValue": "locked"})
        merged = merge_import(form, import_from_ecr(ecr, link=False))
        assert merged["planetaryConditions"]["geographicDiversity"] == "fragmented"
        assert merged["planetaryConditions"]["dayNightCycle"] == "tidally-locked"
        assert form["planetaryConditions"]["dayNightCycle"] == "regular"

    def test_imported_conditions_drive_implications(self):
        ecr = _make_ecr({"mode": "single", "type": "rotation", "specificValue": "locked"})
        merged = merge_import({}, import_from_ecr(ecr))
        ids = [i.id for i in ImplicationEngine().evaluate(merged)]
        assert ids == ["twilight-sacred"]
