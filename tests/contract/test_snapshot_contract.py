"""
Contract tests for the VATSIM snapshot feed.

Validates that recorded feed documents parse into the board's records.
These tests run independently (no network required).
"""

import json
import pytest
from pathlib import Path
import sys

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from contracts.validation import (
    validate_controller_record,
    validate_pilot_record,
    validate_snapshot_document,
)


def load_example(filename: str) -> dict:
    """Load example JSON file."""
    example_path = Path(__file__).parent.parent.parent / "contracts" / "examples" / filename
    with open(example_path) as f:
        return json.load(f)


class TestSnapshotContract:
    """Test that feed documents match the snapshot contract."""

    def test_snapshot_example_validates(self):
        """Test that the recorded snapshot validates."""
        example = load_example("vatsim_snapshot.json")
        is_valid, document, error = validate_snapshot_document(example)

        assert is_valid, f"Example should validate: {error}"
        assert document is not None
        assert len(document.controllers) == 8
        assert len(document.pilots) == 8

    def test_invalid_records_are_dropped_not_fatal(self):
        """Test that one bad record does not fail the whole snapshot."""
        example = load_example("vatsim_snapshot.json")
        is_valid, document, error = validate_snapshot_document(example)

        assert is_valid, f"Example should validate: {error}"
        assert document.rejected_controllers == 1  # empty callsign
        assert document.rejected_pilots == 1  # latitude out of range
        assert "" not in [c.callsign for c in document.controllers]

    def test_update_timestamp_parsed(self):
        """Test that general.update_timestamp is parsed."""
        example = load_example("vatsim_snapshot.json")
        _, document, _ = validate_snapshot_document(example)

        assert document.update_timestamp is not None
        assert document.update_timestamp.year == 2026

    def test_missing_controllers_fails(self):
        """Test that a snapshot without controllers fails validation."""
        example = load_example("vatsim_snapshot.json")
        del example["controllers"]

        is_valid, document, error = validate_snapshot_document(example)
        assert not is_valid, "Should fail without controllers list"
        assert document is None
        assert "controllers" in error

    def test_missing_pilots_fails(self):
        """Test that a snapshot without pilots fails validation."""
        example = load_example("vatsim_snapshot.json")
        example["pilots"] = None

        is_valid, _, error = validate_snapshot_document(example)
        assert not is_valid, "Should fail without pilots list"

    def test_non_object_document_fails(self):
        """Test that a non-object document fails validation."""
        is_valid, _, error = validate_snapshot_document(["controllers", "pilots"])
        assert not is_valid
        assert "object" in error

    def test_empty_collections_validate(self):
        """Test that an empty network is a valid snapshot."""
        is_valid, document, error = validate_snapshot_document({"controllers": [], "pilots": []})

        assert is_valid, f"Should allow empty collections: {error}"
        assert document.controllers == ()
        assert document.pilots == ()
        assert document.update_timestamp is None

    def test_non_dict_records_are_rejected(self):
        """Test that records that are not objects are counted as rejected."""
        is_valid, document, _ = validate_snapshot_document({"controllers": ["EGLL_TWR"], "pilots": [42]})

        assert is_valid
        assert document.rejected_controllers == 1
        assert document.rejected_pilots == 1


class TestRecordContract:
    """Test individual controller and pilot records."""

    def test_controller_optional_fields(self):
        """Test that name and frequency are optional."""
        is_valid, record, error = validate_controller_record({"callsign": "EGCC_DEL"})

        assert is_valid, f"Should allow missing name/frequency: {error}"
        assert record.name is None
        assert record.frequency is None

    def test_controller_requires_callsign(self):
        """Test that a controller without callsign fails."""
        is_valid, _, _ = validate_controller_record({"name": "No Callsign"})
        assert not is_valid

    def test_controller_ignores_extra_fields(self):
        """Test that unknown feed fields are ignored."""
        is_valid, record, error = validate_controller_record(
            {"callsign": "EGLL_N_TWR", "cid": 1, "text_atis": ["line"], "rating": 3}
        )
        assert is_valid, f"Should ignore extra fields: {error}"
        assert record.callsign == "EGLL_N_TWR"

    def test_pilot_missing_kinematics_tolerated(self):
        """Test that groundspeed, altitude and flight plan may be absent."""
        is_valid, record, error = validate_pilot_record({"latitude": 51.0, "longitude": -1.0})

        assert is_valid, f"Should tolerate missing kinematics: {error}"
        assert record.groundspeed is None
        assert record.altitude is None
        assert record.flight_plan is None

    def test_pilot_invalid_position(self):
        """Test that an impossible position fails validation."""
        is_valid, _, _ = validate_pilot_record({"latitude": 51.0, "longitude": -181.0})
        assert not is_valid, "Should fail with invalid longitude"

        is_valid, _, _ = validate_pilot_record({"latitude": 91.0, "longitude": 0.0})
        assert not is_valid, "Should fail with invalid latitude"

    def test_records_are_immutable(self):
        """Test that records cannot be mutated after validation."""
        _, record, _ = validate_controller_record({"callsign": "EGLL_N_TWR"})

        with pytest.raises(Exception):
            record.callsign = "EGKK_TWR"
