"""Unit tests for chain session persistence.

Tests the ChainSession dataclass and the functions that persist it for
resumable chain merges.
"""

from __future__ import annotations

import json

import pytest

from merge_chain.errors import CorruptStateError
from merge_chain.merge.state import (
    STATE_VERSION,
    ChainSession,
    clear_state,
    get_state_path,
    has_active_merge,
    load_state,
    save_state,
)


class TestChainSessionDataclass:
    """Tests for ChainSession projections."""

    def test_begin_targets_branch_after_start(self):
        session = ChainSession.begin(3, 8, "Add syscall")
        assert session.next_index == 4
        assert session.current_target == "ch4"
        assert session.remaining == 5
        assert session.completed_branches == []
        assert session.last_error is None

    def test_completed_and_pending(self):
        session = ChainSession(start=3, end=8, origin_message="m", next_index=6)
        assert session.completed_branches == ["ch4", "ch5"]
        assert session.pending_branches == ["ch6", "ch7", "ch8"]
        assert session.remaining == 3

    def test_remaining_matches_end_minus_next_plus_one(self):
        session = ChainSession(start=1, end=4, origin_message="m", next_index=4)
        assert session.remaining == 4 - 4 + 1

    def test_complete_when_next_passes_end(self):
        session = ChainSession(start=1, end=4, origin_message="m", next_index=5)
        assert session.is_complete
        assert session.current_target is None
        assert session.pending_branches == []
        assert session.progress_percent == 100.0

    def test_progress_percent_partial(self):
        session = ChainSession(start=0, end=4, origin_message="m", next_index=3)
        assert session.progress_percent == 50.0

    def test_record_interruption(self):
        session = ChainSession.begin(3, 5, "Add syscall")
        session.record_interruption(5, "merge_conflict")
        assert session.next_index == 5
        assert session.last_error == "merge_conflict"

    def test_to_dict(self):
        session = ChainSession(start=3, end=5, origin_message="Add syscall", next_index=5)
        d = session.to_dict()
        assert d["version"] == STATE_VERSION
        assert d["start"] == 3
        assert d["end"] == 5
        assert d["origin_message"] == "Add syscall"
        assert d["next"] == 5

    def test_from_dict(self):
        data = {
            "version": STATE_VERSION,
            "start": 3,
            "end": 5,
            "origin_message": "Add syscall",
            "next": 5,
            "started_at": "2026-01-18T10:00:00+00:00",
            "updated_at": "2026-01-18T10:30:00+00:00",
            "last_error": "merge_conflict",
        }
        session = ChainSession.from_dict(data)
        assert session.start == 3
        assert session.next_index == 5
        assert session.started_at == "2026-01-18T10:00:00+00:00"
        assert session.last_error == "merge_conflict"

    @pytest.mark.parametrize(
        "overrides",
        [
            {"version": 99},
            {"start": "3"},
            {"end": 2},
            {"next": 3},
            {"next": 7},
            {"origin_message": None},
            {"start": True},
        ],
    )
    def test_from_dict_rejects_inconsistent_records(self, overrides):
        data = {"version": STATE_VERSION, "start": 3, "end": 5, "origin_message": "m", "next": 4}
        data.update(overrides)
        with pytest.raises(ValueError):
            ChainSession.from_dict(data)


class TestStatePersistence:
    """Tests for save_state, load_state and clear_state."""

    def test_save_and_load_state(self, tmp_path):
        session = ChainSession(start=3, end=5, origin_message="Add syscall", next_index=5)
        save_state(session, tmp_path)

        loaded = load_state(tmp_path)
        assert loaded is not None
        assert (loaded.start, loaded.end, loaded.origin_message, loaded.next_index) == (
            3,
            5,
            "Add syscall",
            5,
        )

    def test_message_with_quotes_and_newlines_survives(self, tmp_path):
        message = 'Add "fork" syscall\n\nLonger body with  spaces'
        save_state(ChainSession.begin(1, 2, message), tmp_path)
        assert load_state(tmp_path).origin_message == message

    def test_get_state_path(self, tmp_path):
        assert get_state_path(tmp_path) == tmp_path / ".merge_chain_state.json"
        assert get_state_path(tmp_path, "custom.json") == tmp_path / "custom.json"

    def test_load_state_missing_file(self, tmp_path):
        assert load_state(tmp_path) is None

    def test_load_state_invalid_json_is_corrupt(self, tmp_path):
        get_state_path(tmp_path).write_text("not valid json{", encoding="utf-8")
        with pytest.raises(CorruptStateError) as exc_info:
            load_state(tmp_path)
        assert exc_info.value.hint and "abort" in exc_info.value.hint

    def test_load_state_legacy_text_record_is_corrupt(self, tmp_path):
        get_state_path(tmp_path).write_text('3 5 "Add syscall" 5\n', encoding="utf-8")
        with pytest.raises(CorruptStateError):
            load_state(tmp_path)

    def test_load_state_missing_fields(self, tmp_path):
        get_state_path(tmp_path).write_text(
            json.dumps({"version": STATE_VERSION, "start": 1}), encoding="utf-8"
        )
        with pytest.raises(CorruptStateError):
            load_state(tmp_path)

    def test_save_leaves_no_temp_file(self, tmp_path):
        save_state(ChainSession.begin(1, 3, "m"), tmp_path)
        assert [p.name for p in tmp_path.iterdir()] == [".merge_chain_state.json"]

    def test_save_overwrites_previous_record(self, tmp_path):
        session = ChainSession.begin(1, 4, "m")
        save_state(session, tmp_path)
        session.advance_to(4)
        save_state(session, tmp_path)
        assert load_state(tmp_path).next_index == 4

    def test_clear_state(self, tmp_path):
        save_state(ChainSession.begin(1, 2, "m"), tmp_path)
        assert clear_state(tmp_path) is True
        assert not get_state_path(tmp_path).exists()

    def test_clear_state_no_file(self, tmp_path):
        assert clear_state(tmp_path) is False


class TestHasActiveMerge:
    def test_no_state_file(self, tmp_path):
        assert has_active_merge(tmp_path) is False

    def test_state_file_present(self, tmp_path):
        save_state(ChainSession.begin(1, 2, "m"), tmp_path)
        assert has_active_merge(tmp_path) is True

    def test_corrupt_file_still_counts_as_active(self, tmp_path):
        get_state_path(tmp_path).write_text("garbage", encoding="utf-8")
        assert has_active_merge(tmp_path) is True
