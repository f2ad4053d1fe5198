"""Tests for export and import of study state."""
import json
from datetime import date

import pytest

from vocabdeck.models.srs_models import CustomList, IntervalTable, StudyState, WordStat
from vocabdeck.services.transfer_service import (
    StateImportError,
    export_filename,
    export_state,
    import_state,
    read_import,
    write_export,
)


@pytest.fixture
def state() -> StudyState:
    return StudyState(
        word_stats={
            "abate": WordStat(
                correct_count=1,
                srs_level=1,
                next_review=date(2024, 5, 2),
                last_reviewed=date(2024, 5, 1),
            ),
            "banal": WordStat(is_known=True),
        },
        custom_lists=[CustomList(name="Week 1", words=["abate", "banal"])],
        srs_intervals=IntervalTable({1: 1, 2: 4}),
    )


def test_export_shape(state: StudyState) -> None:
    """Test the exported structure."""
    data = export_state(state)

    assert set(data) == {"wordStats", "customLists", "srsIntervals"}
    assert data["wordStats"]["abate"]["nextReview"] == "2024-05-02"
    assert data["customLists"] == [{"name": "Week 1", "words": ["abate", "banal"]}]
    assert data["srsIntervals"] == {"1": 1, "2": 4}


def test_write_and_read(state: StudyState, tmp_path) -> None:
    """Test that an exported file imports back to the same state."""
    path = write_export(state, tmp_path / "progress.json")

    assert json.loads(path.read_text(encoding="utf-8"))["wordStats"]["banal"]["isKnown"] is True
    assert read_import(path) == state


def test_write_to_directory(state: StudyState, tmp_path) -> None:
    """Test that exporting to a directory uses a dated file name."""
    path = write_export(state, tmp_path)

    assert path.parent == tmp_path
    assert path.name == export_filename()


def test_export_filename() -> None:
    assert export_filename(date(2024, 5, 1)) == "vocab-progress-2024-05-01.json"


def test_import_without_intervals() -> None:
    """Test that missing intervals fall back to the default table."""
    state = import_state({"wordStats": {}, "customLists": []})

    assert state.srs_intervals == IntervalTable.default()


def test_import_removes_duplicate_list_words() -> None:
    state = import_state({"wordStats": {}, "customLists": [{"name": "A", "words": ["x", "y", "x"]}]})

    assert state.custom_lists[0].words == ["x", "y"]


@pytest.mark.parametrize(
    "payload",
    [
        [],
        "wordStats",
        {"customLists": []},
        {"wordStats": [], "customLists": []},
        {"wordStats": {}, "customLists": {}},
        {"wordStats": {}, "customLists": "Week 1"},
        {"wordStats": {}},
        {"wordStats": {"abate": {"srsLevel": -1}}, "customLists": []},
        {"wordStats": {"abate": "known"}, "customLists": []},
        {"wordStats": {}, "customLists": [{"words": []}]},
        {"wordStats": {}, "customLists": [{"name": "A"}, {"name": "A"}]},
        {"wordStats": {}, "customLists": [{"name": "A", "words": [1, 2]}]},
        {"wordStats": {}, "customLists": [], "srsIntervals": {"1": 0}},
        {"wordStats": {}, "customLists": [], "srsIntervals": [1, 3, 7]},
        {"wordStats": {"abate": {"srsLevel": 99}}, "customLists": []},
        {"wordStats": {"abate": {"srsLevel": 3}}, "customLists": [], "srsIntervals": {"1": 1, "2": 3}},
        {"wordStats": {}, "customLists": [], "srsIntervals": {"1": 1, "3": 7}},
        {"wordStats": {"abate": {"nextReview": "20240501"}}, "customLists": []},
    ],
)
def test_import_rejects_invalid(payload) -> None:
    """Test that any invalid part rejects the whole import."""
    with pytest.raises(StateImportError):
        import_state(payload)


def test_read_import_errors(tmp_path) -> None:
    """Test unreadable files."""
    with pytest.raises(StateImportError):
        read_import(tmp_path / "missing.json")

    broken = tmp_path / "broken.json"
    broken.write_text("{not json")
    with pytest.raises(StateImportError):
        read_import(broken)


def test_read_import_directory(tmp_path) -> None:
    """Test that a directory path is reported as an import error."""
    with pytest.raises(StateImportError):
        read_import(tmp_path)


def test_import_accepts_level_at_table_ceiling() -> None:
    payload = {
        "wordStats": {"abate": {"srsLevel": 2}},
        "customLists": [],
        "srsIntervals": {"1": 1, "2": 3},
    }

    assert import_state(payload).get_stat("abate").srs_level == 2
