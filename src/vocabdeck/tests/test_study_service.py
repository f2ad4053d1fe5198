"""Tests for study service."""
import json
from datetime import timedelta

import pytest
from faker import Faker
from sqlalchemy.exc import OperationalError

from vocabdeck.models.srs_models import IntervalTable, StudyState, WordStat
from vocabdeck.services.state_store import StateStore
from vocabdeck.services.study_service import StudyService
from vocabdeck.services.transfer_service import StateImportError

fake = Faker()


@pytest.fixture
def store(mocker):
    """A mocked state store."""
    return mocker.Mock(spec=StateStore)


@pytest.fixture
def study_service(store) -> StudyService:
    """Create a study service backed by the mocked store."""
    return StudyService(StudyState(), store, "test")


def test_record_correct_answer(study_service, store, today) -> None:
    """Test that a correct answer promotes and counts."""
    word = fake.word()

    stat = study_service.record_answer(word, True, today)

    assert stat.correct_count == 1
    assert stat.incorrect_count == 0
    assert stat.srs_level == 1
    assert stat.next_review == today + timedelta(days=1)
    assert stat.last_reviewed == today
    assert study_service.get_stat(word) == stat
    store.save.assert_called_once_with("test", study_service.state)


def test_record_incorrect_answer(study_service, today) -> None:
    """Test that a wrong answer demotes and counts."""
    study_service.state.word_stats["abate"] = WordStat(correct_count=5, srs_level=5)

    stat = study_service.record_answer("abate", False, today)

    assert stat.correct_count == 5
    assert stat.incorrect_count == 1
    assert stat.srs_level == 2
    assert stat.next_review == today + timedelta(days=1)


def test_answers_follow_configured_intervals(study_service, today) -> None:
    """Test that answers use the session's interval table."""
    study_service.update_intervals({1: 2, 2: 4})

    first = study_service.record_answer("abate", True, today)
    second = study_service.record_answer("abate", True, today)
    third = study_service.record_answer("abate", True, today)

    assert first.next_review == today + timedelta(days=2)
    assert second.next_review == today + timedelta(days=4)
    assert third.srs_level == 2


def test_answer_keeps_flags(study_service, today) -> None:
    """Test that answering leaves favorite and known flags alone."""
    study_service.toggle_favorite("abate")

    stat = study_service.record_answer("abate", True, today)

    assert stat.is_favorite is True
    assert stat.is_known is False


def test_toggle_favorite_creates_stat(study_service, store) -> None:
    """Test that toggling a new word lazily creates its stat."""
    assert "abate" not in study_service.state.word_stats

    assert study_service.toggle_favorite("abate") is True
    assert study_service.state.word_stats["abate"] == WordStat(is_favorite=True)
    assert study_service.toggle_favorite("abate") is False
    assert study_service.favorite_words() == []
    assert store.save.call_count == 2


def test_toggle_known_preserves_schedule(study_service, today) -> None:
    """Test that known words keep their level and schedule but are not due."""
    study_service.record_answer("abate", True, today)
    before = study_service.get_stat("abate")

    assert study_service.toggle_known("abate") is True
    after = study_service.get_stat("abate")
    assert after.srs_level == before.srs_level
    assert after.next_review == before.next_review
    assert study_service.due_words(today + timedelta(days=30)) == []
    assert study_service.known_words() == ["abate"]

    assert study_service.toggle_known("abate") is False
    assert study_service.due_words(today + timedelta(days=30)) == ["abate"]


def test_difficult_words_view(study_service, today) -> None:
    """Test the difficult words queue and difficulty lookup."""
    study_service.record_answer("abate", False, today)
    study_service.record_answer("abate", False, today)
    study_service.record_answer("banal", True, today)
    study_service.record_answer("candid", False, today)
    study_service.toggle_known("candid")
    study_service.toggle_favorite("dearth")

    assert study_service.difficult_words(today) == ["abate", "banal"]
    assert study_service.difficulty("abate", today) == 10
    assert study_service.difficulty("unseen", today) == 0


def test_review_forecast(study_service, today) -> None:
    """Test that the forecast groups upcoming reviews by date."""
    study_service.record_answer("abate", True, today)
    study_service.record_answer("banal", False, today)

    assert study_service.review_forecast() == {today + timedelta(days=1): ["abate", "banal"]}


def test_save_failure_is_not_raised(study_service, store, today, caplog) -> None:
    """Test that a failed save is logged and the state is kept."""
    store.save.side_effect = OperationalError("INSERT", {}, Exception("disk full"))

    stat = study_service.record_answer("abate", True, today)

    assert study_service.get_stat("abate") == stat
    assert "Failed to save state" in caplog.text


def test_without_store(today) -> None:
    """Test that the service works purely in memory."""
    service = StudyService()

    service.record_answer("abate", True, today)

    assert service.get_stat("abate").srs_level == 1
    assert service.intervals.max_level == 8


def test_update_intervals(study_service, store) -> None:
    """Test interval configuration and reset."""
    table = study_service.set_interval(1, 2)
    assert table[1] == 2
    assert study_service.intervals[1] == 2

    with pytest.raises(ValueError):
        study_service.update_intervals({1: 0})
    assert study_service.intervals[1] == 2

    study_service.reset_intervals()
    assert study_service.intervals == IntervalTable.default()
    assert store.save.call_count == 2


def test_set_interval_cannot_skip_a_level(study_service, store) -> None:
    """Test that adding a level beyond the next one is rejected and nothing is saved."""
    with pytest.raises(ValueError):
        study_service.set_interval(10, 500)

    assert study_service.intervals.max_level == 8
    store.save.assert_not_called()

    study_service.set_interval(9, 480)
    assert study_service.intervals.max_level == 9
    assert study_service.intervals[9] == 480


def test_create_list(study_service) -> None:
    """Test that list names must be unique and non-blank."""
    assert study_service.create_list("  Week 1 ") is True
    assert study_service.create_list("Week 1") is False
    assert study_service.create_list("   ") is False
    assert [custom_list.name for custom_list in study_service.custom_lists] == ["Week 1"]


def test_toggle_word_in_list(study_service) -> None:
    """Test list membership toggling."""
    study_service.create_list("Week 1")
    study_service.create_list("Week 2")

    assert study_service.toggle_word_in_list("Week 1", "abate") is True
    assert study_service.toggle_word_in_list("Week 2", "abate") is True
    assert study_service.is_word_in_list("Week 1", "abate")
    assert study_service.lists_containing("abate") == ["Week 1", "Week 2"]
    assert study_service.toggle_word_in_list("Week 1", "abate") is False
    assert not study_service.is_word_in_list("Week 1", "abate")
    assert not study_service.is_word_in_list("Missing", "abate")

    with pytest.raises(ValueError):
        study_service.toggle_word_in_list("Missing", "abate")


def test_delete_list(study_service) -> None:
    """Test deleting a list."""
    study_service.create_list("Week 1")

    assert study_service.delete_list("Week 1") is True
    assert study_service.delete_list("Week 1") is False
    assert study_service.custom_lists == []


def test_import_file(study_service, store, tmp_path) -> None:
    """Test that a valid import replaces the state."""
    path = tmp_path / "progress.json"
    path.write_text(json.dumps({
        "wordStats": {"abate": {"isFavorite": True, "srsLevel": 2, "nextReview": "2024-05-04"}},
        "customLists": [{"name": "Week 1", "words": ["abate"]}],
        "srsIntervals": {"1": 1, "2": 3},
    }))

    state = study_service.import_file(path)

    assert study_service.state is state
    assert study_service.get_stat("abate").srs_level == 2
    assert study_service.intervals.max_level == 2
    store.save.assert_called_once_with("test", state)


def test_import_file_rejected_keeps_state(study_service, store, tmp_path, today) -> None:
    """Test that an invalid import leaves the previous state in place."""
    study_service.record_answer("abate", True, today)
    previous = study_service.state
    store.save.reset_mock()
    path = tmp_path / "progress.json"
    path.write_text(json.dumps({"wordStats": [], "customLists": []}))

    with pytest.raises(StateImportError):
        study_service.import_file(path)

    assert study_service.state is previous
    assert study_service.get_stat("abate").srs_level == 1
    store.save.assert_not_called()


def test_load_from_store(mocker) -> None:
    """Test creating the service from a stored session."""
    state = StudyState(word_stats={"abate": WordStat(is_known=True)})
    store = mocker.Mock(spec=StateStore)
    store.load.return_value = state

    service = StudyService.load(store, "alice")

    store.load.assert_called_once_with("alice")
    assert service.state is state
    assert service.session_key == "alice"
