# tests/test_report_store.py
import pytest

from compliance_health_check.core.exceptions import ReportNotFoundError
from compliance_health_check.core.scoring_engine import score


def save(store, owner, answers, follow_ups=None):
    return store.save_result(owner, score(answers, follow_ups or {}), answers, follow_ups or {})


def test_save_and_load_round_trip(report_store):
    answers = {1: "No", 5: "No"}
    follow_ups = {5: "3"}
    result = score(answers, follow_ups)

    record_id = report_store.save_result("founder-1", result, answers, follow_ups)

    assert report_store.load_result(record_id) == result
    record = report_store.load_record(record_id)
    assert record.owner_id == "founder-1"
    assert record.answers == {"1": "No", "5": "No"}
    assert record.follow_up_answers == {"5": "3"}
    assert record.version == "1.0"
    assert record.risk_level == "critical"


def test_stored_file_uses_camel_case(report_store):
    record_id = save(report_store, "founder-1", {1: "Yes"})
    (path,) = report_store.data_directory.glob(f"*/{record_id}.json")
    text = path.read_text(encoding="utf-8")
    assert '"overallScore": 100' in text
    assert '"ownerId": "founder-1"' in text


def test_unknown_and_malformed_ids(report_store):
    with pytest.raises(ReportNotFoundError):
        report_store.load_record("0" * 32)
    with pytest.raises(ReportNotFoundError):
        report_store.load_record("../secrets")


def test_other_owners_records_are_not_found(report_store):
    record_id = save(report_store, "founder-1", {1: "Yes"})
    assert report_store.load_record_for_owner(record_id, "founder-1").id == record_id
    with pytest.raises(ReportNotFoundError):
        report_store.load_record_for_owner(record_id, "founder-2")


def test_history_is_newest_first_and_paginated(report_store, clock):
    ids = []
    for _ in range(5):
        ids.append(save(report_store, "founder-1", {1: "Yes"}))
        clock.advance(days=1)
    save(report_store, "founder-2", {1: "No"})

    first_page = report_store.history("founder-1", limit=2, page=1)
    assert [r.id for r in first_page["history"]] == [ids[4], ids[3]]
    assert first_page["pagination"] == {
        "current_page": 1,
        "total_results": 5,
        "total_pages": 3,
        "has_next": True,
        "has_prev": False,
    }

    last_page = report_store.history("founder-1", limit=2, page=3)
    assert [r.id for r in last_page["history"]] == [ids[0]]
    assert last_page["pagination"]["has_next"] is False
    assert last_page["pagination"]["has_prev"] is True


def test_latest_and_improvement(report_store, clock):
    assert report_store.latest("founder-1") is None

    save(report_store, "founder-1", {1: "No"})
    first = report_store.latest("founder-1")
    assert report_store.improvement(first) is None

    clock.advance(days=2, hours=3)
    save(report_store, "founder-1", {1: "Not Sure"})
    latest = report_store.latest("founder-1")

    assert latest.score == 30
    assert report_store.improvement(latest) == {
        "score_change": 30,
        "previous_score": 0,
        "current_score": 30,
        "days_between": 3,
    }


def test_stats(report_store, clock):
    for answers in ({1: "Yes"}, {1: "No"}, {1: "Not Sure"}):
        save(report_store, "founder-1", answers)
        clock.advance(days=1)

    stats = report_store.stats("founder-1")
    assert stats["total_assessments"] == 3
    assert stats["average_score"] == 43.33
    assert stats["highest_score"] == 100
    assert stats["lowest_score"] == 0
    assert stats["trend"] == "improving"
    assert stats["risk_distribution"] == {"low": 1, "medium": 0, "high": 0, "critical": 2}
    assert stats["last_assessment"] == report_store.latest("founder-1").assessment_date


def test_stats_without_records(report_store):
    stats = report_store.stats("nobody")
    assert stats["total_assessments"] == 0
    assert stats["trend"] == "no-data"
    assert stats["last_assessment"] is None


def test_declining_and_stable_trend(report_store, clock):
    save(report_store, "a", {1: "Yes"})
    clock.advance(days=1)
    save(report_store, "a", {1: "No"})
    assert report_store.stats("a")["trend"] == "declining"

    save(report_store, "b", {1: "Yes"})
    clock.advance(days=1)
    save(report_store, "b", {4: "Yes"})
    assert report_store.stats("b")["trend"] == "stable"


def test_records_are_grouped_by_owner(report_store):
    first = save(report_store, "founder-1", {1: "Yes"})
    second = save(report_store, "founder-2", {1: "No"})

    (first_path,) = report_store.data_directory.glob(f"*/{first}.json")
    (second_path,) = report_store.data_directory.glob(f"*/{second}.json")
    assert first_path.parent != second_path.parent
    assert list(first_path.parent.glob("*.json")) == [first_path]


def test_save_leaves_no_temp_files(report_store):
    record_id = save(report_store, "founder-1", {1: "Yes"})
    (path,) = report_store.data_directory.glob(f"*/{record_id}.json")
    assert [p.name for p in path.parent.iterdir()] == [path.name]


def test_unreadable_files_are_skipped(report_store, clock):
    save(report_store, "founder-1", {1: "No"})
    clock.advance(days=1)
    latest_id = save(report_store, "founder-1", {1: "Yes"})

    (path,) = report_store.data_directory.glob(f"*/{latest_id}.json")
    (path.parent / "notes.json").write_text("{}", encoding="utf-8")
    (path.parent / "truncated.json").write_text(path.read_text(encoding="utf-8")[:40], encoding="utf-8")
    (path.parent / "binary.json").write_bytes(b"\xff\xfe\x00")

    history = report_store.history("founder-1")
    assert history["pagination"]["total_results"] == 2
    assert report_store.latest("founder-1").id == latest_id
    assert report_store.stats("founder-1")["total_assessments"] == 2


def test_truncated_record_is_not_found(report_store):
    record_id = save(report_store, "founder-1", {1: "Yes"})
    (path,) = report_store.data_directory.glob(f"*/{record_id}.json")
    path.write_text(path.read_text(encoding="utf-8")[:40], encoding="utf-8")

    with pytest.raises(ReportNotFoundError):
        report_store.load_record(record_id)
