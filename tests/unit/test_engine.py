"""Tests for the apply engine: single suggestions, batch apply, review sessions."""

import copy
import json
from pathlib import Path

import pytest

from src.core.config import StorageConfig
from src.core.schemas import Suggestion, SuggestionsFile
from src.core.store import ProfileNotFoundError, ProfileStore, SuggestionStore
from src.review.engine import (
    ApplyEngine,
    ReviewSession,
    apply_suggestion,
    partition,
    try_apply,
)

PROFILE = {
    "name": "Test User",
    "email": "test@example.com",
    "summary": "Original summary text",
    "experience": [
        {
            "company": "Company A",
            "title": "Engineer",
            "bullets": ["First bullet", "Old bullet", "Third bullet"],
        },
        {
            "company": "Company B",
            "title": "Junior Dev",
            "bullets": ["Remove me", "Keep me"],
        },
    ],
    "skills": [{"category": "Languages", "items": ["Go", "Python", "TypeScript", "SQL"]}],
}

SUGGESTIONS = [
    {"id": 1, "section": "summary", "type": "rewrite", "current": "Original summary text",
     "suggested": "Backend engineer who cut deploy times 80%", "reason": "Specific",
     "principle": "6-second scan"},
    {"id": 2, "section": "experience[0].bullets[1]", "type": "rewrite", "current": "Old bullet",
     "suggested": "New XYZ bullet with metrics", "reason": "XYZ", "principle": "XYZ formula"},
    {"id": 3, "section": "experience[1].bullets[0]", "type": "remove", "current": "Remove me",
     "suggested": "", "reason": "Weak", "principle": "relevance"},
    {"id": 4, "section": "skills[0].items[2]", "type": "rewrite", "current": "TypeScript",
     "suggested": "TypeScript/JavaScript", "reason": "Complete", "principle": "keyword match"},
]


def _suggestion(section: str, type_: str = "rewrite", suggested: str = "", id_: int = 99) -> Suggestion:
    return Suggestion(id=id_, section=section, type=type_, suggested=suggested,  # type: ignore[arg-type]
                      reason="test", principle="test")


def _profile() -> dict:
    return copy.deepcopy(PROFILE)


@pytest.fixture
def storage(tmp_path: Path) -> StorageConfig:
    return StorageConfig(data_dir=str(tmp_path / "data"))


@pytest.fixture
def engine(storage: StorageConfig) -> ApplyEngine:
    return ApplyEngine(ProfileStore(storage), SuggestionStore(storage))


def _write_profile(storage: StorageConfig, profile: dict | None = None) -> None:
    storage.root.mkdir(parents=True, exist_ok=True)
    storage.profile_path.write_text(json.dumps(profile if profile is not None else PROFILE))


def _write_suggestions(storage: StorageConfig, job_id: str = "review", items: list | None = None) -> None:
    d = storage.output_dir / job_id
    d.mkdir(parents=True, exist_ok=True)
    data = {"generatedAt": "2026-01-01T00:00:00Z", "jobId": None if job_id == "review" else job_id,
            "suggestions": SUGGESTIONS if items is None else items}
    (d / "suggestions.json").write_text(json.dumps(data))


def _disk_profile(storage: StorageConfig) -> dict:
    return json.loads(storage.profile_path.read_text())


# ---------------------------------------------------------------------------
# apply_suggestion
# ---------------------------------------------------------------------------


class TestApplySuggestion:
    def test_rewrites_top_level_field(self) -> None:
        result = apply_suggestion(_suggestion("summary", suggested="New summary"), _profile())
        assert result["summary"] == "New summary"

    def test_returns_same_object(self) -> None:
        profile = _profile()
        assert apply_suggestion(_suggestion("summary", suggested="x"), profile) is profile

    def test_rewrites_nested_element_leaving_siblings(self) -> None:
        result = apply_suggestion(
            _suggestion("experience[0].bullets[1]", suggested="Improved bullet"), _profile(),
        )
        assert result["experience"][0]["bullets"] == ["First bullet", "Improved bullet", "Third bullet"]
        assert result["experience"][1] == PROFILE["experience"][1]

    def test_rewrites_deep_path(self) -> None:
        result = apply_suggestion(_suggestion("skills[0].items[2]", suggested="TS/JS"), _profile())
        assert result["skills"][0]["items"] == ["Go", "Python", "TS/JS", "SQL"]

    def test_add_creates_missing_map_key(self) -> None:
        result = apply_suggestion(_suggestion("headline", "add", "Backend engineer"), _profile())
        assert result["headline"] == "Backend engineer"

    def test_add_at_list_end_appends(self) -> None:
        result = apply_suggestion(
            _suggestion("experience[1].bullets[2]", "add", "New bullet"), _profile(),
        )
        assert result["experience"][1]["bullets"] == ["Remove me", "Keep me", "New bullet"]

    def test_restructure_assigns(self) -> None:
        result = apply_suggestion(_suggestion("experience[0].title", "restructure", "Lead"), _profile())
        assert result["experience"][0]["title"] == "Lead"

    def test_remove_splices_list(self) -> None:
        profile = _profile()
        before = len(profile["experience"][1]["bullets"])
        result = apply_suggestion(_suggestion("experience[1].bullets[0]", "remove"), profile)
        assert len(result["experience"][1]["bullets"]) == before - 1
        assert result["experience"][1]["bullets"][0] == "Keep me"

    def test_remove_shifts_following_items(self) -> None:
        result = apply_suggestion(_suggestion("skills[0].items[1]", "remove"), _profile())
        assert result["skills"][0]["items"] == ["Go", "TypeScript", "SQL"]

    def test_remove_deletes_map_key(self) -> None:
        result = apply_suggestion(_suggestion("summary", "remove"), _profile())
        assert "summary" not in result

    def test_remove_absent_key_is_noop(self) -> None:
        profile = _profile()
        apply_suggestion(_suggestion("headline", "remove"), profile)
        assert profile == PROFILE

    def test_remove_at_append_slot_is_noop(self) -> None:
        profile = _profile()
        apply_suggestion(_suggestion("experience[1].bullets[2]", "remove"), profile)
        assert profile == PROFILE

    @pytest.mark.parametrize(
        "section",
        ["nonexistent[99].deep.path", "summary.text", "experience[7].title", "", "skills[0].items[9]"],
    )
    def test_unresolved_path_leaves_profile_identical(self, section: str) -> None:
        profile = _profile()
        before = json.dumps(profile)
        result = apply_suggestion(_suggestion(section, suggested="x"), profile)
        assert json.dumps(result) == before

    def test_try_apply_reports_resolution(self) -> None:
        assert try_apply(_suggestion("summary", suggested="x"), _profile()) is True
        assert try_apply(_suggestion("a.b.c", suggested="x"), _profile()) is False


class TestPartition:
    def test_all(self) -> None:
        items = [Suggestion.model_validate(s) for s in SUGGESTIONS]
        to_apply, skipped = partition(items, "all")
        assert [s.id for s in to_apply] == [1, 2, 3, 4]
        assert skipped == []

    def test_keeps_file_order(self) -> None:
        items = [Suggestion.model_validate(s) for s in SUGGESTIONS]
        to_apply, skipped = partition(items, {4, 1})
        assert [s.id for s in to_apply] == [1, 4]
        assert skipped == [2, 3]

    def test_duplicate_ids_classified_together(self) -> None:
        items = [_suggestion("summary", id_=1), _suggestion("name", id_=1), _suggestion("email", id_=2)]
        to_apply, skipped = partition(items, [1])
        assert [s.section for s in to_apply] == ["summary", "name"]
        assert skipped == [2]


# ---------------------------------------------------------------------------
# ApplyEngine.apply_by_ids
# ---------------------------------------------------------------------------


class TestApplyByIds:
    def test_missing_suggestions_is_empty_noop(self, engine: ApplyEngine, storage: StorageConfig) -> None:
        _write_profile(storage)
        result = engine.apply_by_ids("all")
        assert result.applied == []
        assert result.skipped == []
        assert result.backup_created is False
        assert not storage.backup_path.exists()

    def test_empty_suggestions_is_noop(self, engine: ApplyEngine, storage: StorageConfig) -> None:
        _write_suggestions(storage, items=[])
        result = engine.apply_by_ids("all")
        assert result.applied == [] and result.skipped == []

    def test_all_applies_every_suggestion(self, engine: ApplyEngine, storage: StorageConfig) -> None:
        _write_profile(storage)
        _write_suggestions(storage)
        result = engine.apply_by_ids("all")
        assert result.applied == [1, 2, 3, 4]
        assert result.skipped == []
        assert result.backup_created is True

        profile = _disk_profile(storage)
        assert profile["summary"] == "Backend engineer who cut deploy times 80%"
        assert profile["experience"][0]["bullets"][1] == "New XYZ bullet with metrics"
        assert profile["experience"][1]["bullets"] == ["Keep me"]
        assert profile["skills"][0]["items"][2] == "TypeScript/JavaScript"

    def test_selected_ids_only(self, engine: ApplyEngine, storage: StorageConfig) -> None:
        _write_profile(storage)
        _write_suggestions(storage)
        result = engine.apply_by_ids([1, 3])
        assert result.applied == [1, 3]
        assert result.skipped == [2, 4]

        profile = _disk_profile(storage)
        assert profile["experience"][0]["bullets"][1] == "Old bullet"
        assert profile["skills"][0]["items"][2] == "TypeScript"

    def test_unknown_id_touches_nothing(self, engine: ApplyEngine, storage: StorageConfig) -> None:
        _write_profile(storage)
        _write_suggestions(storage)
        before = storage.profile_path.read_bytes()

        result = engine.apply_by_ids([999])

        assert result.applied == []
        assert result.skipped == [1, 2, 3, 4]
        assert result.backup_created is False
        assert storage.profile_path.read_bytes() == before
        assert not storage.backup_path.exists()

    def test_unknown_id_without_profile_is_not_an_error(
        self, engine: ApplyEngine, storage: StorageConfig,
    ) -> None:
        _write_suggestions(storage)
        result = engine.apply_by_ids([999])
        assert result.skipped == [1, 2, 3, 4]

    def test_missing_profile_is_fatal(self, engine: ApplyEngine, storage: StorageConfig) -> None:
        _write_suggestions(storage)
        with pytest.raises(ProfileNotFoundError, match="No profile found"):
            engine.apply_by_ids("all")

    def test_backup_holds_pre_change_profile(self, engine: ApplyEngine, storage: StorageConfig) -> None:
        _write_profile(storage)
        _write_suggestions(storage)
        engine.apply_by_ids("all")
        assert json.loads(storage.backup_path.read_text()) == PROFILE

    def test_backup_taken_once_per_call(
        self, engine: ApplyEngine, storage: StorageConfig, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        _write_profile(storage)
        _write_suggestions(storage)
        calls: list[int] = []
        original = engine.profiles.backup

        def counting_backup() -> bool:
            calls.append(1)
            return original()

        monkeypatch.setattr(engine.profiles, "backup", counting_backup)
        engine.apply_by_ids("all")
        assert len(calls) == 1

    def test_unresolved_ids_still_count_as_applied(
        self, engine: ApplyEngine, storage: StorageConfig,
    ) -> None:
        _write_profile(storage)
        _write_suggestions(storage, items=[
            {"id": 1, "section": "summary", "type": "rewrite", "suggested": "New"},
            {"id": 2, "section": "missing[0].path", "type": "rewrite", "suggested": "x"},
        ])
        result = engine.apply_by_ids("all")
        assert result.applied == [1, 2]
        assert result.unresolved == [2]
        assert _disk_profile(storage)["summary"] == "New"

    def test_job_namespace(self, engine: ApplyEngine, storage: StorageConfig) -> None:
        _write_profile(storage)
        _write_suggestions(storage, job_id="acme-123")
        assert engine.apply_by_ids("all").applied == []
        assert engine.apply_by_ids("all", "acme-123").applied == [1, 2, 3, 4]

    def test_changelog_line_per_suggestion(self, engine: ApplyEngine, storage: StorageConfig) -> None:
        _write_profile(storage)
        _write_suggestions(storage)
        engine.apply_by_ids([1, 2])
        log = (storage.output_dir / "review" / "changelog.md").read_text()
        assert log.startswith("# Review Changelog")
        entries = [line for line in log.splitlines() if line.startswith("- [")]
        assert len(entries) == 2
        assert "**approved** summary (6-second scan): rewrite" in entries[0]

    def test_no_temp_file_left(self, engine: ApplyEngine, storage: StorageConfig) -> None:
        _write_profile(storage)
        _write_suggestions(storage)
        engine.apply_by_ids("all")
        assert not storage.profile_path.with_name("profile.json.tmp").exists()


# ---------------------------------------------------------------------------
# ReviewSession
# ---------------------------------------------------------------------------


class TestReviewSession:
    def test_approve_applies_and_backs_up_once(self, engine: ApplyEngine, storage: StorageConfig) -> None:
        _write_profile(storage)
        session = ReviewSession(engine)
        session.approve(_suggestion("summary", suggested="First change", id_=1))
        backup_after_first = storage.backup_path.read_text()
        session.approve(_suggestion("name", suggested="Renamed", id_=2))

        assert session.backup_created is True
        assert storage.backup_path.read_text() == backup_after_first
        assert json.loads(backup_after_first)["summary"] == "Original summary text"
        profile = _disk_profile(storage)
        assert profile["summary"] == "First change"
        assert profile["name"] == "Renamed"
        assert session.changes_applied == 2

    def test_edit_overrides_suggested(self, engine: ApplyEngine, storage: StorageConfig) -> None:
        _write_profile(storage)
        session = ReviewSession(engine)
        original = _suggestion("summary", suggested="Their version", id_=1)
        session.edit(original, "My version")
        assert _disk_profile(storage)["summary"] == "My version"
        assert original.suggested == "Their version"
        assert session.by_action("edited")[0].id == 1

    def test_edit_with_empty_text_is_skip(self, engine: ApplyEngine, storage: StorageConfig) -> None:
        _write_profile(storage)
        session = ReviewSession(engine)
        assert session.edit(_suggestion("summary", id_=1), "") is False
        assert session.by_action("skipped")[0].id == 1
        assert not storage.backup_path.exists()

    def test_manual_uses_reserved_ids(self, engine: ApplyEngine, storage: StorageConfig) -> None:
        _write_profile(storage)
        session = ReviewSession(engine)
        manual = session.manual("experience[0].bullets[0]", "Shipped X", position=2)
        assert manual is not None
        assert manual.id == 9002
        assert manual.principle == "user"
        assert _disk_profile(storage)["experience"][0]["bullets"][0] == "Shipped X"

    def test_manual_empty_input(self, engine: ApplyEngine, storage: StorageConfig) -> None:
        _write_profile(storage)
        session = ReviewSession(engine)
        assert session.manual("", "text", position=0) is None
        assert session.manual("summary", "", position=0) is None
        assert session.decisions == []

    def test_skip_logs_changelog(self, engine: ApplyEngine, storage: StorageConfig) -> None:
        session = ReviewSession(engine, "acme")
        session.skip(_suggestion("summary", id_=5))
        log = (storage.output_dir / "acme" / "changelog.md").read_text()
        assert "**skipped** summary" in log
        assert session.changes_applied == 0

    def test_approve_without_profile_raises(self, engine: ApplyEngine) -> None:
        session = ReviewSession(engine)
        with pytest.raises(ProfileNotFoundError):
            session.approve(_suggestion("summary", suggested="x"))
        assert session.decisions == []


class TestSuggestionsFileModel:
    def test_camel_case_round_trip_keys(self) -> None:
        data = SuggestionsFile.model_validate(
            {"generatedAt": "2026-01-01T00:00:00Z", "jobId": "x", "suggestions": SUGGESTIONS},
        )
        dumped = data.model_dump(by_alias=True)
        assert dumped["generatedAt"] == "2026-01-01T00:00:00Z"
        assert dumped["jobId"] == "x"
        assert len(dumped["suggestions"]) == 4
