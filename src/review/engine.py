"""Apply engine: mutates the profile from suggestions and persists the result.

Data flow for one commit:
  1. Backup the profile file (at most once per batch or session)
  2. Load the live profile (missing profile is fatal)
  3. Apply each suggestion through its resolved (parent, key)
  4. Append a changelog line per decision
  5. Atomic write of the profile
"""

import logging
from collections.abc import Collection, Sequence
from dataclasses import dataclass, field
from typing import Any, Literal

from src.core.schemas import ApplyResult, ChangeAction, ChangelogEntry, Suggestion
from src.core.store import ProfileNotFoundError, ProfileStore, SuggestionStore
from src.review.paths import resolve_path

logger = logging.getLogger(__name__)

ALL = "all"

MANUAL_ID_BASE = 9000


def try_apply(suggestion: Suggestion, profile: Any) -> bool:
    """Apply one suggestion in place. Returns False if its path did not resolve."""
    resolved = resolve_path(profile, suggestion.section)
    if resolved is None:
        return False

    parent, key = resolved
    if suggestion.type == "remove":
        if isinstance(parent, list):
            if key < len(parent):  # type: ignore[operator]
                del parent[key]  # type: ignore[arg-type]
        else:
            parent.pop(key, None)  # type: ignore[arg-type]
    elif isinstance(parent, list) and key == len(parent):
        parent.append(suggestion.suggested)
    else:
        parent[key] = suggestion.suggested  # type: ignore[index]
    return True


def apply_suggestion(suggestion: Suggestion, profile: Any) -> Any:
    """Apply one suggestion in place and return the profile for chaining.

    ``remove`` splices list items and deletes map keys; every other type
    assigns ``suggested`` at the path. An unresolvable path leaves the
    profile untouched.
    """
    try_apply(suggestion, profile)
    return profile


def partition(
    suggestions: Sequence[Suggestion],
    ids: Collection[int] | Literal["all"],
) -> tuple[list[Suggestion], list[int]]:
    """Split suggestions into (to_apply, skipped_ids), keeping file order."""
    to_apply: list[Suggestion] = []
    skipped: list[int] = []
    for s in suggestions:
        if ids == ALL or s.id in ids:
            to_apply.append(s)
        else:
            skipped.append(s.id)
    return to_apply, skipped


@dataclass
class CommitOutcome:
    backup_created: bool
    unresolved: list[int] = field(default_factory=list)


class ApplyEngine:
    """Applies suggestions to the stored profile with backup and changelog."""

    def __init__(self, profiles: ProfileStore, suggestions: SuggestionStore) -> None:
        self.profiles = profiles
        self.suggestions = suggestions

    def apply_by_ids(
        self,
        ids: Collection[int] | Literal["all"],
        job_id: str | None = None,
    ) -> ApplyResult:
        """Batch-apply the suggestions whose id is in ``ids`` (or all of them).

        A missing suggestions file is an empty no-op. A missing profile is
        fatal only when something is selected for apply.
        """
        data = self.suggestions.load(job_id)
        if data is None or not data.suggestions:
            return ApplyResult()

        to_apply, skipped = partition(data.suggestions, ids)
        if not to_apply:
            logger.info("No suggestions matched ids %s", ids)
            return ApplyResult(skipped=skipped)

        outcome = self.commit(to_apply, job_id, action="approved", backup=True)
        return ApplyResult(
            applied=[s.id for s in to_apply],
            skipped=skipped,
            backup_created=outcome.backup_created,
            unresolved=outcome.unresolved,
        )

    def commit(
        self,
        batch: Sequence[Suggestion],
        job_id: str | None,
        *,
        action: ChangeAction,
        backup: bool,
    ) -> CommitOutcome:
        """Apply ``batch`` to the stored profile and write it back once.

        The backup, when requested, is taken before the profile is loaded
        so it always holds the pre-change file.
        """
        backup_created = self.profiles.backup() if backup else False

        profile = self.profiles.load()
        if profile is None:
            raise ProfileNotFoundError

        unresolved: list[int] = []
        for s in batch:
            if not try_apply(s, profile):
                unresolved.append(s.id)
                logger.debug("Suggestion #%d path '%s' did not resolve", s.id, s.section)
            self.suggestions.append_changelog(job_id, ChangelogEntry.for_suggestion(s, action))

        self.profiles.save(profile)
        logger.info("Applied %d suggestion(s) (%s)", len(batch), action)
        return CommitOutcome(backup_created=backup_created, unresolved=unresolved)

    def log_skip(self, suggestion: Suggestion, job_id: str | None) -> None:
        self.suggestions.append_changelog(job_id, ChangelogEntry.for_suggestion(suggestion, "skipped"))


@dataclass
class Decision:
    id: int
    section: str
    action: ChangeAction


class ReviewSession:
    """One-at-a-time decisions over the same commit path as batch apply.

    The profile is backed up before the first change of the session only.
    """

    def __init__(self, engine: ApplyEngine, job_id: str | None = None) -> None:
        self._engine = engine
        self.job_id = job_id
        self.backup_created = False
        self.decisions: list[Decision] = []

    @property
    def changes_applied(self) -> int:
        return sum(1 for d in self.decisions if d.action != "skipped")

    def approve(self, suggestion: Suggestion) -> bool:
        return self._apply(suggestion, "approved")

    def edit(self, suggestion: Suggestion, text: str) -> bool:
        """Apply the user's own wording in place of ``suggested``."""
        if not text:
            self.pass_over(suggestion)
            return False
        return self._apply(suggestion.model_copy(update={"suggested": text}), "edited")

    def manual(self, section: str, text: str, position: int) -> Suggestion | None:
        """Apply a user-written rewrite at ``section``. None on empty input."""
        if not section or not text:
            return None
        suggestion = Suggestion(
            id=MANUAL_ID_BASE + position,
            section=section,
            type="rewrite",
            current="(manual)",
            suggested=text,
            reason="Manual user addition",
            principle="user",
        )
        self._apply(suggestion, "manual")
        return suggestion

    def skip(self, suggestion: Suggestion) -> None:
        self._engine.log_skip(suggestion, self.job_id)
        self._record(suggestion, "skipped")

    def pass_over(self, suggestion: Suggestion) -> None:
        """Count as skipped without writing a changelog line."""
        self._record(suggestion, "skipped")

    def by_action(self, action: ChangeAction) -> list[Decision]:
        return [d for d in self.decisions if d.action == action]

    def _apply(self, suggestion: Suggestion, action: ChangeAction) -> bool:
        outcome = self._engine.commit(
            [suggestion], self.job_id, action=action, backup=not self.backup_created,
        )
        self.backup_created = self.backup_created or outcome.backup_created
        self._record(suggestion, action)
        return not outcome.unresolved

    def _record(self, suggestion: Suggestion, action: ChangeAction) -> None:
        self.decisions.append(Decision(suggestion.id, suggestion.section, action))
