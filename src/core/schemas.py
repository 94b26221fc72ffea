"""Core data models for suggestions, apply results, and job search results.

On-disk and over-the-wire JSON uses camelCase keys (``generatedAt``,
``jobUrl``); the models accept either form and dump camelCase with
``by_alias=True``.
"""

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

SuggestionType = Literal["rewrite", "restructure", "add", "remove"]
ChangeAction = Literal["approved", "edited", "manual", "skipped"]

_CAMEL = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Suggestion(BaseModel):
    """One proposed edit to the profile, addressed by a path string.

    Frozen. Edits produce a copy via ``model_copy(update={"suggested": ...})``.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    section: str
    type: SuggestionType
    current: str = ""
    suggested: str = ""
    reason: str = ""
    principle: str = ""


class SuggestionsFile(BaseModel):
    """Contents of ``suggestions.json`` for one namespace."""

    model_config = _CAMEL

    generated_at: str = ""
    job_id: str | None = None
    suggestions: list[Suggestion] = Field(default_factory=list)


class ApplyResult(BaseModel):
    """Outcome of a batch apply.

    ``applied`` lists every id the caller asked for, whether or not its path
    resolved. ``unresolved`` is the subset whose path matched nothing, so the
    profile was left as it was for those ids.
    """

    model_config = _CAMEL

    applied: list[int] = Field(default_factory=list)
    skipped: list[int] = Field(default_factory=list)
    backup_created: bool = False
    unresolved: list[int] = Field(default_factory=list)


class ChangelogEntry(BaseModel):
    """A single review decision, written as one markdown line."""

    model_config = ConfigDict(frozen=True)

    action: ChangeAction
    section: str
    principle: str
    type: SuggestionType
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def for_suggestion(cls, suggestion: Suggestion, action: ChangeAction) -> "ChangelogEntry":
        return cls(
            action=action,
            section=suggestion.section,
            principle=suggestion.principle,
            type=suggestion.type,
        )

    def to_line(self) -> str:
        ts = self.timestamp.isoformat(timespec="milliseconds").replace("+00:00", "Z")
        return f"- [{ts}] **{self.action}** {self.section} ({self.principle}): {self.type}\n"


class SalaryRange(BaseModel):
    """Normalized pay range. Either bound may be unknown, not both."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    min_amount: float | None = None
    max_amount: float | None = None
    interval: str | None = None
    currency: str | None = None

    def describe(self) -> str:
        cur = f"{self.currency} " if self.currency else ""
        if self.min_amount is not None and self.max_amount is not None:
            text = f"{cur}{self.min_amount:,.0f}-{self.max_amount:,.0f}"
        else:
            amount = self.min_amount if self.min_amount is not None else self.max_amount
            text = f"{cur}{amount:,.0f}"
        return f"{text}/{self.interval}" if self.interval else text


class JobResult(BaseModel):
    """A job listing normalized from any source.

    Frozen. Identity for dedup is the canonicalized ``job_url``.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    title: str
    company: str
    location: str
    job_url: str
    source: str
    is_remote: bool = False
    date_posted: str | None = None
    salary: SalaryRange | None = None
    description: str = ""


class SearchOptions(BaseModel):
    """Options bag for a search. ``None`` means the source's own default."""

    model_config = ConfigDict(frozen=True)

    site: str | None = None
    location: str | None = None
    remote: bool | None = None
    results: int | None = Field(default=None, ge=1)
    job_type: str | None = None
    hours_old: int | None = Field(default=None, ge=1)
    greenhouse_boards: list[str] = Field(default_factory=list)
    lever_sites: list[str] = Field(default_factory=list)

    def cache_key(self) -> str:
        """Stable serialization used as the cache sub-key."""
        return self.model_dump_json()
