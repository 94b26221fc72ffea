"""Request/response models for the review API."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator

from src.core.config import DEFAULT_NAMESPACE


class AcceptRequest(BaseModel):
    """Body of ``POST /api/accept``."""

    model_config = ConfigDict(populate_by_name=True)

    ids: list[StrictInt] | Literal["all"]
    job_id: str | None = Field(default=None, alias="jobId")

    @field_validator("ids")
    @classmethod
    def ids_not_empty(cls, v: list[int] | str) -> list[int] | str:
        if isinstance(v, list) and not v:
            msg = "ids array is empty"
            raise ValueError(msg)
        return v

    @property
    def namespace(self) -> str | None:
        """``"review"`` and missing both select the default namespace."""
        if self.job_id in (None, "", DEFAULT_NAMESPACE):
            return None
        return self.job_id


class JobEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    label: str
    has_suggestions: bool = Field(alias="hasSuggestions")


class JobsResponse(BaseModel):
    jobs: list[JobEntry]
