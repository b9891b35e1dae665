"""Pydantic schemas for the chart cache."""

from __future__ import annotations

from datetime import date
from typing import Any
from urllib.parse import quote

from pydantic import BaseModel, Field


class CacheKey(BaseModel):
    """Composite cache key: subject, computation kind, bucket date, schema version."""

    subject_id: str = Field(min_length=1, alias="subjectId")
    computation_kind: str = Field(min_length=1, alias="computationKind")
    bucket_date: date = Field(alias="bucketDate")
    schema_version: int = Field(ge=1, alias="schemaVersion")

    model_config = {"frozen": True, "populate_by_name": True}

    def storage_key(self, prefix: str) -> str:
        """Render the key for a flat key-value store.

        Components are percent-encoded so a ':' inside a subject id cannot
        collide with another key's field boundary.
        """
        parts = (
            quote(self.computation_kind, safe=""),
            quote(self.subject_id, safe=""),
            self.bucket_date.isoformat(),
        )
        return f"{prefix}:v{self.schema_version}:" + ":".join(parts)


class CacheEntry(BaseModel):
    """A stored computation result and the local date it was created for."""

    key: CacheKey
    value: Any
    created_for: date = Field(alias="createdAtLocalDate")

    model_config = {"frozen": True, "populate_by_name": True}
