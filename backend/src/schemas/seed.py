"""Pydantic schemas for the seed dataset (`data.json`)."""
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# Records are written as-is through the document service, which validates them
# against the content-type registry; here they stay plain dicts.
SeedRecord = dict[str, Any]


class KnowledgeBaseSeed(BaseModel):
    """The knowledge-base families. Any of them may be absent."""

    model_config = ConfigDict(populate_by_name=True)

    global_: SeedRecord | None = Field(default=None, alias="global")
    audiences: list[SeedRecord] | None = None
    collections: list[SeedRecord] | None = None
    articles: list[SeedRecord] | None = None
    release_notes: list[SeedRecord] | None = Field(default=None, alias="releaseNotes")


class SeedDataset(BaseModel):
    """Every family of demo records, keyed the way `data.json` keys them."""

    model_config = ConfigDict(populate_by_name=True)

    categories: list[SeedRecord] = Field(default_factory=list)
    authors: list[SeedRecord] = Field(default_factory=list)
    articles: list[SeedRecord] = Field(default_factory=list)
    global_: SeedRecord | None = Field(default=None, alias="global")
    about: SeedRecord | None = None
    knowledge_base: KnowledgeBaseSeed | None = Field(default=None, alias="knowledgeBase")
