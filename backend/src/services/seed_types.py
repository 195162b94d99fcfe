"""Value types shared by the seed pipeline."""
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from models.entry import Entry


@dataclass(frozen=True)
class EntryRef:
    """
    Canonical identity of an entry for relation references.

    Built once from whatever the store returned (an Entry or a plain mapping);
    the document id wins over the row id when both are present.
    """

    document_id: str | None = None
    id: int | None = None

    @classmethod
    def from_entry(cls, entry: Any) -> "EntryRef":
        """Build a ref from an Entry, a mapping with documentId/id keys, a ref, or None."""
        if entry is None:
            return cls()
        if isinstance(entry, EntryRef):
            return entry
        if isinstance(entry, Mapping):
            return cls(document_id=entry.get("documentId"), id=entry.get("id"))
        return cls(
            document_id=getattr(entry, "document_id", None),
            id=getattr(entry, "id", None),
        )

    @property
    def identifier(self) -> str | int | None:
        if self.document_id:
            return self.document_id
        return self.id

    def __bool__(self) -> bool:
        return self.identifier is not None

    def as_relation(self) -> dict[str, str | int]:
        """Relation reference understood by DocumentService connect operations."""
        if self.document_id:
            return {"documentId": self.document_id}
        if self.id is not None:
            return {"id": self.id}
        raise ValueError("EntryRef has no identifier")


# Slug -> identity of the created entry for one content family. Built once per
# phase and handed to later phases read-only (wrapped in MappingProxyType).
SlugMap = Mapping[str, EntryRef]


@dataclass(frozen=True)
class WriteResult:
    """
    Outcome of a single entry write: either `entry` or `error` is set.

    `ref` and `slug` are captured when the entry is created. A later rollback
    expires ORM instances in the session, so callers that keep results around
    should use these rather than attributes of `entry`.
    """

    content_type: str
    entry: Entry | None = None
    error: Exception | None = None
    ref: EntryRef = EntryRef()
    slug: str | None = None

    @classmethod
    def created(cls, content_type: str, entry: Entry) -> "WriteResult":
        return cls(
            content_type=content_type,
            entry=entry,
            ref=EntryRef.from_entry(entry),
            slug=entry.slug,
        )

    @classmethod
    def failed(cls, content_type: str, error: Exception) -> "WriteResult":
        return cls(content_type=content_type, error=error)

    @property
    def ok(self) -> bool:
        return self.entry is not None and self.error is None
