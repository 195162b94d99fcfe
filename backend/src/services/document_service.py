"""
Service layer for content entries (the "document" API).

Entries of every registered content type go through here. Writes are validated
against `core.content_types`, media values are normalized to file refs, and
relation attributes are written to `entry_relations`.

Services only flush; committing is up to the caller (the request dependency for
HTTP, the seed pipeline per write).
"""
import logging
from collections.abc import Mapping, Sequence
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import Select, delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.content_types import Attribute, ContentTypeSchema, get_component, get_content_type
from models.entry import Entry
from models.entry_relation import EntryRelation
from models.upload_file import UploadFile
from services.exceptions import (
    ContentValidationError,
    EntryNotFoundError,
    RelationTargetNotFoundError,
)

logger = logging.getLogger(__name__)

# Keys of a relation value that make it an operation rather than a plain reference
RELATION_OPERATIONS = frozenset({"connect", "disconnect", "set"})

# Filters accepted by find_one, mapped to Entry columns
FIND_FILTERS = {"id": "id", "documentId": "document_id", "slug": "slug"}


def parse_published_at(uid: str, value: Any) -> datetime | None:
    """
    Parse a publishedAt value.

    Accepts a datetime, an ISO-8601 string, or epoch milliseconds (what
    `Date.now()`-style callers pass). Naive datetimes are taken as UTC.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise ContentValidationError(uid, f"invalid publishedAt: {value!r}")
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=UTC)
    if isinstance(value, int | float):
        return datetime.fromtimestamp(value / 1000, UTC)
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError as e:
            raise ContentValidationError(uid, f"invalid publishedAt: {value!r}") from e
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
    raise ContentValidationError(uid, f"invalid publishedAt: {value!r}")


class DocumentService:
    """Create, update and query entries of registered content types."""

    async def create(
        self,
        db: AsyncSession,
        content_type: str,
        data: Mapping[str, Any],
    ) -> Entry:
        """
        Create an entry.

        Relation attributes in `data` are linked after the entry row exists.

        Raises:
            ContentTypeNotFoundError: If the content type is not registered.
            ContentValidationError: If the data does not match the declaration.
            RelationTargetNotFoundError: If a relation reference does not resolve.
        """
        schema = get_content_type(content_type)
        payload = dict(data)
        published_at = parse_published_at(schema.uid, payload.pop("publishedAt", None))
        _check_keys(schema.uid, schema.attributes, payload)

        missing = [
            name for name, attr in schema.attributes.items()
            if attr.required and payload.get(name) in (None, "")
        ]
        if missing:
            raise ContentValidationError(
                schema.uid, f"missing required attribute(s): {', '.join(missing)}",
            )

        if schema.is_single_type:
            existing = await db.scalar(
                select(func.count()).select_from(Entry).where(Entry.content_type == schema.uid),
            )
            if existing:
                raise ContentValidationError(schema.uid, "single type already has an entry")

        relations = {
            name: payload.pop(name)
            for name in list(payload)
            if schema.attributes[name].type == "relation"
        }
        stored = await self._normalize_attributes(db, schema.uid, schema.attributes, payload)

        if not schema.draft_and_publish:
            # Types without drafts are always published
            published_at = published_at or datetime.now(UTC)

        slug_attribute = schema.slug_attribute()
        entry = Entry(
            content_type=schema.uid,
            slug=stored.get(slug_attribute) if slug_attribute else None,
            data=stored,
            published_at=published_at,
        )
        db.add(entry)
        await db.flush()

        for name, value in relations.items():
            if value is not None:
                await self._apply_relation(db, schema, entry, name, value)

        await db.refresh(entry)
        logger.debug("Created %s entry %s", schema.uid, entry.document_id)
        return entry

    async def update(
        self,
        db: AsyncSession,
        content_type: str,
        document_id: str,
        data: Mapping[str, Any],
    ) -> Entry:
        """
        Update an entry by document id.

        Scalar, media and component attributes are merged into the stored data.
        Relation attributes take `connect` / `disconnect` / `set` operations, or a
        bare reference (list) which is treated as `set`.

        Raises:
            ContentTypeNotFoundError: If the content type is not registered.
            EntryNotFoundError: If no entry has this document id.
            ContentValidationError: If the data does not match the declaration.
            RelationTargetNotFoundError: If a relation reference does not resolve.
        """
        schema = get_content_type(content_type)
        entry = await self._get_by_document_id(db, schema.uid, document_id)
        if entry is None:
            raise EntryNotFoundError(schema.uid, document_id)

        payload = dict(data)
        if "publishedAt" in payload:
            entry.published_at = parse_published_at(schema.uid, payload.pop("publishedAt"))
        _check_keys(schema.uid, schema.attributes, payload)

        cleared = [
            name for name, value in payload.items()
            if schema.attributes[name].required and value in (None, "")
        ]
        if cleared:
            raise ContentValidationError(
                schema.uid, f"required attribute(s) cannot be empty: {', '.join(cleared)}",
            )

        relations = {
            name: payload.pop(name)
            for name in list(payload)
            if schema.attributes[name].type == "relation"
        }
        if payload:
            stored = await self._normalize_attributes(db, schema.uid, schema.attributes, payload)
            # Reassign so the JSON column registers the change
            entry.data = {**entry.data, **stored}
            slug_attribute = schema.slug_attribute()
            if slug_attribute and slug_attribute in stored:
                entry.slug = stored[slug_attribute]
        await db.flush()

        for name, value in relations.items():
            await self._apply_relation(db, schema, entry, name, value)

        await db.refresh(entry)
        return entry

    async def find_one(
        self,
        db: AsyncSession,
        content_type: str,
        where: Mapping[str, Any],
    ) -> Entry | None:
        """
        Find the first entry matching all filters.

        Supported filter keys: id, documentId, slug.

        Raises:
            ValueError: If an unsupported filter key is given.
        """
        schema = get_content_type(content_type)
        stmt = select(Entry).where(Entry.content_type == schema.uid)
        for key, value in where.items():
            column = FIND_FILTERS.get(key)
            if column is None:
                raise ValueError(f"Unsupported filter: {key}")
            stmt = stmt.where(getattr(Entry, column) == value)
        result = await db.execute(stmt.order_by(Entry.id).limit(1))
        return result.scalar_one_or_none()

    def _listing(self, content_type: str, published_only: bool) -> Select[tuple[Entry]]:
        schema = get_content_type(content_type)
        stmt = select(Entry).where(Entry.content_type == schema.uid)
        if published_only and schema.draft_and_publish:
            stmt = stmt.where(Entry.published_at.is_not(None))
        return stmt

    async def find_many(
        self,
        db: AsyncSession,
        content_type: str,
        *,
        published_only: bool = True,
        offset: int = 0,
        limit: int | None = None,
    ) -> list[Entry]:
        """List entries of a content type ordered by id. Drafts are skipped by default."""
        stmt = self._listing(content_type, published_only).order_by(Entry.id).offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def count(
        self,
        db: AsyncSession,
        content_type: str,
        *,
        published_only: bool = True,
    ) -> int:
        """Number of entries `find_many` would return without offset or limit."""
        listing = self._listing(content_type, published_only).subquery()
        result = await db.execute(select(func.count()).select_from(listing))
        return result.scalar_one()

    async def get_related(
        self,
        db: AsyncSession,
        entry: Entry,
        attribute: str,
    ) -> list[Entry]:
        """Entries connected to `entry` through a relation attribute, in position order."""
        stmt = (
            select(Entry)
            .join(EntryRelation, EntryRelation.child_id == Entry.id)
            .where(
                EntryRelation.parent_id == entry.id,
                EntryRelation.attribute == attribute,
            )
            .order_by(EntryRelation.position, EntryRelation.id)
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def _get_by_document_id(
        self,
        db: AsyncSession,
        uid: str,
        document_id: str,
    ) -> Entry | None:
        stmt = select(Entry).where(
            Entry.content_type == uid,
            Entry.document_id == document_id,
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    # ------------------------------------------------------------------
    # Attribute normalization
    # ------------------------------------------------------------------

    async def _normalize_attributes(
        self,
        db: AsyncSession,
        owner: str,
        attributes: Mapping[str, Attribute],
        values: Mapping[str, Any],
    ) -> dict[str, Any]:
        normalized: dict[str, Any] = {}
        for name, value in values.items():
            normalized[name] = await self._normalize_value(db, owner, name, attributes[name], value)
        return normalized

    async def _normalize_value(
        self,
        db: AsyncSession,
        owner: str,
        name: str,
        attr: Attribute,
        value: Any,
    ) -> Any:
        if value is None:
            return None
        if attr.type == "media":
            return await self._normalize_media(db, owner, name, attr, value)
        if attr.type == "component":
            if attr.repeatable:
                if not isinstance(value, list):
                    raise ContentValidationError(owner, f"{name} must be a list")
                return [
                    await self._normalize_component(db, owner, attr.component, item)
                    for item in value
                ]
            return await self._normalize_component(db, owner, attr.component, value)
        if attr.type == "dynamiczone":
            if not isinstance(value, list):
                raise ContentValidationError(owner, f"{name} must be a list of blocks")
            blocks = []
            for block in value:
                component = block.get("__component") if isinstance(block, Mapping) else None
                if component not in attr.components:
                    raise ContentValidationError(
                        owner, f"{name}: component {component!r} is not allowed",
                    )
                normalized = await self._normalize_component(db, owner, component, block)
                blocks.append({"__component": component, **normalized})
            return blocks
        return value

    async def _normalize_component(
        self,
        db: AsyncSession,
        owner: str,
        component_uid: str | None,
        value: Any,
    ) -> dict[str, Any]:
        if component_uid is None:
            raise ContentValidationError(owner, "component attribute has no component declared")
        if not isinstance(value, Mapping):
            raise ContentValidationError(owner, f"{component_uid} value must be an object")
        component = get_component(component_uid)
        fields = {k: v for k, v in value.items() if k not in ("__component", "id")}
        _check_keys(owner, component.attributes, fields, prefix=f"{component_uid}.")
        missing = [
            name for name, attr in component.attributes.items()
            if attr.required and fields.get(name) in (None, "")
        ]
        if missing:
            raise ContentValidationError(
                owner, f"{component_uid}: missing required attribute(s): {', '.join(missing)}",
            )
        return await self._normalize_attributes(db, owner, component.attributes, fields)

    async def _normalize_media(
        self,
        db: AsyncSession,
        owner: str,
        name: str,
        attr: Attribute,
        value: Any,
    ) -> dict[str, Any] | list[dict[str, Any]] | None:
        items = list(value) if isinstance(value, list | tuple) else [value]
        refs = [await self._media_ref(db, owner, name, item) for item in items]
        if attr.multiple:
            return refs
        if len(refs) > 1:
            raise ContentValidationError(owner, f"{name} accepts a single file, got {len(refs)}")
        return refs[0] if refs else None

    async def _media_ref(
        self,
        db: AsyncSession,
        owner: str,
        name: str,
        item: Any,
    ) -> dict[str, Any]:
        if isinstance(item, UploadFile):
            if item.id is None:
                raise ContentValidationError(owner, f"{name}: file has not been persisted")
            return item.as_ref()

        stmt = select(UploadFile)
        if isinstance(item, Mapping) and item.get("documentId"):
            stmt = stmt.where(UploadFile.document_id == item["documentId"])
        elif isinstance(item, Mapping) and item.get("id") is not None:
            stmt = stmt.where(UploadFile.id == item["id"])
        elif isinstance(item, int) and not isinstance(item, bool):
            stmt = stmt.where(UploadFile.id == item)
        elif isinstance(item, str):
            stmt = stmt.where(UploadFile.document_id == item)
        else:
            raise ContentValidationError(owner, f"{name}: invalid media value {item!r}")

        file = (await db.execute(stmt)).scalar_one_or_none()
        if file is None:
            raise ContentValidationError(owner, f"{name}: file not found {item!r}")
        return file.as_ref()

    # ------------------------------------------------------------------
    # Relations
    # ------------------------------------------------------------------

    async def _apply_relation(
        self,
        db: AsyncSession,
        schema: ContentTypeSchema,
        entry: Entry,
        name: str,
        value: Any,
    ) -> None:
        attr = schema.attributes[name]
        if isinstance(value, Mapping) and RELATION_OPERATIONS & value.keys():
            operations = value
        else:
            operations = {"set": [] if value is None else value}

        if "set" in operations:
            children = await self._resolve_refs(db, attr.target, operations["set"])
            await db.execute(
                delete(EntryRelation).where(
                    EntryRelation.parent_id == entry.id,
                    EntryRelation.attribute == name,
                ),
            )
            await self._link(db, entry, name, attr, children)

        if operations.get("disconnect"):
            children = await self._resolve_refs(db, attr.target, operations["disconnect"])
            await db.execute(
                delete(EntryRelation).where(
                    EntryRelation.parent_id == entry.id,
                    EntryRelation.attribute == name,
                    EntryRelation.child_id.in_([c.id for c in children]),
                ),
            )

        if operations.get("connect"):
            children = await self._resolve_refs(db, attr.target, operations["connect"])
            if not attr.multiple:
                # To-one relations: connecting replaces the current target
                await db.execute(
                    delete(EntryRelation).where(
                        EntryRelation.parent_id == entry.id,
                        EntryRelation.attribute == name,
                    ),
                )
            await self._link(db, entry, name, attr, children)

        await db.flush()

    async def _link(
        self,
        db: AsyncSession,
        entry: Entry,
        name: str,
        attr: Attribute,
        children: Sequence[Entry],
    ) -> None:
        """Append edges for children that are not already linked."""
        if not attr.multiple and len(children) > 1:
            raise ContentValidationError(
                entry.content_type, f"{name} accepts a single entry, got {len(children)}",
            )
        rows = await db.execute(
            select(EntryRelation.child_id, EntryRelation.position).where(
                EntryRelation.parent_id == entry.id,
                EntryRelation.attribute == name,
            ),
        )
        existing = dict(rows.all())
        position = max(existing.values(), default=-1) + 1
        for child in children:
            if child.id in existing:
                continue
            db.add(EntryRelation(
                parent_id=entry.id,
                attribute=name,
                child_id=child.id,
                position=position,
            ))
            existing[child.id] = position
            position += 1

    async def _resolve_refs(
        self,
        db: AsyncSession,
        target: str | None,
        refs: Any,
    ) -> list[Entry]:
        """
        Resolve relation references to entries of the target type.

        A reference is an Entry, {"documentId": ...}, {"id": ...}, {"slug": ...},
        a document id string, or a row id int.
        """
        if target is None:
            raise ValueError("relation attribute has no target declared")
        items = list(refs) if isinstance(refs, list | tuple) else [refs]
        resolved: list[Entry] = []
        for ref in items:
            stmt = select(Entry).where(Entry.content_type == target)
            if isinstance(ref, Entry):
                stmt = stmt.where(Entry.id == ref.id)
            elif isinstance(ref, Mapping) and ref.get("documentId"):
                stmt = stmt.where(Entry.document_id == ref["documentId"])
            elif isinstance(ref, Mapping) and ref.get("id") is not None:
                stmt = stmt.where(Entry.id == ref["id"])
            elif isinstance(ref, Mapping) and ref.get("slug"):
                stmt = stmt.where(Entry.slug == ref["slug"])
            elif isinstance(ref, int) and not isinstance(ref, bool):
                stmt = stmt.where(Entry.id == ref)
            elif isinstance(ref, str):
                stmt = stmt.where(Entry.document_id == ref)
            else:
                raise RelationTargetNotFoundError(target, ref)
            child = (await db.execute(stmt)).scalar_one_or_none()
            if child is None:
                raise RelationTargetNotFoundError(target, ref)
            resolved.append(child)
        return resolved


def _check_keys(
    owner: str,
    attributes: Mapping[str, Attribute],
    values: Mapping[str, Any],
    *,
    prefix: str = "",
) -> None:
    unknown = [key for key in values if key not in attributes]
    if unknown:
        raise ContentValidationError(owner, f"Invalid key(s): {', '.join(prefix + k for k in unknown)}")


document_service = DocumentService()
