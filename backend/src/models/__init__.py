"""SQLAlchemy models."""
from models.base import Base, DocumentIdMixin, TimestampMixin
from models.core_store import CoreStoreSetting
from models.entry import Entry
from models.entry_relation import EntryRelation
from models.permission import Permission, Role
from models.upload_file import UploadFile

__all__ = [
    "Base",
    "CoreStoreSetting",
    "DocumentIdMixin",
    "Entry",
    "EntryRelation",
    "Permission",
    "Role",
    "TimestampMixin",
    "UploadFile",
]
