"""Shared exceptions for service layer operations."""


class ContentTypeNotFoundError(Exception):
    """Raised when a content type name or uid is not registered."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown content type: {name}")


class ContentValidationError(Exception):
    """
    Raised when entry data does not satisfy its content-type declaration.

    Covers unknown attribute keys, missing required attributes, malformed media
    or component values, and a second entry for a single type.
    """

    def __init__(self, content_type: str, message: str) -> None:
        self.content_type = content_type
        super().__init__(f"{content_type}: {message}")


class EntryNotFoundError(Exception):
    """Raised when an entry referenced by document id does not exist."""

    def __init__(self, content_type: str, document_id: str | int) -> None:
        self.content_type = content_type
        self.document_id = document_id
        super().__init__(f"{content_type} entry not found: {document_id}")


class RelationTargetNotFoundError(Exception):
    """Raised when a relation reference does not resolve to an entry of the target type."""

    def __init__(self, target: str, reference: object) -> None:
        self.target = target
        self.reference = reference
        super().__init__(f"Relation target not found in {target}: {reference!r}")
