"""
Content-type and component registry.

Each content type is declared once here: its kind (collection or single), whether
it supports draft/publish, and its attributes. The document service validates
writes against these declarations and the API uses them to route reads.

Content types are addressed either by short name ("article") or by uid
("api::article.article").
"""
from dataclasses import dataclass
from typing import Literal

from services.exceptions import ContentTypeNotFoundError

AttributeType = Literal[
    "string",
    "text",
    "richtext",
    "uid",
    "email",
    "date",
    "json",
    "media",
    "relation",
    "component",
    "dynamiczone",
]

ContentTypeKind = Literal["collectionType", "singleType"]


@dataclass(frozen=True)
class Attribute:
    """A single attribute declaration."""

    type: AttributeType
    required: bool = False
    # media and relation: single value or a list
    multiple: bool = False
    # relation: uid of the target content type
    target: str | None = None
    # component: uid of the component; repeatable stores a list of them
    component: str | None = None
    repeatable: bool = False
    # dynamiczone: component uids allowed in the zone
    components: tuple[str, ...] = ()


@dataclass(frozen=True)
class ComponentSchema:
    """A reusable group of attributes embedded in entries."""

    uid: str
    attributes: dict[str, Attribute]


@dataclass(frozen=True)
class ContentTypeSchema:
    """Declaration of a content type."""

    singular_name: str
    plural_name: str
    attributes: dict[str, Attribute]
    kind: ContentTypeKind = "collectionType"
    draft_and_publish: bool = True

    @property
    def uid(self) -> str:
        """Fully qualified uid, e.g. 'api::article.article'."""
        return f"api::{self.singular_name}.{self.singular_name}"

    @property
    def is_single_type(self) -> bool:
        return self.kind == "singleType"

    def relation_attributes(self) -> dict[str, Attribute]:
        return {k: a for k, a in self.attributes.items() if a.type == "relation"}

    def slug_attribute(self) -> str | None:
        """Name of the uid attribute, if the type has one."""
        for name, attr in self.attributes.items():
            if attr.type == "uid":
                return name
        return None


def _relation(target: str, *, many: bool = True) -> Attribute:
    return Attribute(type="relation", target=f"api::{target}.{target}", multiple=many)


BLOCK_COMPONENTS = ("shared.media", "shared.quote", "shared.rich-text", "shared.slider")

COMPONENTS: dict[str, ComponentSchema] = {
    c.uid: c
    for c in (
        ComponentSchema(
            uid="shared.media",
            attributes={"file": Attribute(type="media")},
        ),
        ComponentSchema(
            uid="shared.slider",
            attributes={"files": Attribute(type="media", multiple=True)},
        ),
        ComponentSchema(
            uid="shared.quote",
            attributes={"title": Attribute(type="string"), "body": Attribute(type="text")},
        ),
        ComponentSchema(
            uid="shared.rich-text",
            attributes={"body": Attribute(type="richtext")},
        ),
        ComponentSchema(
            uid="shared.seo",
            attributes={
                "metaTitle": Attribute(type="string", required=True),
                "metaDescription": Attribute(type="text", required=True),
                "shareImage": Attribute(type="media"),
            },
        ),
    )
}

CONTENT_TYPES: dict[str, ContentTypeSchema] = {
    ct.singular_name: ct
    for ct in (
        ContentTypeSchema(
            singular_name="category",
            plural_name="categories",
            draft_and_publish=False,
            attributes={
                "name": Attribute(type="string", required=True),
                "slug": Attribute(type="uid"),
                "description": Attribute(type="text"),
            },
        ),
        ContentTypeSchema(
            singular_name="author",
            plural_name="authors",
            draft_and_publish=False,
            attributes={
                "name": Attribute(type="string", required=True),
                "slug": Attribute(type="uid"),
                "avatar": Attribute(type="media"),
                "email": Attribute(type="email"),
            },
        ),
        ContentTypeSchema(
            singular_name="article",
            plural_name="articles",
            attributes={
                "title": Attribute(type="string", required=True),
                "description": Attribute(type="text"),
                "slug": Attribute(type="uid"),
                "cover": Attribute(type="media"),
                "author": _relation("author", many=False),
                "category": _relation("category", many=False),
                "blocks": Attribute(type="dynamiczone", components=BLOCK_COMPONENTS),
            },
        ),
        ContentTypeSchema(
            singular_name="global",
            plural_name="globals",
            kind="singleType",
            attributes={
                "siteName": Attribute(type="string", required=True),
                "favicon": Attribute(type="media"),
                "siteDescription": Attribute(type="text", required=True),
                "defaultSeo": Attribute(type="component", component="shared.seo"),
            },
        ),
        ContentTypeSchema(
            singular_name="about",
            plural_name="abouts",
            kind="singleType",
            attributes={
                "title": Attribute(type="string"),
                "blocks": Attribute(type="dynamiczone", components=BLOCK_COMPONENTS),
            },
        ),
        ContentTypeSchema(
            singular_name="knowledge-base-global",
            plural_name="knowledge-base-globals",
            kind="singleType",
            attributes={
                "title": Attribute(type="string", required=True),
                "tagline": Attribute(type="string"),
                "description": Attribute(type="text"),
                "supportEmail": Attribute(type="email"),
            },
        ),
        ContentTypeSchema(
            singular_name="knowledge-base-audience",
            plural_name="knowledge-base-audiences",
            attributes={
                "name": Attribute(type="string", required=True),
                "slug": Attribute(type="uid"),
                "description": Attribute(type="text"),
            },
        ),
        ContentTypeSchema(
            singular_name="knowledge-base-collection",
            plural_name="knowledge-base-collections",
            attributes={
                "title": Attribute(type="string", required=True),
                "slug": Attribute(type="uid"),
                "description": Attribute(type="text"),
                "icon": Attribute(type="string"),
                "audiences": _relation("knowledge-base-audience"),
            },
        ),
        ContentTypeSchema(
            singular_name="knowledge-base-article",
            plural_name="knowledge-base-articles",
            attributes={
                "title": Attribute(type="string", required=True),
                "slug": Attribute(type="uid"),
                "summary": Attribute(type="text"),
                "content": Attribute(type="richtext"),
                "audiences": _relation("knowledge-base-audience"),
                "collections": _relation("knowledge-base-collection"),
            },
        ),
        ContentTypeSchema(
            singular_name="knowledge-base-release-note",
            plural_name="knowledge-base-release-notes",
            attributes={
                "title": Attribute(type="string", required=True),
                "slug": Attribute(type="uid"),
                "version": Attribute(type="string"),
                "releasedOn": Attribute(type="date"),
                "summary": Attribute(type="text"),
                "content": Attribute(type="richtext"),
                "audiences": _relation("knowledge-base-audience"),
                "articles": _relation("knowledge-base-article"),
            },
        ),
        ContentTypeSchema(
            singular_name="welcome-guide",
            plural_name="welcome-guides",
            attributes={
                "title": Attribute(type="string", required=True),
                "slug": Attribute(type="uid"),
                "intro": Attribute(type="richtext"),
                "sections": _relation("welcome-guide-section"),
                "resources": _relation("welcome-guide-resource"),
            },
        ),
        ContentTypeSchema(
            singular_name="welcome-guide-section",
            plural_name="welcome-guide-sections",
            draft_and_publish=False,
            attributes={
                "title": Attribute(type="string", required=True),
                "body": Attribute(type="richtext"),
            },
        ),
        ContentTypeSchema(
            singular_name="welcome-guide-resource",
            plural_name="welcome-guide-resources",
            draft_and_publish=False,
            attributes={
                "title": Attribute(type="string", required=True),
                "url": Attribute(type="string", required=True),
                "description": Attribute(type="text"),
            },
        ),
    )
}

_BY_UID: dict[str, ContentTypeSchema] = {ct.uid: ct for ct in CONTENT_TYPES.values()}
_BY_PLURAL: dict[str, ContentTypeSchema] = {ct.plural_name: ct for ct in CONTENT_TYPES.values()}


def get_content_type(name: str) -> ContentTypeSchema:
    """
    Look up a content type by short name or uid.

    Raises:
        ContentTypeNotFoundError: If no content type is registered under that name.
    """
    schema = CONTENT_TYPES.get(name) or _BY_UID.get(name)
    if schema is None:
        raise ContentTypeNotFoundError(name)
    return schema


def get_content_type_by_route(segment: str) -> ContentTypeSchema | None:
    """
    Resolve a URL segment to a content type.

    Collection types are routed by plural name, single types by singular name.
    """
    schema = _BY_PLURAL.get(segment)
    if schema is not None and not schema.is_single_type:
        return schema
    schema = CONTENT_TYPES.get(segment)
    if schema is not None and schema.is_single_type:
        return schema
    return None


def get_component(uid: str) -> ComponentSchema:
    """
    Look up a component by uid.

    Raises:
        KeyError: If the component is not registered.
    """
    return COMPONENTS[uid]

