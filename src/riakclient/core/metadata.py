"""
Object metadata and value models.

Represents the Riak-specific annotations attached to a stored value and
the results returned by key operations.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from riakclient.core.errors import InvalidArgumentError


@dataclass
class Link:
    """A reference to another Riak object, with an optional tag."""
    link: str
    tag: str = ""

    @classmethod
    def from_value(cls, value: Union["Link", Mapping[str, Any]]) -> "Link":
        """Build a Link from a Link or a {"link", "tag"} mapping."""
        if isinstance(value, Link):
            return value
        return cls(link=str(value.get("link") or ""), tag=str(value.get("tag") or ""))

    def to_dict(self) -> dict:
        return {"link": self.link, "tag": self.tag}


@dataclass
class ObjectMetadata:
    """
    Riak annotations attached to a stored value.

    Attributes:
        vclock: Opaque causality token (empty string when absent)
        links: Links in header order
        meta: User metadata, keyed by header name after the meta prefix
        index: Secondary index bindings, keyed by header name after the index prefix
        content_type: Media type of the stored value (empty when absent)
    """

    vclock: str = ""
    links: List[Link] = field(default_factory=list)
    meta: Dict[str, str] = field(default_factory=dict)
    index: Dict[str, str] = field(default_factory=dict)
    content_type: str = ""

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "ObjectMetadata":
        """
        Build metadata from a mapping; unknown keys are ignored.

        Link entries that are neither a Link nor a mapping are skipped.
        """
        if not data:
            return cls()

        return cls(
            vclock=str(data.get("vclock") or ""),
            links=[
                Link.from_value(link) for link in data.get("links") or []
                if isinstance(link, (Link, Mapping))
            ],
            meta=dict(data.get("meta") or {}),
            index=dict(data.get("index") or {}),
            content_type=str(data.get("content_type") or ""),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "vclock": self.vclock,
            "links": [link.to_dict() for link in self.links],
            "meta": dict(self.meta),
            "index": dict(self.index),
            "content_type": self.content_type,
        }


@dataclass(frozen=True)
class RawBody:
    """A body stored and returned as plain text."""
    text: str


@dataclass(frozen=True)
class StructuredBody:
    """A body carried as JSON-serializable data."""
    value: Any


Body = Union[RawBody, StructuredBody]


def as_body(value: Any) -> Body:
    """
    Coerce a caller-supplied value into a Body variant.

    Strings and bytes are raw text, existing variants pass through and
    everything else is treated as structured data.
    """
    if isinstance(value, (RawBody, StructuredBody)):
        return value
    if isinstance(value, bytes):
        return RawBody(value.decode("utf-8"))
    if isinstance(value, str):
        return RawBody(value)
    return StructuredBody(value)


@dataclass
class StoredValue:
    """
    The result of a read or write.

    Attributes:
        key: Key the value is stored under
        body: Decoded body, None when the key was not found
        metadata: Metadata decoded from the response headers
        raw_headers: Response headers as returned by the transport
        found: False for the not-found result of a read
    """

    key: str
    body: Optional[Body] = None
    metadata: ObjectMetadata = field(default_factory=ObjectMetadata)
    raw_headers: Dict[str, str] = field(default_factory=dict)
    found: bool = True

    @classmethod
    def empty(cls, key: str) -> "StoredValue":
        """The value returned for a key that does not exist."""
        return cls(key=key, found=False)

    @property
    def data(self) -> Any:
        """The plain body value (text or structured data)."""
        if isinstance(self.body, RawBody):
            return self.body.text
        if isinstance(self.body, StructuredBody):
            return self.body.value
        return None

    def to_dict(self) -> dict:
        """
        Merged view of the value: body fields with metadata fields as siblings.

        Metadata fields overwrite same-named body fields. A body that is not
        a mapping is placed under "body". The not-found value is {}.
        """
        if not self.found:
            return {}

        data = self.data
        if isinstance(data, Mapping):
            merged = dict(data)
        else:
            merged = {"body": data}

        merged.update(self.metadata.to_dict())
        return merged


@dataclass
class PutRequest:
    """A single write in a batch."""
    key: str
    body: Any
    headers: Optional[Dict[str, str]] = None

    @classmethod
    def from_value(cls, value: Any) -> "PutRequest":
        """Build a PutRequest from a PutRequest, a mapping or a (key, body[, headers]) tuple."""
        if isinstance(value, PutRequest):
            return value
        if isinstance(value, Mapping):
            return cls(key=value.get("key"), body=value.get("body"), headers=value.get("headers"))
        if isinstance(value, tuple) and len(value) in (2, 3):
            return cls(*value)
        raise InvalidArgumentError(f"Cannot build a put request from {type(value).__name__}")


@dataclass
class BatchResult:
    """One entry of a batch get/put result, aligned with the input position."""
    value: StoredValue
    raw_headers: Dict[str, str] = field(default_factory=dict)


@dataclass
class IndexQueryResult:
    """
    Result of a secondary index query.

    Attributes:
        keys: Matching keys
        results: (term, key) pairs when terms were requested
        continuation: Token for the next page, if paginated
    """

    keys: List[str] = field(default_factory=list)
    results: List[Tuple[str, str]] = field(default_factory=list)
    continuation: Optional[str] = None
