"""
Header codec.

Converts between Riak's HTTP header conventions and ObjectMetadata:

    X-Riak-Vclock: a85hYGBgzGDKBVIc...
    Link: </buckets/list/keys/1>; riaktag="previous", </buckets/list>; rel="up"
    X-Riak-Meta-Author: jane
    X-Riak-Index-Email_bin: jane@example.com

Header names are matched case-insensitively, in this order: content type,
vector clock, link, meta prefix, index prefix. Anything else is ignored.
"""

from typing import Any, Dict, Mapping, Optional, Tuple, Union

import structlog

from riakclient.core.metadata import Link, ObjectMetadata

logger = structlog.get_logger(__name__)


CONTENT_TYPE_HEADER = "content-type"
VCLOCK_HEADER = "x-riak-vclock"
LINK_HEADER = "link"
META_PREFIX = "x-riak-meta-"
INDEX_PREFIX = "x-riak-index-"

JSON_CONTENT_TYPE = "application/json"
TEXT_CONTENT_TYPE = "text/plain"

# Value fields that travel as headers on writes
METADATA_FIELDS = ("vclock", "links", "meta", "index")


def _parse_link(entry: str) -> Optional[Link]:
    """
    Parse one link-header entry.

    Returns None for blank entries and for server-internal relation links
    (those carrying rel= instead of riaktag=).
    """
    parts = entry.strip().split(";")
    target = parts[0].strip().lstrip("<").rstrip(">").strip()
    if not target:
        return None

    tag = ""
    for param in parts[1:]:
        name, _, value = param.partition("=")
        name = name.strip().lower()

        if name == "rel":
            return None
        if name == "riaktag":
            tag = value.strip().strip('"')

    return Link(link=target, tag=tag)


def decode_headers(headers: Optional[Mapping[str, str]]) -> ObjectMetadata:
    """
    Decode Riak metadata from a response header map.

    Args:
        headers: Header names to values; may be empty or None

    Returns:
        Fully populated metadata (absent fields are empty, never missing)
    """
    metadata = ObjectMetadata()

    if not headers:
        return metadata

    for name, value in headers.items():
        lowered = name.lower()

        if lowered == CONTENT_TYPE_HEADER:
            metadata.content_type = value
        elif lowered == VCLOCK_HEADER:
            metadata.vclock = value
        elif lowered == LINK_HEADER:
            for entry in value.split(","):
                link = _parse_link(entry)
                if link is not None:
                    metadata.links.append(link)
        elif lowered.startswith(META_PREFIX):
            metadata.meta[name[len(META_PREFIX):]] = value
        elif lowered.startswith(INDEX_PREFIX):
            metadata.index[name[len(INDEX_PREFIX):]] = value

    return metadata


def _format_link(link: Link) -> str:
    if link.tag:
        return f'<{link.link}>; riaktag="{link.tag}"'
    return f"<{link.link}>"


def encode_headers(
    metadata: Union[ObjectMetadata, Mapping[str, Any], None],
) -> Dict[str, str]:
    """
    Encode metadata into Riak request headers.

    Only vclock, links, meta and index are considered. The input is not
    modified.

    Link targets and tags are written unescaped, so a tag containing "," or
    ";" does not decode back to the same link.

    Returns:
        A new header map; empty when there is nothing to encode
    """
    headers: Dict[str, str] = {}

    if not metadata:
        return headers

    if not isinstance(metadata, ObjectMetadata):
        metadata = ObjectMetadata.from_dict(metadata)

    if metadata.vclock:
        headers[VCLOCK_HEADER] = metadata.vclock

    links = [_format_link(link) for link in metadata.links if link.link]
    if links:
        headers[LINK_HEADER] = ", ".join(links)

    for name, value in metadata.meta.items():
        headers[META_PREFIX + name] = str(value)

    for name, value in metadata.index.items():
        headers[INDEX_PREFIX + name] = str(value)

    return headers


def split_metadata(
    fields: Mapping[str, Any],
) -> Tuple[Dict[str, str], Dict[str, Any]]:
    """
    Separate inline metadata from the fields of a value being stored.

    Args:
        fields: Value to store, possibly carrying vclock/links/meta/index

    Returns:
        (headers encoding the metadata fields, new mapping of the remaining fields)
    """
    inline = {name: fields[name] for name in METADATA_FIELDS if name in fields}
    remaining = {name: value for name, value in fields.items() if name not in METADATA_FIELDS}

    headers = encode_headers(inline)
    if headers:
        logger.debug("inline_metadata_extracted", headers=sorted(headers))

    return headers, remaining


def media_type(content_type: Optional[str]) -> str:
    """Return the lowercased media type without parameters."""
    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()
