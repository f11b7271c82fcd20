"""Field value decoding, full-text extraction and attachment URL resolution."""

from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from models.records import (
    FileArray,
    PlainURL,
    ProjectRecord,
    Scalar,
    SingleFile,
    TaggedOption,
)
from services.text import normalize_text

DEFAULT_THUMBNAIL_PRIORITY = ("large", "medium", "small", "tiny")

# Keys checked, in order, for the human readable label of an object value
TAG_KEYS = ("value", "name", "label")

_VARIANTS = (Scalar, PlainURL, TaggedOption, SingleFile, FileArray)

DecodedValue = Union[Scalar, PlainURL, TaggedOption, SingleFile, FileArray]


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, list):
        return ",".join(_stringify(v) for v in value if v is not None)
    return str(value)


def _tagged_label(data: Dict[str, Any]) -> str:
    """First truthy of value/name/label, '' if none."""
    for key in TAG_KEYS:
        candidate = data.get(key)
        if candidate:
            return candidate if isinstance(candidate, str) else _stringify(candidate)
    return ""


# =============================================================================
# DECODING
# =============================================================================

def decode_value(raw: Any) -> Optional[DecodedValue]:
    """Decode a raw JSON value into its variant. None stays None."""
    if raw is None:
        return None
    if isinstance(raw, (bool, int, float, str)):
        return Scalar(value=raw)
    if isinstance(raw, dict):
        if "url" in raw or "thumbnails" in raw:
            url = raw.get("url")
            thumbnails = raw.get("thumbnails")
            return SingleFile(
                url=url if isinstance(url, str) else None,
                thumbnails=thumbnails if isinstance(thumbnails, dict) else {},
                label=_tagged_label(raw),
            )
        return TaggedOption(label=_tagged_label(raw))
    if isinstance(raw, (list, tuple)):
        return FileArray(items=[decode_value(item) for item in raw])
    return Scalar(value=str(raw))


def decode_attachment(raw: Any) -> Optional[DecodedValue]:
    """Decode an attachment-field value; strings become PlainURL."""
    if isinstance(raw, str):
        return PlainURL(url=raw)
    return decode_value(raw)


def decode_record(raw: Dict[str, Any], attachment_fields: Iterable[str] = ()) -> ProjectRecord:
    """Decode every field of a raw row once, preserving field order."""
    attachments = set(attachment_fields)
    values = {}
    for name, value in raw.items():
        decoded = decode_attachment(value) if name in attachments else decode_value(value)
        if decoded is not None:
            values[name] = decoded
    record = ProjectRecord(raw=raw, values=values)
    record.full_text = extract_full_text(record)
    return record


def decode_records(rows: Sequence[Dict[str, Any]], attachment_fields: Iterable[str] = ()) -> List[ProjectRecord]:
    attachment_fields = tuple(attachment_fields)
    return [decode_record(row, attachment_fields) for row in rows if isinstance(row, dict)]


# =============================================================================
# TEXT
# =============================================================================

def _item_text(item: DecodedValue) -> str:
    if isinstance(item, Scalar):
        return _stringify(item.value)
    if isinstance(item, PlainURL):
        return item.url
    if isinstance(item, (TaggedOption, SingleFile)):
        return item.label
    # nested list
    return ""


def _value_texts(value: DecodedValue) -> List[str]:
    if isinstance(value, FileArray):
        return [_item_text(item) for item in value.items if item is not None]
    return [_item_text(value)]


def extract_full_text(record: Union[ProjectRecord, Dict[str, Any]]) -> str:
    """Normalized, space-joined text of every field in the record."""
    if not isinstance(record, ProjectRecord):
        record = ProjectRecord(raw=record, values={
            name: decoded for name, decoded in
            ((name, decode_value(value)) for name, value in record.items())
            if decoded is not None
        })
    texts = []
    for value in record.values.values():
        texts.extend(_value_texts(value))
    return normalize_text(" ".join(texts))


def field_text(record: ProjectRecord, field: str) -> str:
    """Display text of a single field, '' when absent."""
    value = record.values.get(field)
    if value is None:
        return ""
    return ", ".join(text for text in _value_texts(value) if text)


# =============================================================================
# ATTACHMENTS
# =============================================================================

def _usable(text: Any) -> Optional[str]:
    if isinstance(text, str) and text.strip():
        return text.strip()
    return None


def resolve_attachment_url(
    value: Any,
    thumbnail_priority: Sequence[str] = DEFAULT_THUMBNAIL_PRIORITY,
    use_original_if_no_thumbnail: bool = True,
) -> Optional[str]:
    """Resolve an attachment value into a single displayable URL.

    Order: explicit string, first array element, thumbnails by priority,
    the file's original url, else None.
    """
    if not isinstance(value, _VARIANTS):
        value = decode_attachment(value)
    if value is None:
        return None

    if isinstance(value, PlainURL):
        return _usable(value.url)
    if isinstance(value, Scalar):
        return _usable(value.value)

    file = value
    if isinstance(value, FileArray):
        file = value.items[0] if value.items else None

    if not isinstance(file, SingleFile):
        return None

    for size in thumbnail_priority:
        thumb = file.thumbnails.get(size)
        if not thumb:
            continue
        if isinstance(thumb, str) and _usable(thumb):
            return _usable(thumb)
        if isinstance(thumb, dict) and _usable(thumb.get("url")):
            return _usable(thumb.get("url"))

    if use_original_if_no_thumbnail and _usable(file.url):
        return _usable(file.url)

    return None
