"""Pydantic models for project records with a discriminated field-value union.

Baserow returns values in several shapes (plain scalars, single/multiple
select options, file arrays with thumbnails). They are decoded once when a
record is ingested so the rest of the pipeline never re-dispatches on raw
JSON shapes.
"""

from typing import Any, Annotated, Dict, List, Literal, Optional, Union
from pydantic import BaseModel, Field


# =============================================================================
# FIELD VALUE VARIANTS
# =============================================================================

class Scalar(BaseModel):
    """Plain string, number or boolean."""
    kind: Literal["scalar"] = "scalar"
    value: Union[bool, int, float, str]


class PlainURL(BaseModel):
    """Attachment given directly as a URL string."""
    kind: Literal["plain_url"] = "plain_url"
    url: str


class TaggedOption(BaseModel):
    """Select option or link-row object labelled by value/name/label."""
    kind: Literal["option"] = "option"
    label: str = ""


class SingleFile(BaseModel):
    """One uploaded file, optionally with pre-generated thumbnails."""
    kind: Literal["file"] = "file"
    url: Optional[str] = None
    thumbnails: Dict[str, Any] = Field(default_factory=dict)
    label: str = ""


class FileArray(BaseModel):
    """List value: files, multiple-select options or plain items."""
    kind: Literal["array"] = "array"
    items: List[Optional["FieldValue"]] = Field(default_factory=list)  # None keeps its position


FieldValue = Annotated[
    Union[Scalar, PlainURL, TaggedOption, SingleFile, FileArray],
    Field(discriminator="kind"),
]

FileArray.model_rebuild()


# =============================================================================
# RECORDS
# =============================================================================

class TableField(BaseModel):
    """Column definition as returned by the Baserow fields endpoint."""
    model_config = {"extra": "allow"}

    id: Optional[int] = None
    name: str
    type: str = "text"
    primary: bool = False


class ProjectRecord(BaseModel):
    """A fetched row: the raw mapping plus its decoded values.

    `full_text` is the normalized concatenation of every field, computed at
    ingestion for substring search.
    """

    raw: Dict[str, Any]
    values: Dict[str, FieldValue] = Field(default_factory=dict)
    full_text: str = ""


class CachedProjects(BaseModel):
    """Persisted cache entry. `timestamp` is epoch milliseconds."""

    timestamp: float
    data: Optional[List[Dict[str, Any]]] = None
