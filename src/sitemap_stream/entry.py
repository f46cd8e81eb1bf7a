"""Entry normalization: bare locations and partial records become SitemapEntry."""

from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import InvalidEntryError


class SitemapEntry(BaseModel):
    """A single accepted URL record. Immutable once built."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    url: str = Field(min_length=1)
    change_freq: str | None = Field(default=None, alias="changeFreq", min_length=1)
    priority: float | None = Field(default=None, ge=0.0, le=1.0)


def normalize_entry(entry: "str | Mapping | SitemapEntry") -> SitemapEntry:
    """Turn a location string or a record mapping into a SitemapEntry.

    Raises:
        InvalidEntryError: if the record is malformed.
    """
    if isinstance(entry, SitemapEntry):
        return entry
    if isinstance(entry, str):
        entry = {"url": entry}
    if not isinstance(entry, Mapping):
        raise InvalidEntryError(f"Unsupported entry type: {type(entry).__name__}")

    try:
        return SitemapEntry.model_validate(dict(entry))
    except ValidationError as e:
        raise InvalidEntryError(str(e)) from e
