"""
Two families of types live here:

  - the dataset schema, validated with pydantic when the compressed JSON
    document is loaded (Entry, SemanticField, Dataset);
  - the page view models handed to the renderer, one frozen dataclass per
    page kind, each tagged with a ``page_type`` class attribute.

Everything is frozen: the dataset is built once at startup and never
mutated, and page data is built fresh for every page and then discarded.
"""

from dataclasses import dataclass, field
from typing import ClassVar, Mapping, Union

from pydantic import BaseModel, ConfigDict, Field


class Entry(BaseModel):
    """
    One dictionary headword as exported by the data source.

    ``normalized_title`` arrives precomputed (lowercase, vowel accents
    stripped) and only drives first-letter filing; a missing one is "".
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    slug: str = Field(default="", alias="title")
    display_title: str = Field(default="", alias="title_display")
    normalized_title: str = Field(default="", alias="title_normalized")
    content: str = ""


class SemanticField(BaseModel):
    """A thematic page; ``path`` is its URL slug."""

    model_config = ConfigDict(frozen=True)

    title: str = ""
    body: str = ""
    path: str = ""


class Dataset(BaseModel):
    """Top-level document: entries, semantic fields and glossary."""

    model_config = ConfigDict(frozen=True)

    entries: tuple[Entry, ...] = ()
    semantic_fields: tuple[SemanticField, ...] = ()
    glossary: dict[str, str] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Page view models
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LetterEntry:
    """Minimal entry projection listed on letter pages."""

    slug: str
    display_title: str


@dataclass(frozen=True)
class HomePage:
    title: str
    letters: tuple[str, ...] = ()

    page_type: ClassVar[str] = "home"


@dataclass(frozen=True)
class EntryPage:
    title: str
    content_html: str
    prev_slug: str = ""
    next_slug: str = ""

    page_type: ClassVar[str] = "entry"


@dataclass(frozen=True)
class LetterPage:
    title: str
    letter: str
    entries: tuple[LetterEntry, ...] = ()
    prev_letter: str = ""
    next_letter: str = ""

    page_type: ClassVar[str] = "letter"


@dataclass(frozen=True)
class SemanticFieldPage:
    title: str
    content_html: str

    page_type: ClassVar[str] = "semantic-field"


@dataclass(frozen=True)
class StaticPage:
    """Generic static page; only the glossary fills the glossary fields."""

    title: str
    path: str
    glossary_letters: tuple[str, ...] = ()
    glossary_content: Mapping[str, str] = field(default_factory=dict)

    page_type: ClassVar[str] = "static"


@dataclass(frozen=True)
class NotFoundPage:
    title: str

    page_type: ClassVar[str] = "not-found"


PageData = Union[HomePage, EntryPage, LetterPage, SemanticFieldPage, StaticPage, NotFoundPage]
