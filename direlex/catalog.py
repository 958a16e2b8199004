"""
Dictionary data layer.

``load_catalog(path)`` reads the gzip-compressed JSON dataset once at
startup and returns a ``Catalog``: an immutable handle over

    entries          ordered as exported (locale collation, never re-sorted)
    semantic_fields  thematic pages, looked up by path
    glossary         uppercase letter -> trusted HTML fragment
    index            LookupIndex(slug_to_position, letters)

The server and the static generator share the same handle. Nothing in it
changes after construction, so every read below is safe from any number
of concurrent callers without locking.

Absence is not an error here: unknown slugs, letters and paths come back
as ``None``, ``[]`` or ``("", "")`` and the caller decides what to render.
"""

import gzip
import json
import logging
import zlib
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from pydantic import ValidationError

from .models import Dataset, LetterEntry

logger = logging.getLogger(__name__)


class DatasetError(Exception):
    """The dataset could not be opened, decompressed, decoded or validated."""


class DuplicateSlugError(DatasetError):
    """Two entries share the same slug."""


@dataclass(frozen=True)
class LookupIndex:
    slug_to_position: Mapping[str, int]
    letters: tuple[str, ...]


def build_index(entries):
    """
    Builds the slug -> position map and the sorted set of first letters.

    Single pass over ``entries``, which is left untouched. A repeated slug
    raises DuplicateSlugError instead of silently shadowing the earlier entry.
    """
    slug_to_position = {}
    letters = set()
    for position, entry in enumerate(entries):
        if entry.slug in slug_to_position:
            raise DuplicateSlugError(
                f"duplicate slug {entry.slug!r} at positions "
                f"{slug_to_position[entry.slug]} and {position}"
            )
        slug_to_position[entry.slug] = position
        if entry.normalized_title:
            letters.add(entry.normalized_title[0])

    return LookupIndex(
        slug_to_position=MappingProxyType(slug_to_position),
        letters=tuple(sorted(letters)),
    )


class Catalog:
    """Immutable view over the loaded dictionary plus its lookup index."""

    __slots__ = ("_entries", "_semantic_fields", "_glossary", "_index", "_fields_by_path")

    def __init__(self, entries, semantic_fields=(), glossary=None):
        self._entries = tuple(entries)
        self._semantic_fields = tuple(semantic_fields)
        self._glossary = MappingProxyType(dict(glossary or {}))
        self._index = build_index(self._entries)
        # First field wins when two share a path.
        self._fields_by_path = MappingProxyType(
            {f.path: f for f in reversed(self._semantic_fields)}
        )

    @classmethod
    def from_dataset(cls, dataset):
        return cls(dataset.entries, dataset.semantic_fields, dataset.glossary)

    @property
    def entries(self):
        return self._entries

    @property
    def semantic_fields(self):
        return self._semantic_fields

    @property
    def glossary(self):
        return self._glossary

    @property
    def index(self):
        return self._index

    @property
    def letters(self):
        return self._index.letters

    @property
    def glossary_letters(self):
        return tuple(sorted(self._glossary))

    # --- lookups ---

    def entry_by_slug(self, slug):
        """Returns the Entry for ``slug``, or None."""
        i = self._index.slug_to_position.get(slug)
        if i is None:
            return None
        return self._entries[i]

    def entries_by_first_letter(self, letter):
        """
        Lists (slug, display title) for entries whose normalized title starts
        with ``letter``, in source order.
        """
        if not letter:
            return []
        return [
            LetterEntry(slug=entry.slug, display_title=entry.display_title)
            for entry in self._entries
            if entry.normalized_title and entry.normalized_title[0] == letter
        ]

    def semantic_field_by_path(self, path):
        return self._fields_by_path.get(path)

    # --- navigation ---

    def adjacent_entries(self, slug):
        """Returns (prev_slug, next_slug); ("", "") for an unknown slug."""
        i = self._index.slug_to_position.get(slug)
        if i is None:
            return "", ""
        prev = self._entries[i - 1].slug if i > 0 else ""
        nxt = self._entries[i + 1].slug if i < len(self._entries) - 1 else ""
        return prev, nxt

    def adjacent_letters(self, letter):
        """Returns (prev_letter, next_letter); ("", "") for an unknown letter."""
        letters = self._index.letters
        if letter not in letters:
            return "", ""
        j = letters.index(letter)
        prev = letters[j - 1] if j > 0 else ""
        nxt = letters[j + 1] if j < len(letters) - 1 else ""
        return prev, nxt

    # --- export ---

    def terms(self):
        """Rows of the autocomplete dataset consumed by the client-side search."""
        return [
            {"t": entry.slug, "d": entry.display_title, "s": entry.normalized_title}
            for entry in self._entries
        ]


def read_dataset(path):
    """Decompresses and validates the dataset file at ``path``."""
    try:
        with gzip.open(path, "rb") as f:
            raw = json.load(f)
    except (OSError, EOFError, zlib.error) as e:
        raise DatasetError(f"failed to read data file {path}: {e}") from e
    except ValueError as e:
        raise DatasetError(f"failed to decode JSON in {path}: {e}") from e

    try:
        return Dataset.model_validate(raw)
    except ValidationError as e:
        raise DatasetError(f"invalid dataset in {path}: {e}") from e


def load_catalog(path):
    """Loads the dataset and builds the catalog. Call once, at startup."""
    catalog = Catalog.from_dataset(read_dataset(path))
    logger.info(
        "Loaded %d entries, %d semantic fields and glossary (%d letters).",
        len(catalog.entries), len(catalog.semantic_fields), len(catalog.glossary),
    )
    return catalog
