"""
Builds the page data for every page kind. These are plain constructors:
no I/O, no rendering. The HTTP handlers and the static generator both call
them and pass the result to the renderer.
"""

from urllib.parse import quote

from . import config
from .models import (
    EntryPage,
    HomePage,
    LetterPage,
    NotFoundPage,
    SemanticFieldPage,
    StaticPage,
)


def display_title_from_slug(slug):
    """Underscores in slugs stand for spaces."""
    return slug.replace("_", " ")


def entry_url(slug):
    """URL path of an entry page. Keeps [ ] : literal, encodes ( ) ' and the rest."""
    return "/lema/" + quote(slug, safe="[]:")


def render_entry(entry):
    """Heading plus body for one entry. Both fields are trusted HTML."""
    return f"<h2>{entry.display_title}</h2><div>{entry.content}</div>"


def home_page_data(catalog):
    return HomePage(title=config.SITE_TITLE, letters=catalog.letters)


def entry_page_data(slug, entry_html, prev_slug="", next_slug=""):
    """
    Page data for an entry.

    ``slug`` is the entry's identifier (e.g. "absència", "adonar-se_(de)"),
    ``entry_html`` its already-rendered markup, ``prev_slug``/``next_slug``
    the neighbouring entries ("" at either end).
    """
    return EntryPage(
        title=display_title_from_slug(slug),
        content_html=entry_html,
        prev_slug=prev_slug,
        next_slug=next_slug,
    )


def letter_page_data(letter, entries, prev_letter="", next_letter=""):
    return LetterPage(
        title=config.LETTER_TITLE.format(letter=letter),
        letter=letter,
        entries=tuple(entries),
        prev_letter=prev_letter,
        next_letter=next_letter,
    )


def semantic_field_page_data(title, body):
    return SemanticFieldPage(title=title, content_html=body)


def static_page_data(path, title, catalog):
    """Static page data; the glossary page also carries the glossary itself."""
    if path == config.GLOSSARY_PATH:
        return StaticPage(
            title=title,
            path=path,
            glossary_letters=catalog.glossary_letters,
            glossary_content=catalog.glossary,
        )
    return StaticPage(title=title, path=path)


def not_found_page_data():
    return NotFoundPage(title=config.NOT_FOUND_TITLE)


def entry_page_for(catalog, slug):
    """Looks up, renders and navigates an entry in one go. None if unknown."""
    entry = catalog.entry_by_slug(slug)
    if entry is None:
        return None
    prev_slug, next_slug = catalog.adjacent_entries(slug)
    return entry_page_data(entry.slug, render_entry(entry), prev_slug, next_slug)


def letter_page_for(catalog, letter):
    """Letter page for ``letter``, or None when no entry starts with it."""
    entries = catalog.entries_by_first_letter(letter)
    if not entries:
        return None
    prev_letter, next_letter = catalog.adjacent_letters(letter)
    return letter_page_data(letter, entries, prev_letter, next_letter)
