"""
Turns page data into a complete HTML document.

The layout lives in templates/layout.html and uses ``{{ name }}``
placeholders, filled in a single pass so that placeholder-like text inside
dictionary content is never substituted. Each page kind has its own body
builder; static pages additionally pull their text from
templates/pages/<path>.html.

Plain-text titles are escaped. Display titles, entry content, semantic
field bodies and glossary fragments come from the data source as trusted
HTML and are inserted as they are.
"""

import html
import re
from pathlib import Path

from . import config
from .pages import entry_url

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"
LAYOUT_FILENAME = "layout.html"

_PLACEHOLDER = re.compile(r"\{\{ (\w+) \}\}")


def load_template(filename, templates_dir=TEMPLATES_DIR):
    """Loads a template file's content."""
    return (Path(templates_dir) / filename).read_text(encoding="utf-8")


def load_partials(templates_dir=TEMPLATES_DIR):
    """Loads the body partial of every registered static page, "" if missing."""
    partials = {}
    for path, _title in config.STATIC_PAGES:
        partial = Path(templates_dir) / "pages" / f"{path}.html"
        partials[path] = partial.read_text(encoding="utf-8") if partial.exists() else ""
    return partials


def fill_template(template, replacements):
    """Replaces every known ``{{ name }}`` placeholder; unknown ones are left alone."""
    return _PLACEHOLDER.sub(lambda m: replacements.get(m.group(1), m.group(0)), template)


def _letter_link(letter):
    return f'<a href="/lletra/{letter}">{letter.upper()}</a>'


def _pager(prev_html, next_html):
    if not prev_html and not next_html:
        return ""
    return (
        '<nav class="pager">'
        f'<span class="prev">{prev_html}</span>'
        f'<span class="next">{next_html}</span>'
        "</nav>"
    )


class Renderer:
    """Stateless once built: ``render`` depends only on the page passed in."""

    def __init__(self, layout=None, partials=None):
        self.layout = layout if layout is not None else load_template(LAYOUT_FILENAME)
        self.partials = partials if partials is not None else load_partials()
        self._bodies = {
            "home": self._home_body,
            "entry": self._entry_body,
            "letter": self._letter_body,
            "semantic-field": self._semantic_field_body,
            "static": self._static_body,
            "not-found": self._not_found_body,
        }

    def render(self, page):
        body = self._bodies[page.page_type](page)
        search_value = page.title if page.page_type == "entry" else ""
        return fill_template(self.layout, {
            "site_title": html.escape(config.SITE_TITLE),
            "page_title": html.escape(page.title),
            "page_type": page.page_type,
            "search_value": html.escape(search_value),
            "static_nav": self._static_nav(),
            "main": body,
        })

    def _static_nav(self):
        items = "".join(
            f'<li><a href="/{path}">{html.escape(title)}</a></li>'
            for path, title in config.STATIC_PAGES
        )
        return f"<ul>{items}</ul>"

    def _home_body(self, page):
        links = "".join(f"<li>{_letter_link(letter)}</li>" for letter in page.letters)
        return (
            f"<h1>{html.escape(page.title)}</h1>"
            f'<nav class="letters"><ul>{links}</ul></nav>'
        )

    def _entry_body(self, page):
        prev_html = f'<a href="{entry_url(page.prev_slug)}" rel="prev">&larr;</a>' if page.prev_slug else ""
        next_html = f'<a href="{entry_url(page.next_slug)}" rel="next">&rarr;</a>' if page.next_slug else ""
        return f'<article class="entry">{page.content_html}</article>' + _pager(prev_html, next_html)

    def _letter_body(self, page):
        items = "".join(
            f'<li><a href="{entry_url(e.slug)}">{e.display_title}</a></li>'
            for e in page.entries
        )
        prev_html = _letter_link(page.prev_letter) if page.prev_letter else ""
        next_html = _letter_link(page.next_letter) if page.next_letter else ""
        return (
            f"<h1>{html.escape(page.title)}</h1>"
            f'<ul class="entries">{items}</ul>'
            + _pager(prev_html, next_html)
        )

    def _semantic_field_body(self, page):
        return f"<h1>{html.escape(page.title)}</h1><div>{page.content_html}</div>"

    def _static_body(self, page):
        body = f"<h1>{html.escape(page.title)}</h1>" + self.partials.get(page.path, "")
        if page.glossary_letters:
            index = "".join(
                f'<li><a href="#{letter}">{letter}</a></li>' for letter in page.glossary_letters
            )
            sections = "".join(
                f'<section id="{letter}"><h2>{letter}</h2>{page.glossary_content[letter]}</section>'
                for letter in page.glossary_letters
            )
            body += f'<nav class="letters"><ul>{index}</ul></nav>{sections}'
        return body

    def _not_found_body(self, page):
        return (
            f"<h1>{html.escape(page.title)}</h1>"
            '<p>La pàgina que cerqueu no existeix. <a href="/">Torna a la portada</a>.</p>'
        )
