import gzip
import json

import pytest

from direlex.catalog import load_catalog

# Entries are listed in Catalan collation order, as the exporter delivers them.
SAMPLE_DATA = {
    "entries": [
        {"title": "abans", "title_display": "abans", "title_normalized": "abans",
         "content": "<p><i>adv.</i> En un temps anterior.</p>"},
        {"title": "adonar-se_(de)", "title_display": "adonar-se <i>(de)</i>",
         "title_normalized": "adonar-se (de)", "content": "<p>Percebre, notar.</p>"},
        {"title": "àvia", "title_display": "àvia", "title_normalized": "avia",
         "content": "<p>Mare del pare o de la mare.</p>"},
        {"title": "casa", "title_display": "casa", "title_normalized": "casa",
         "content": "<p>Edifici per a habitar-hi.</p>"},
        {"title": "ésser", "title_display": "ésser", "title_normalized": "esser",
         "content": "<p>Existir.</p>"},
        {"title": "l'un_i_l'altre", "title_display": "l'un i l'altre",
         "title_normalized": "l'un i l'altre", "content": "<p>Tots dos.</p>"},
        {"title": "quan", "title_display": "quan", "title_normalized": "quan",
         "content": "<p>En el moment que.</p>"},
        {"title": "qüestió", "title_display": "qüestió", "title_normalized": "questio",
         "content": "<p>Pregunta, problema.</p>"},
    ],
    "semantic_fields": [
        {"title": "Emocions", "body": "<p>Paraules per parlar dels sentiments.</p>",
         "path": "emocions"},
    ],
    "glossary": {
        "B": "<dl><dt>barbarisme</dt><dd>Mot estranger.</dd></dl>",
        "A": "<dl><dt>accepció</dt><dd>Sentit d'un mot.</dd></dl>",
    },
}


def write_dataset(path, data):
    """Writes ``data`` as gzip-compressed JSON, the format of the real export."""
    with gzip.open(path, "wt", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False)
    return path


@pytest.fixture
def dataset_path(tmp_path):
    return write_dataset(tmp_path / "data.json.gz", SAMPLE_DATA)


@pytest.fixture
def catalog(dataset_path):
    return load_catalog(dataset_path)


@pytest.fixture
def slugs():
    return [e["title"] for e in SAMPLE_DATA["entries"]]
