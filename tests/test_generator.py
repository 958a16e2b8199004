import asyncio
import gzip
import json
import logging

import brotli
import pytest

from direlex import config
from direlex.catalog import Catalog
from direlex.generator import (
    GenerationError,
    files_to_compress,
    generate_site,
    main,
    page_jobs,
)
from direlex.models import Entry
from direlex.render import Renderer


@pytest.fixture
def public_dir(tmp_path):
    public = tmp_path / "public"
    (public / "css").mkdir(parents=True)
    (public / "css" / "main.min.css").write_text("body{margin:0}", encoding="utf-8")
    (public / "img").mkdir()
    (public / "img" / "logo.png").write_bytes(b"\x89PNG")
    return public


def test_page_jobs_cover_the_site(catalog):
    paths = [path for path, _page in page_jobs(catalog)]
    assert paths[0] == "index.html"
    assert paths[-1] == "404.html"
    assert "lema/adonar-se_(de).html" in paths
    assert "lletra/q.html" in paths
    assert "camp-semantic/emocions.html" in paths
    for path, _title in config.STATIC_PAGES:
        assert f"{path}.html" in paths
    expected = 1 + len(catalog.entries) + len(catalog.letters) + len(config.STATIC_PAGES) + 1 + 1
    assert len(paths) == expected


def test_generate_site(tmp_path, catalog, public_dir):
    output = tmp_path / "build"
    output.mkdir()
    (output / "stale.html").write_text("old", encoding="utf-8")

    report = asyncio.run(generate_site(catalog, output_dir=output, public_dir=public_dir, workers=2))

    assert report.pages == len(list(page_jobs(catalog)))
    assert not (output / "stale.html").exists()

    entry_html = (output / "lema" / "casa.html").read_text(encoding="utf-8")
    assert "<h2>casa</h2>" in entry_html
    assert "ha trobat" in (output / "404.html").read_text(encoding="utf-8")
    assert catalog.glossary["B"] in (output / "glossari.html").read_text(encoding="utf-8")

    assert (output / "css" / "main.min.css").exists()
    terms = json.loads((output / "js" / "terms.json").read_text(encoding="utf-8"))
    assert terms == catalog.terms()


def test_generate_site_compresses_text_files(tmp_path, catalog, public_dir):
    output = tmp_path / "build"
    report = asyncio.run(generate_site(catalog, output_dir=output, public_dir=public_dir, workers=4))

    originals = [p for p in output.rglob("*") if p.is_file() and p.suffix not in (".gz", ".br")]
    compressible = [p for p in originals if p.suffix in config.COMPRESSIBLE_EXTENSIONS]
    assert report.compressed == len(compressible)
    for path in compressible:
        gz = path.with_name(path.name + ".gz")
        assert gzip.decompress(gz.read_bytes()) == path.read_bytes()
        br = path.with_name(path.name + ".br")
        assert brotli.decompress(br.read_bytes()) == path.read_bytes()
    assert not (output / "img" / "logo.png.gz").exists()
    assert not (output / "img" / "logo.png.br").exists()


def test_pages_are_minified(tmp_path, catalog):
    output = tmp_path / "build"
    asyncio.run(generate_site(catalog, output_dir=output, public_dir=tmp_path / "nope", workers=2))
    rendered = Renderer().render(next(page_jobs(catalog))[1])
    written = (output / "index.html").read_text(encoding="utf-8")
    assert len(written) < len(rendered)
    assert "\n    <meta" not in written


def test_minify_failure_keeps_original(tmp_path, catalog, monkeypatch, caplog):
    def broken_minify(content, **kwargs):
        raise ValueError("bad markup")

    monkeypatch.setattr("direlex.generator.minify_html.minify", broken_minify)
    output = tmp_path / "build"
    with caplog.at_level(logging.WARNING, logger="direlex.generator"):
        asyncio.run(generate_site(catalog, output_dir=output, public_dir=tmp_path / "nope", workers=2))

    rendered = Renderer().render(next(page_jobs(catalog))[1])
    assert (output / "index.html").read_text(encoding="utf-8") == rendered
    assert "Could not minify index.html" in caplog.text


def test_missing_public_dir_is_skipped(tmp_path, catalog):
    output = tmp_path / "build"
    asyncio.run(generate_site(catalog, output_dir=output, public_dir=tmp_path / "nope", workers=1))
    assert (output / "index.html").exists()


def test_files_to_compress(tmp_path):
    (tmp_path / "a.HTML").write_text("x")
    (tmp_path / "b.png").write_text("x")
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "c.js").write_text("x")
    found = files_to_compress(tmp_path)
    assert sorted(p.rsplit("/", 1)[-1] for p in found) == ["a.HTML", "c.js"]


def test_write_failure_aborts(tmp_path):
    catalog = Catalog([
        Entry(slug="casa", normalized_title="casa"),
        Entry(slug="x" * 300, normalized_title="x"),
    ])
    with pytest.raises(GenerationError, match="lema/"):
        asyncio.run(generate_site(catalog, output_dir=tmp_path / "build",
                                  public_dir=tmp_path / "nope", workers=2))


def test_render_failure_aborts(tmp_path, catalog):
    class BrokenRenderer(Renderer):
        def render(self, page):
            if page.page_type == "letter":
                raise RuntimeError("boom")
            return super().render(page)

    with pytest.raises(GenerationError, match="failed to render lletra/.*boom"):
        asyncio.run(generate_site(catalog, BrokenRenderer(), output_dir=tmp_path / "build",
                                  public_dir=tmp_path / "nope", workers=2))


def test_main(tmp_path, dataset_path):
    output = tmp_path / "site"
    assert main(["--data", str(dataset_path), "--output", str(output),
                 "--public", str(tmp_path / "nope"), "--workers", "2"]) == 0
    assert (output / "index.html.gz").exists()


def test_main_fails_on_bad_data(tmp_path):
    bad = tmp_path / "bad.json.gz"
    bad.write_bytes(b"not gzip")
    assert main(["--data", str(bad), "--output", str(tmp_path / "site")]) == 1


def test_main_fails_on_render_error(tmp_path, dataset_path, monkeypatch):
    def broken_home(self, page):
        raise KeyError("letters")

    monkeypatch.setattr(Renderer, "_home_body", broken_home)
    assert main(["--data", str(dataset_path), "--output", str(tmp_path / "site"),
                 "--public", str(tmp_path / "nope")]) == 1
