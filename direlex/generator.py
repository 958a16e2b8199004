"""
Static site generator. Renders every page of the dictionary ahead of time
and pre-compresses the output so a plain web server can serve it.

Output layout (under OUTPUT_DIR):
    index.html
    404.html
    <static path>.html
    lema/<slug>.html
    lletra/<letter>.html
    camp-semantic/<path>.html
    js/terms.json            autocomplete dataset
    ...                      assets copied from PUBLIC_DIR
    *.gz, *.br               gzip and Brotli copies of every html/css/js/svg/json file

Pages are minified and written concurrently, at most ``workers`` at a time. Each phase
succeeds only if all of its tasks do; the first failure cancels the rest
and aborts the run. A run always starts by clearing the output directory,
so leftovers from a failed run are harmless.
"""

import argparse
import asyncio
import gzip
import json
import logging
import os
import shutil
import sys
from dataclasses import dataclass

import aiofiles
import brotli
import minify_html
from tqdm import tqdm

from . import config
from .catalog import DatasetError, load_catalog
from .pages import (
    entry_page_data,
    home_page_data,
    letter_page_for,
    not_found_page_data,
    render_entry,
    semantic_field_page_data,
    static_page_data,
)
from .render import Renderer

logger = logging.getLogger(__name__)


class GenerationError(Exception):
    """A page or asset could not be written or compressed."""


@dataclass(frozen=True)
class GenerationReport:
    pages: int
    compressed: int


def page_jobs(catalog):
    """Yields (relative output path, page data) for every page of the site."""
    yield "index.html", home_page_data(catalog)

    for entry in catalog.entries:
        prev_slug, next_slug = catalog.adjacent_entries(entry.slug)
        page = entry_page_data(entry.slug, render_entry(entry), prev_slug, next_slug)
        yield os.path.join("lema", f"{entry.slug}.html"), page

    for letter in catalog.letters:
        page = letter_page_for(catalog, letter)
        if page is not None:
            yield os.path.join("lletra", f"{letter}.html"), page

    for path, title in config.STATIC_PAGES:
        yield f"{path}.html", static_page_data(path, title, catalog)

    for field in catalog.semantic_fields:
        page = semantic_field_page_data(field.title, field.body)
        yield os.path.join("camp-semantic", f"{field.path}.html"), page

    yield "404.html", not_found_page_data()


async def run_all(coros, desc, unit):
    """
    Runs the coroutines concurrently with a progress bar.

    Returns their results in completion order. If any of them fails, the
    others are cancelled and the error is re-raised.
    """
    tasks = [asyncio.create_task(coro) for coro in coros]
    results = []
    try:
        with tqdm(total=len(tasks), desc=desc, unit=unit) as pbar:
            for coro in asyncio.as_completed(tasks):
                results.append(await coro)
                pbar.update(1)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
    return results


def minify_page(relative_path, content):
    """Minifies a rendered page, falling back to the original markup on failure."""
    try:
        return minify_html.minify(
            content,
            keep_closing_tags=True,
            keep_html_and_head_opening_tags=True,
        )
    except Exception as e:
        logger.warning("Could not minify %s: %s. Original content will be used.", relative_path, e)
        return content


async def write_page(output_dir, relative_path, page, renderer, semaphore):
    """Renders, minifies and writes a single page to the output directory."""
    async with semaphore:
        try:
            content = renderer.render(page)
        except Exception as e:
            raise GenerationError(f"failed to render {relative_path}: {e}") from e
        content = minify_page(relative_path, content)
        output_path = os.path.join(output_dir, relative_path)
        try:
            os.makedirs(os.path.dirname(output_path), exist_ok=True)
            async with aiofiles.open(output_path, "w", encoding="utf-8") as f:
                await f.write(content)
        except OSError as e:
            raise GenerationError(f"failed to generate {relative_path}: {e}") from e
        return relative_path


async def generate_pages(catalog, renderer, output_dir, semaphore):
    """Writes every page of the site concurrently."""
    coros = [
        write_page(output_dir, relative_path, page, renderer, semaphore)
        for relative_path, page in page_jobs(catalog)
    ]
    return await run_all(coros, desc="Generating pages", unit="page")


def copy_assets(public_dir, output_dir):
    """Copies the static assets (css, js, images) into the output directory."""
    if not os.path.isdir(public_dir):
        logger.warning("No assets directory at %s, skipping.", public_dir)
        return
    try:
        shutil.copytree(public_dir, output_dir, dirs_exist_ok=True)
    except OSError as e:
        raise GenerationError(f"failed to copy assets from {public_dir}: {e}") from e


async def write_terms(catalog, output_dir):
    """Writes the autocomplete dataset used by the client-side search."""
    terms_path = os.path.join(output_dir, config.TERMS_FILENAME)
    payload = json.dumps(catalog.terms(), ensure_ascii=False, separators=(",", ":"))
    try:
        os.makedirs(os.path.dirname(terms_path), exist_ok=True)
        async with aiofiles.open(terms_path, "w", encoding="utf-8") as f:
            await f.write(payload)
    except OSError as e:
        raise GenerationError(f"failed to write {terms_path}: {e}") from e
    return terms_path


def files_to_compress(output_dir):
    """Lists the files worth pre-compressing, by extension."""
    files = []
    for root, _dirs, filenames in os.walk(output_dir):
        for filename in filenames:
            if os.path.splitext(filename)[1].lower() in config.COMPRESSIBLE_EXTENSIONS:
                files.append(os.path.join(root, filename))
    return sorted(files)


async def write_bytes(path, content):
    async with aiofiles.open(path, "wb") as f:
        await f.write(content)


async def compress_file(path, semaphore):
    """Creates ``<path>.gz`` and ``<path>.br`` next to ``path``."""
    async with semaphore:
        try:
            async with aiofiles.open(path, "rb") as f:
                content = await f.read()
        except OSError as e:
            raise GenerationError(f"failed to read {path}: {e}") from e

        try:
            gzipped = await asyncio.to_thread(
                gzip.compress, content, config.GZIP_LEVEL, mtime=0
            )
            await write_bytes(f"{path}.gz", gzipped)
        except OSError as e:
            raise GenerationError(f"failed to gzip {path}: {e}") from e

        try:
            brotlied = await asyncio.to_thread(
                brotli.compress, content, quality=config.BROTLI_QUALITY
            )
            await write_bytes(f"{path}.br", brotlied)
        except (OSError, brotli.error) as e:
            raise GenerationError(f"failed to brotli {path}: {e}") from e
        return path


async def compress_files(output_dir, semaphore):
    coros = [compress_file(path, semaphore) for path in files_to_compress(output_dir)]
    return await run_all(coros, desc="Compressing files", unit="file")


def reset_output_dir(output_dir):
    try:
        if os.path.exists(output_dir):
            shutil.rmtree(output_dir)
        os.makedirs(output_dir)
    except OSError as e:
        raise GenerationError(f"failed to reset output directory {output_dir}: {e}") from e


async def generate_site(
    catalog,
    renderer=None,
    output_dir=config.OUTPUT_DIR,
    public_dir=config.PUBLIC_DIR,
    workers=config.DEFAULT_WORKERS,
):
    """Generates the whole static site into ``output_dir``."""
    renderer = renderer or Renderer()
    semaphore = asyncio.Semaphore(max(1, workers))

    logger.info("Starting static site generation into %s", output_dir)
    reset_output_dir(output_dir)

    pages = await generate_pages(catalog, renderer, output_dir, semaphore)
    logger.info("Generated %d pages.", len(pages))

    copy_assets(public_dir, output_dir)
    await write_terms(catalog, output_dir)

    compressed = await compress_files(output_dir, semaphore)
    logger.info("Compressed %d files.", len(compressed))

    return GenerationReport(pages=len(pages), compressed=len(compressed))


def main(argv=None):
    parser = argparse.ArgumentParser(description="Generate the static DIRELEX site.")
    parser.add_argument("--data", default=config.DATA_PATH, help="gzipped JSON dataset")
    parser.add_argument("--output", default=config.OUTPUT_DIR, help="output directory")
    parser.add_argument("--public", default=config.PUBLIC_DIR, help="static assets directory")
    parser.add_argument("--workers", type=int, default=config.DEFAULT_WORKERS,
                        help="max files processed concurrently")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        catalog = load_catalog(args.data)
        report = asyncio.run(generate_site(
            catalog,
            output_dir=args.output,
            public_dir=args.public,
            workers=args.workers,
        ))
    except (DatasetError, GenerationError) as e:
        logger.error("Static site generation failed: %s", e)
        return 1

    logger.info("Done: %d pages, %d compressed files in %s",
                report.pages, report.compressed, args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
