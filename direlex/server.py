#!/usr/bin/env python3
"""
Flask web server for the DIRELEX dictionary.

Pages are rendered on demand from the catalog loaded at startup. The
catalog and the renderer are injected through ``create_app`` and kept in
``app.config``; request handlers only read from them.

Routes:
    /                        home page, letter index
    /lema/<slug>             entry page
    /lletra/<letter>         entries starting with <letter> (a-z)
    /camp-semantic/<slug>    semantic field page
    /<static page>           see config.STATIC_PAGES
    /js/terms.json           autocomplete dataset
    /css, /js, /img, ...     static assets from the public directory

Search runs client-side against /js/terms.json.
"""

import argparse
import logging
import os
import sys

from flask import Flask, abort, jsonify, send_from_directory

from . import config
from .catalog import DatasetError, load_catalog
from .pages import (
    entry_page_for,
    home_page_data,
    letter_page_for,
    not_found_page_data,
    semantic_field_page_data,
    static_page_data,
)
from .render import Renderer

logger = logging.getLogger(__name__)

HTML_CONTENT_TYPE = "text/html; charset=utf-8"


def is_valid_letter(letter):
    return len(letter) == 1 and "a" <= letter <= "z"


def create_app(catalog, renderer=None, public_dir=config.PUBLIC_DIR):
    app = Flask(__name__, static_folder=None)
    app.config["catalog"] = catalog
    app.config["renderer"] = renderer or Renderer()
    app.config["public_dir"] = os.path.abspath(public_dir)

    register_routes(app)
    return app


def register_routes(app):
    def get_catalog():
        return app.config["catalog"]

    def html_response(page, status=200):
        body = app.config["renderer"].render(page)
        return body, status, {"Content-Type": HTML_CONTENT_TYPE}

    @app.errorhandler(404)
    def not_found(_error):
        return html_response(not_found_page_data(), 404)

    @app.route("/")
    def index():
        return html_response(home_page_data(get_catalog()))

    @app.route("/lema/<slug>")
    def entry(slug):
        page = entry_page_for(get_catalog(), slug)
        if page is None:
            abort(404)
        return html_response(page)

    @app.route("/lletra/<letter>")
    def letter(letter):
        if not is_valid_letter(letter):
            abort(404)
        page = letter_page_for(get_catalog(), letter)
        if page is None:
            abort(404)
        return html_response(page)

    @app.route("/camp-semantic/<slug>")
    def semantic_field(slug):
        field = get_catalog().semantic_field_by_path(slug)
        if field is None:
            abort(404)
        return html_response(semantic_field_page_data(field.title, field.body))

    def static_page_view(path, title):
        def view():
            return html_response(static_page_data(path, title, get_catalog()))
        return view

    for path, title in config.STATIC_PAGES:
        app.add_url_rule(f"/{path}", endpoint=f"static_page_{path}",
                         view_func=static_page_view(path, title))

    @app.route("/" + config.TERMS_FILENAME)
    def terms():
        return jsonify(get_catalog().terms())

    @app.route("/<any(css, js, img):folder>/<path:filename>")
    def assets(folder, filename):
        return send_from_directory(os.path.join(app.config["public_dir"], folder), filename)

    @app.route("/favicon.svg")
    def favicon():
        return send_from_directory(app.config["public_dir"], "favicon.svg")

    @app.route("/robots.txt")
    def robots():
        return send_from_directory(app.config["public_dir"], "robots.txt")


def main(argv=None):
    host, port = config.get_server_address()

    parser = argparse.ArgumentParser(description="Serve the DIRELEX dictionary.")
    parser.add_argument("--data", default=config.DATA_PATH, help="gzipped JSON dataset")
    parser.add_argument("--public", default=config.PUBLIC_DIR, help="static assets directory")
    parser.add_argument("--host", default=host)
    parser.add_argument("--port", type=int, default=port)
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        catalog = load_catalog(args.data)
    except DatasetError as e:
        logger.error("Cannot start server: %s", e)
        return 1

    app = create_app(catalog, public_dir=args.public)
    logger.info("Server started at %s:%d", args.host, args.port)
    app.run(host=args.host, port=args.port)
    return 0


if __name__ == "__main__":
    sys.exit(main())
