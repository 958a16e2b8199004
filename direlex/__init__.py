"""DIRELEX: dictionary data layer, HTTP server and static site generator."""

__version__ = "0.1.0"
