"""Folio: a static site generator for markdown content trees."""

__version__ = "0.1.0"
