"""Omnisync - offline HTML copies of an Omnivore inbox."""

__version__ = "0.1.0"
