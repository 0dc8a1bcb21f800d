# -*- coding: utf-8 -*-
"""Lookup indexes over loaded documents."""

from grimoire.indexers.catalogue_index import CatalogueIndex

__all__ = ["CatalogueIndex"]
