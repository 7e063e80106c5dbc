from __future__ import annotations
from typing import Optional
import random

from .catalog import CatalogEntry, ImageCatalog


class DrawSelector:
    """Uniform pick over whatever the manifest lists right now.

    The catalog is re-read on every draw so edits to images.env apply without
    a restart. Nothing is removed or reordered; every draw samples the full set.
    """

    def __init__(self, catalog: ImageCatalog, rng: Optional[random.Random] = None):
        self.catalog = catalog
        self.rng = rng or random.Random()

    def pick(self) -> Optional[CatalogEntry]:
        entries = self.catalog.load()
        if not entries:
            return None
        return entries[self.rng.randrange(len(entries))]
