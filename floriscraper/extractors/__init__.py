"""Per-item field extraction for the Explorer product grid."""

from .fields import FieldExtractor
from .surface import ItemSurface, PlaywrightItemSurface

__all__ = ["FieldExtractor", "ItemSurface", "PlaywrightItemSurface"]
