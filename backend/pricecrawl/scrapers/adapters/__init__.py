"""Vendor-specific adapter implementations.

Each adapter module defines a class that inherits from BaseSourceAdapter
and supplies its SourceConfig, CategoryTaxonomy and ExtractionPipeline.
"""

from .ohouse import OhouseAdapter
from .zzro import ZzroAdapter
from .hangel import HangelAdapter
from .ianmall import IanmallAdapter
from .symembership import SymembershipAdapter

__all__ = [
    "OhouseAdapter",
    "ZzroAdapter",
    "HangelAdapter",
    "IanmallAdapter",
    "SymembershipAdapter",
]
