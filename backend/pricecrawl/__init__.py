"""pricecrawl: interior-material price crawler for Korean vendor catalogs."""

__version__ = "0.1.0"
