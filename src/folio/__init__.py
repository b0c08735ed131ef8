"""Folio - locale-aware, publication-gated resolution of series and books."""

__version__ = "0.1.0"
