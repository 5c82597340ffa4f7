"""Tradebook — personal trade journal with realized PNL and ROI analytics."""

__version__ = "0.1.0"
