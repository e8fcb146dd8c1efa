"""
Bin Pricing Package

Quote engine for a bin and dumpster cleaning service.
Prices residential, commercial and HOA requests with minimum floors,
manual review flags and an estimate range.
"""

__version__ = "1.0.0"
