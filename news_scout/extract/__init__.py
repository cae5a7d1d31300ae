"""
Article content extraction.

This package turns a publisher page into structured article fields using
boilerplate removal, host-aware selector profiles and whole-document
fallbacks.
"""

from .cleaner import strip_boilerplate
from .extractor import extract_article, extract_from_html
from .selectors import PROFILES, SelectorProfile, profile_for

__all__ = [
    "extract_article",
    "extract_from_html",
    "strip_boilerplate",
    "PROFILES",
    "SelectorProfile",
    "profile_for",
]
