"""
Whole-document body extraction used after the selector cascade.

This module provides a chain of extraction methods:
1. trafilatura: Fast, purpose-built for article content (default)
2. readability: Mozilla's readability algorithm (fallback)

Both run on the already-cleaned document and return a list of raw
paragraph strings; the caller applies the paragraph filter and body
threshold.
"""

from __future__ import annotations

from typing import Callable

from bs4 import BeautifulSoup
import trafilatura
from readability import Document


def extract_paragraphs(html: str, methods: list[str]) -> tuple[str, list[str]] | None:
    """Extract paragraphs from HTML using a chain of extractors.

    Tries each extraction method in order until one produces non-empty
    output.

    Args:
        html: The (cleaned) HTML document
        methods: Extractor names in the order to try them

    Returns:
        (method name, paragraphs) of the first method with output, or None
    """
    for method in methods:
        extractor = _get_extractor(method)
        if not extractor:
            continue
        try:
            paragraphs = extractor(html)
        except Exception:  # noqa: BLE001
            continue
        if paragraphs:
            return method, paragraphs
    return None


def _get_extractor(name: str) -> Callable[[str], list[str]] | None:
    if name == "trafilatura":
        return _extract_trafilatura
    if name == "readability":
        return _extract_readability
    return None


def _extract_trafilatura(html: str) -> list[str]:
    """Extract main content with trafilatura, one paragraph per line."""
    text = trafilatura.extract(html, include_comments=False, include_tables=False)
    if not text:
        return []
    return [line.strip() for line in text.splitlines() if line.strip()]


def _extract_readability(html: str) -> list[str]:
    """Extract main content with readability, then split its <p> nodes."""
    doc = Document(html)
    content_html = doc.summary()
    soup = BeautifulSoup(content_html, "html.parser")
    paragraphs = [p.get_text(" ", strip=True) for p in soup.find_all("p")]
    return [text for text in paragraphs if text]
