"""
query_processor/merger.py
Combines the explicit request with free-text extraction.

Explicit fields always win; extraction only fills gaps.  Place strings are
trimmed and blank values collapse to None so "missing" has one meaning
downstream.
"""
import re
from dataclasses import replace
from typing import Optional

from query_processor.models import CONTAINER_TYPES, MODES, QuoteRequest

_CONTAINER_ALIASES = {"40hq": "40hc", "40highcube": "40hc"}


def _clean(value: Optional[str]) -> Optional[str]:
    text = str(value or "").strip()
    return text or None


def _mode(value: Optional[str]) -> Optional[str]:
    mode = str(value or "").strip().lower()
    return mode if mode in MODES else None


def _container(value: Optional[str]) -> Optional[str]:
    """Normalise spellings such as `40 FT`, `40-ft` or `40HQ`; None when unrecognised."""
    key = re.sub(r"[\s\-']", "", str(value or "").lower())
    if key.isdigit():
        key += "ft"
    key = _CONTAINER_ALIASES.get(key, key)
    return key if key in CONTAINER_TYPES else None


def merge_request(explicit: QuoteRequest, extracted: Optional[QuoteRequest] = None) -> QuoteRequest:
    merged = replace(extracted) if extracted is not None else QuoteRequest()
    for name, value in explicit.set_fields().items():
        setattr(merged, name, value)

    merged.free_text   = _clean(explicit.free_text)
    merged.origin      = _clean(merged.origin)
    merged.destination = _clean(merged.destination)
    merged.mode        = _mode(explicit.mode) or (_mode(extracted.mode) if extracted else None)
    merged.container_type = (
        _container(explicit.container_type)
        or (_container(extracted.container_type) if extracted else None)
    )
    return merged


def same_location(request: QuoteRequest) -> bool:
    if not request.origin or not request.destination:
        return False
    return request.origin.strip().lower() == request.destination.strip().lower()
