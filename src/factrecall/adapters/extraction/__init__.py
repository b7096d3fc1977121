"""Extraction payload adapter."""

from __future__ import annotations

from .schema import CandidateFactPayload, EntityPayload, ExtractionPayload
from .translator import parse_extraction, parse_extraction_data, to_candidate, to_candidates

__all__ = [
    "CandidateFactPayload",
    "EntityPayload",
    "ExtractionPayload",
    "parse_extraction",
    "parse_extraction_data",
    "to_candidate",
    "to_candidates",
]
