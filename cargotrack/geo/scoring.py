"""Ranking of provider candidates against the original query."""
from __future__ import annotations

import re
from typing import Dict, Iterable, List, Optional, Set

from cargotrack.geo.models import Candidate

_TOKEN_RE = re.compile(r"[^\W_]+", re.UNICODE)

PLACE_TYPE_BONUS: Dict[str, float] = {
    "city": 1.0,
    "town": 0.8,
    "village": 0.5,
}


def tokenize(text: str) -> Set[str]:
    return {token.lower() for token in _TOKEN_RE.findall(text or "")}


def place_type_bonus(candidate: Candidate) -> float:
    for place_type in (candidate.addresstype, candidate.type):
        if place_type and place_type.lower() in PLACE_TYPE_BONUS:
            return PLACE_TYPE_BONUS[place_type.lower()]
    return 0.0


def score_candidate(query: str, candidate: Candidate) -> float:
    """Token overlap (weighted x2) plus place-type bonus plus provider importance."""
    query_tokens = tokenize(query)
    overlap = 0.0
    if query_tokens:
        overlap = len(query_tokens & tokenize(candidate.display_name)) / len(query_tokens)
    return overlap * 2 + place_type_bonus(candidate) + (candidate.importance or 0.0)


def select_candidate(query: str, candidates: Iterable[Candidate]) -> Optional[Candidate]:
    """Return the best-scoring candidate with a valid coordinate.

    Ties keep the provider's ordering.
    """
    best: Optional[Candidate] = None
    best_score = float("-inf")
    usable: List[Candidate] = [candidate for candidate in candidates if candidate.coordinate() is not None]
    for candidate in usable:
        score = score_candidate(query, candidate)
        if score > best_score:
            best, best_score = candidate, score
    return best
