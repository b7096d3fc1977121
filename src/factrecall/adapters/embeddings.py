"""Dependency-light text embedder.

Vectors combine TF-IDF weights over a fixed software-engineering vocabulary
with hashed token/position and bigram features, normalised to unit length.
Good enough to rank short fact statements without a model download.
"""

from __future__ import annotations

import hashlib
import re
from collections import Counter
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from collections.abc import Sequence

EMBEDDING_DIM = 384

VOCABULARY: tuple[str, ...] = tuple(
    dict.fromkeys(
        """
        database framework library module class function method
        api rest graphql http request response server client
        authentication authorization token session cookie jwt
        user admin role permission access control security
        error exception handling validation sanitization
        test spec unit integration end-to-end e2e
        frontend backend fullstack ui ux component
        react vue angular svelte javascript typescript
        ruby python java go rust php elixir
        sql nosql postgresql mysql mongodb redis sqlite
        docker kubernetes container orchestration deployment
        git branch commit merge pull push repository
        configuration environment variable setting preference
        logger logging debug trace info warn
        cache caching storage persistence state
        async await promise callback thread process
        route routing middleware handler controller
        model view template render
        form input button submit
        dependency injection service factory singleton
        migration schema table column index constraint
        query filter sort pagination limit offset
        create read update delete crud operation
        json xml yaml csv format serialization
        encrypt decrypt hash salt cipher algorithm
        webhook event listener subscriber publisher
        job queue worker background task schedule
        metric monitoring performance optimization
        refactor cleanup technical debt improvement
        """.split()
    )
)

_COMMON_TERMS = frozenset(
    """
    the is are was were be been being have has had do does did
    for with from that this these those can could would should
    will make get set add remove update delete create
    """.split()
)
_COMMON_WEIGHT = 0.5
_VOCABULARY_WEIGHT = 2.0

_TOKEN = re.compile(r"[^\W_]+")


def tokenize(text: str) -> list[str]:
    """Lowercase word tokens; underscores split words (``uses_database``)."""

    return _TOKEN.findall(text.lower())


def _bucket(key: str, size: int) -> int:
    return int(hashlib.md5(key.encode("utf-8"), usedforsecurity=False).hexdigest(), 16) % size


class HashingEmbedder:
    def __init__(self, *, dimensions: int = EMBEDDING_DIM) -> None:
        if dimensions <= len(VOCABULARY):
            raise ValueError(f"dimensions must exceed the vocabulary size ({len(VOCABULARY)})")
        self._dimensions = dimensions
        self._index = {term: position for position, term in enumerate(VOCABULARY)}

    @property
    def dimensions(self) -> int:
        return self._dimensions

    def embed(self, text: str) -> list[float]:
        tokens = tokenize(text)
        if not tokens:
            return [0.0] * self._dimensions

        vector = np.zeros(self._dimensions, dtype=np.float64)
        counts = Counter(tokens)
        max_count = max(counts.values())
        for term, count in counts.items():
            position = self._index.get(term)
            if position is None:
                continue
            weight = _COMMON_WEIGHT if term in _COMMON_TERMS else _VOCABULARY_WEIGHT
            vector[position] = (count / max_count) * weight

        vector[len(VOCABULARY) :] = self._hashed_features(tokens)
        norm = float(np.linalg.norm(vector))
        if norm == 0.0:
            return vector.tolist()
        return (vector / norm).tolist()

    def embed_batch(self, texts: Sequence[str]) -> list[list[float]]:
        return [self.embed(text) for text in texts]

    def _hashed_features(self, tokens: list[str]) -> np.ndarray:
        size = self._dimensions - len(VOCABULARY)
        features = np.zeros(size, dtype=np.float64)
        for position, token in enumerate(tokens):
            features[_bucket(f"{token}_{position % 10}", size)] += 1.0
        for first, second in zip(tokens, tokens[1:], strict=False):
            features[_bucket(f"{first}_{second}", size)] += 0.5
        peak = features.max()
        return features / peak if peak > 0 else features
