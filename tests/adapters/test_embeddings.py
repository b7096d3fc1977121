from __future__ import annotations

import numpy as np
import pytest

from factrecall.adapters.embeddings import EMBEDDING_DIM, VOCABULARY, HashingEmbedder, tokenize
from factrecall.domain.recall import cosine_similarity


def test_tokenize_splits_on_underscores_and_punctuation() -> None:
    assert tokenize("app uses_database PostgreSQL!") == ["app", "uses", "database", "postgresql"]


def test_vocabulary_has_no_duplicates() -> None:
    assert len(set(VOCABULARY)) == len(VOCABULARY)


def test_vectors_are_unit_length_and_deterministic() -> None:
    embedder = HashingEmbedder()

    vector = embedder.embed("app uses_database postgresql")

    assert len(vector) == embedder.dimensions == EMBEDDING_DIM
    assert float(np.linalg.norm(vector)) == pytest.approx(1.0)
    assert embedder.embed("app uses_database postgresql") == vector


def test_blank_text_gives_a_zero_vector() -> None:
    assert HashingEmbedder(dimensions=400).embed("  ... ") == [0.0] * 400


def test_related_statements_are_closer_than_unrelated_ones() -> None:
    embedder = HashingEmbedder()
    query = embedder.embed("which database does the app use")

    related = cosine_similarity(query, embedder.embed("app uses_database postgresql database"))
    unrelated = cosine_similarity(query, embedder.embed("frontend react component render"))

    assert related > unrelated


def test_batch_matches_single_embeddings() -> None:
    embedder = HashingEmbedder()

    assert embedder.embed_batch(["jwt token", "docker"]) == [embedder.embed("jwt token"), embedder.embed("docker")]


def test_dimensions_must_leave_room_for_hashed_features() -> None:
    with pytest.raises(ValueError, match="vocabulary"):
        HashingEmbedder(dimensions=len(VOCABULARY))
