from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import uuid4

import pytest

from factrecall.app import index
from factrecall.domain.model import FactRecord, FactScope, FactStatus, Polarity
from factrecall.domain.recall import fact_text, index_embeddings
from tests.helpers.facts import EPOCH, global_candidate, make_candidate, remember

if TYPE_CHECKING:
    from factrecall.adapters.sqlalchemy import SqlAlchemyStore
    from factrecall.app import Application
    from tests.helpers.facts import KeywordEmbedder


def test_fact_text_joins_subject_predicate_and_object() -> None:
    record = FactRecord(
        id=uuid4(),
        subject_name="app",
        subject_type="repo",
        predicate="uses_database",
        object_literal="postgresql",
        polarity=Polarity.POSITIVE,
        status=FactStatus.ACTIVE,
        confidence=1.0,
        scope=FactScope.GLOBAL,
        project_path=None,
        valid_from=EPOCH,
        valid_to=None,
        created_at=EPOCH,
    )

    assert fact_text(record) == "app uses_database postgresql"


def test_index_embeds_active_facts_once(app: Application, embedder: KeywordEmbedder) -> None:
    remember(app, make_candidate("postgresql"))
    remember(app, make_candidate("mysql"))
    remember(app, global_candidate("jwt", predicate="auth_method"))

    assert index(app) == 2
    assert sorted(embedder.embedded) == ["app auth_method jwt", "app uses_database postgresql"]
    assert index(app) == 0


def test_index_works_in_batches(
    project_store: SqlAlchemyStore, app: Application, embedder: KeywordEmbedder
) -> None:
    for number in range(5):
        remember(app, make_candidate(f"style {number}", predicate="convention"))

    assert index_embeddings(project_store.unit_of_work, embedder, batch_size=2) == 5
    assert len(embedder.embedded) == 5


def test_force_recomputes_every_embedding(app: Application, embedder: KeywordEmbedder) -> None:
    remember(app, make_candidate("postgresql"))
    index(app)

    assert index(app, force=True) == 1
    assert embedder.embedded == ["app uses_database postgresql"] * 2


def test_index_honours_scope(app: Application) -> None:
    remember(app, make_candidate("postgresql"))
    remember(app, global_candidate("jwt", predicate="auth_method"))

    assert index(app, scope="global") == 1
    assert index(app) == 1


def test_batch_size_must_be_positive(project_store: SqlAlchemyStore, embedder: KeywordEmbedder) -> None:
    with pytest.raises(ValueError, match="batch_size"):
        index_embeddings(project_store.unit_of_work, embedder, batch_size=0)
