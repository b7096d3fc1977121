from __future__ import annotations

from datetime import timedelta
from uuid import uuid4

from factrecall.domain.model import FactRecord, FactScope, FactStatus, Polarity, Source
from factrecall.domain.recall import RecallResult
from factrecall.domain.recall.ranking import (
    dedupe_and_sort,
    dedupe_by_fact_id,
    merge_search_results,
    sort_by_timestamp,
    source_priority,
)
from tests.helpers.facts import EPOCH, PROJECT_PATH


def _result(
    object_literal: str,
    *,
    source: Source = Source.PROJECT,
    scope: FactScope = FactScope.PROJECT,
    minutes: int = 0,
    similarity: float | None = None,
    fact_id: object = None,
) -> RecallResult:
    record = FactRecord(
        id=fact_id or uuid4(),  # type: ignore[arg-type]
        subject_name="app",
        subject_type="repo",
        predicate="uses_database",
        object_literal=object_literal,
        polarity=Polarity.POSITIVE,
        status=FactStatus.ACTIVE,
        confidence=1.0,
        scope=scope,
        project_path=PROJECT_PATH if scope == FactScope.PROJECT else None,
        valid_from=EPOCH,
        valid_to=None,
        created_at=EPOCH + timedelta(minutes=minutes),
    )
    return RecallResult(fact=record, receipts=(), source=source, similarity=similarity)


def test_source_priority_uses_fact_scope_for_legacy_results() -> None:
    assert source_priority(_result("a", source=Source.PROJECT)) == 0
    assert source_priority(_result("a", source=Source.GLOBAL, scope=FactScope.GLOBAL)) == 1
    assert source_priority(_result("a", source=Source.LEGACY)) == 0
    assert source_priority(_result("a", source=Source.LEGACY, scope=FactScope.GLOBAL)) == 1


def test_dedupe_and_sort_prefers_project_and_first_signature() -> None:
    global_hit = _result("postgresql", source=Source.GLOBAL, scope=FactScope.GLOBAL, minutes=-10)
    project_hit = _result("postgresql", minutes=5)
    other = _result("redis", minutes=1)

    ranked = dedupe_and_sort([project_hit, global_hit, other], limit=10)

    assert ranked == [other, project_hit]


def test_dedupe_and_sort_orders_oldest_first_within_a_source_and_limits() -> None:
    newer = _result("a", minutes=2)
    older = _result("b", minutes=1)
    global_hit = _result("c", source=Source.GLOBAL, scope=FactScope.GLOBAL)

    assert dedupe_and_sort([global_hit, newer, older], limit=2) == [older, newer]


def test_dedupe_by_fact_id_keeps_best_score() -> None:
    fact_id = uuid4()
    weak = _result("a", similarity=0.2, fact_id=fact_id)
    strong = _result("a", similarity=0.9, fact_id=fact_id)
    other = _result("b", similarity=0.5)

    assert dedupe_by_fact_id([weak, other, strong], limit=5) == [strong, other]


def test_vector_hits_win_over_text_hits_for_the_same_fact() -> None:
    fact_id = uuid4()
    vector = _result("a", similarity=0.3, fact_id=fact_id)
    text = _result("a", similarity=0.5, fact_id=fact_id)
    text_only = _result("b", similarity=0.5)

    merged = merge_search_results([vector], [text, text_only], limit=5)

    assert merged == [text_only, vector]


def test_sort_by_timestamp_is_newest_first_and_stable() -> None:
    first = _result("a", minutes=1)
    tie = _result("b", minutes=1)
    newest = _result("c", minutes=3)

    assert sort_by_timestamp([first, tie, newest], limit=3) == [newest, first, tie]
    assert sort_by_timestamp([first, tie, newest], limit=1) == [newest]
