from __future__ import annotations

from uuid import uuid4

import pytest

from factrecall.domain.model import (
    Conflict,
    ContentItem,
    Entity,
    Fact,
    FactScope,
    normalize_object,
    slugify,
)


def test_entity_slug_is_derived_from_the_name() -> None:
    entity = Entity(type="database", canonical_name="  PostgreSQL 16 ")

    assert entity.slug == "postgresql_16"
    assert slugify("Ruby-on-Rails!") == "ruby_on_rails"


def test_names_without_ascii_characters_get_a_stable_slug() -> None:
    entity = Entity(type="repo", canonical_name="日本語")

    assert entity.slug.startswith("_")
    assert entity.slug == slugify(" 日本語 ")
    assert slugify("++") != slugify("日本語")
    assert slugify("   ") == ""


def test_content_item_for_text_hashes_the_body() -> None:
    item = ContentItem.for_text("héllo", source="note")

    assert item.byte_len == 6
    assert len(item.text_hash) == 64
    assert item.source == "note"


def test_fact_scope_and_project_path_must_agree() -> None:
    with pytest.raises(ValueError, match="project_path"):
        Fact(subject_entity_id=uuid4(), predicate="decision", scope=FactScope.PROJECT)
    with pytest.raises(ValueError, match="global"):
        Fact(
            subject_entity_id=uuid4(),
            predicate="decision",
            scope=FactScope.GLOBAL,
            project_path="/work/app",
        )


def test_fact_compares_objects_by_normalized_form() -> None:
    fact = Fact(subject_entity_id=None, predicate="decision", object_literal="Use UV", scope=FactScope.GLOBAL)

    assert fact.same_object("  use uv ")
    assert normalize_object(None) == ""


def test_conflict_needs_distinct_facts() -> None:
    fact_id = uuid4()
    with pytest.raises(ValueError, match="distinct"):
        Conflict(fact_a_id=fact_id, fact_b_id=fact_id)

    other = uuid4()
    conflict = Conflict(fact_a_id=fact_id, fact_b_id=other)
    assert conflict.is_open
    assert conflict.involves(other)
