"""Fill in embeddings for facts that do not have one yet."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from factrecall.domain.retry import RetryPolicy

if TYPE_CHECKING:
    from factrecall.domain.model import FactRecord
    from factrecall.domain.ports import Embedder, UnitOfWorkFactory

log = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 100


def fact_text(record: FactRecord) -> str:
    """Text a fact is embedded as: ``subject predicate object``."""

    parts = [record.subject_name, record.predicate, record.object_literal]
    return " ".join(part for part in parts if part)


def index_embeddings(
    unit_of_work: UnitOfWorkFactory,
    embedder: Embedder,
    *,
    batch_size: int = DEFAULT_BATCH_SIZE,
    force: bool = False,
    retry: RetryPolicy | None = None,
) -> int:
    """Embed active facts lacking a vector; returns how many were embedded.

    With ``force`` every stored embedding is dropped first so the whole store
    is re-indexed. Each batch is its own write transaction.
    """

    if batch_size < 1:
        raise ValueError("batch_size must be at least 1")
    policy = retry or RetryPolicy()

    if force:

        def clear() -> int:
            with unit_of_work() as uow:
                cleared = uow.repositories.facts.clear_embeddings()
                uow.commit()
            return cleared

        log.info("Cleared %d embeddings before re-indexing", policy.run(clear, context="clear embeddings"))

    def embed_batch() -> int:
        with unit_of_work() as uow:
            facts = uow.repositories.facts
            pending = facts.missing_embeddings(limit=batch_size)
            if not pending:
                return 0
            vectors = embedder.embed_batch([fact_text(record) for record in pending])
            for record, vector in zip(pending, vectors, strict=True):
                facts.set_embedding(record.id, vector)
            uow.commit()
        return len(pending)

    total = 0
    while True:
        embedded = policy.run(embed_batch, context="embedding index")
        total += embedded
        if embedded < batch_size:
            break
        log.debug("Embedded %d facts so far", total)
    log.info("Embedded %d facts", total)
    return total
