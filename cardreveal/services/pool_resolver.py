"""
Pool Resolver: Reconcile the Awarded Card Against Cached Views.

Three sources describe the same card designs with different freshness:
the claim response (authoritative), the reward's configured pool, and the
client-side catalog. This module merges them into one ResolvedPool.

PRECEDENCE (identity always by normalized id):
    awarded card > catalog > candidate pool

INVARIANTS:
- Pure: no timers, no I/O beyond logging
- Never raises; the worst outcome is the fail-closed single-entry pool
- entries[awarded_index].id == awarded card id
- No two entries share an id
"""

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from cardreveal.models.card_design import CardDesign, normalize_card_id
from cardreveal.models.claim import CandidateEntry
from cardreveal.models.resolved_pool import ResolvedPool

logger = logging.getLogger(__name__)

# Catalog snapshot: a sequence of designs/records, or a mapping keyed by id
Catalog = Iterable[CardDesign | Mapping[str, Any]] | Mapping[str, CardDesign | Mapping[str, Any]]


def _to_card(entry: Any) -> CardDesign | None:
    """Coerce a pool/catalog entry to a CardDesign, or None if it has no id."""
    if isinstance(entry, CardDesign):
        return entry
    if isinstance(entry, Mapping):
        return CardDesign.from_record(entry)
    if isinstance(entry, (str, int)) and not isinstance(entry, bool):
        card_id = normalize_card_id(entry)
        return CardDesign(id=card_id) if card_id else None
    return None


def _index_catalog(catalog: Catalog | None) -> dict[str, CardDesign]:
    """Index catalog entries by id. The last entry for an id wins."""
    if not catalog:
        return {}
    values = catalog.values() if isinstance(catalog, Mapping) else catalog

    indexed: dict[str, CardDesign] = {}
    for entry in values:
        card = _to_card(entry)
        if card is not None:
            indexed[card.id] = indexed[card.id].merged_with(card) if card.id in indexed else card
    return indexed


def _build_working_sequence(candidate_pool: Iterable[CandidateEntry] | None) -> list[CardDesign]:
    """
    Parse the candidate pool, dropping entries without an id.

    Duplicate ids collapse onto the first position; later duplicates'
    populated fields are overlaid on it.
    """
    working: list[CardDesign] = []
    positions: dict[str, int] = {}

    for entry in candidate_pool or ():
        card = _to_card(entry)
        if card is None:
            continue
        if card.id in positions:
            idx = positions[card.id]
            working[idx] = working[idx].merged_with(card)
        else:
            positions[card.id] = len(working)
            working.append(card)

    return working


def find_card_index(entries: Sequence[CardDesign], card_id: str | None) -> int:
    """Index of the first entry with `card_id`, or -1."""
    normalized = normalize_card_id(card_id)
    if normalized is None:
        return -1
    for idx, card in enumerate(entries):
        if card.id == normalized:
            return idx
    return -1


def _fail_closed(awarded: CardDesign, reason: str, **context: Any) -> ResolvedPool:
    logger.error(
        "pool_resolution_integrity_failure",
        extra={"awarded_id": awarded.id, "reason": reason, **context},
    )
    return ResolvedPool(entries=(awarded,), awarded_index=0, fail_closed=True)


def _has_unique_ids(entries: Sequence[CardDesign]) -> bool:
    return len({card.id for card in entries}) == len(entries)


def resolve_pool(
    awarded_card: CardDesign | Mapping[str, Any] | None,
    candidate_pool: Iterable[CandidateEntry] | None,
    catalog: Catalog | None = None,
) -> ResolvedPool | None:
    """
    Resolve the pool a reveal spins through.

    Steps:
    1. No awarded card → no pool (the reveal is not run)
    2. Parse the candidate pool, dropping entries without an id
    3. Backfill each entry from the catalog (catalog wins on overlap)
    4. Overwrite the awarded position with the awarded card verbatim,
       or append it when the pool does not contain it
    5. Verify entries[awarded_index] is the awarded card; otherwise fail
       closed to a single-entry pool

    Args:
        awarded_card: Authoritative card from the claim response
        candidate_pool: Reward's configured pool (ids or partial records)
        catalog: Client-side catalog snapshot, used only for backfill

    Returns:
        ResolvedPool, or None when there is no awarded card
    """
    awarded = _to_card(awarded_card) if awarded_card is not None else None
    if awarded is None:
        if awarded_card is not None:
            logger.warning("awarded_card_without_id")
        return None

    try:
        catalog_by_id = _index_catalog(catalog)
        working = [
            card.merged_with(catalog_by_id[card.id]) if card.id in catalog_by_id else card
            for card in _build_working_sequence(candidate_pool)
        ]

        awarded_index = find_card_index(working, awarded.id)
        if awarded_index == -1:
            working.append(awarded)
            awarded_index = len(working) - 1
        else:
            working[awarded_index] = awarded
    except Exception as e:
        logger.exception("pool_resolution_error")
        return _fail_closed(awarded, reason=type(e).__name__)

    if not 0 <= awarded_index < len(working) or working[awarded_index].id != awarded.id:
        return _fail_closed(
            awarded,
            reason="awarded_index_mismatch",
            awarded_index=awarded_index,
            pool_size=len(working),
        )
    if not _has_unique_ids(working):
        return _fail_closed(awarded, reason="duplicate_ids", pool_size=len(working))

    logger.info(
        "pool_resolved",
        extra={
            "awarded_id": awarded.id,
            "awarded_index": awarded_index,
            "pool_size": len(working),
            "catalog_size": len(catalog_by_id),
        },
    )

    return ResolvedPool(entries=tuple(working), awarded_index=awarded_index)
