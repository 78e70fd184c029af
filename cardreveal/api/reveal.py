"""
Reveal resolution endpoint.

Exposes the pool resolver so a thin client can obtain the pool and the
awarded index without reimplementing reconciliation.
"""

import logging
from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel, ConfigDict, Field

from cardreveal.models.failure import (
    ApiResponse,
    FailureKind,
    KnownError,
    RefusalError,
    create_success,
    create_unknown_failure,
)
from cardreveal.services.pool_resolver import resolve_pool

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reveal", tags=["reveal"])


class ResolveRequest(BaseModel):
    """Inputs to pool resolution, in the API's camelCase shape."""

    model_config = ConfigDict(populate_by_name=True)

    awarded_card: dict[str, Any] | None = Field(default=None, alias="awardedCard")
    candidate_pool: list[dict[str, Any] | str] = Field(default_factory=list, alias="candidatePool")
    catalog: list[dict[str, Any]] = Field(default_factory=list)


class ResolvedPoolPayload(BaseModel):
    """Resolved pool as returned to clients."""

    model_config = ConfigDict(populate_by_name=True)

    entries: list[dict[str, Any]]
    awarded_index: int = Field(alias="awardedIndex")
    fail_closed: bool = Field(alias="failClosed")


@router.post("/resolve", response_model=None)
async def resolve(request: ResolveRequest) -> ApiResponse[Any]:
    """
    Resolve the reveal pool for a claim.

    Refuses when no awarded card is supplied: there is nothing to reveal.
    An awarded card without an id is a known failure.
    """
    try:
        if request.awarded_card is None:
            raise RefusalError(FailureKind.MISSING_REQUIRED, "awarded_card_required")

        pool = resolve_pool(request.awarded_card, request.candidate_pool, request.catalog)
        if pool is None:
            raise KnownError(
                kind=FailureKind.INVALID_INPUT,
                message="Awarded card has no id",
                detail="awarded_card_without_id",
                status_code=422,
            )

        return create_success(
            ResolvedPoolPayload(
                entries=[card.to_record() for card in pool.entries],
                awarded_index=pool.awarded_index,
                fail_closed=pool.fail_closed,
            )
        )
    except RefusalError as e:
        return e.to_response()
    except KnownError as e:
        logger.warning("reveal_resolve_rejected", extra={"reason": e.detail})
        return e.to_response()
    except Exception as e:
        logger.exception("reveal_resolve_failed")
        return create_unknown_failure(e)
