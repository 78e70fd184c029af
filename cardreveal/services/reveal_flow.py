"""
Reveal flow: claim result → pool resolution → reveal → cache refresh.

Glue between the claim workflow, the client-side cache and the reveal
controller. Holds no animation logic of its own.
"""

import asyncio
import logging
import random
from collections.abc import Callable

from cardreveal.config import (
    COLLECTIBLES_QUERY,
    POST_REVEAL_QUERIES,
    PROFILE_QUERY,
    REWARDS_QUERY,
)
from cardreveal.models.claim import ClaimResult, RewardDescriptor
from cardreveal.models.resolved_pool import ResolvedPool
from cardreveal.models.reveal_state import RevealTiming
from cardreveal.services.loyalty_client import LoyaltyApiClient
from cardreveal.services.pool_resolver import resolve_pool
from cardreveal.services.query_cache import QueryCache
from cardreveal.services.reveal_controller import RevealController, Scheduler, StateListener

logger = logging.getLogger(__name__)


class RevealFlow:
    """
    Runs the card reveal for claimed rewards.

    Resolved pools are cached per claim id, so re-opening the reveal for
    the same claim spins through the same pool.
    """

    def __init__(
        self,
        cache: QueryCache,
        client: LoyaltyApiClient | None = None,
        timing: RevealTiming | None = None,
        scheduler: Scheduler | None = None,
        rng: random.Random | None = None,
        on_state: StateListener | None = None,
        on_complete: Callable[[int], None] | None = None,
    ) -> None:
        self.cache = cache
        self.client = client
        self.controller = RevealController(
            timing=timing,
            scheduler=scheduler,
            rng=rng,
            on_state=on_state,
            on_complete=self._handle_complete,
        )
        self._on_complete = on_complete
        self._resolved: dict[str, ResolvedPool] = {}
        self._refresh_tasks: set[asyncio.Task[dict[str, bool]]] = set()

    def resolve(self, claim: ClaimResult, reward: RewardDescriptor | None) -> ResolvedPool | None:
        """Resolve (or reuse) the pool for a claim against the cached catalog."""
        if claim.claim_id is not None and claim.claim_id in self._resolved:
            return self._resolved[claim.claim_id]

        candidates = reward.card_design_ids if reward is not None else ()
        pool = resolve_pool(claim.awarded_card, candidates, self.cache.peek(COLLECTIBLES_QUERY))

        if pool is not None and claim.claim_id is not None:
            self._resolved[claim.claim_id] = pool
        return pool

    def begin(self, claim: ClaimResult, reward: RewardDescriptor | None) -> ResolvedPool | None:
        """
        Open the reveal for a claim.

        Returns None, leaving the controller untouched, when the claim
        awarded no card design.
        """
        pool = self.resolve(claim, reward)
        if pool is None:
            logger.info("reveal_skipped_no_awarded_card", extra={"claim_id": claim.claim_id})
            return None

        if pool.fail_closed:
            logger.warning(
                "reveal_using_fail_closed_pool",
                extra={"claim_id": claim.claim_id, "awarded_id": pool.awarded_card.id},
            )
        self.controller.open(pool)
        return pool

    async def claim(self, reward: RewardDescriptor) -> ResolvedPool | None:
        """
        Claim a reward through the API, then open its reveal.

        Raises:
            RuntimeError: If the flow has no API client
            LoyaltyApiError: If the claim was rejected
        """
        if self.client is None:
            raise RuntimeError("RevealFlow has no LoyaltyApiClient")

        result = await self.client.claim_reward(reward.reward_id)
        if result.remaining_coins is not None:
            try:
                self.cache.query(PROFILE_QUERY).set(result.remaining_coins)
            except KeyError:
                logger.debug("profile_query_not_registered")
        return self.begin(result, reward)

    def dismiss(self) -> None:
        """The hosting UI closed."""
        self.controller.close()

    def _handle_complete(self, session_token: int) -> None:
        invalidated = self.cache.invalidate(*POST_REVEAL_QUERIES)
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        if loop is not None and invalidated:
            task = loop.create_task(self.cache.refetch(*invalidated))
            self._refresh_tasks.add(task)
            task.add_done_callback(self._refresh_tasks.discard)

        if self._on_complete is not None:
            self._on_complete(session_token)


def build_query_cache(client: LoyaltyApiClient) -> QueryCache:
    """Query cache with the catalog, profile balance and rewards registered."""
    cache = QueryCache()
    cache.register(COLLECTIBLES_QUERY, client.get_collectibles)
    cache.register(PROFILE_QUERY, client.get_balance)
    cache.register(REWARDS_QUERY, client.get_rewards)
    return cache
