"""
Loyalty API client.

Thin async wrapper over the loyalty backend endpoints the reveal flow
depends on: claiming a reward and reading the catalog, rewards and balance.
"""

from collections.abc import Mapping
from typing import Any

import httpx

from cardreveal.config import settings
from cardreveal.models.card_design import CardDesign
from cardreveal.models.claim import ClaimResult, RewardDescriptor
from cardreveal.models.failure import FailureKind, KnownError


class LoyaltyApiError(KnownError):
    """The loyalty backend rejected a request or returned an unusable body."""

    def __init__(self, message: str, status_code: int = 502, detail: str | None = None):
        super().__init__(
            kind=FailureKind.EXTERNAL_API_ERROR,
            message=message,
            detail=detail,
            status_code=status_code,
        )


class LoyaltyApiClient:
    """
    Client for the customer-facing loyalty API.

    Retries and auth refresh are the caller's concern.
    """

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        timeout: float = 30.0,
    ) -> None:
        """
        Initialize the client.

        Args:
            base_url: API base URL. Defaults to settings.loyalty_api_url.
            token: Bearer token. Defaults to settings.loyalty_api_token.
            timeout: Request timeout in seconds.
        """
        self.base_url = (base_url or settings.loyalty_api_url).rstrip("/")
        self.token = token if token is not None else settings.loyalty_api_token
        self.timeout = timeout

    def _headers(self) -> dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    async def _request(self, method: str, path: str) -> dict[str, Any]:
        async with httpx.AsyncClient(timeout=self.timeout, headers=self._headers()) as client:
            response = await client.request(method, f"{self.base_url}{path}")

        try:
            body = response.json()
        except ValueError:
            body = None

        if not isinstance(body, dict):
            raise LoyaltyApiError(
                f"Unexpected response from {path}",
                detail=f"HTTP {response.status_code}",
            )
        if response.is_error or body.get("success") is False:
            raise LoyaltyApiError(
                body.get("message") or f"Request to {path} failed",
                status_code=response.status_code if response.is_error else 502,
                detail=f"HTTP {response.status_code}",
            )
        return body

    async def claim_reward(self, reward_id: str) -> ClaimResult:
        """
        Claim a reward.

        Raises:
            LoyaltyApiError: If the claim was rejected
            httpx.HTTPError: On transport failure
        """
        body = await self._request("POST", f"/rewards/claim/{reward_id}")
        return ClaimResult.from_response(body)

    async def get_collectibles(self) -> list[CardDesign]:
        """Fetch the full card design catalog. Records without an id are skipped."""
        body = await self._request("GET", "/customer/collectibles")
        designs = (CardDesign.from_record(r) for r in body.get("collectibles") or [])
        return [d for d in designs if d is not None]

    async def get_rewards(self) -> list[RewardDescriptor]:
        body = await self._request("GET", "/customer/rewards")
        records = body.get("rewards") or []
        return [RewardDescriptor.from_record(r) for r in records if isinstance(r, Mapping)]

    async def get_balance(self) -> int:
        """Current coin balance of the signed-in user."""
        body = await self._request("GET", "/customer/profile")
        user = body.get("user")
        coins = user.get("esproCoins") if isinstance(user, Mapping) else None
        return int(coins) if coins is not None else 0
