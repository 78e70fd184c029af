"""
Claim and reward descriptors.

Inbound shapes from the claim workflow. Parsing is lenient: the reveal
engine decides what to do with missing data, these models only carry it.
"""

import json
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from cardreveal.models.card_design import CardDesign, record_id

# A candidate pool entry as configured on a reward: a full or partial
# record, a bare id, or an already-parsed design.
CandidateEntry = CardDesign | Mapping[str, Any] | str | int


class RewardType(str, Enum):
    """What a reward grants when claimed."""

    VOUCHER = "voucher"
    SPECIFIC_CARD_DESIGN = "specificCardDesign"
    RANDOM_CARD_DESIGN = "randomCardDesign"


def _parse_card_design_ids(raw: Any) -> tuple[CandidateEntry, ...]:
    """Accept a list, a JSON-encoded list, or a single id string."""
    if raw is None:
        return ()
    if isinstance(raw, str):
        try:
            decoded = json.loads(raw)
        except ValueError:
            return (raw,)
        if isinstance(decoded, list):
            return tuple(decoded)
        return (raw,)
    if isinstance(raw, (list, tuple)):
        return tuple(raw)
    return ()


@dataclass(frozen=True, slots=True)
class RewardDescriptor:
    """
    A reward as the client knows it.

    Attributes:
        reward_id: Reward identifier
        title: Display title
        reward_type: Kind of reward
        card_design_ids: Configured candidate pool (possibly stale or partial)
    """

    reward_id: str
    title: str | None = None
    reward_type: RewardType = RewardType.VOUCHER
    card_design_ids: tuple[CandidateEntry, ...] = ()

    @property
    def involves_card_design(self) -> bool:
        return self.reward_type in (
            RewardType.SPECIFIC_CARD_DESIGN,
            RewardType.RANDOM_CARD_DESIGN,
        )

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "RewardDescriptor":
        try:
            reward_type = RewardType(record.get("rewardType", RewardType.VOUCHER.value))
        except ValueError:
            reward_type = RewardType.VOUCHER
        return cls(
            reward_id=record_id(record) or "",
            title=record.get("title") or record.get("name"),
            reward_type=reward_type,
            card_design_ids=_parse_card_design_ids(record.get("cardDesignIds")),
        )


@dataclass(frozen=True, slots=True)
class ClaimResult:
    """
    Outcome of a claim call.

    Attributes:
        claim_id: Claim identifier (None if the server omitted it)
        awarded_card: The authoritative awarded design, if any
        remaining_coins: Balance after the claim, if reported
    """

    claim_id: str | None
    awarded_card: CardDesign | None = None
    remaining_coins: int | None = None

    @classmethod
    def from_response(cls, payload: Mapping[str, Any]) -> "ClaimResult":
        """
        Parse the claim endpoint body.

        The top-level `awardedCardDesign` is authoritative. When it is
        missing, a populated `claim.awardedCardDesign` record is used; a
        bare id there carries no fields and is ignored.
        """
        claim = payload.get("claim")
        claim = claim if isinstance(claim, Mapping) else {}

        awarded_card = None
        for source in (payload.get("awardedCardDesign"), claim.get("awardedCardDesign")):
            if isinstance(source, Mapping):
                awarded_card = CardDesign.from_record(source)
                if awarded_card is not None:
                    break

        remaining = payload.get("remainingCoins")
        return cls(
            claim_id=record_id(claim),
            awarded_card=awarded_card,
            remaining_coins=int(remaining) if remaining is not None else None,
        )
