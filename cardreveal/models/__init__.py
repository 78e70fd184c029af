from cardreveal.models.card_design import (
    CardDesign,
    DesignType,
    GradientColors,
    normalize_card_id,
    record_id,
)
from cardreveal.models.claim import (
    CandidateEntry,
    ClaimResult,
    RewardDescriptor,
    RewardType,
)
from cardreveal.models.failure import (
    STANDARD_MESSAGES,
    STANDARD_SUGGESTIONS,
    ApiResponse,
    FailureDetail,
    FailureKind,
    KnownError,
    OutcomeType,
    RefusalError,
    create_known_failure,
    create_refusal,
    create_success,
    create_unknown_failure,
    finalize_response,
    is_finalized,
)
from cardreveal.models.resolved_pool import ResolvedPool
from cardreveal.models.reveal_state import RevealPhase, RevealState, RevealTiming

__all__ = [
    "ApiResponse",
    "CandidateEntry",
    "CardDesign",
    "ClaimResult",
    "DesignType",
    "FailureDetail",
    "FailureKind",
    "GradientColors",
    "KnownError",
    "OutcomeType",
    "RefusalError",
    "ResolvedPool",
    "RevealPhase",
    "RevealState",
    "RevealTiming",
    "RewardDescriptor",
    "RewardType",
    "STANDARD_MESSAGES",
    "STANDARD_SUGGESTIONS",
    "create_known_failure",
    "create_refusal",
    "create_success",
    "create_unknown_failure",
    "finalize_response",
    "is_finalized",
    "normalize_card_id",
    "record_id",
]
