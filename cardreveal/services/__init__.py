from cardreveal.services.loyalty_client import LoyaltyApiClient, LoyaltyApiError
from cardreveal.services.pool_resolver import find_card_index, resolve_pool
from cardreveal.services.query_cache import CachedQuery, QueryCache
from cardreveal.services.reveal_controller import RevealController, Scheduler
from cardreveal.services.reveal_flow import RevealFlow, build_query_cache

__all__ = [
    "CachedQuery",
    "LoyaltyApiClient",
    "LoyaltyApiError",
    "QueryCache",
    "RevealController",
    "RevealFlow",
    "Scheduler",
    "build_query_cache",
    "find_card_index",
    "resolve_pool",
]
