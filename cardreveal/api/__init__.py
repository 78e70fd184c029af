from cardreveal.api.health import router as health_router
from cardreveal.api.reveal import router as reveal_router

__all__ = [
    "health_router",
    "reveal_router",
]
