# Routers package
from . import screen_router

__all__ = [
    "screen_router",
]
