# API module
from .endpoints import router, vehicles_router

__all__ = ["router", "vehicles_router"]
