"""FastAPI routers package."""

from .availability import router as availability_router
from .health import router as health_router
from .metrics import router as metrics_router
from .review import router as review_router
from .tour import router as tour_router
from .vendor import router as vendor_router

__all__ = [
    "availability_router",
    "health_router",
    "metrics_router",
    "review_router",
    "tour_router",
    "vendor_router",
]
