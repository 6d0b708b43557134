"""
seller_scraper/api/routers package marker.
"""

from seller_scraper.api.routers.runs import router as runs_router

__all__ = [
    "runs_router",
]
