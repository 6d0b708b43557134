"""
Seller scraping core: field mapping, stage extractors, target pipeline, engine.
"""

from seller_scraper.scraping.engine import RunSink, SellerScrapingEngine
from seller_scraper.scraping.pipeline import TargetPipeline
from seller_scraper.scraping.visit_set import SellerVisitSet

__all__ = [
    "RunSink",
    "SellerScrapingEngine",
    "SellerVisitSet",
    "TargetPipeline",
]
