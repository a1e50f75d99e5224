"""
Scrapers package containing the dashboard scraping implementations.
"""
from .base_scraper import BaseScraper
from .fieldedge_scraper import FieldEdgeScraper

__all__ = [
    'BaseScraper',
    'FieldEdgeScraper',
]
