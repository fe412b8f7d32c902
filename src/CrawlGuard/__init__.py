"""CrawlGuard: robots exclusion compliance for web crawlers."""

__version__ = "0.1.0"
