"""BNI Profile Scraper - Collect member contact details from a BNI directory listing."""

__version__ = "0.1.0"
