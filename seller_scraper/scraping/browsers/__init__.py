"""
Browser implementations of the page query protocol.

Imported lazily by `seller_scraper.scraping.browser.create_browser_factory`
so the static browser works without Playwright installed.
"""
