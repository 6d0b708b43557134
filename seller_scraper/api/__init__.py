"""
seller_scraper/api package marker.
"""
