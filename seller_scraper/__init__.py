"""
Seller compliance scraper for regional Amazon storefronts.
"""
