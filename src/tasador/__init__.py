"""
tasador: scraping de listings, geocodificación y modelo de precios.
"""

__version__ = "0.1.0"
