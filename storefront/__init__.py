"""
Storefront - Source Package

A finance tracker for small businesses: record income and expenses by
hand, by voice or from a receipt photo, and watch the numbers add up.

DESIGN PRINCIPLES:
1. The hosted provider owns identity, rows and files
2. Provider failures never crash a page
3. No automatic retries - the user decides when to try again
4. Application state lives in explicit, injectable objects
5. Storage backends are swappable
"""

__version__ = "1.0.0"
__author__ = "Storefront Team"
