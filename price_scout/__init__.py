"""
Salon Price Scout: competitor website discovery and price extraction.
"""
