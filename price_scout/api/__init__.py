"""
price_scout/api package marker.
"""
