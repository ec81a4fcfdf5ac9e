"""
Website discovery and competitor price extraction pipeline.
"""
