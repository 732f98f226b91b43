"""
Matching and conversion engines.
"""
