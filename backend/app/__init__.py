"""
Recruiting Company API backend.
"""
