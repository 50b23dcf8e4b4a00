"""
Request and response schemas for the Recruiting Company API.
"""
