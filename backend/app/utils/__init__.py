"""
Managers and adapters used by the API routers.
"""
