"""
API v1 package.

Contains versioned API routes for the identity and access-control API.
"""

from studyauth.api.v1.routes import router

__all__ = ["router"]
