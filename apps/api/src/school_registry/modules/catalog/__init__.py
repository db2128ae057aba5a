"""
Catalog Module

Read-only lookups for NTEs, municipalities and typologies.
"""

from .router import router

__all__ = ["router"]
