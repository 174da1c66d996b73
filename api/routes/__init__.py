"""API routes package"""

from . import health, plans, recipes

__all__ = ["health", "plans", "recipes"]
