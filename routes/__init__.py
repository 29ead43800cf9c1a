"""
Routes module for the FoodFeed API
"""

from .webhook_routes import webhook_bp
from .plaid_routes import plaid_bp

__all__ = ['webhook_bp', 'plaid_bp']
