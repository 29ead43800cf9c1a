"""
External API clients: Plaid (transactions, Link) and Google Places
"""

from .plaid_client import PlaidClient, PlaidError
from .places_client import PlacesClient, PlacesError

__all__ = ['PlaidClient', 'PlaidError', 'PlacesClient', 'PlacesError']
