"""
Transaction processing module for FoodFeed
Classifies Plaid transactions as food, enriches them with place data and builds feed items
"""

from .models import ClassifiedTransaction, EnrichedTransaction, PlaceData, TransactionRecord
from .food_classifier import FoodRules, FoodRulesError, filter_food_transactions, is_food_transaction, load_food_rules
from .place_enricher import PlaceEnricher
from .transaction_pipeline import TransactionPipeline
from .feed_materializer import FeedMaterializer, FeedResult
from .transaction_sync import TransactionSync

__all__ = [
    'ClassifiedTransaction', 'EnrichedTransaction', 'PlaceData', 'TransactionRecord',
    'FoodRules', 'FoodRulesError', 'filter_food_transactions', 'is_food_transaction', 'load_food_rules',
    'PlaceEnricher', 'TransactionPipeline', 'FeedMaterializer', 'FeedResult', 'TransactionSync',
]
