"""
Food transaction classifier

Decides whether a Plaid transaction is a food/dining purchase. The data
driving the decision (MCCs, category labels, merchant names, keywords)
lives in food_rules.yaml so it can change without touching this logic.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, List, Optional

import yaml

from logging_setup import get_logger
from transaction.models import TransactionRecord

logger = get_logger(__name__)

DEFAULT_RULES_PATH = Path(__file__).parent / "food_rules.yaml"

_RULE_KEYS = ("merchant_category_codes", "category_labels", "merchant_whitelist", "keywords")


class FoodRulesError(Exception):
    """Raised when the food rules file is missing or malformed"""
    pass


@dataclass(frozen=True)
class FoodRules:
    merchant_category_codes: frozenset
    category_labels: frozenset
    merchant_whitelist: tuple
    keywords: tuple
    version: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Any) -> "FoodRules":
        if not isinstance(data, dict):
            raise FoodRulesError("Food rules must be a mapping")

        values = {}
        for key in _RULE_KEYS:
            items = data.get(key)
            if not isinstance(items, list):
                raise FoodRulesError(f"Food rules '{key}' must be a list")
            values[key] = [str(item).strip().lower() for item in items if str(item).strip()]

        return cls(
            merchant_category_codes=frozenset(values["merchant_category_codes"]),
            category_labels=frozenset(values["category_labels"]),
            merchant_whitelist=tuple(values["merchant_whitelist"]),
            keywords=tuple(values["keywords"]),
            version=data.get("version"),
        )


def load_food_rules(path: Optional[str] = None) -> FoodRules:
    """
    Load food rules from YAML

    Lookup order: explicit path, FOOD_RULES_PATH, packaged food_rules.yaml
    """
    rules_path = Path(path or os.getenv("FOOD_RULES_PATH") or DEFAULT_RULES_PATH)

    try:
        with open(rules_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise FoodRulesError(f"Cannot read food rules from {rules_path}: {e}") from e
    except yaml.YAMLError as e:
        raise FoodRulesError(f"Invalid YAML in {rules_path}: {e}") from e

    rules = FoodRules.from_dict(data)
    logger.info(
        f"Loaded food rules v{rules.version} from {rules_path.name}: "
        f"{len(rules.merchant_category_codes)} MCCs, {len(rules.merchant_whitelist)} merchants, "
        f"{len(rules.keywords)} keywords"
    )
    return rules


_default_rules: Optional[FoodRules] = None


def default_food_rules() -> FoodRules:
    global _default_rules
    if _default_rules is None:
        _default_rules = load_food_rules()
    return _default_rules


def is_food_transaction(tx: TransactionRecord, rules: Optional[FoodRules] = None) -> bool:
    """
    Check if a transaction is food-related

    Pending transactions are always rejected; they are classified once
    they settle (with their final amount and id).
    """
    rules = rules or default_food_rules()

    if tx.pending:
        return False

    if tx.merchant_category_code and tx.merchant_category_code in rules.merchant_category_codes:
        return True

    if tx.category:
        labels = {label.lower() for label in tx.category}
        if labels & rules.category_labels:
            return True

    merchant_name = (tx.merchant_name or tx.name or "").lower()

    if any(merchant in merchant_name for merchant in rules.merchant_whitelist):
        return True

    if any(keyword in merchant_name for keyword in rules.keywords):
        return True

    return False


def filter_food_transactions(
    transactions: Optional[Iterable[TransactionRecord]],
    rules: Optional[FoodRules] = None,
) -> List[TransactionRecord]:
    """Keep food transactions, preserving input order. None/invalid input gives []"""
    if not transactions or isinstance(transactions, (str, bytes, dict)):
        return []
    try:
        items = list(transactions)
    except TypeError:
        return []

    rules = rules or default_food_rules()
    return [tx for tx in items if is_food_transaction(tx, rules)]
