"""Tests for the food transaction classifier and food rules loading."""

import pytest

from tests.helpers.stubs import plaid_transaction
from transaction.food_classifier import (
    FoodRules,
    FoodRulesError,
    filter_food_transactions,
    is_food_transaction,
    load_food_rules,
)
from transaction.models import TransactionRecord


def record(**kwargs):
    return TransactionRecord.from_plaid(plaid_transaction("t1", **kwargs))


class TestIsFoodTransaction:
    def test_restaurant_mcc_is_food(self, food_rules):
        """Scenario A: MCC 5812 alone is enough."""
        assert is_food_transaction(record(mcc="5812"), food_rules)

    @pytest.mark.parametrize("mcc", ["5811", "5813", "5814", "5411", "5462", "5309"])
    def test_food_mccs_accepted(self, food_rules, mcc):
        assert is_food_transaction(record(name="ZZZ", mcc=mcc), food_rules)

    def test_keyword_match_without_category(self, food_rules):
        """Scenario B: keyword match on the raw name."""
        assert is_food_transaction(record(name="Joe's Pizzeria", category=None), food_rules)

    def test_hardware_store_rejected(self, food_rules):
        """Scenario C."""
        assert not is_food_transaction(record(name="Acme Hardware", category=["Shops"]), food_rules)

    def test_pending_always_rejected(self, food_rules):
        tx = record(
            name="Starbucks Coffee",
            merchant_name="Starbucks",
            mcc="5812",
            category=["Food and Drink", "Restaurants"],
            pending=True,
        )
        assert not is_food_transaction(tx, food_rules)

    def test_category_labels_case_insensitive(self, food_rules):
        assert is_food_transaction(record(name="ZZZ", category=["Shops", "FOOD AND DRINK"]), food_rules)
        assert is_food_transaction(record(name="ZZZ", category=["Coffee Shop"]), food_rules)

    def test_unrelated_category_rejected(self, food_rules):
        assert not is_food_transaction(record(name="ZZZ", category=["Travel", "Airlines"]), food_rules)

    def test_whitelist_merchant_without_category(self, food_rules):
        assert is_food_transaction(record(merchant_name="TRADER JOE'S #552"), food_rules)

    def test_merchant_name_preferred_over_raw_name(self, food_rules):
        tx = record(name="SQ *CHIPOTLE 1234", merchant_name="Acme Hardware")
        assert not is_food_transaction(tx, food_rules)

    def test_raw_name_used_when_merchant_missing(self, food_rules):
        assert is_food_transaction(record(name="SQ *CHIPOTLE 1234"), food_rules)

    def test_substring_not_token_match(self, food_rules):
        # "bar" inside "Barnes" still counts
        assert is_food_transaction(record(name="Barnes Supply"), food_rules)

    def test_no_names_no_signals_rejected(self, food_rules):
        assert not is_food_transaction(record(), food_rules)

    def test_default_rules_used_when_none_given(self):
        assert is_food_transaction(record(mcc="5812"))


class TestFilterFoodTransactions:
    def test_preserves_order(self, food_rules):
        transactions = [
            TransactionRecord.from_plaid(plaid_transaction("a", name="Joe's Pizzeria")),
            TransactionRecord.from_plaid(plaid_transaction("b", name="Acme Hardware")),
            TransactionRecord.from_plaid(plaid_transaction("c", mcc="5812")),
        ]

        result = filter_food_transactions(transactions, food_rules)

        assert [tx.transaction_id for tx in result] == ["a", "c"]

    @pytest.mark.parametrize("bad_input", [None, [], "not a list", 42, {"transaction_id": "x"}])
    def test_invalid_input_yields_empty(self, food_rules, bad_input):
        assert filter_food_transactions(bad_input, food_rules) == []


class TestLoadFoodRules:
    def test_packaged_rules(self, food_rules):
        assert "5812" in food_rules.merchant_category_codes
        assert len(food_rules.merchant_category_codes) == 12
        assert food_rules.category_labels == {
            "food and drink", "restaurants", "coffee shop", "groceries", "alcohol and bars",
        }
        assert "starbucks" in food_rules.merchant_whitelist
        assert "pizzeria" in food_rules.keywords

    def test_custom_rules_file(self, tmp_path):
        path = tmp_path / "rules.yaml"
        path.write_text(
            "version: 2\n"
            "merchant_category_codes: ['9999']\n"
            "category_labels: [Snacks]\n"
            "merchant_whitelist: [Local Deli Co]\n"
            "keywords: [noodle]\n"
        )

        rules = load_food_rules(str(path))

        assert rules.version == 2
        assert rules.category_labels == {"snacks"}
        assert rules.merchant_whitelist == ("local deli co",)
        assert is_food_transaction(record(name="NOODLE HOUSE"), rules)
        assert not is_food_transaction(record(mcc="5812"), rules)

    def test_env_var_override(self, tmp_path, monkeypatch):
        path = tmp_path / "rules.yaml"
        path.write_text(
            "merchant_category_codes: []\ncategory_labels: []\nmerchant_whitelist: []\nkeywords: [ramen]\n"
        )
        monkeypatch.setenv("FOOD_RULES_PATH", str(path))

        assert load_food_rules().keywords == ("ramen",)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FoodRulesError):
            load_food_rules(str(tmp_path / "nope.yaml"))

    def test_missing_section(self, tmp_path):
        path = tmp_path / "rules.yaml"
        path.write_text("merchant_category_codes: ['5812']\n")

        with pytest.raises(FoodRulesError, match="category_labels"):
            load_food_rules(str(path))

    def test_not_a_mapping(self):
        with pytest.raises(FoodRulesError):
            FoodRules.from_dict(["5812"])
