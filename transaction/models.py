from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional


def _to_decimal(value: Any) -> Decimal:
    if value is None:
        return Decimal("0")
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return Decimal("0")


@dataclass(frozen=True)
class TransactionRecord:
    """
    One transaction as returned by Plaid /transactions/get

    `amount` keeps Plaid's sign convention (positive = money out).
    `raw` is the untouched payload, stored verbatim with the row.
    """
    transaction_id: str
    merchant_name: Optional[str] = None
    name: Optional[str] = None
    amount: Decimal = Decimal("0")
    date: Optional[str] = None
    merchant_category_code: Optional[str] = None
    category: Optional[List[str]] = None
    pending: bool = False
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_plaid(cls, data: Dict[str, Any]) -> "TransactionRecord":
        category = data.get("category")
        if not isinstance(category, list):
            category = None

        mcc = data.get("merchant_category_code")
        return cls(
            transaction_id=str(data.get("transaction_id") or ""),
            merchant_name=data.get("merchant_name") or None,
            name=data.get("name") or None,
            amount=_to_decimal(data.get("amount")),
            date=data.get("date"),
            merchant_category_code=str(mcc) if mcc else None,
            category=[str(label) for label in category] if category is not None else None,
            pending=bool(data.get("pending", False)),
            raw=dict(data),
        )

    @property
    def display_name(self) -> Optional[str]:
        return self.merchant_name or self.name

    @property
    def category_string(self) -> Optional[str]:
        return ", ".join(self.category) if self.category else None


@dataclass(frozen=True)
class PlaceData:
    place_id: Optional[str] = None
    name: Optional[str] = None
    address: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    photo_url: Optional[str] = None


@dataclass(frozen=True)
class EnrichedTransaction:
    """A food transaction plus best-effort place metadata (None when lookup failed)"""
    transaction: TransactionRecord
    place: Optional[PlaceData] = None

    @property
    def transaction_id(self) -> str:
        return self.transaction.transaction_id

    @property
    def display_name(self) -> Optional[str]:
        return self.transaction.display_name


# Classification is a predicate, not a flag: a classified transaction is a record that passed it
ClassifiedTransaction = TransactionRecord
