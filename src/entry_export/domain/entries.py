"""Domain – forms, entries and the records linked to them."""
from __future__ import annotations

import dataclasses
import json
from datetime import UTC, datetime
from typing import Any, Mapping

__all__ = [
    "PAYMENT_FIELD_TYPES",
    "Author",
    "Entry",
    "EntryNote",
    "Field",
    "FormSchema",
    "Location",
    "Payment",
    "PaymentMeta",
    "parse_datetime",
]

PAYMENT_FIELD_TYPES: frozenset[str] = frozenset(
    {
        "authorize_net",
        "payment-checkbox",
        "payment-coupon",
        "payment-multiple",
        "payment-select",
        "payment-single",
        "payment-total",
        "paypal-commerce",
        "square",
        "stripe-credit-card",
    }
)


def parse_datetime(value: datetime | str) -> datetime:
    """Accept a datetime or an ISO / ``Y-m-d H:M:S`` string; naive means UTC."""
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value


@dataclasses.dataclass(frozen=True)
class Field:
    """A named input defined on a form schema."""

    id: str
    type: str = ""
    label: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Field":
        return cls(
            id=str(data["id"]),
            type=str(data.get("type") or ""),
            label=str(data.get("label") or ""),
        )

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "type": self.type, "label": self.label}


@dataclasses.dataclass(frozen=True)
class FormSchema:
    """Live schema of a form: its fields in display order."""

    form_id: int
    fields: tuple[Field, ...] = ()
    has_payments: bool = False

    @property
    def supports_payments(self) -> bool:
        return self.has_payments or any(f.type in PAYMENT_FIELD_TYPES for f in self.fields)

    def field_ids(self) -> list[str]:
        return [f.id for f in self.fields]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FormSchema":
        return cls(
            form_id=int(data["form_id"]),
            fields=tuple(Field.from_dict(f) for f in data.get("fields") or ()),
            has_payments=bool(data.get("has_payments", False)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "form_id": self.form_id,
            "fields": [f.to_dict() for f in self.fields],
            "has_payments": self.has_payments,
        }


@dataclasses.dataclass
class Entry:
    """One submitted form record.

    ``fields`` maps field id to the submitted value.  ``meta`` holds any other
    stored column of the entry (e.g. ``user_uuid``) reachable through
    :meth:`get`.
    """

    entry_id: int
    form_id: int
    date: datetime
    fields: dict[str, Any] = dataclasses.field(default_factory=dict)
    status: str = ""
    type: str = ""
    viewed: bool = False
    starred: bool = False
    ip_address: str = ""
    user_agent: str = ""
    meta: dict[str, Any] = dataclasses.field(default_factory=dict)

    def __post_init__(self) -> None:
        self.date = parse_datetime(self.date)

    def field_value(self, field_id: str) -> Any:
        return self.fields.get(str(field_id), "")

    def get(self, key: str, default: Any = "") -> Any:
        if key == "fields" or key.startswith("_"):
            return default
        if key in {f.name for f in dataclasses.fields(self)}:
            return getattr(self, key)
        return self.meta.get(key, default)

    @staticmethod
    def decode_fields(raw: str | list[Any] | Mapping[str, Any] | None) -> dict[str, Any]:
        """Index stored field data by field id.

        Accepts the JSON-encoded list of ``{"id": ..., "value": ...}`` records
        the entry store keeps, the decoded list, or a plain id -> value map.
        Records without an id are ignored.
        """
        if not raw:
            return {}
        data: Any = json.loads(raw) if isinstance(raw, str) else raw
        if not data:
            return {}
        if isinstance(data, Mapping):
            return {
                str(k): (v.get("value", "") if isinstance(v, Mapping) else v)
                for k, v in data.items()
            }
        by_id: dict[str, Any] = {}
        for item in data:
            if not isinstance(item, Mapping) or "id" not in item:
                continue
            by_id[str(item["id"])] = item.get("value", "")
        return by_id


@dataclasses.dataclass(frozen=True)
class EntryNote:
    entry_id: int
    user_id: int
    date: datetime
    data: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "date", parse_datetime(self.date))


@dataclasses.dataclass(frozen=True)
class Author:
    user_login: str
    first_name: str = ""
    last_name: str = ""

    @property
    def display_name(self) -> str:
        name = self.first_name or self.user_login
        if self.last_name:
            name = f"{name} {self.last_name}"
        return name


@dataclasses.dataclass(frozen=True)
class Location:
    """Decoded geolocation blob stored with an entry."""

    city: str = ""
    region: str = ""
    postal: str = ""
    country: str = ""
    latitude: str = ""
    longitude: str = ""

    @classmethod
    def from_json(cls, raw: str | Mapping[str, Any] | None) -> "Location | None":
        if not raw:
            return None
        data: Any = json.loads(raw) if isinstance(raw, str) else raw
        if not isinstance(data, Mapping):
            return None
        known = {f.name for f in dataclasses.fields(cls)}
        return cls(**{k: "" if v is None else str(v) for k, v in data.items() if k in known})


@dataclasses.dataclass(frozen=True)
class Payment:
    """A payment record linked to an entry."""

    id: int
    entry_id: int
    status: str = ""
    total_amount: str = ""
    currency: str = ""
    gateway: str = ""
    type: str = ""
    mode: str = ""
    transaction_id: str = ""
    customer_id: str = ""
    subscription_id: str = ""
    subscription_status: str = ""


@dataclasses.dataclass(frozen=True)
class PaymentMeta:
    key: str
    value: str | None
