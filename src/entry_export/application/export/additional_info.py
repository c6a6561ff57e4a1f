"""Application export – values of the additional-information columns.

Each column id maps to an async handler ``(entry, scope) -> value``; the
default table is :data:`DEFAULT_HANDLERS` and :class:`RowFormatter` accepts
extra registrations.
"""
from __future__ import annotations

import dataclasses
from decimal import Decimal, InvalidOperation
from typing import Any, Awaitable, Callable
from urllib.parse import urlencode

from entry_export.application.export.columns import strip_tags
from entry_export.application.export.context import FormattingContext
from entry_export.application.export.ports import (
    EntryMetaStore,
    PaymentMetaStore,
    PaymentStore,
    UserDirectory,
)
from entry_export.domain import Entry, FormSchema, Payment

__all__ = [
    "ALLOWED_GATEWAYS",
    "ALLOWED_PAYMENT_TYPES",
    "DEFAULT_HANDLERS",
    "MAP_BASE_URL",
    "AdditionalInfoHandler",
    "FormatScope",
    "InfoSources",
    "format_amount",
    "ucwords",
]

MAP_BASE_URL = "https://maps.google.com/maps"

ALLOWED_GATEWAYS: dict[str, str] = {
    "manual": "Manual",
    "paypal_standard": "PayPal Standard",
    "paypal_commerce": "PayPal Commerce",
    "stripe": "Stripe",
    "square": "Square",
    "authorize_net": "Authorize.Net",
}

ALLOWED_PAYMENT_TYPES: dict[str, str] = {
    "one-time": "One-Time",
    "subscription": "Subscription",
    "renewal": "Renewal",
}

_PAYMENT_LABELS: tuple[tuple[str, str], ...] = (
    ("total_amount", "Total"),
    ("currency", "Currency"),
    ("gateway", "Gateway"),
    ("type", "Type"),
    ("mode", "Mode"),
    ("transaction_id", "Transaction"),
    ("customer_id", "Customer"),
    ("subscription_id", "Subscription"),
    ("subscription_status", "Subscription Status"),
)

_PAYMENT_META_LABELS: tuple[tuple[str, str], ...] = (
    ("payment_note", "Payment Note"),
    ("subscription_period", "Subscription Period"),
)


@dataclasses.dataclass(frozen=True)
class InfoSources:
    """Stores consulted by the additional-information handlers."""

    meta: EntryMetaStore
    payments: PaymentStore
    payment_meta: PaymentMetaStore
    users: UserDirectory


@dataclasses.dataclass(frozen=True)
class FormatScope:
    form: FormSchema
    context: FormattingContext
    sources: InfoSources

    def t(self, text: str) -> str:
        return self.context.translate(text)


AdditionalInfoHandler = Callable[[Entry, FormatScope], Awaitable[Any]]


def ucwords(text: str) -> str:
    """Upper-case the first letter of every space separated word."""
    return " ".join(word[:1].upper() + word[1:] for word in text.split(" "))


def format_amount(amount: Any) -> str:
    try:
        value = Decimal(str(amount).replace(",", ""))
    except InvalidOperation:
        return str(amount)
    return f"{value:,.2f}"


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value == "")


def _lines(pairs: list[tuple[str, Any]]) -> str:
    return "".join(f"{label}: {value}\n" for label, value in pairs)


async def date_value(entry: Entry, scope: FormatScope) -> str:
    return scope.context.format_datetime(entry.date)


async def notes_value(entry: Entry, scope: FormatScope) -> str:
    notes = sorted(await scope.sources.meta.notes(entry.entry_id), key=lambda n: n.date)
    value = ""
    for note in notes:
        author = await scope.sources.users.get(note.user_id)
        name = author.display_name if author is not None else ""
        value += f"{scope.context.format_datetime(note.date)}, {name}: {strip_tags(note.data)}\n"
    return value


async def status_value(entry: Entry, scope: FormatScope) -> str:
    if entry.status in ("partial", "abandoned"):
        return ucwords(strip_tags(entry.status))
    return scope.t("Completed")


async def geodata_value(entry: Entry, scope: FormatScope) -> str:
    location = await scope.sources.meta.location(entry.entry_id)
    if location is None:
        return ""

    lines: list[tuple[str, str]] = []
    query: dict[str, str] = {}
    place = ", ".join(part for part in (location.city, location.region) if part)

    if place:
        query["q"] = ",".join(part for part in (location.city, location.region) if part)

    latlong = ""
    if location.latitude and location.longitude:
        query["ll"] = f"{location.latitude},{location.longitude}"
        latlong = f"{location.latitude}, {location.longitude}"
        lines.append((scope.t("Lat/Long"), latlong))

    if query:
        query["z"] = str(scope.context.map_zoom)
        query["output"] = "embed"
        lines.append((scope.t("Map"), f"{MAP_BASE_URL}?{urlencode(query, safe=',')}"))

    if place:
        lines.append((scope.t("Location"), place))

    if location.postal:
        label = "Zipcode" if location.country == "US" else "Postal"
        lines.append((scope.t(label), location.postal))

    if location.country:
        lines.append((scope.t("Country"), location.country))

    return _lines(lines)


async def pstatus_value(entry: Entry, scope: FormatScope) -> str:
    if not scope.form.supports_payments or entry.type != "payment":
        return ""
    payment = await scope.sources.payments.get_by_entry(entry.entry_id)
    if payment is None or not payment.status:
        return ""
    return ucwords(strip_tags(payment.status))


def _payment_value(key: str, value: Any) -> Any:
    if key == "total_amount":
        return format_amount(value)
    if key == "gateway":
        return ALLOWED_GATEWAYS.get(value, value)
    if key == "type":
        return ALLOWED_PAYMENT_TYPES.get(value, value)
    if key == "subscription_status":
        return ucwords(str(value).replace("-", " "))
    return value


async def pginfo_value(entry: Entry, scope: FormatScope) -> str:
    if not scope.form.supports_payments:
        return ""
    payment: Payment | None = await scope.sources.payments.get_by_entry(entry.entry_id)
    if payment is None:
        return ""

    lines: list[tuple[str, Any]] = []
    for key, label in _PAYMENT_LABELS:
        raw = getattr(payment, key)
        if _is_empty(raw):
            continue
        lines.append((scope.t(label), _payment_value(key, raw)))

    meta = await scope.sources.payment_meta.get_all(payment.id)
    for key, label in _PAYMENT_META_LABELS:
        item = meta.get(key)
        if item is None or _is_empty(item.value):
            continue
        lines.append((scope.t(label), item.value))

    return _lines(lines)


def _flag(col_id: str) -> AdditionalInfoHandler:
    async def flag_value(entry: Entry, scope: FormatScope) -> str:
        return scope.t("Yes") if entry.get(col_id, False) else scope.t("No")

    return flag_value


DEFAULT_HANDLERS: dict[str, AdditionalInfoHandler] = {
    "date": date_value,
    "notes": notes_value,
    "status": status_value,
    "geodata": geodata_value,
    "pstatus": pstatus_value,
    "pginfo": pginfo_value,
    "viewed": _flag("viewed"),
    "starred": _flag("starred"),
}
