"""Request normalization for the transaction engine.

Incoming payloads use camelCase field names and, for historical reasons,
several alternate spellings (``equipmentId`` for ``equipment``, a
``rentalDates`` pair instead of ``rentalDetails``, ``governBody``/``school``
instead of ``provider``/``recipient``, ...). Everything is folded into one
shape here, once, before the engine sees it. Normalization only converts
shapes and types; business rules are enforced by the engine.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from equiptrack.domain.errors import ValidationError
from equiptrack.domain.status import (
    ItemCondition,
    ProviderKind,
    TransactionKind,
    TransactionStatus,
    parse_condition,
    parse_provider_kind,
    parse_status,
    parse_transaction_kind,
)
from equiptrack.utils.date_parser import parse_datetime

logger = logging.getLogger(__name__)


@dataclass
class ItemInput:
    """Unvalidated transaction item."""

    equipment_id: Optional[int] = None
    quantity: Optional[int] = None
    condition: Optional[ItemCondition] = None
    serial_numbers: tuple[str, ...] = ()
    notes: Optional[str] = None


@dataclass
class RentalDetailsInput:
    """Unvalidated rental details; any field may be missing."""

    start_date: Optional[datetime] = None
    return_due_date: Optional[datetime] = None
    returned_date: Optional[datetime] = None
    rental_fee: Optional[Decimal] = None


@dataclass
class CreateTransactionRequest:
    provider_kind: Optional[ProviderKind] = None
    provider_id: Optional[int] = None
    recipient_id: Optional[int] = None
    transaction_kind: Optional[TransactionKind] = None
    items: list[ItemInput] = field(default_factory=list)
    rental_details: Optional[RentalDetailsInput] = None
    additional_notes: Optional[str] = None
    terms_and_conditions: Optional[str] = None
    request_reference: Optional[str] = None


@dataclass
class UpdateTransactionRequest:
    """Partial update. ``None`` means the field was not supplied."""

    status: Optional[TransactionStatus] = None
    approved_by: Optional[str] = None
    provider_kind: Optional[ProviderKind] = None
    provider_id: Optional[int] = None
    recipient_id: Optional[int] = None
    transaction_kind: Optional[TransactionKind] = None
    items: Optional[list[ItemInput]] = None
    rental_details: Optional[RentalDetailsInput] = None
    additional_notes: Optional[str] = None
    terms_and_conditions: Optional[str] = None
    request_reference: Optional[str] = None
    note: Optional[str] = None
    actor: Optional[str] = None


@dataclass
class TransactionFilter:
    provider_id: Optional[int] = None
    provider_kind: Optional[ProviderKind] = None
    recipient_id: Optional[int] = None
    status: Optional[TransactionStatus] = None
    transaction_kind: Optional[TransactionKind] = None
    equipment_id: Optional[int] = None
    request_reference: Optional[str] = None
    start_date_from: Optional[datetime] = None
    start_date_to: Optional[datetime] = None
    return_due_date_from: Optional[datetime] = None
    return_due_date_to: Optional[datetime] = None
    page: int = 1
    limit: int = 10


def _pick(payload: dict[str, Any], *names: str) -> Any:
    """Return the first non-empty value among alternate field names."""
    for name in names:
        value = payload.get(name)
        if value is not None and value != "":
            return value
    return None


def _parse_id(value: Any, field_name: str) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValidationError(f"Invalid {field_name} '{value}': expected a numeric ID")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {field_name} '{value}': expected a numeric ID")


def _parse_quantity(value: Any, index: int) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValidationError(f"Item {index}: quantity must be a whole number")
    if isinstance(value, float) and not value.is_integer():
        raise ValidationError(f"Item {index}: quantity must be a whole number")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Item {index}: quantity must be a whole number")


def _parse_date_field(value: Any, field_name: str) -> Optional[datetime]:
    try:
        return parse_datetime(value)
    except ValueError as e:
        raise ValidationError(f"Invalid date format for {field_name}: {e}")


def _parse_fee(value: Any) -> Optional[Decimal]:
    if value is None:
        return None
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise ValidationError(f"Invalid rentalFee '{value}': expected a number")


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value).strip()


def normalize_item(raw: Any, index: int) -> ItemInput:
    """Normalize one item payload, accepting ``equipmentId`` for ``equipment``."""
    if not isinstance(raw, dict):
        raise ValidationError(f"Item {index}: expected an object")

    condition = raw.get("condition")
    serial_numbers = raw.get("serialNumbers") or raw.get("serial_numbers") or ()
    if isinstance(serial_numbers, str):
        serial_numbers = [s for s in (part.strip() for part in serial_numbers.split(",")) if s]

    return ItemInput(
        equipment_id=_parse_id(_pick(raw, "equipment", "equipmentId", "equipment_id"), f"equipment for item {index}"),
        quantity=_parse_quantity(raw.get("quantity"), index),
        condition=parse_condition(condition) if condition not in (None, "") else None,
        serial_numbers=tuple(str(s) for s in serial_numbers),
        notes=_optional_text(raw.get("notes")),
    )


def normalize_rental_details(payload: dict[str, Any]) -> Optional[RentalDetailsInput]:
    """Build rental details from ``rentalDetails`` or a ``rentalDates`` pair."""
    rental_dates = payload.get("rentalDates")
    if isinstance(rental_dates, (list, tuple)) and len(rental_dates) == 2:
        return RentalDetailsInput(
            start_date=_parse_date_field(rental_dates[0], "startDate"),
            return_due_date=_parse_date_field(rental_dates[1], "returnDueDate"),
            rental_fee=_parse_fee(payload.get("rentalFee")),
        )

    details = _pick(payload, "rentalDetails", "rental_details")
    if details is None:
        return None
    if not isinstance(details, dict):
        raise ValidationError("rentalDetails must be an object")

    return RentalDetailsInput(
        start_date=_parse_date_field(_pick(details, "startDate", "start_date"), "startDate"),
        return_due_date=_parse_date_field(_pick(details, "returnDueDate", "return_due_date"), "returnDueDate"),
        returned_date=_parse_date_field(_pick(details, "returnedDate", "returned_date"), "returnedDate"),
        rental_fee=_parse_fee(_pick(details, "rentalFee", "rental_fee")),
    )


def _normalize_parties(payload: dict[str, Any]) -> tuple[Optional[ProviderKind], Any, Any]:
    provider_kind_raw = _pick(payload, "providerKind", "providerType", "provider_kind")
    provider = _pick(payload, "provider", "provider_id")
    recipient = _pick(payload, "recipient", "recipient_id", "school")

    govern_body = payload.get("governBody")
    if govern_body not in (None, "") and provider is None:
        provider = govern_body
        if provider_kind_raw is None:
            provider_kind_raw = ProviderKind.GOVERNING_BODY

    provider_kind = parse_provider_kind(provider_kind_raw) if provider_kind_raw is not None else None
    return provider_kind, provider, recipient


def normalize_create_payload(payload: dict[str, Any]) -> CreateTransactionRequest:
    """Normalize a creation payload into a CreateTransactionRequest.

    Raises:
        ValidationError: If a supplied value cannot be parsed
    """
    if not isinstance(payload, dict):
        raise ValidationError("Transaction payload must be an object")

    provider_kind, provider, recipient = _normalize_parties(payload)
    kind_raw = _pick(payload, "transactionKind", "transactionType", "transaction_kind")

    raw_items = payload.get("items") or []
    if not isinstance(raw_items, list):
        raise ValidationError("items must be a list")

    transaction_kind = parse_transaction_kind(kind_raw) if kind_raw is not None else None
    rental_details = normalize_rental_details(payload)
    if rental_details is not None and transaction_kind == TransactionKind.PERMANENT:
        logger.debug("Ignoring rental details on permanent transaction payload")
        rental_details = None

    return CreateTransactionRequest(
        provider_kind=provider_kind,
        provider_id=_parse_id(provider, "provider"),
        recipient_id=_parse_id(recipient, "recipient"),
        transaction_kind=transaction_kind,
        items=[normalize_item(raw, index) for index, raw in enumerate(raw_items, start=1)],
        rental_details=rental_details,
        additional_notes=_optional_text(_pick(payload, "additionalNotes", "notes")),
        terms_and_conditions=_optional_text(_pick(payload, "termsAndConditions", "terms")),
        request_reference=_optional_text(_pick(payload, "requestReference", "requestId")),
    )


def normalize_update_payload(payload: dict[str, Any]) -> UpdateTransactionRequest:
    """Normalize a partial update payload into an UpdateTransactionRequest.

    Raises:
        ValidationError: If a supplied value cannot be parsed
    """
    if not isinstance(payload, dict):
        raise ValidationError("Update payload must be an object")

    provider_kind, provider, recipient = _normalize_parties(payload)
    kind_raw = _pick(payload, "transactionKind", "transactionType", "transaction_kind")
    status_raw = payload.get("status")

    items = None
    if "items" in payload:
        raw_items = payload["items"]
        if not isinstance(raw_items, list):
            raise ValidationError("items must be a list")
        items = [normalize_item(raw, index) for index, raw in enumerate(raw_items, start=1)]

    return UpdateTransactionRequest(
        status=parse_status(status_raw) if status_raw not in (None, "") else None,
        approved_by=_optional_text(_pick(payload, "approvedBy", "approved_by")),
        provider_kind=provider_kind,
        provider_id=_parse_id(provider, "provider"),
        recipient_id=_parse_id(recipient, "recipient"),
        transaction_kind=parse_transaction_kind(kind_raw) if kind_raw is not None else None,
        items=items,
        rental_details=normalize_rental_details(payload),
        additional_notes=_optional_text(_pick(payload, "additionalNotes", "notes")),
        terms_and_conditions=_optional_text(_pick(payload, "termsAndConditions", "terms")),
        request_reference=_optional_text(_pick(payload, "requestReference", "requestId")),
        note=_optional_text(payload.get("statusNote")),
        actor=_optional_text(_pick(payload, "changedBy", "updatedBy")),
    )


def normalize_filter(params: dict[str, Any]) -> TransactionFilter:
    """Normalize listing query parameters into a TransactionFilter."""
    provider_kind_raw = _pick(params, "providerKind", "providerType")
    status_raw = params.get("status")
    kind_raw = _pick(params, "transactionKind", "transactionType")

    page = params.get("page")
    limit = params.get("limit")
    try:
        page = int(page) if page not in (None, "") else 1
        limit = int(limit) if limit not in (None, "") else 10
    except (TypeError, ValueError):
        raise ValidationError("page and limit must be whole numbers")

    return TransactionFilter(
        provider_id=_parse_id(_pick(params, "provider", "governBody"), "provider"),
        provider_kind=parse_provider_kind(provider_kind_raw) if provider_kind_raw else None,
        recipient_id=_parse_id(_pick(params, "recipient", "school"), "recipient"),
        status=parse_status(status_raw) if status_raw else None,
        transaction_kind=parse_transaction_kind(kind_raw) if kind_raw else None,
        equipment_id=_parse_id(params.get("equipment"), "equipment"),
        request_reference=_optional_text(params.get("requestReference")),
        start_date_from=_parse_date_field(params.get("startDateFrom"), "startDateFrom"),
        start_date_to=_parse_date_field(params.get("startDateTo"), "startDateTo"),
        return_due_date_from=_parse_date_field(params.get("returnDueDateFrom"), "returnDueDateFrom"),
        return_due_date_to=_parse_date_field(params.get("returnDueDateTo"), "returnDueDateTo"),
        page=page,
        limit=limit,
    )
