"""Equipment transaction domain service.

The transaction engine: validates new transactions against the party
directory and equipment registry, enforces the status transition table and
derives the lifecycle side effects (approval stamp, returned date). Every
write is a single conditional store update, so a request either fully
applies or leaves nothing behind.
"""

import logging
from dataclasses import replace
from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional

from equiptrack.database.base import Database
from equiptrack.domain.directory import (
    DatabaseEquipmentRegistry,
    DatabasePartyDirectory,
    EquipmentRegistry,
    PartyDirectory,
)
from equiptrack.domain.entities import (
    Equipment,
    EquipmentTransaction,
    RentalDetails,
    ResolvedTransaction,
    StatusChange,
    TransactionItem,
    TransactionPage,
)
from equiptrack.domain.errors import (
    ConflictError,
    NotFoundError,
    StateTransitionError,
    ValidationError,
    concurrent_modification,
    immutable_field,
    missing_fields,
    only_pending_deletable,
    only_pending_editable,
    transaction_not_found,
)
from equiptrack.domain.identifiers import IdGenerator, SequenceIdGenerator
from equiptrack.domain.requests import (
    CreateTransactionRequest,
    ItemInput,
    RentalDetailsInput,
    TransactionFilter,
    UpdateTransactionRequest,
)
from equiptrack.domain.status import (
    ProviderKind,
    TransactionStatus,
    TransactionKind,
    ensure_transition_allowed,
    parse_condition,
    parse_provider_kind,
    parse_status,
    parse_transaction_kind,
)
from equiptrack.utils.date_parser import utcnow

logger = logging.getLogger(__name__)

DEFAULT_GOVERN_BODY_TERMS = "Standard terms apply"


class EquipmentTransactionService:
    """Service for managing equipment transactions."""

    def __init__(
        self,
        db: Database,
        registry: Optional[EquipmentRegistry] = None,
        directory: Optional[PartyDirectory] = None,
        id_generator: Optional[IdGenerator] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        """Initialize equipment transaction service.

        Args:
            db: Database instance (the transaction record store)
            registry: Equipment lookup; defaults to the database-backed registry
            directory: School and governing body lookup; defaults to the
                database-backed directory
            id_generator: Transaction ID allocator; defaults to database sequences
            clock: Returns the current naive UTC time
        """
        self.db = db
        self.registry = registry or DatabaseEquipmentRegistry(db)
        self.directory = directory or DatabasePartyDirectory(db)
        self.id_generator = id_generator or SequenceIdGenerator(db)
        self.clock = clock

    # Creation
    def create_transaction(self, request: CreateTransactionRequest) -> EquipmentTransaction:
        """Validate and persist a new transaction.

        All checks run before anything is written. Rule violations are
        reported before directory lookups, so a malformed request is always a
        ValidationError whatever its references.

        Args:
            request: Normalized creation request

        Returns:
            The persisted transaction, status pending

        Raises:
            ValidationError: If fields are missing or invalid
            NotFoundError: If the provider, recipient or an equipment item does not exist
        """
        missing = []
        if request.provider_id is None:
            missing.append("provider")
        if request.provider_kind is None:
            missing.append("providerKind")
        if request.recipient_id is None:
            missing.append("recipient")
        if request.transaction_kind is None:
            missing.append("transactionKind")
        if not request.items:
            missing.append("items (non-empty list)")
        if missing:
            raise ValidationError(missing_fields(missing))

        provider_kind = parse_provider_kind(request.provider_kind)
        transaction_kind = parse_transaction_kind(request.transaction_kind)

        if provider_kind == ProviderKind.SCHOOL and request.provider_id == request.recipient_id:
            raise ValidationError("Provider and recipient cannot be the same school")

        items = self._validate_items(request.items)

        rental_details = None
        if transaction_kind == TransactionKind.RENTAL:
            rental_details = self._validate_new_rental_details(request.rental_details)
        elif request.rental_details is not None:
            logger.debug("Ignoring rental details on permanent transaction")

        self.directory.resolve_provider(provider_kind, request.provider_id)
        self.directory.resolve_school(request.recipient_id, role="Recipient")
        self._resolve_equipment(items)

        terms = request.terms_and_conditions
        if not terms and provider_kind == ProviderKind.GOVERNING_BODY:
            terms = DEFAULT_GOVERN_BODY_TERMS

        transaction_id = self.id_generator.next_transaction_id(provider_kind, transaction_kind)
        now = self.clock()
        transaction_pk = self.db.create_transaction(
            transaction_id=transaction_id,
            provider_kind=provider_kind,
            provider_id=request.provider_id,
            recipient_id=request.recipient_id,
            transaction_kind=transaction_kind,
            items=items,
            created_at=now,
            history_entry=StatusChange(from_status=None, to_status=TransactionStatus.PENDING, changed_at=now),
            rental_details=rental_details,
            additional_notes=request.additional_notes or None,
            terms_and_conditions=terms or None,
            request_reference=request.request_reference or None,
        )
        logger.info(
            "Created %s transaction %s from %s %s to school %s with %d item(s)",
            transaction_kind.value,
            transaction_id,
            provider_kind.value,
            request.provider_id,
            request.recipient_id,
            len(items),
        )
        return self.require_transaction(transaction_pk)

    # Retrieval
    def get_transaction(self, reference: int | str) -> Optional[EquipmentTransaction]:
        """Get transaction by primary key or human-readable transaction ID.

        Args:
            reference: Numeric ID or transaction ID such as 'RNT000001'

        Returns:
            Transaction entity or None if not found
        """
        if isinstance(reference, int):
            return self.db.get_transaction(reference)
        reference = reference.strip()
        if reference.isdigit():
            return self.db.get_transaction(int(reference))
        return self.db.get_transaction_by_code(reference)

    def require_transaction(self, reference: int | str) -> EquipmentTransaction:
        """Get transaction or raise NotFoundError."""
        txn = self.get_transaction(reference)
        if txn is None:
            raise NotFoundError(transaction_not_found(reference))
        return txn

    def get_history(self, reference: int | str) -> tuple[StatusChange, ...]:
        """Get the status history of a transaction, oldest first."""
        return self.require_transaction(reference).history

    def describe_transaction(self, reference: int | str) -> ResolvedTransaction:
        """Get a transaction with its provider, recipient and equipment resolved."""
        txn = self.require_transaction(reference)
        equipment: dict[int, Equipment] = {}
        for item in txn.items:
            if item.equipment_id not in equipment:
                equipment[item.equipment_id] = self.registry.resolve(item.equipment_id)
        return ResolvedTransaction(
            transaction=txn,
            provider=self.directory.resolve_provider(txn.provider_kind, txn.provider_id),
            recipient=self.directory.resolve_school(txn.recipient_id, role="Recipient"),
            equipment=equipment,
        )

    def list_transactions(self, filters: Optional[TransactionFilter] = None) -> TransactionPage:
        """List transactions matching filters, newest first.

        Raises:
            ValidationError: If page or limit is less than 1
        """
        filters = filters or TransactionFilter()
        if filters.page < 1:
            raise ValidationError("page must be at least 1")
        if filters.limit < 1:
            raise ValidationError("limit must be at least 1")

        logger.debug("Listing transactions with %s", filters)
        transactions, total = self.db.list_transactions(filters)
        return TransactionPage(transactions=transactions, total=total, page=filters.page, limit=filters.limit)

    # Updates and transitions
    def update_transaction(self, reference: int | str, request: UpdateTransactionRequest) -> EquipmentTransaction:
        """Apply a partial update, including an optional status transition.

        Args:
            reference: Numeric ID or transaction ID
            request: Normalized partial update

        Returns:
            The updated transaction (unchanged if the request changed nothing)

        Raises:
            NotFoundError: If the transaction or a referenced equipment item does not exist
            ConflictError: If a write-once field would change, details of a
                non-pending transaction would be corrected, or the transaction was
                modified concurrently
            StateTransitionError: If the status change is not allowed
            ValidationError: If supplied values are invalid
        """
        txn = self.require_transaction(reference)
        self._check_immutable_fields(txn, request)
        now = self.clock()

        target_status = parse_status(request.status) if request.status is not None else None
        if target_status == txn.status:
            target_status = None
        resulting_status = target_status or txn.status

        changes: dict = {}
        items = None
        history_entry = None

        if request.items is not None:
            if txn.status != TransactionStatus.PENDING:
                raise ConflictError(only_pending_editable("items", txn.status.value))
            items = self._validate_items(request.items)

        rental_details = self._merge_rental_details(txn, request.rental_details, resulting_status)

        if target_status is not None:
            ensure_transition_allowed(txn.status, target_status, txn.transaction_kind)

            if target_status == TransactionStatus.APPROVED:
                if not request.approved_by and not txn.approved_by:
                    raise StateTransitionError(
                        "approvedBy is required when approving a transaction",
                        from_status=txn.status.value,
                        to_status=target_status.value,
                    )
                if txn.approved_at is None:
                    changes["approved_at"] = now

            if target_status == TransactionStatus.RETURNED and rental_details.returned_date is None:
                rental_details = replace(rental_details, returned_date=now)

            changes["status"] = target_status
            history_entry = StatusChange(
                from_status=txn.status,
                to_status=target_status,
                changed_at=now,
                changed_by=request.actor or request.approved_by,
                note=request.note,
            )

        if request.approved_by is not None and request.approved_by != txn.approved_by:
            if resulting_status != TransactionStatus.APPROVED or target_status is None:
                raise ValidationError("approvedBy can only be supplied when approving a transaction")
            changes["approved_by"] = request.approved_by

        if rental_details != txn.rental_details:
            changes["rental_details"] = rental_details

        for field_name in ("additional_notes", "terms_and_conditions", "request_reference"):
            value = getattr(request, field_name)
            if value is not None and (value or None) != getattr(txn, field_name):
                changes[field_name] = value or None

        if items is not None and tuple(items) != txn.items:
            self._resolve_equipment(items)
        elif items is not None:
            items = None

        if not changes and items is None:
            logger.debug("Update of transaction %s changed nothing", txn.transaction_id)
            return txn

        applied = self.db.update_transaction(
            transaction_pk=txn.id,
            expected_version=txn.version,
            expected_status=txn.status,
            updated_at=now,
            changes=changes,
            items=items,
            history_entry=history_entry,
        )
        if not applied:
            logger.warning("Lost concurrent update on transaction %s", txn.transaction_id)
            raise ConflictError(concurrent_modification(txn.transaction_id))

        if target_status is not None:
            logger.info(
                "Transaction %s moved from %s to %s", txn.transaction_id, txn.status.value, target_status.value
            )
        else:
            logger.info("Updated transaction %s (%s)", txn.transaction_id, ", ".join(sorted(changes)) or "items")
        return self.require_transaction(txn.id)

    def transition_status(
        self,
        reference: int | str,
        status: str | TransactionStatus,
        approved_by: Optional[str] = None,
        returned_date: Optional[datetime] = None,
        note: Optional[str] = None,
        actor: Optional[str] = None,
    ) -> EquipmentTransaction:
        """Move a transaction to a new status.

        Args:
            reference: Numeric ID or transaction ID
            status: Target status
            approved_by: Approver reference, required when approving unless one is on record
            returned_date: Returned date for rentals moving to returned; defaults to now
            note: Optional note stored in the status history
            actor: Who made the change, stored in the status history
        """
        rental_details = RentalDetailsInput(returned_date=returned_date) if returned_date is not None else None
        return self.update_transaction(
            reference,
            UpdateTransactionRequest(
                status=parse_status(status),
                approved_by=approved_by,
                rental_details=rental_details,
                note=note,
                actor=actor,
            ),
        )

    # Deletion
    def delete_transaction(self, reference: int | str) -> None:
        """Delete a transaction that is still pending.

        Raises:
            NotFoundError: If the transaction doesn't exist
            ConflictError: If the transaction is not pending
        """
        txn = self.require_transaction(reference)
        if txn.status != TransactionStatus.PENDING:
            raise ConflictError(only_pending_deletable(txn.transaction_id, txn.status.value))

        if not self.db.delete_transaction(txn.id, expected_status=TransactionStatus.PENDING):
            logger.warning("Lost concurrent delete on transaction %s", txn.transaction_id)
            raise ConflictError(concurrent_modification(txn.transaction_id))
        logger.info("Deleted pending transaction %s", txn.transaction_id)

    # Validation helpers
    def _check_immutable_fields(self, txn: EquipmentTransaction, request: UpdateTransactionRequest) -> None:
        checks = (
            ("provider", request.provider_id, txn.provider_id),
            ("recipient", request.recipient_id, txn.recipient_id),
            (
                "provider kind",
                parse_provider_kind(request.provider_kind) if request.provider_kind is not None else None,
                txn.provider_kind,
            ),
            (
                "transaction kind",
                parse_transaction_kind(request.transaction_kind) if request.transaction_kind is not None else None,
                txn.transaction_kind,
            ),
        )
        for field_name, requested, current in checks:
            if requested is not None and requested != current:
                raise ConflictError(immutable_field(field_name))

    def _validate_items(self, raw_items: list[ItemInput]) -> list[TransactionItem]:
        if not raw_items:
            raise ValidationError("At least one equipment item must be included in the transaction")

        items = []
        for index, raw in enumerate(raw_items, start=1):
            problems = []
            if raw.equipment_id is None:
                problems.append("equipment ID is missing")
            if raw.quantity is None:
                problems.append("quantity is missing")
            elif raw.quantity < 1:
                problems.append(f"quantity must be at least 1 (got {raw.quantity})")
            if raw.condition is None:
                problems.append("condition is missing")
            if problems:
                raise ValidationError(f"Item {index}: {'; '.join(problems)}")

            items.append(
                TransactionItem(
                    equipment_id=raw.equipment_id,
                    quantity=raw.quantity,
                    condition=parse_condition(raw.condition),
                    serial_numbers=tuple(raw.serial_numbers),
                    notes=raw.notes or None,
                )
            )
        return items

    def _resolve_equipment(self, items: list[TransactionItem]) -> None:
        for item in items:
            self.registry.resolve(item.equipment_id)

    def _validate_new_rental_details(self, details: Optional[RentalDetailsInput]) -> RentalDetails:
        if details is None or details.start_date is None or details.return_due_date is None:
            raise ValidationError("Rental transactions require startDate and returnDueDate")
        if details.returned_date is not None:
            raise ValidationError("returnedDate cannot be set on a new transaction")
        return self._build_rental_details(details.start_date, details.return_due_date, None, details.rental_fee)

    def _build_rental_details(
        self,
        start_date: datetime,
        return_due_date: datetime,
        returned_date: Optional[datetime],
        rental_fee: Optional[Decimal],
    ) -> RentalDetails:
        if return_due_date <= start_date:
            raise ValidationError(
                f"Return due date must be after start date "
                f"(start {start_date.isoformat()}, due {return_due_date.isoformat()})"
            )
        if returned_date is not None and returned_date < start_date:
            raise ValidationError(
                f"Returned date cannot be before start date "
                f"(start {start_date.isoformat()}, returned {returned_date.isoformat()})"
            )
        if rental_fee is not None and rental_fee < 0:
            raise ValidationError("rentalFee cannot be negative")
        return RentalDetails(
            start_date=start_date,
            return_due_date=return_due_date,
            returned_date=returned_date,
            rental_fee=rental_fee,
        )

    def _merge_rental_details(
        self,
        txn: EquipmentTransaction,
        update: Optional[RentalDetailsInput],
        resulting_status: TransactionStatus,
    ) -> Optional[RentalDetails]:
        """Merge supplied rental fields over the stored ones."""
        current = txn.rental_details
        if update is None:
            return current
        if not txn.is_rental or current is None:
            logger.debug("Ignoring rental details on %s transaction %s", txn.transaction_kind.value, txn.transaction_id)
            return current

        corrected = [
            name
            for name, value, stored in (
                ("startDate", update.start_date, current.start_date),
                ("returnDueDate", update.return_due_date, current.return_due_date),
                ("rentalFee", update.rental_fee, current.rental_fee),
            )
            if value is not None and value != stored
        ]
        if corrected and txn.status != TransactionStatus.PENDING:
            raise ConflictError(only_pending_editable(", ".join(corrected), txn.status.value))

        if update.returned_date is not None and resulting_status != TransactionStatus.RETURNED:
            raise ValidationError("returnedDate can only be set when the transaction is returned")

        return self._build_rental_details(
            start_date=update.start_date or current.start_date,
            return_due_date=update.return_due_date or current.return_due_date,
            returned_date=update.returned_date or current.returned_date,
            rental_fee=update.rental_fee if update.rental_fee is not None else current.rental_fee,
        )
