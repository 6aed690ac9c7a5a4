# dao/ledger.py
"""
Stock ledger: keeps ``stock`` on materials/products in lockstep with the
append-only ``stock_history`` log.

The ledger does not talk to the database directly. It is handed a store
whose ``with_transaction(fn)`` runs ``fn`` with a transactional handle and
commits on return / rolls back on exception (see ``dao.stock_store``).
"""
import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Iterable, List, Optional, Protocol, Tuple, TypeVar, Union

from dao.errors import (
    InsufficientStockError,
    NotFoundError,
    Unauthorized,
    ValidationError,
)
from db.models.stock_history import MovementType

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class MaterialRef:
    id: int
    kind = "material"


@dataclass(frozen=True)
class ProductRef:
    id: int
    kind = "product"


ItemRef = Union[MaterialRef, ProductRef]


@dataclass
class PurchaseReversal:
    """Lines of a completed purchase that must be taken back out of stock."""

    purchase_id: int
    label: str
    lines: List[Tuple[ItemRef, Decimal]] = field(default_factory=list)


class StockTransaction(Protocol):
    def load_stock(self, ref: ItemRef, user_id: int) -> Optional[Decimal]: ...

    def save_stock(self, ref: ItemRef, stock: Decimal) -> None: ...

    def add_history(
        self,
        ref: ItemRef,
        movement: MovementType,
        quantity: Decimal,
        description: Optional[str],
        reference: Optional[str],
        user_id: int,
    ) -> Any: ...

    def completed_purchases(
        self, purchase_ids: List[int], user_id: int
    ) -> List[PurchaseReversal]: ...

    def delete_purchases(self, purchase_ids: List[int], user_id: int) -> int: ...


class StockStore(Protocol):
    def with_transaction(self, fn: Callable[[StockTransaction], T]) -> T: ...


# ---------- input parsing ----------
def _present(v) -> bool:
    return v is not None and str(v).strip() != ""


def item_ref(material_id=None, product_id=None) -> ItemRef:
    """Build a MaterialRef/ProductRef from the two optional wire fields."""
    has_material, has_product = _present(material_id), _present(product_id)
    if has_material == has_product:
        raise ValidationError(
            "Exactly one of materialId or productId is required",
            details={"materialId": material_id, "productId": product_id},
        )
    raw = material_id if has_material else product_id
    try:
        item_id = int(raw)
    except (TypeError, ValueError):
        raise ValidationError("Invalid item id", details={"received": raw})
    return MaterialRef(item_id) if has_material else ProductRef(item_id)


def to_movement_type(value) -> MovementType:
    if isinstance(value, MovementType):
        return value
    try:
        return MovementType(str(value).strip().lower())
    except ValueError:
        raise ValidationError(
            'Invalid type. Must be either "in", "out", or "adjustment"',
            details={"received": value},
        )


def to_quantity(value) -> Decimal:
    if value is None or isinstance(value, bool):
        raise ValidationError("Quantity is required", details={"quantity": value})
    try:
        qty = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError("Quantity must be a number", details={"quantity": value})
    if not qty.is_finite():
        raise ValidationError("Quantity must be a number", details={"quantity": value})
    return qty


def next_stock(current: Decimal, movement: MovementType, quantity: Decimal) -> Decimal:
    if movement is MovementType.IN:
        return current + quantity
    if movement is MovementType.OUT:
        return current - quantity
    return quantity


def _check_quantity(movement: MovementType, quantity: Decimal) -> None:
    if movement is MovementType.ADJUSTMENT:
        if quantity < 0:
            raise ValidationError(
                "Adjustment quantity must not be negative",
                details={"type": movement.value, "quantity": float(quantity)},
            )
    elif quantity <= 0:
        raise ValidationError(
            "Quantity must be greater than 0 for stock in/out",
            details={"type": movement.value, "quantity": float(quantity)},
        )


def _require_user(user_id) -> int:
    if user_id is None:
        raise Unauthorized("Unauthorized access")
    return user_id


# ---------- ledger ----------
class StockLedger:
    def __init__(self, store: StockStore):
        self.store = store

    def apply(
        self,
        ref: ItemRef,
        movement,
        quantity,
        user_id: Optional[int],
        description: Optional[str] = None,
        reference: Optional[str] = None,
    ):
        """Apply one movement atomically and return the created history row."""
        user_id = _require_user(user_id)
        if not isinstance(ref, (MaterialRef, ProductRef)):
            raise ValidationError("Invalid item reference", details={"received": ref})
        movement = to_movement_type(movement)
        qty = to_quantity(quantity)
        _check_quantity(movement, qty)

        return self.store.with_transaction(
            lambda tx: self.record(tx, ref, movement, qty, user_id, description, reference)
        )

    def record(
        self,
        tx: StockTransaction,
        ref: ItemRef,
        movement: MovementType,
        quantity: Decimal,
        user_id: int,
        description: Optional[str] = None,
        reference: Optional[str] = None,
    ):
        """
        Apply a movement inside a transaction the caller already holds.
        Input is assumed validated.
        """
        current = tx.load_stock(ref, user_id)
        if current is None:
            raise NotFoundError(f"{ref.kind.capitalize()} not found: {ref.id}")

        new_stock = next_stock(current, movement, quantity)
        if new_stock < 0:
            logger.warning(
                "Rejected %s of %s on %s #%s: stock %s would become %s",
                movement.value,
                quantity,
                ref.kind,
                ref.id,
                current,
                new_stock,
            )
            raise InsufficientStockError(
                "Stock cannot be negative",
                details={
                    "current": float(current),
                    "requested": float(quantity),
                    "type": movement.value,
                },
            )

        row = tx.add_history(ref, movement, quantity, description, reference, user_id)
        tx.save_stock(ref, new_stock)
        logger.info(
            "Stock %s %s on %s #%s: %s -> %s",
            movement.value,
            quantity,
            ref.kind,
            ref.id,
            current,
            new_stock,
        )
        return row

    def reverse_completed_purchase(
        self,
        tx: StockTransaction,
        reversal: PurchaseReversal,
        user_id: int,
        description: Optional[str] = None,
        reference: Optional[str] = None,
    ) -> list:
        """
        Take every line of a completed purchase back out of stock with an
        ``out`` entry. The original movement type is not re-derived.
        """
        description = description or f"Purchase deleted: {reversal.label}"
        reference = reference or f"Bulk delete - Purchase: {reversal.label}"
        return [
            self.record(tx, ref, MovementType.OUT, qty, user_id, description, reference)
            for ref, qty in reversal.lines
        ]

    def bulk_delete_purchases(
        self, purchase_ids: Iterable, user_id: Optional[int]
    ) -> Tuple[int, int]:
        """
        Delete the user's purchases by id, reversing stock for the completed
        ones. Returns ``(deleted, reverted)``; all-or-nothing.
        """
        user_id = _require_user(user_id)
        if not isinstance(purchase_ids, (list, tuple)) or not purchase_ids:
            raise ValidationError(
                "Invalid request", details="ids must be a non-empty array"
            )
        try:
            ids = [int(x) for x in purchase_ids]
        except (TypeError, ValueError):
            raise ValidationError("Invalid request", details="ids must be integers")

        def run(tx: StockTransaction) -> Tuple[int, int]:
            completed = tx.completed_purchases(ids, user_id)
            for reversal in completed:
                self.reverse_completed_purchase(tx, reversal, user_id)
            deleted = tx.delete_purchases(ids, user_id)
            return deleted, len(completed)

        deleted, reverted = self.store.with_transaction(run)
        logger.info(
            "Deleted %s purchases, reverted stock for %s completed", deleted, reverted
        )
        return deleted, reverted
