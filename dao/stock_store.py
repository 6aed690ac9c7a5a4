# dao/stock_store.py
from decimal import Decimal
from typing import Callable, List, Optional, TypeVar

from flask import current_app

from configs import db
from dao.ledger import ItemRef, MaterialRef, ProductRef, PurchaseReversal, StockLedger
from db.models.material import Material
from db.models.product import Product
from db.models.purchase import Purchase, PurchaseStatus
from db.models.stock_history import MovementType, StockHistory

T = TypeVar("T")


def _dec(x) -> Decimal:
    return Decimal(str(x or 0))


def model_for(ref: ItemRef):
    return Material if isinstance(ref, MaterialRef) else Product


def purchase_lines(purchase: Purchase) -> list:
    """(ref, qty) for every purchase line whose item still exists."""
    lines = []
    for item in purchase.items:
        if item.type == "material" and item.material_id is not None:
            lines.append((MaterialRef(int(item.material_id)), _dec(item.quantity)))
        elif item.type == "product" and item.product_id is not None:
            lines.append((ProductRef(int(item.product_id)), _dec(item.quantity)))
    return lines


class SqlAlchemyStockTransaction:
    def __init__(self, session):
        self.session = session

    def _locked(self, ref: ItemRef, user_id: int):
        model = model_for(ref)
        return (
            self.session.query(model)
            .filter(model.id == ref.id, model.user_id == user_id)
            .with_for_update()
            .populate_existing()
            .one_or_none()
        )

    def load_stock(self, ref: ItemRef, user_id: int) -> Optional[Decimal]:
        """Stock of the user's item, row-locked; None when missing or not theirs."""
        item = self._locked(ref, user_id)
        return None if item is None else _dec(item.stock)

    def save_stock(self, ref: ItemRef, stock: Decimal) -> None:
        item = self.session.get(model_for(ref), ref.id)
        item.stock = stock

    def add_history(
        self,
        ref: ItemRef,
        movement: MovementType,
        quantity: Decimal,
        description: Optional[str],
        reference: Optional[str],
        user_id: int,
    ) -> StockHistory:
        row = StockHistory(
            material_id=ref.id if isinstance(ref, MaterialRef) else None,
            product_id=ref.id if isinstance(ref, ProductRef) else None,
            type=movement,
            quantity=quantity,
            description=description,
            reference=reference,
            user_id=user_id,
        )
        self.session.add(row)
        self.session.flush()  # need row.id
        return row

    def completed_purchases(
        self, purchase_ids: List[int], user_id: int
    ) -> List[PurchaseReversal]:
        purchases = (
            self.session.query(Purchase)
            .filter(
                Purchase.id.in_(purchase_ids),
                Purchase.user_id == user_id,
                Purchase.status == PurchaseStatus.COMPLETED,
            )
            .order_by(Purchase.id.asc())
            .all()
        )
        return [
            PurchaseReversal(purchase_id=p.id, label=p.label, lines=purchase_lines(p))
            for p in purchases
        ]

    def delete_purchases(self, purchase_ids: List[int], user_id: int) -> int:
        purchases = (
            self.session.query(Purchase)
            .filter(Purchase.id.in_(purchase_ids), Purchase.user_id == user_id)
            .all()
        )
        for p in purchases:
            self.session.delete(p)  # items/costs go with it (cascade)
        self.session.flush()
        return len(purchases)


class SqlAlchemyStockStore:
    """Ledger store over the Flask-SQLAlchemy session."""

    def __init__(self, session=None):
        self._session = session

    @property
    def session(self):
        return self._session if self._session is not None else db.session

    def with_transaction(self, fn: Callable[[SqlAlchemyStockTransaction], T]) -> T:
        tx = SqlAlchemyStockTransaction(self.session)
        try:
            result = fn(tx)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        return result


def init_ledger(app, store=None):
    """Attach the app's StockLedger; tests may pass their own store."""
    ledger = StockLedger(store or SqlAlchemyStockStore())
    app.extensions["stock_ledger"] = ledger
    return ledger


def current_ledger():
    return current_app.extensions["stock_ledger"]
