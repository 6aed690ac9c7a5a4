from configs import db
from datetime import datetime
import enum


class MovementType(enum.Enum):
    IN = "in"
    OUT = "out"
    ADJUSTMENT = "adjustment"


class StockHistory(db.Model):
    """Append-only ledger row: one stock movement on one material or product."""

    __tablename__ = "stock_history"
    __table_args__ = (
        db.CheckConstraint(
            "(material_id IS NULL) <> (product_id IS NULL)",
            name="ck_stock_history_one_item",
        ),
    )

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    material_id = db.Column(
        db.Integer, db.ForeignKey("material.id", ondelete="CASCADE"), index=True
    )
    product_id = db.Column(
        db.Integer, db.ForeignKey("product.id", ondelete="CASCADE"), index=True
    )
    type = db.Column(
        db.Enum(
            MovementType,
            name="movementtype",
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
    )
    quantity = db.Column(db.Numeric(18, 3), nullable=False)
    description = db.Column(db.String(255))
    reference = db.Column(db.String(255))
    user_id = db.Column(db.Integer, db.ForeignKey("user_account.id"), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    material = db.relationship("Material")
    product = db.relationship("Product")
