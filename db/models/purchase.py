from configs import db
from datetime import datetime
import enum


class PurchaseStatus(enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Purchase(db.Model):
    __tablename__ = "purchase"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    invoice_number = db.Column(db.String(40), nullable=False)
    supplier = db.Column(db.String(255), nullable=False)
    reference = db.Column(db.String(255), default="")
    notes = db.Column(db.Text, default="")
    order_type = db.Column(db.String(20), default="offline")

    status = db.Column(
        db.Enum(
            PurchaseStatus,
            name="purchasestatus",
            values_callable=lambda e: [s.value for s in e],
        ),
        default=PurchaseStatus.PENDING,
        nullable=False,
    )
    discount = db.Column(db.Numeric(18, 2), default=0)
    subtotal = db.Column(db.Numeric(18, 2), default=0)
    total = db.Column(db.Numeric(18, 2), default=0)
    auto_update_price = db.Column(db.Boolean, default=False, nullable=False)

    user_id = db.Column(db.Integer, db.ForeignKey("user_account.id"), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    items = db.relationship(
        "PurchaseItem",
        back_populates="purchase",
        cascade="all, delete-orphan",
        order_by="PurchaseItem.id",
    )
    additional_costs = db.relationship(
        "PurchaseAdditionalCost",
        back_populates="purchase",
        cascade="all, delete-orphan",
    )

    @property
    def label(self) -> str:
        return self.reference or self.invoice_number

    def __str__(self):
        return self.invoice_number


class PurchaseItem(db.Model):
    __tablename__ = "purchase_item"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    purchase_id = db.Column(
        db.Integer,
        db.ForeignKey("purchase.id", ondelete="CASCADE"),
        nullable=False,
    )
    type = db.Column(db.String(20), nullable=False)  # material / product
    material_id = db.Column(
        db.Integer, db.ForeignKey("material.id", ondelete="SET NULL")
    )
    product_id = db.Column(db.Integer, db.ForeignKey("product.id", ondelete="SET NULL"))

    quantity = db.Column(db.Numeric(18, 3), nullable=False)
    unit = db.Column(db.String(30), default="pcs")
    price = db.Column(db.Numeric(18, 2), nullable=False)
    total_price = db.Column(db.Numeric(18, 2), nullable=False)

    purchase = db.relationship("Purchase", back_populates="items")
    material = db.relationship("Material")
    product = db.relationship("Product")


class PurchaseAdditionalCost(db.Model):
    __tablename__ = "purchase_additional_cost"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    purchase_id = db.Column(
        db.Integer,
        db.ForeignKey("purchase.id", ondelete="CASCADE"),
        nullable=False,
    )
    description = db.Column(db.String(255))
    amount = db.Column(db.Numeric(18, 2), nullable=False, default=0)

    purchase = db.relationship("Purchase", back_populates="additional_costs")
