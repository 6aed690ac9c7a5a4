from datetime import datetime

from configs import db


class Product(db.Model):
    __tablename__ = "product"
    __table_args__ = (
        db.UniqueConstraint("user_id", "sku", name="uq_product_user_sku"),
        db.CheckConstraint("stock >= 0", name="ck_product_stock_non_negative"),
    )

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    sku = db.Column(db.String(60), nullable=False)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text)
    category = db.Column(db.String(100))
    price = db.Column(db.Numeric(18, 2), default=0, nullable=False)
    stock = db.Column(db.Numeric(18, 3), default=0, nullable=False)
    min_stock = db.Column(db.Numeric(18, 3), default=0, nullable=False)
    status = db.Column(db.String(20), default="active", nullable=False)

    user_id = db.Column(db.Integer, db.ForeignKey("user_account.id"), nullable=False)
    user = db.relationship("User")

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __str__(self):
        return f"{self.sku} - {self.name}"
