from datetime import datetime

from configs import db


class Material(db.Model):
    __tablename__ = "material"
    __table_args__ = (
        db.UniqueConstraint("user_id", "code", name="uq_material_user_code"),
        db.CheckConstraint("stock >= 0", name="ck_material_stock_non_negative"),
    )

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    code = db.Column(db.String(60), nullable=False)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text)
    unit = db.Column(db.String(30), default="pcs")
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
        return f"{self.code} - {self.name}"
