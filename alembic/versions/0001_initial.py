"""initial schema: users, materials, products, purchases, stock history

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 09:00:00

"""
from alembic import op
import sqlalchemy as sa

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None

userrole = sa.Enum("ADMIN", "STAFF", name="userrole")
purchasestatus = sa.Enum("pending", "completed", "cancelled", name="purchasestatus")
movementtype = sa.Enum("in", "out", "adjustment", name="movementtype")


def _stock_item_columns(key: str):
    return [
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(key, sa.String(60), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("category", sa.String(100)),
        sa.Column("price", sa.Numeric(18, 2), nullable=False, server_default="0"),
        sa.Column("stock", sa.Numeric(18, 3), nullable=False, server_default="0"),
        sa.Column("min_stock", sa.Numeric(18, 3), nullable=False, server_default="0"),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user_account.id"), nullable=False),
        sa.Column("created_at", sa.DateTime()),
        sa.Column("updated_at", sa.DateTime()),
    ]


def upgrade() -> None:
    op.create_table(
        "user_account",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("name", sa.String(120)),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("role", userrole, nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("is_verified", sa.Boolean(), nullable=False),
        sa.Column("email_verified_at", sa.DateTime()),
        sa.Column("created_at", sa.DateTime()),
    )
    op.create_index("ix_user_account_email", "user_account", ["email"], unique=True)

    op.create_table(
        "verification_token",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("user_account.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("token", sa.String(6), nullable=False),
        sa.Column("expires", sa.DateTime(), nullable=False),
    )

    material_cols = _stock_item_columns("code")
    material_cols.insert(4, sa.Column("unit", sa.String(30)))
    op.create_table(
        "material",
        *material_cols,
        sa.UniqueConstraint("user_id", "code", name="uq_material_user_code"),
        sa.CheckConstraint("stock >= 0", name="ck_material_stock_non_negative"),
    )
    op.create_table(
        "product",
        *_stock_item_columns("sku"),
        sa.UniqueConstraint("user_id", "sku", name="uq_product_user_sku"),
        sa.CheckConstraint("stock >= 0", name="ck_product_stock_non_negative"),
    )

    op.create_table(
        "purchase",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("invoice_number", sa.String(40), nullable=False),
        sa.Column("supplier", sa.String(255), nullable=False),
        sa.Column("reference", sa.String(255)),
        sa.Column("notes", sa.Text()),
        sa.Column("order_type", sa.String(20)),
        sa.Column("status", purchasestatus, nullable=False),
        sa.Column("discount", sa.Numeric(18, 2)),
        sa.Column("subtotal", sa.Numeric(18, 2)),
        sa.Column("total", sa.Numeric(18, 2)),
        sa.Column("auto_update_price", sa.Boolean(), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user_account.id"), nullable=False),
        sa.Column("created_at", sa.DateTime()),
    )
    op.create_table(
        "purchase_item",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "purchase_id",
            sa.Integer(),
            sa.ForeignKey("purchase.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("material_id", sa.Integer(), sa.ForeignKey("material.id", ondelete="SET NULL")),
        sa.Column("product_id", sa.Integer(), sa.ForeignKey("product.id", ondelete="SET NULL")),
        sa.Column("quantity", sa.Numeric(18, 3), nullable=False),
        sa.Column("unit", sa.String(30)),
        sa.Column("price", sa.Numeric(18, 2), nullable=False),
        sa.Column("total_price", sa.Numeric(18, 2), nullable=False),
    )
    op.create_table(
        "purchase_additional_cost",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "purchase_id",
            sa.Integer(),
            sa.ForeignKey("purchase.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("description", sa.String(255)),
        sa.Column("amount", sa.Numeric(18, 2), nullable=False),
    )

    op.create_table(
        "stock_history",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("material_id", sa.Integer(), sa.ForeignKey("material.id", ondelete="CASCADE")),
        sa.Column("product_id", sa.Integer(), sa.ForeignKey("product.id", ondelete="CASCADE")),
        sa.Column("type", movementtype, nullable=False),
        sa.Column("quantity", sa.Numeric(18, 3), nullable=False),
        sa.Column("description", sa.String(255)),
        sa.Column("reference", sa.String(255)),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user_account.id"), nullable=False),
        sa.Column("created_at", sa.DateTime()),
        sa.CheckConstraint(
            "(material_id IS NULL) <> (product_id IS NULL)",
            name="ck_stock_history_one_item",
        ),
    )
    op.create_index("ix_stock_history_material_id", "stock_history", ["material_id"])
    op.create_index("ix_stock_history_product_id", "stock_history", ["product_id"])
    op.create_index("ix_stock_history_created_at", "stock_history", ["created_at"])


def downgrade() -> None:
    op.drop_table("stock_history")
    op.drop_table("purchase_additional_cost")
    op.drop_table("purchase_item")
    op.drop_table("purchase")
    op.drop_table("product")
    op.drop_table("material")
    op.drop_table("verification_token")
    op.drop_index("ix_user_account_email", table_name="user_account")
    op.drop_table("user_account")
    for enum in (movementtype, purchasestatus, userrole):
        enum.drop(op.get_bind(), checkfirst=True)
