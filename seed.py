# seed.py
import click
from werkzeug.security import generate_password_hash

from configs import db
from db.models.material import Material
from db.models.product import Product
from db.models.user import User, UserRole


# -------- Users --------
def seed_users(password: str = "123456"):
    users = [
        ("admin@example.com", "System Admin", UserRole.ADMIN),
        ("staff@example.com", "Warehouse Staff", UserRole.STAFF),
    ]
    for email, name, role in users:
        u = User.query.filter_by(email=email).first()
        if not u:
            db.session.add(
                User(
                    email=email,
                    name=name,
                    password_hash=generate_password_hash(password),
                    role=role,
                    is_active=True,
                    is_verified=True,
                )
            )
        else:
            u.name = name
            u.role = role
    db.session.commit()
    click.echo("✓ Users seeded/updated")


def _owner_id() -> int:
    u = User.query.filter_by(email="admin@example.com").first()
    if not u:
        raise RuntimeError("Admin user missing. Run seed_users() first.")
    return u.id


# -------- Materials --------
def seed_materials():
    owner = _owner_id()
    materials = [
        # code, name, unit, category, price, stock, min_stock
        ("MAT-FLOUR", "Wheat flour", "kg", "Raw material", 12000, 50, 10),
        ("MAT-SUGAR", "Refined sugar", "kg", "Raw material", 15000, 30, 5),
        ("MAT-BOX-S", "Small carton box", "pcs", "Packaging", 2500, 200, 50),
    ]
    for code, name, unit, category, price, stock, min_stock in materials:
        m = Material.query.filter_by(user_id=owner, code=code).first()
        if not m:
            db.session.add(
                Material(
                    code=code,
                    name=name,
                    unit=unit,
                    category=category,
                    price=price,
                    stock=stock,
                    min_stock=min_stock,
                    user_id=owner,
                )
            )
        else:
            # stock is left alone: only the ledger moves it
            m.name, m.unit, m.category, m.price, m.min_stock = (
                name,
                unit,
                category,
                price,
                min_stock,
            )
    db.session.commit()
    click.echo("✓ Materials seeded/updated")


# -------- Products --------
def seed_products():
    owner = _owner_id()
    products = [
        ("PRD-COOKIE-250", "Butter cookies 250g", "Snacks", 35000, 20, 5),
        ("PRD-CAKE-1KG", "Sponge cake 1kg", "Cakes", 90000, 8, 2),
    ]
    for sku, name, category, price, stock, min_stock in products:
        p = Product.query.filter_by(user_id=owner, sku=sku).first()
        if not p:
            db.session.add(
                Product(
                    sku=sku,
                    name=name,
                    category=category,
                    price=price,
                    stock=stock,
                    min_stock=min_stock,
                    user_id=owner,
                )
            )
        else:
            p.name, p.category, p.price, p.min_stock = name, category, price, min_stock
    db.session.commit()
    click.echo("✓ Products seeded/updated")


def register_commands(app):
    @app.cli.command("seed")
    @click.option("--password", default="123456", help="Password for seeded users.")
    def seed_command(password):
        """Create tables if needed and load demo users, materials and products."""
        db.create_all()
        seed_users(password)
        seed_materials()
        seed_products()
        click.echo("✅ Seed data loaded")
