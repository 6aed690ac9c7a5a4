# admin/setup.py
from flask import abort, redirect, url_for
from flask_admin import Admin, AdminIndexView, expose
from flask_admin.contrib.sqla import ModelView
from flask_admin.menu import MenuLink
from flask_admin.theme import Bootstrap4Theme
from flask_login import current_user, logout_user

from configs import db
from db.models.user import UserRole


def _is_admin() -> bool:
    return current_user.is_authenticated and current_user.has_role(UserRole.ADMIN)


def _deny():
    # not logged in -> 401, logged in with another role -> 403
    if not current_user.is_authenticated:
        abort(401)
    abort(403)


class MyAdminIndex(AdminIndexView):
    @expose("/")
    def index(self):
        if not _is_admin():
            _deny()
        return super().index()

    @expose("/logout")
    def admin_logout(self):
        if current_user.is_authenticated:
            logout_user()
        return redirect(url_for("admin.index"))

    def is_accessible(self):
        return _is_admin()

    def inaccessible_callback(self, name, **kwargs):
        _deny()


class SecureModelView(ModelView):
    can_view_details = True
    can_export = True

    def is_accessible(self):
        return _is_admin()

    def inaccessible_callback(self, name, **kwargs):
        _deny()


class UserView(SecureModelView):
    column_exclude_list = ["password_hash"]
    column_searchable_list = ["email", "name"]
    form_excluded_columns = ["password_hash", "verification_token"]


class PurchaseView(SecureModelView):
    column_searchable_list = ["invoice_number", "supplier", "reference"]
    column_filters = ["status", "created_at", "supplier"]
    column_list = ["id", "invoice_number", "supplier", "created_at", "status", "total"]
    # status changes must go through the API so stock follows
    form_excluded_columns = ["status", "items", "additional_costs"]
    # deleting must reverse stock, see /api/purchases/bulk-delete
    can_delete = False


class ReadOnlyView(SecureModelView):
    can_create = False
    can_edit = False
    can_delete = False


class StockHistoryView(ReadOnlyView):
    """Ledger rows are append-only: list and inspect only."""

    column_filters = ["type", "created_at"]
    column_list = ["id", "created_at", "type", "quantity", "material", "product", "reference"]
    column_default_sort = ("created_at", True)


class StockItemView(SecureModelView):
    # stock is only moved by the ledger
    form_excluded_columns = ["stock", "created_at", "updated_at"]
    column_searchable_list = ["name"]


def init_admin(app):
    admin = Admin(
        app,
        name="Inventory Admin",
        theme=Bootstrap4Theme(),
        index_view=MyAdminIndex(url="/manage"),  # index is /manage/
        url="/manage",
    )
    # models imported here to avoid circular imports
    from db.models.user import User
    from db.models.material import Material
    from db.models.product import Product
    from db.models.purchase import Purchase, PurchaseItem
    from db.models.stock_history import StockHistory

    admin.add_view(
        UserView(User, db.session, category="System", endpoint="admin_user", name="Users")
    )
    admin.add_view(
        StockItemView(
            Material,
            db.session,
            category="Inventory",
            endpoint="admin_material",
            name="Materials",
        )
    )
    admin.add_view(
        StockItemView(
            Product,
            db.session,
            category="Inventory",
            endpoint="admin_product",
            name="Products",
        )
    )
    admin.add_view(
        StockHistoryView(
            StockHistory,
            db.session,
            category="Inventory",
            endpoint="admin_stock_history",
            name="Stock History",
        )
    )
    admin.add_view(
        PurchaseView(
            Purchase,
            db.session,
            category="Purchasing",
            endpoint="admin_purchase",
            name="Purchases",
        )
    )
    admin.add_view(
        ReadOnlyView(
            PurchaseItem,
            db.session,
            category="Purchasing",
            endpoint="admin_purchase_item",
            name="Purchase Items",
        )
    )
    admin.add_link(
        MenuLink(
            name="Logout",
            category="System",
            endpoint="admin.admin_logout",
        )
    )
    return admin
