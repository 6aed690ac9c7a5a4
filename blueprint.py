from index import main_bp
from routes.auth import auth_bp
from routes.material import material_bp
from routes.product import product_bp
from routes.purchases import purchase_bp
from routes.stock_history import stock_history_bp


def blue_print(app):
    app.register_blueprint(main_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(material_bp)
    app.register_blueprint(product_bp)
    app.register_blueprint(purchase_bp)
    app.register_blueprint(stock_history_bp)
