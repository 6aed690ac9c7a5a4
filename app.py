import logging

from dotenv import load_dotenv
from flask import Flask, jsonify
from sqlalchemy.exc import SQLAlchemyError

from admin.setup import init_admin
from blueprint import blue_print
from configs import db, default_config, login
from dao.errors import DomainError
from dao.stock_store import init_ledger
from dao.user import get_user
from seed import register_commands

load_dotenv()

logger = logging.getLogger(__name__)


def create_app(test_config=None, stock_store=None):
    app = Flask(__name__)
    app.config.from_mapping(default_config())
    if test_config:
        app.config.update(test_config)

    logging.basicConfig(
        level=app.config["LOG_LEVEL"],
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    db.init_app(app)
    login.init_app(app)
    init_ledger(app, stock_store)

    @login.user_loader
    def load_user(user_id):
        return get_user(user_id)

    @login.unauthorized_handler
    def unauthorized():
        return jsonify({"error": "Unauthorized access"}), 401

    _register_error_handlers(app)

    init_admin(app)  # /manage
    blue_print(app)
    register_commands(app)
    return app


def _register_error_handlers(app):
    @app.errorhandler(DomainError)
    def domain_error(e: DomainError):
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(SQLAlchemyError)
    def database_error(e: SQLAlchemyError):
        db.session.rollback()
        logger.exception("Database error")
        return jsonify({"error": "Database error"}), 500


if __name__ == "__main__":
    create_app().run(debug=True, host="0.0.0.0", port=5000)
