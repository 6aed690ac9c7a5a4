# configs.py
import os

from flask_login import LoginManager
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
login = LoginManager()


def default_config() -> dict:
    """Defaults read from the environment (.env is loaded by app.py)."""
    return dict(
        SECRET_KEY=os.getenv("SECRET_KEY", "dev_secret"),
        SQLALCHEMY_DATABASE_URI=os.getenv("DATABASE_URL", "sqlite:///inventory.db"),
        SQLALCHEMY_TRACK_MODIFICATIONS=False,
        LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO"),
        VERIFICATION_TOKEN_TTL_MINUTES=int(
            os.getenv("VERIFICATION_TOKEN_TTL_MINUTES", "15")
        ),
        STOCK_HISTORY_PAGE_SIZE=int(os.getenv("STOCK_HISTORY_PAGE_SIZE", "10")),
    )
