# utils/mailer.py
import logging

logger = logging.getLogger(__name__)


def send_verification_code(email: str, code: str) -> None:
    # Delivery transport is deployment-specific; the code goes to the log.
    logger.info("Verification code for %s: %s", email, code)
