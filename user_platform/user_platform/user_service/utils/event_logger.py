"""
Event logger utility for account events.
"""
from datetime import datetime, timezone
import sys
import logging
import os

from ..config import settings

logger = logging.getLogger(__name__)


ALLOWED_EVENT_TYPES = {
    "register_success",
    "register_failure",
    "login_success",
    "login_failure",
    "profile_update",
}


def configure_logging(log_dir: str = None, level: str = None) -> None:
    """
    Send log records to stdout and, when the directory is writable,
    to <log_dir>/user_events.log.
    """
    log_dir = log_dir or settings.LOG_DIR
    level = level or settings.LOG_LEVEL

    handlers = [logging.StreamHandler(sys.stdout)]

    # Try to add file handler, but continue without it if directory creation fails
    try:
        os.makedirs(log_dir, exist_ok=True)
        handlers.append(logging.FileHandler(os.path.join(log_dir, "user_events.log")))
    except (OSError, PermissionError) as e:
        print(f"WARNING: Could not set up file logging: {e}", file=sys.stderr)

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s:%(message)s",
        handlers=handlers
    )


def mask_phone_number(phone_number: str) -> str:
    if not phone_number:
        return "unknown"
    if len(phone_number) <= 4:
        return "*" * len(phone_number)
    return "*" * (len(phone_number) - 4) + phone_number[-4:]


def log_account_event(
    event_type: str,
    user_id: str = None,
    phone_number: str = None,
    **context
) -> None:
    """
    Log an account event.

    Args:
        event_type: One of: register_success, register_failure, login_success,
                    login_failure, profile_update
        user_id: Account identifier, when known
        phone_number: Phone number involved; only the last four digits are logged
        **context: Extra key/value pairs appended to the record

    Raises:
        ValueError: If event_type is invalid
    """
    if event_type not in ALLOWED_EVENT_TYPES:
        raise ValueError(
            f"Invalid event_type '{event_type}'. Must be one of: {', '.join(sorted(ALLOWED_EVENT_TYPES))}"
        )

    extra = "".join(f" {key}={value}" for key, value in sorted(context.items()))
    logger.info(
        "ACCOUNT %s user_id=%s phone=%s timestamp=%s%s",
        event_type, user_id, mask_phone_number(phone_number),
        datetime.now(timezone.utc).isoformat(), extra
    )
