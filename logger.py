import logging
import os
from typing import Optional


def _get_log_level() -> int:
    level_str = os.getenv("LOG_LEVEL", "INFO").upper()
    return getattr(logging, level_str, logging.INFO)


# Runs once, on first import
logging.basicConfig(
    level=_get_log_level(),
    format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
)

logger = logging.getLogger("rentcare")
logger.setLevel(_get_log_level())


def log_db_operation(
    operation: str,
    collection: str,
    success: bool,
    rows: Optional[int] = None,
    doc_id: Optional[str] = None,
    error: Optional[str] = None,
) -> None:
    """One line per document store call, e.g. `[DB] REPLACE properties/prop-1 - SUCCESS (rows=1)`."""
    target = f"{collection}/{doc_id}" if doc_id else collection
    msg = f"[DB] {operation} {target} - {'SUCCESS' if success else 'FAILED'}"
    if rows is not None:
        msg += f" (rows={rows})"
    if success:
        logger.info(msg)
        return
    if error:
        msg += f" | error={error}"
    logger.error(msg)


def log_payment(
    event: str,
    property_id: str,
    flat_no: str,
    amount=None,
    session_id: Optional[str] = None,
    level: int = logging.INFO,
) -> None:
    """
    Rent payment audit line. Every checkout, confirmation and shortfall goes
    through here so a flat's payment trail can be grepped by `[PAYMENT]`.
    """
    msg = f"[PAYMENT] {event} property={property_id} flat={flat_no}"
    if amount is not None:
        msg += f" amount={amount}"
    if session_id:
        msg += f" session={session_id}"
    logger.log(level, msg)
