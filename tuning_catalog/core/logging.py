"""Logging for the catalog API.

One ``tuning_catalog`` logger writes to stdout; module loggers under the
package propagate to it. Request lines carry the reseller a storefront or
reseller-API call was made for, so one reseller's traffic can be followed.
"""

import logging
import os
import re
import sys
from typing import Any, Mapping

LOGGER_NAME = "tuning_catalog"

_STOREFRONT_PATH = re.compile(r"^/api/reseller/(?P<reseller_id>[^/]+)")


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Attach a stdout handler to the package logger (once)."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    if logger.handlers:
        return logger

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s - %(levelname)s - %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    logger.addHandler(handler)
    return logger


logger = setup_logging(os.environ.get("LOG_LEVEL", "INFO"))


def _fields(**kwargs: Any) -> str:
    return " ".join(f"{k}={v}" for k, v in kwargs.items() if v is not None)


def request_reseller(path: str, headers: Mapping[str, str]) -> str | None:
    """Reseller a request is made for: storefront path first, then the API header.

    Examples:
        >>> request_reseller("/api/reseller/test2/volvo", {})
        'test2'
        >>> request_reseller("/api/overrides", {"x-reseller-id": "test2"})
        'test2'
    """
    match = _STOREFRONT_PATH.match(path)
    if match:
        return match.group("reseller_id")
    return headers.get("x-reseller-id") or None


def log_request(method: str, path: str, reseller_id: str | None = None, **kwargs: Any) -> None:
    logger.info(f"REQUEST {method} {path} {_fields(reseller=reseller_id, **kwargs)}".strip())


def log_response(
    method: str,
    path: str,
    status: int,
    duration_ms: float,
    reseller_id: str | None = None,
) -> None:
    level = logging.WARNING if status >= 500 else logging.INFO
    logger.log(
        level,
        f"RESPONSE {method} {path} status={status} duration_ms={duration_ms:.2f} "
        f"{_fields(reseller=reseller_id)}".strip(),
    )


def log_error(message: str, exc: Exception | None = None, **kwargs: Any) -> None:
    """Log an error, with the traceback when an exception is given."""
    logger.error(f"ERROR {message} {_fields(**kwargs)}".strip(), exc_info=exc)


def log_db_query(
    operation: str, table: str, duration_ms: float, success: bool = True
) -> None:
    """Content store call; failures are logged at warning level."""
    if success:
        logger.debug(f"DB {operation} table={table} duration_ms={duration_ms:.2f}")
    else:
        logger.warning(f"DB {operation} table={table} failed duration_ms={duration_ms:.2f}")


def log_external_call(service: str, operation: str, success: bool, duration_ms: float) -> None:
    status = "success" if success else "failed"
    logger.info(f"EXTERNAL {service} {operation} status={status} duration_ms={duration_ms:.2f}")
