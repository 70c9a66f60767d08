import hashlib
import logging
from typing import Any

from sqlalchemy import inspect
from sqlalchemy.exc import NoInspectionAvailable

# Create the library logger
logger = logging.getLogger("pagealchemy")

# Add NullHandler to prevent "No handlers could be found" warnings
# if the application doesn't configure logging.
logger.addHandler(logging.NullHandler())


def redact_identity(owner: Any) -> str:
    """
    Redacts the identity of a mapped instance for logging.
    Hashes the primary key values to allow correlation without revealing PII.
    """
    try:
        identity = inspect(owner).identity
    except NoInspectionAvailable:
        identity = None

    if identity is None:
        return "<transient>"

    val_str = "/".join(str(v) for v in identity).encode("utf-8")
    return hashlib.sha256(val_str).hexdigest()[:8]
