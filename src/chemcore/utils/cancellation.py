# src/chemcore/utils/cancellation.py

"""Cooperative cancellation for long-running parse and fingerprint loops."""

import threading
from typing import Optional

from ..exceptions import OperationCancelledError


def check_cancelled(cancel_event: Optional[threading.Event], operation: str) -> None:
    """Raise if ``cancel_event`` has been set.

    Raises:
        OperationCancelledError: If cancellation was requested
    """
    if cancel_event is not None and cancel_event.is_set():
        raise OperationCancelledError(f"{operation} cancelled")
