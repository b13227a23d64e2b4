"""
Request signing for the Marvel API.

Every server-side request must carry three query parameters: ``ts``
(any string that changes per request, here the current time in
milliseconds), ``apikey`` (the public key) and ``hash``, the hex MD5
digest of ``ts + private_key + public_key``. A fresh triple is built for
every outbound call; timestamps are never reused.
"""

from __future__ import annotations

import hashlib
import time
from typing import Dict, Optional

from ..config import Settings, get_settings


def compute_hash(ts: str, private_key: str, public_key: str) -> str:
    """Return the hex MD5 digest of ``ts + private_key + public_key``."""
    return hashlib.md5(f"{ts}{private_key}{public_key}".encode("utf-8")).hexdigest()


def generate_auth_params(
    settings: Optional[Settings] = None,
    now: Optional[float] = None,
) -> Dict[str, str]:
    """Build the ``ts``/``apikey``/``hash`` triple for one request.

    Parameters
    ----------
    settings : Optional[Settings]
        Source of the credentials. Defaults to the process-wide settings.
    now : Optional[float]
        Seconds since the epoch. Defaults to the current time; only tests
        should pin it.
    """
    settings = settings or get_settings()
    moment = time.time() if now is None else now
    ts = str(int(moment * 1000))
    return {
        "ts": ts,
        "apikey": settings.public_key,
        "hash": compute_hash(ts, settings.private_key, settings.public_key),
    }
