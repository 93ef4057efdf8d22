"""Reference id generation"""

import base64
import secrets
from typing import Callable

from tablebook.reservations.types import ReferenceId

REFERENCE_PREFIX = "RES"

ReferenceGenerator = Callable[[], ReferenceId]


def generate_reference_id() -> ReferenceId:
    """'RES' followed by 96 random bits in base32, e.g. RESK5Q3ZP7M2W4XHJ6NAB2C"""
    token = base64.b32encode(secrets.token_bytes(12)).decode("ascii").rstrip("=")
    return ReferenceId(REFERENCE_PREFIX + token)
