import random
import string
import time
from typing import Callable, Optional

_BASE36_ALPHABET = string.digits + string.ascii_lowercase
_SUFFIX_LENGTH = 6


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


def generate_reference_id(
    prefix: str = "REF",
    *,
    clock: Callable[[], int] = _now_ms,
    rng: Optional[random.Random] = None,
) -> str:
    """Opaque transaction reference: ``<prefix><ms timestamp><6 base36 chars>``, upper-cased.

    Not unique by construction and not meant to be unguessable; pass ``clock``
    (milliseconds since epoch) and ``rng`` to get a reproducible value.
    """
    rng = rng or random.Random()
    suffix = "".join(rng.choice(_BASE36_ALPHABET) for _ in range(_SUFFIX_LENGTH))
    return f"{prefix}{clock()}{suffix}".upper()
