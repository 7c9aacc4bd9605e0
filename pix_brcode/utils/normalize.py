import re
import unicodedata

from .constants import MAX_MERCHANT_CITY_LENGTH, MAX_MERCHANT_NAME_LENGTH, TAG_MERCHANT_CITY, TAG_MERCHANT_NAME
from .pix_errors import FieldOverflowError, PixFieldError

_NOT_ALLOWED_RE = re.compile(r'[^A-Za-z0-9 ]')


def normalize(text: str) -> str:
    """Reduce text to the EMV charset: ASCII letters, digits and space.

    Accents are decomposed (NFD) and the combining marks dropped, so
    "João" becomes "Joao"; any other character outside the charset is removed.
    """
    decomposed = unicodedata.normalize("NFD", text)
    stripped = "".join(c for c in decomposed if not unicodedata.combining(c))
    return _NOT_ALLOWED_RE.sub("", stripped)


def normalize_merchant_name(name: str) -> str:
    # truncation is the accepted convention for tag 59
    value = normalize(name)[:MAX_MERCHANT_NAME_LENGTH]
    if not value.strip():
        raise PixFieldError("merchant name is empty after normalization", TAG_MERCHANT_NAME)
    return value


def normalize_merchant_city(city: str) -> str:
    value = normalize(city)
    if not value.strip():
        raise PixFieldError("merchant city is empty after normalization", TAG_MERCHANT_CITY)
    if len(value) > MAX_MERCHANT_CITY_LENGTH:
        raise FieldOverflowError(TAG_MERCHANT_CITY, len(value), MAX_MERCHANT_CITY_LENGTH)
    return value
