from __future__ import annotations

from typing import Optional, TypedDict, Union
from typing_extensions import NotRequired  # Not available in 'typing' module for Python < 3.11

from ..utils.enumerators import PixKeyType
from ..utils.pix_errors import PixFieldError, PixKeyValidationError
from .dtos import MerchantProfile, PixIdentifier


class PayeeRecord(TypedDict, total=False):
    """
    Payee profile as the caller reads it from its user store.
    The codec never fetches it; camelCase keys (pixKey, pixKeyType) are also read.
    """
    name: NotRequired[str]
    city: NotRequired[str]
    pix_key: NotRequired[str]
    pix_key_type: NotRequired[str]


_CAMEL_CASE = {
    "pix_key": "pixKey",
    "pix_key_type": "pixKeyType",
}


def _get(record: dict, key: str) -> Optional[str]:
    value = record.get(key)
    if value is None and key in _CAMEL_CASE:
        value = record.get(_CAMEL_CASE[key])
    return value


def make_merchant(
    *,
    name: str,
    city: str,
    pix_key: str,
    pix_key_type: Union[PixKeyType, str],
) -> MerchantProfile:
    identifier = PixIdentifier(value=pix_key, key_type=pix_key_type)
    return MerchantProfile(name=name, city=city, pix_key=identifier)


def merchant_from_record(record: PayeeRecord) -> MerchantProfile:
    """Build a ``MerchantProfile`` from a stored payee record.

    Raises ``PixKeyValidationError`` when the key or its type is missing and
    ``PixFieldError`` when name or city are missing.
    """
    pix_key = _get(record, "pix_key")
    pix_key_type = _get(record, "pix_key_type")
    if not pix_key or not pix_key_type:
        raise PixKeyValidationError("payee has no Pix key configured", pix_key=pix_key, key_type=pix_key_type)
    name = _get(record, "name")
    if not name:
        raise PixFieldError("payee has no name configured", "59")
    city = _get(record, "city")
    if not city:
        raise PixFieldError("payee has no city configured", "60")
    return make_merchant(name=name, city=city, pix_key=pix_key, pix_key_type=pix_key_type)
