from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
import logging
from typing import Optional, Tuple, Union

from ..utils.constants import (
    COUNTRY_CODE_BR,
    CRC_PREFIX,
    CURRENCY_BRL,
    DEFAULT_MERCHANT_CATEGORY_CODE,
    DEFAULT_REFERENCE_LABEL,
    MAX_AMOUNT_LENGTH,
    PAYLOAD_FORMAT_INDICATOR,
    PIX_GUI,
    SUBTAG_DESCRIPTION,
    SUBTAG_GUI,
    SUBTAG_PIX_KEY,
    SUBTAG_REFERENCE_LABEL,
    TAG_ADDITIONAL_DATA,
    TAG_COUNTRY_CODE,
    TAG_MERCHANT_ACCOUNT_INFO,
    TAG_MERCHANT_CATEGORY_CODE,
    TAG_MERCHANT_CITY,
    TAG_MERCHANT_NAME,
    TAG_PAYLOAD_FORMAT_INDICATOR,
    TAG_POINT_OF_INITIATION,
    TAG_TRANSACTION_AMOUNT,
    TAG_TRANSACTION_CURRENCY,
)
from ..utils.enumerators import PointOfInitiation
from ..utils.pix_errors import FieldOverflowError, PixFieldError
from .crc import crc16
from .dtos import MerchantProfile
from .tlv import Composite, Field, Leaf, encode_fields

logger = logging.getLogger(__name__)

Amount = Union[Decimal, int, float, str]

_CENTS = Decimal("0.01")


def format_amount(amount: Optional[Amount]) -> Optional[str]:
    """Two-decimal string for tag 54, or None when no amount is to be emitted."""
    if amount is None:
        return None
    if isinstance(amount, bool):
        raise PixFieldError("amount must be numeric", TAG_TRANSACTION_AMOUNT)
    try:
        # str() keeps floats at their shortest repr: 25.5 -> "25.5", not the binary expansion
        value = Decimal(str(amount)) if isinstance(amount, float) else Decimal(amount)
    except (InvalidOperation, ValueError, TypeError):
        raise PixFieldError(f"invalid amount {amount!r}", TAG_TRANSACTION_AMOUNT)
    if not value.is_finite():
        raise PixFieldError(f"invalid amount {amount!r}", TAG_TRANSACTION_AMOUNT)
    if value < 0:
        raise PixFieldError("amount must not be negative", TAG_TRANSACTION_AMOUNT)
    try:
        value = value.quantize(_CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        # more digits than the decimal context holds
        formatted = format(value, "f")
        raise FieldOverflowError(TAG_TRANSACTION_AMOUNT, len(formatted), MAX_AMOUNT_LENGTH)
    if value == 0:
        return None
    formatted = format(value, "f")
    if len(formatted) > MAX_AMOUNT_LENGTH:
        raise FieldOverflowError(TAG_TRANSACTION_AMOUNT, len(formatted), MAX_AMOUNT_LENGTH)
    return formatted


def build_payload_fields(
    merchant: MerchantProfile,
    amount: Optional[Amount] = None,
    reference: Optional[str] = None,
    *,
    point_of_initiation: PointOfInitiation = PointOfInitiation.REUSABLE,
    description: Optional[str] = None,
    merchant_category_code: str = DEFAULT_MERCHANT_CATEGORY_CODE,
) -> Tuple[Field, ...]:
    """Top level fields in emission order, without the CRC."""
    if len(merchant_category_code) != 4 or not merchant_category_code.isdigit():
        raise PixFieldError(f"invalid merchant category code {merchant_category_code!r}", TAG_MERCHANT_CATEGORY_CODE)

    account_info: Tuple[Field, ...] = (
        Leaf(SUBTAG_GUI, PIX_GUI),
        Leaf(SUBTAG_PIX_KEY, merchant.pix_key.payload_key),
    )
    if description:
        account_info += (Leaf(SUBTAG_DESCRIPTION, description),)

    fields: Tuple[Field, ...] = (
        Leaf(TAG_PAYLOAD_FORMAT_INDICATOR, PAYLOAD_FORMAT_INDICATOR),
        Leaf(TAG_POINT_OF_INITIATION, PointOfInitiation(point_of_initiation).value),
        Composite(TAG_MERCHANT_ACCOUNT_INFO, account_info),
        Leaf(TAG_MERCHANT_CATEGORY_CODE, merchant_category_code),
        Leaf(TAG_TRANSACTION_CURRENCY, CURRENCY_BRL),
    )
    amount_str = format_amount(amount)
    if amount_str is not None:
        fields += (Leaf(TAG_TRANSACTION_AMOUNT, amount_str),)
    fields += (
        Leaf(TAG_COUNTRY_CODE, COUNTRY_CODE_BR),
        Leaf(TAG_MERCHANT_NAME, merchant.name),
        Leaf(TAG_MERCHANT_CITY, merchant.city),
        Composite(TAG_ADDITIONAL_DATA, (Leaf(SUBTAG_REFERENCE_LABEL, reference or DEFAULT_REFERENCE_LABEL),)),
    )
    return fields


def encode_pix_payload(
    merchant: MerchantProfile,
    amount: Optional[Amount] = None,
    reference: Optional[str] = None,
    *,
    point_of_initiation: PointOfInitiation = PointOfInitiation.REUSABLE,
    description: Optional[str] = None,
    merchant_category_code: str = DEFAULT_MERCHANT_CATEGORY_CODE,
) -> str:
    """Build the complete BR Code string ("Pix copia e cola") for ``merchant``.

    Args:
        merchant: payee data, already validated and normalized.
        amount: value in BRL; omitted from the payload when None or zero.
        reference: reference label for tag 62/05, "***" when not given.
        point_of_initiation: "11" reusable (default) or "12" single use.
        description: optional free text in tag 26/02.
        merchant_category_code: ISO 18245 MCC, "0000" by default.

    Returns:
        The payload, ending with "6304" and its CRC16.

    Raises:
        PixFieldError: a value is unusable (bad amount, non-ASCII text).
        FieldOverflowError: a value does not fit its length prefix.
    """
    fields = build_payload_fields(
        merchant,
        amount,
        reference,
        point_of_initiation=point_of_initiation,
        description=description,
        merchant_category_code=merchant_category_code,
    )
    body = encode_fields(fields) + CRC_PREFIX
    payload = body + crc16(body)
    logger.debug(
        "pix payload encoded",
        extra={
            "payload_length": len(payload),
            "has_amount": any(f.tag == TAG_TRANSACTION_AMOUNT for f in fields),
            "point_of_initiation": PointOfInitiation(point_of_initiation).value,
        },
    )
    return payload
