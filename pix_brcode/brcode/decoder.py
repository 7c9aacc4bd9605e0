from decimal import Decimal
import logging
import re
from typing import Dict, Optional, Tuple

from ..utils.constants import (
    CRC_LENGTH,
    CRC_PREFIX,
    MAX_AMOUNT_LENGTH,
    PAYLOAD_FORMAT_INDICATOR,
    PIX_GUI,
    SUBTAG_DESCRIPTION,
    SUBTAG_GUI,
    SUBTAG_LOCATION_URL,
    SUBTAG_PIX_KEY,
    SUBTAG_REFERENCE_LABEL,
    TAG_ADDITIONAL_DATA,
    TAG_COUNTRY_CODE,
    TAG_CRC,
    TAG_MERCHANT_ACCOUNT_INFO,
    TAG_MERCHANT_CATEGORY_CODE,
    TAG_MERCHANT_CITY,
    TAG_MERCHANT_NAME,
    TAG_PAYLOAD_FORMAT_INDICATOR,
    TAG_POINT_OF_INITIATION,
    TAG_TRANSACTION_AMOUNT,
    TAG_TRANSACTION_CURRENCY,
)
from ..utils.enumerators import PointOfInitiation, QrPixType
from ..utils.pix_errors import CrcMismatchError, DecodeStructureError, PixCodecException
from .crc import crc16
from .dtos import DecodedPayload
from .tlv import Composite, Field, Leaf, parse_fields

logger = logging.getLogger(__name__)

_HEX_DIGITS = frozenset("0123456789ABCDEFabcdef")
# plain decimal, at most two fraction digits: no sign, no exponent
_AMOUNT_RE = re.compile(r"[0-9]+(\.[0-9]{1,2})?")
# merchant account information templates
_ACCOUNT_INFO_TAGS = frozenset(f"{t:02d}" for t in range(26, 52))


def _index_fields(fields: Tuple[Field, ...]) -> Dict[str, Field]:
    index: Dict[str, Field] = {}
    for f in fields:
        if f.tag in index:
            raise DecodeStructureError(f"duplicated tag {f.tag}", tag=f.tag)
        index[f.tag] = f
    return index


def _leaf_value(index: Dict[str, Field], tag: str, *, required: bool = True) -> Optional[str]:
    f = index.get(tag)
    if f is None:
        if required:
            raise DecodeStructureError(f"missing required field {tag}", tag=tag)
        return None
    if not isinstance(f, Leaf):
        raise DecodeStructureError(f"field {tag} must be a plain value", tag=tag)
    return f.value


def _sub_value(template: Composite, subtag: str) -> Optional[str]:
    f = template.get(subtag)
    return f.value if f is not None else None


def _find_pix_account_info(fields: Tuple[Field, ...]) -> Composite:
    for f in fields:
        if isinstance(f, Composite) and f.tag in _ACCOUNT_INFO_TAGS:
            gui = _sub_value(f, SUBTAG_GUI)
            if gui is not None and gui.upper() == PIX_GUI:
                return f
    raise DecodeStructureError("no Pix merchant account information", tag=TAG_MERCHANT_ACCOUNT_INFO)


def _verify_crc(payload: str, fields: Tuple[Field, ...]) -> str:
    last = fields[-1] if fields else None
    if last is None or last.tag != TAG_CRC:
        raise DecodeStructureError("payload does not end with the CRC field", tag=TAG_CRC)
    found = last.value
    if len(found) != CRC_LENGTH or not set(found) <= _HEX_DIGITS:
        raise DecodeStructureError(f"malformed CRC value {found!r}", tag=TAG_CRC, position=len(payload) - len(found))
    expected = crc16(payload[:-CRC_LENGTH])
    if found.upper() != expected:
        logger.warning("checksum error", extra={"expected_crc": expected, "found_crc": found})
        raise CrcMismatchError(expected=expected, found=found)
    return expected


def decode_pix_payload(payload: str) -> DecodedPayload:
    """Parse and verify a BR Code string.

    The TLV structure is read first, then the CRC of everything up to and
    including "6304" is checked against the trailing value, then the Pix
    fields are extracted.

    Raises:
        DecodeStructureError: malformed TLV or a required field is missing;
            ``tag`` names the offending field.
        CrcMismatchError: the structure is fine but the checksum is not.
    """
    if not isinstance(payload, str):
        raise DecodeStructureError("payload must be a string")
    payload = payload.strip()
    if len(payload) < len(CRC_PREFIX) + CRC_LENGTH:
        raise DecodeStructureError("payload too short", position=0)

    fields = parse_fields(payload)
    crc = _verify_crc(payload, fields)

    index = _index_fields(fields)
    if fields[0].tag != TAG_PAYLOAD_FORMAT_INDICATOR:
        raise DecodeStructureError("payload must start with the format indicator", tag=fields[0].tag, position=0)
    format_indicator = _leaf_value(index, TAG_PAYLOAD_FORMAT_INDICATOR)
    if format_indicator != PAYLOAD_FORMAT_INDICATOR:
        raise DecodeStructureError(f"unsupported payload format {format_indicator!r}", tag=TAG_PAYLOAD_FORMAT_INDICATOR)

    point_of_initiation = _leaf_value(index, TAG_POINT_OF_INITIATION, required=False)
    if point_of_initiation is not None:
        try:
            point_of_initiation = PointOfInitiation(point_of_initiation)
        except ValueError:
            raise DecodeStructureError(
                f"invalid point of initiation {point_of_initiation!r}", tag=TAG_POINT_OF_INITIATION
            )

    account_info = _find_pix_account_info(fields)
    pix_key = _sub_value(account_info, SUBTAG_PIX_KEY)
    location_url = _sub_value(account_info, SUBTAG_LOCATION_URL)
    if not pix_key and not location_url:
        raise DecodeStructureError("merchant account information has no key nor location", tag=account_info.tag)

    amount_str = _leaf_value(index, TAG_TRANSACTION_AMOUNT, required=False)
    amount: Optional[Decimal] = None
    if amount_str is not None:
        if len(amount_str) > MAX_AMOUNT_LENGTH or not _AMOUNT_RE.fullmatch(amount_str):
            raise DecodeStructureError(f"invalid amount {amount_str!r}", tag=TAG_TRANSACTION_AMOUNT)
        amount = Decimal(amount_str)

    reference_label = None
    additional_data = index.get(TAG_ADDITIONAL_DATA)
    if isinstance(additional_data, Composite):
        reference_label = _sub_value(additional_data, SUBTAG_REFERENCE_LABEL)

    decoded = DecodedPayload(
        payload_format_indicator=format_indicator,
        point_of_initiation=point_of_initiation,
        gui=_sub_value(account_info, SUBTAG_GUI),
        pix_key=pix_key,
        description=_sub_value(account_info, SUBTAG_DESCRIPTION),
        location_url=location_url,
        merchant_category_code=_leaf_value(index, TAG_MERCHANT_CATEGORY_CODE),
        transaction_currency=_leaf_value(index, TAG_TRANSACTION_CURRENCY),
        transaction_amount=amount,
        country_code=_leaf_value(index, TAG_COUNTRY_CODE),
        merchant_name=_leaf_value(index, TAG_MERCHANT_NAME),
        merchant_city=_leaf_value(index, TAG_MERCHANT_CITY),
        reference_label=reference_label,
        crc=crc,
        raw_fields=tuple((f.tag, f.value) for f in fields),
    )
    logger.debug(
        "pix payload decoded",
        extra={"payload_length": len(payload), "qr_type": decoded.qr_type.value, "has_amount": amount is not None},
    )
    return decoded


def is_valid_pix_payload(payload: str) -> bool:
    try:
        decode_pix_payload(payload)
    except PixCodecException:
        return False
    return True


def detect_qr_pix_type(qr_code: str) -> QrPixType:
    """
    Detect if a BR Code is static or dynamic from its leading fields, without
    decoding or verifying it.
    """
    qr_code = qr_code.strip()
    # 00020101021X where X is the point of initiation
    if qr_code.startswith(f"{TAG_PAYLOAD_FORMAT_INDICATOR}02{PAYLOAD_FORMAT_INDICATOR}{TAG_POINT_OF_INITIATION}02"):
        return QrPixType.from_point_of_initiation(qr_code[10:12])
    # 00020126 has no point of initiation, which means static
    if qr_code.startswith(f"{TAG_PAYLOAD_FORMAT_INDICATOR}02{PAYLOAD_FORMAT_INDICATOR}{TAG_MERCHANT_ACCOUNT_INFO}"):
        return QrPixType.STATIC
    return QrPixType.UNKNOWN
