"""BR Code (Pix "copia e cola") payload codec."""

__version__ = "0.1.0"

from .brcode.crc import crc16
from .brcode.decoder import decode_pix_payload, detect_qr_pix_type, is_valid_pix_payload
from .brcode.dtos import DecodedPayload, MerchantProfile, PixIdentifier
from .brcode.encoder import encode_pix_payload
from .utils.enumerators import PixKeyType, PointOfInitiation, QrPixType
from .utils.normalize import normalize
from .utils.reference import generate_reference_id
from .utils.validate_keys import format_pix_key, mask_pix_key, validate_pix_key

__all__ = [
    "__version__",
    "crc16",
    "decode_pix_payload",
    "detect_qr_pix_type",
    "is_valid_pix_payload",
    "DecodedPayload",
    "MerchantProfile",
    "PixIdentifier",
    "encode_pix_payload",
    "PixKeyType",
    "PointOfInitiation",
    "QrPixType",
    "normalize",
    "generate_reference_id",
    "format_pix_key",
    "mask_pix_key",
    "validate_pix_key",
]
