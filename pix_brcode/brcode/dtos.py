from decimal import Decimal
from typing import Any, Optional, Tuple

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from ..utils.enumerators import PixKeyType, PointOfInitiation, QrPixType
from ..utils.normalize import normalize_merchant_city, normalize_merchant_name
from ..utils.pix_errors import PixFieldError, PixKeyValidationError
from ..utils.validate_keys import canonical_pix_key, format_pix_key, mask_pix_key, validate_pix_key


class PixIdentifier(BaseModel):
    """A Pix key that passed the check for its declared type.

    Construction is the validation step: an invalid value raises
    ``PixKeyValidationError`` and no instance exists. The type is never
    inferred from the value.
    """
    model_config = ConfigDict(extra="ignore", frozen=True)
    value: str
    key_type: PixKeyType

    @field_validator("key_type", mode="before")
    @classmethod
    def _coerce_key_type(cls, v: Any) -> PixKeyType:
        if isinstance(v, PixKeyType):
            return v
        try:
            return PixKeyType.from_string(str(v))
        except (KeyError, ValueError):
            raise PixKeyValidationError(f"unknown Pix key type {v!r}", key_type=str(v))

    @field_validator("value", mode="before")
    @classmethod
    def _strip_value(cls, v: Any) -> Any:
        # the stripped form is both validated and encoded
        return v.strip() if isinstance(v, str) else v

    @model_validator(mode="after")
    def _check_value(self):
        if not validate_pix_key(self.value, self.key_type):
            raise PixKeyValidationError(
                f"invalid {self.key_type.value} Pix key", pix_key=self.value, key_type=self.key_type.value
            )
        return self

    @property
    def payload_key(self) -> str:
        return canonical_pix_key(self.value, self.key_type)

    @property
    def formatted(self) -> Optional[str]:
        return format_pix_key(self.value, self.key_type)

    @property
    def masked(self) -> Optional[str]:
        return mask_pix_key(self.value, self.key_type)

    def to_json(self):
        return self.model_dump_json()


class MerchantProfile(BaseModel):
    """Payee data needed to build a payload; name and city are stored normalized."""
    model_config = ConfigDict(extra="ignore", frozen=True)
    name: str
    city: str
    pix_key: PixIdentifier

    @field_validator("name", mode="before")
    @classmethod
    def _normalize_name(cls, v: Any) -> str:
        if not isinstance(v, str):
            raise PixFieldError("merchant name must be a string", "59")
        return normalize_merchant_name(v)

    @field_validator("city", mode="before")
    @classmethod
    def _normalize_city(cls, v: Any) -> str:
        if not isinstance(v, str):
            raise PixFieldError("merchant city must be a string", "60")
        return normalize_merchant_city(v)

    def to_json(self):
        return self.model_dump_json()


class DecodedPayload(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)
    payload_format_indicator: str
    point_of_initiation: Optional[PointOfInitiation] = None
    gui: str
    pix_key: Optional[str] = None
    description: Optional[str] = None
    location_url: Optional[str] = None
    merchant_category_code: str
    transaction_currency: str
    transaction_amount: Optional[Decimal] = None
    country_code: str
    merchant_name: str
    merchant_city: str
    reference_label: Optional[str] = None
    crc: str
    # top level (tag, raw value) pairs in payload order
    raw_fields: Tuple[Tuple[str, str], ...] = ()

    @property
    def qr_type(self) -> QrPixType:
        # an absent point of initiation means a reusable (static) code
        if self.point_of_initiation is None:
            return QrPixType.STATIC
        return QrPixType.from_point_of_initiation(self.point_of_initiation.value)

    @property
    def is_single_use(self) -> bool:
        return self.point_of_initiation == PointOfInitiation.SINGLE_USE

    def to_json(self):
        return self.model_dump_json()
