"""Pix key validation, display formatting and masking.

Validators never raise, they return a bool. Formatters and maskers are total:
they return ``None`` when the value does not have the shape its type needs.
"""
import re
import logging
from typing import Callable, Dict, Optional, Union

from .constants import PHONE_COUNTRY_PREFIX, RANDOM_KEY_MAX_LENGTH, RANDOM_KEY_MIN_LENGTH
from .enumerators import PixKeyType

logger = logging.getLogger(__name__)

CPF_LENGTH = 11
CNPJ_LENGTH = 14
CNPJ_WEIGHTS_1 = (5, 4, 3, 2, 9, 8, 7, 6, 5, 4, 3, 2)
CNPJ_WEIGHTS_2 = (6, 5, 4, 3, 2, 9, 8, 7, 6, 5, 4, 3, 2)

_EMAIL_RE = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')


def _only_numbers(s: str) -> str:
    return re.sub(r"[^\d]+", "", s)


def _check_digit(digits: str, weights) -> int:
    remainder = sum(int(d) * w for d, w in zip(digits, weights)) % 11
    return 0 if remainder < 2 else 11 - remainder


def validate_cpf(cpf: str) -> bool:
    if not isinstance(cpf, str):
        return False
    cpf = _only_numbers(cpf)
    if len(cpf) != CPF_LENGTH or len(set(cpf)) == 1:
        return False
    digit1 = _check_digit(cpf[:9], range(10, 1, -1))
    digit2 = _check_digit(cpf[:10], range(11, 1, -1))
    return cpf[-2:] == f"{digit1}{digit2}"


def validate_cnpj(cnpj: str) -> bool:
    if not isinstance(cnpj, str):
        return False
    cnpj = _only_numbers(cnpj)
    if len(cnpj) != CNPJ_LENGTH or len(set(cnpj)) == 1:
        return False
    digit1 = _check_digit(cnpj[:12], CNPJ_WEIGHTS_1)
    digit2 = _check_digit(cnpj[:13], CNPJ_WEIGHTS_2)
    return cnpj[-2:] == f"{digit1}{digit2}"


def validate_email(email: str) -> bool:
    if not isinstance(email, str):
        return False
    # permissive on purpose, not RFC 5322
    return bool(_EMAIL_RE.match(email))


def validate_phone(phone: str) -> bool:
    if not isinstance(phone, str):
        return False
    phone = _only_numbers(phone)
    if len(phone) not in (10, 11):
        return False
    # area code (DDD) 11..99
    return 11 <= int(phone[:2]) <= 99


def validate_random_key(key: str) -> bool:
    if not isinstance(key, str):
        return False
    # measured as encoded, see canonical_pix_key
    return RANDOM_KEY_MIN_LENGTH <= len(key.strip()) <= RANDOM_KEY_MAX_LENGTH


_VALIDATORS: Dict[PixKeyType, Callable[[str], bool]] = {
    PixKeyType.CPF: validate_cpf,
    PixKeyType.CNPJ: validate_cnpj,
    PixKeyType.EMAIL: validate_email,
    PixKeyType.PHONE: validate_phone,
    PixKeyType.RANDOM: validate_random_key,
}


def _coerce_key_type(key_type: Union[PixKeyType, str, None]) -> Optional[PixKeyType]:
    if isinstance(key_type, PixKeyType):
        return key_type
    if not isinstance(key_type, str):
        return None
    try:
        return PixKeyType.from_string(key_type)
    except (KeyError, ValueError):
        return None


def validate_pix_key(value: str, key_type: Union[PixKeyType, str]) -> bool:
    kt = _coerce_key_type(key_type)
    if kt is None or not isinstance(value, str):
        logger.debug("validate_pix_key: unknown key type", extra={"key_type": str(key_type)})
        return False
    return _VALIDATORS[kt](value)


# --------------------------------------------------------------------
# Formatting
# --------------------------------------------------------------------

def format_cpf(cpf: str) -> Optional[str]:
    digits = _only_numbers(cpf)
    if len(digits) != CPF_LENGTH:
        return None
    return re.sub(r'(\d{3})(\d{3})(\d{3})(\d{2})', r'\1.\2.\3-\4', digits)


def format_cnpj(cnpj: str) -> Optional[str]:
    digits = _only_numbers(cnpj)
    if len(digits) != CNPJ_LENGTH:
        return None
    return re.sub(r'(\d{2})(\d{3})(\d{3})(\d{4})(\d{2})', r'\1.\2.\3/\4-\5', digits)


def format_phone(phone: str) -> Optional[str]:
    digits = _only_numbers(phone)
    if len(digits) == 11:
        return re.sub(r'(\d{2})(\d{5})(\d{4})', r'(\1) \2-\3', digits)
    if len(digits) == 10:
        return re.sub(r'(\d{2})(\d{4})(\d{4})', r'(\1) \2-\3', digits)
    return None


def format_pix_key(value: str, key_type: Union[PixKeyType, str]) -> Optional[str]:
    kt = _coerce_key_type(key_type)
    if kt == PixKeyType.CPF:
        return format_cpf(value)
    if kt == PixKeyType.CNPJ:
        return format_cnpj(value)
    if kt == PixKeyType.PHONE:
        return format_phone(value)
    if kt == PixKeyType.EMAIL:
        return value if validate_email(value) else None
    if kt == PixKeyType.RANDOM:
        return value if validate_random_key(value) else None
    return None


# --------------------------------------------------------------------
# Masking
# --------------------------------------------------------------------

def _mask_email(email: str) -> Optional[str]:
    if not validate_email(email):
        return None
    local, domain = email.split('@', 1)
    masked_local = local[:2] + '***' if len(local) > 2 else '***'
    return f"{masked_local}@{domain}"


def _mask_random(key: str) -> Optional[str]:
    if not validate_random_key(key):
        return None
    key = key.strip()
    return key[:4] + '***' + key[-4:]


def mask_pix_key(value: str, key_type: Union[PixKeyType, str]) -> Optional[str]:
    """Partially redacted display form of a key.

    Examples:
        ("123.456.789-01", "cpf")       -> "123.***.***-01"
        ("11222333000181", "cnpj")      -> "11.***.***/****-81"
        ("user@example.com", "email")   -> "us***@example.com"
        ("11987654321", "phone")        -> "(11) *****-4321"

    Only the shape is checked (digit count, email syntax, key length), not the
    check digits, so a display value can be masked before it is validated.
    """
    kt = _coerce_key_type(key_type)
    if kt == PixKeyType.EMAIL:
        return _mask_email(value)
    if kt == PixKeyType.RANDOM:
        return _mask_random(value)

    formatted = format_pix_key(value, kt) if kt is not None else None
    if formatted is None:
        return None
    if kt == PixKeyType.CPF:
        return re.sub(r'(\d{3})\.(\d{3})\.(\d{3})-(\d{2})', r'\1.***.***-\4', formatted)
    if kt == PixKeyType.CNPJ:
        return re.sub(r'(\d{2})\.(\d{3})\.(\d{3})/(\d{4})-(\d{2})', r'\1.***.***/****-\5', formatted)
    # phone
    return re.sub(r'(\(\d{2}\)) (\d{4,5})-(\d{4})', lambda m: f"{m.group(1)} {'*' * len(m.group(2))}-{m.group(3)}", formatted)


def canonical_pix_key(value: str, key_type: PixKeyType) -> str:
    """Form of the key as it goes into the payload (the DICT lookup form)."""
    if key_type in (PixKeyType.CPF, PixKeyType.CNPJ):
        return _only_numbers(value)
    if key_type == PixKeyType.PHONE:
        return PHONE_COUNTRY_PREFIX + _only_numbers(value)
    if key_type == PixKeyType.EMAIL:
        return value.strip().lower()
    return value.strip()
