from enum import Enum


class PixKeyType(str, Enum):
    CPF = "cpf"
    CNPJ = "cnpj"
    EMAIL = "email"
    PHONE = "phone"
    RANDOM = "random"

    @classmethod
    def from_string(cls, value: str) -> 'PixKeyType':
        """Accepts either the value ("cpf") or the member name ("CPF"), case-insensitive."""
        try:
            return cls(value.strip().lower())
        except ValueError:
            return cls[value.strip().upper()]


class PointOfInitiation(str, Enum):
    REUSABLE = "11"
    SINGLE_USE = "12"


class QrPixType(str, Enum):
    STATIC = "STATIC"
    DYNAMIC = "DYNAMIC"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def from_point_of_initiation(cls, value) -> 'QrPixType':
        if value == PointOfInitiation.REUSABLE.value:
            return cls.STATIC
        if value == PointOfInitiation.SINGLE_USE.value:
            return cls.DYNAMIC
        return cls.UNKNOWN


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"
