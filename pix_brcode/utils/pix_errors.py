from typing import Optional


class PixCodecException(Exception):
    """Base class for all BR Code codec exceptions."""
    def __init__(self, message: str, tag: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.tag = tag


class PixKeyValidationError(PixCodecException):
    def __init__(self, message: str = "Invalid Pix key", pix_key: Optional[str] = None, key_type: Optional[str] = None):
        super().__init__(message, tag="26")
        self.pix_key = pix_key
        self.key_type = key_type


class PixFieldError(PixCodecException):
    def __init__(self, message: str = "Invalid field value", tag: Optional[str] = None):
        super().__init__(message, tag)


class FieldOverflowError(PixFieldError):
    def __init__(self, tag: Optional[str], length: int, max_length: int):
        super().__init__(f"field {tag} has {length} chars, max is {max_length}", tag)
        self.length = length
        self.max_length = max_length


class DecodeStructureError(PixCodecException):
    def __init__(self, message: str = "Malformed payload", tag: Optional[str] = None, position: Optional[int] = None):
        super().__init__(message, tag)
        self.position = position


class CrcMismatchError(PixCodecException):
    def __init__(self, expected: str, found: str):
        super().__init__(f"CRC mismatch: expected {expected}, found {found}", tag="63")
        self.expected = expected
        self.found = found
