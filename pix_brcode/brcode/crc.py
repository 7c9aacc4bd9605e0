from ..utils.constants import CRC_LENGTH

CRC16_INIT = 0xFFFF
CRC16_POLYNOMIAL = 0x1021


def calculate_checksum(data: bytes) -> int:
    """CRC-16/CCITT-FALSE (poly 0x1021, init 0xFFFF, no reflection, no final xor)."""
    crc = CRC16_INIT
    for byte in data:
        crc ^= (byte << 8)
        for _ in range(8):
            if crc & 0x8000:
                crc = (crc << 1) ^ CRC16_POLYNOMIAL
            else:
                crc = crc << 1
            crc &= 0xFFFF
    return crc


def crc16(payload: str) -> str:
    """Checksum of ``payload`` as 4 upper-case hex digits.

    ``payload`` must already end with the "6304" CRC tag and length.
    """
    return f"{calculate_checksum(payload.encode('utf-8')):0{CRC_LENGTH}X}"


def validate_checksum(data: str) -> bool:
    """True when the last four characters of ``data`` are the CRC of everything before them."""
    if len(data) <= CRC_LENGTH:
        return False
    return data[-CRC_LENGTH:].upper() == crc16(data[:-CRC_LENGTH])
