LOG_SOURCE = "pix_brcode"

# Top level EMV tags, in the order they are emitted
TAG_PAYLOAD_FORMAT_INDICATOR = "00"
TAG_POINT_OF_INITIATION = "01"
TAG_MERCHANT_ACCOUNT_INFO = "26"
TAG_MERCHANT_CATEGORY_CODE = "52"
TAG_TRANSACTION_CURRENCY = "53"
TAG_TRANSACTION_AMOUNT = "54"
TAG_COUNTRY_CODE = "58"
TAG_MERCHANT_NAME = "59"
TAG_MERCHANT_CITY = "60"
TAG_ADDITIONAL_DATA = "62"
TAG_CRC = "63"

# Subtags of "26" (merchant account information)
SUBTAG_GUI = "00"
SUBTAG_PIX_KEY = "01"
SUBTAG_DESCRIPTION = "02"
SUBTAG_LOCATION_URL = "25"

# Subtags of "62" (additional data field template)
SUBTAG_REFERENCE_LABEL = "05"

# Templates whose value is itself a TLV list:
# 26..51 merchant account information, 62 additional data, 80..99 unreserved
COMPOSITE_TAGS = frozenset(
    [f"{t:02d}" for t in range(26, 52)]
    + [TAG_ADDITIONAL_DATA]
    + [f"{t:02d}" for t in range(80, 100)]
)

PAYLOAD_FORMAT_INDICATOR = "01"
PIX_GUI = "BR.GOV.BCB.PIX"
DEFAULT_MERCHANT_CATEGORY_CODE = "0000"
CURRENCY_BRL = "986"
COUNTRY_CODE_BR = "BR"
DEFAULT_REFERENCE_LABEL = "***"

CRC_LENGTH = 4
CRC_PREFIX = TAG_CRC + f"{CRC_LENGTH:02d}"  # "6304"

MAX_FIELD_LENGTH = 99
MAX_MERCHANT_NAME_LENGTH = 25
MAX_MERCHANT_CITY_LENGTH = MAX_FIELD_LENGTH
MAX_AMOUNT_LENGTH = 13

RANDOM_KEY_MIN_LENGTH = 32
RANDOM_KEY_MAX_LENGTH = 77

PHONE_COUNTRY_PREFIX = "+55"
