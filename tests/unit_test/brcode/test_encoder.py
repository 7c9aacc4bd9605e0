import re
from decimal import Decimal
from unittest.mock import Mock

import pytest

import pix_brcode.brcode.encoder as encoder_module
from pix_brcode.brcode.context import make_merchant
from pix_brcode.brcode.crc import crc16
from pix_brcode.brcode.encoder import build_payload_fields, encode_pix_payload, format_amount
from pix_brcode.brcode.tlv import decode_fields
from pix_brcode.utils.enumerators import PointOfInitiation
from pix_brcode.utils.pix_errors import FieldOverflowError, PixFieldError, PixKeyValidationError

RANDOM_KEY = "123e4567-e12b-12d1-a456-426655440000"


@pytest.fixture
def merchant():
    return make_merchant(
        name="Maria Clara de Oliveira Santos",
        city="São Paulo",
        pix_key="11144477735",
        pix_key_type="cpf",
    )


def _tags(payload):
    return [tag for tag, _ in decode_fields(payload)]


class TestEncodePixPayload:
    """End to end encoding."""

    def test_full_payload(self, merchant):
        payload = encode_pix_payload(merchant, Decimal("25.50"), "REF123ABC")

        expected_body = (
            "000201"
            "010211"
            "2633" "0014BR.GOV.BCB.PIX" "0111" "11144477735"
            "52040000"
            "5303986"
            "540525.50"
            "5802BR"
            "5925" "Maria Clara de Oliveira S"
            "6009" "Sao Paulo"
            "6213" "0509REF123ABC"
            "6304"
        )
        assert payload.startswith("000201")
        assert "5802BR" in payload
        assert payload[:-4] == expected_body
        assert re.fullmatch(r"[0-9A-F]{4}", payload[-4:])
        assert payload[-4:] == crc16(payload[:-4])

    def test_field_order(self, merchant):
        payload = encode_pix_payload(merchant, Decimal("1"), "REF1")
        assert _tags(payload) == ["00", "01", "26", "52", "53", "54", "58", "59", "60", "62", "63"]

    def test_every_length_prefix_matches_value(self, merchant):
        payload = encode_pix_payload(merchant, Decimal("25.50"), "REF123ABC", description="almoco")
        cursor = 0
        while cursor < len(payload):
            length = int(payload[cursor + 2:cursor + 4])
            cursor += 4 + length
        assert cursor == len(payload)

    def test_without_amount_omits_tag_54(self, merchant):
        assert "54" not in _tags(encode_pix_payload(merchant))

    def test_zero_amount_omits_tag_54(self, merchant):
        assert "54" not in _tags(encode_pix_payload(merchant, Decimal("0.00")))

    def test_default_reference(self, merchant):
        assert "62070503***6304" in encode_pix_payload(merchant, Decimal("10"))

    def test_empty_reference_uses_default(self, merchant):
        assert "62070503***6304" in encode_pix_payload(merchant, None, "")

    def test_single_use(self, merchant):
        payload = encode_pix_payload(merchant, point_of_initiation=PointOfInitiation.SINGLE_USE)
        assert payload.startswith("000201010212")

    def test_description(self, merchant):
        payload = encode_pix_payload(merchant, description="Almoco")
        assert "26430014BR.GOV.BCB.PIX011111144477735" "0206Almoco" in payload

    def test_phone_key_uses_country_prefix(self):
        merchant = make_merchant(name="Joao", city="Recife", pix_key="(11) 98765-4321", pix_key_type="phone")
        assert "0114+5511987654321" in encode_pix_payload(merchant)

    def test_email_key_is_lowercased(self):
        merchant = make_merchant(name="Joao", city="Recife", pix_key="Joao@Example.com", pix_key_type="email")
        assert "0116joao@example.com" in encode_pix_payload(merchant)

    def test_reference_overflow(self, merchant):
        assert encode_pix_payload(merchant, None, "R" * 95)
        with pytest.raises(FieldOverflowError) as exc:
            encode_pix_payload(merchant, None, "R" * 96)
        assert exc.value.tag == "62"

    def test_padded_random_key_is_encoded_stripped(self):
        merchant = make_merchant(name="Joao", city="Recife", pix_key=" " + "a" * 32 + " ", pix_key_type="random")
        assert "0132" + "a" * 32 + "52" in encode_pix_payload(merchant)

    def test_padded_random_key_below_bound_is_refused(self):
        with pytest.raises(PixKeyValidationError):
            make_merchant(name="Joao", city="Recife", pix_key="  " + "a" * 31, pix_key_type="random")

    def test_account_info_overflow(self):
        merchant = make_merchant(name="Joao", city="Recife", pix_key="k" * 77, pix_key_type="random")
        assert encode_pix_payload(merchant)
        with pytest.raises(FieldOverflowError) as exc:
            encode_pix_payload(merchant, description="x")
        assert exc.value.tag == "26"

    def test_non_ascii_reference(self, merchant):
        with pytest.raises(PixFieldError):
            encode_pix_payload(merchant, None, "REFÇ")

    @pytest.mark.parametrize("mcc", ["000", "00000", "abcd"])
    def test_invalid_merchant_category_code(self, merchant, mcc):
        with pytest.raises(PixFieldError) as exc:
            encode_pix_payload(merchant, merchant_category_code=mcc)
        assert exc.value.tag == "52"

    def test_custom_merchant_category_code(self, merchant):
        assert "52045812" in encode_pix_payload(merchant, merchant_category_code="5812")

    def test_is_deterministic(self, merchant):
        assert encode_pix_payload(merchant, Decimal("3.10"), "X") == encode_pix_payload(merchant, Decimal("3.10"), "X")

    def test_logs_without_personal_data(self, merchant, monkeypatch):
        mock_logger = Mock()
        monkeypatch.setattr(encoder_module, "logger", mock_logger)

        payload = encode_pix_payload(merchant, Decimal("25.50"))

        mock_logger.debug.assert_called_once()
        extra = mock_logger.debug.call_args.kwargs["extra"]
        assert extra == {"payload_length": len(payload), "has_amount": True, "point_of_initiation": "11"}


class TestBuildPayloadFields:
    def test_does_not_include_crc(self, merchant):
        tags = [f.tag for f in build_payload_fields(merchant)]
        assert tags == ["00", "01", "26", "52", "53", "58", "59", "60", "62"]


class TestFormatAmount:
    @pytest.mark.parametrize("amount,expected", [
        (Decimal("25.50"), "25.50"),
        (Decimal("25.5"), "25.50"),
        (25.5, "25.50"),
        (0.1, "0.10"),
        (10, "10.00"),
        ("7.999", "8.00"),
        (Decimal("10.005"), "10.01"),
        (Decimal("1E+3"), "1000.00"),
        (Decimal("1234567890.00"), "1234567890.00"),
    ])
    def test_formats_two_decimals(self, amount, expected):
        assert format_amount(amount) == expected

    @pytest.mark.parametrize("amount", [None, 0, Decimal("0.004"), "0"])
    def test_no_amount(self, amount):
        assert format_amount(amount) is None

    @pytest.mark.parametrize("amount", [Decimal("-1"), "abc", float("nan"), float("inf"), True])
    def test_invalid(self, amount):
        with pytest.raises(PixFieldError) as exc:
            format_amount(amount)
        assert exc.value.tag == "54"

    def test_overflow(self):
        with pytest.raises(FieldOverflowError):
            format_amount(Decimal("12345678901.00"))

    @pytest.mark.parametrize("amount", [Decimal("1e30"), "1e40", 1e30])
    def test_amount_beyond_decimal_precision(self, amount):
        with pytest.raises(FieldOverflowError) as exc:
            format_amount(amount)
        assert exc.value.tag == "54"
        assert exc.value.max_length == 13
