import json
from decimal import Decimal

import pytest
from pydantic import ValidationError

from pix_brcode.brcode.dtos import DecodedPayload, MerchantProfile, PixIdentifier
from pix_brcode.utils.enumerators import PixKeyType, PointOfInitiation, QrPixType
from pix_brcode.utils.pix_errors import FieldOverflowError, PixFieldError, PixKeyValidationError


class TestPixIdentifier:
    """Tests for PixIdentifier."""

    def test_valid_identifier(self):
        ident = PixIdentifier(value="111.444.777-35", key_type=PixKeyType.CPF)
        assert ident.value == "111.444.777-35"
        assert ident.payload_key == "11144477735"
        assert ident.formatted == "111.444.777-35"
        assert ident.masked == "111.***.***-35"

    @pytest.mark.parametrize("key_type", ["cpf", "CPF", " Cpf "])
    def test_key_type_from_string(self, key_type):
        assert PixIdentifier(value="11144477735", key_type=key_type).key_type is PixKeyType.CPF

    def test_invalid_value_raises(self):
        with pytest.raises(PixKeyValidationError) as exc:
            PixIdentifier(value="11144477736", key_type="cpf")
        assert exc.value.pix_key == "11144477736"
        assert exc.value.key_type == "cpf"
        assert exc.value.tag == "26"

    def test_unknown_type_raises(self):
        with pytest.raises(PixKeyValidationError):
            PixIdentifier(value="11144477735", key_type="iban")

    def test_is_immutable(self):
        ident = PixIdentifier(value="a@b.co", key_type="email")
        with pytest.raises(ValidationError):
            ident.value = "c@d.co"

    def test_padded_random_key_below_bound_raises(self):
        with pytest.raises(PixKeyValidationError):
            PixIdentifier(value="  " + "a" * 31, key_type="random")

    def test_value_is_stored_stripped(self):
        ident = PixIdentifier(value=" " + "a" * 32 + "\n", key_type="random")
        assert ident.value == "a" * 32
        assert ident.payload_key == "a" * 32

    def test_phone_payload_key(self):
        assert PixIdentifier(value="(11) 98765-4321", key_type="phone").payload_key == "+5511987654321"

    def test_to_json(self):
        data = json.loads(PixIdentifier(value="a@b.co", key_type="email").to_json())
        assert data == {"value": "a@b.co", "key_type": "email"}


class TestMerchantProfile:
    """Tests for MerchantProfile."""

    def _key(self):
        return PixIdentifier(value="11144477735", key_type="cpf")

    def test_name_and_city_are_normalized(self):
        merchant = MerchantProfile(name="Maria Clara de Oliveira Santos", city="São Paulo", pix_key=self._key())
        assert merchant.name == "Maria Clara de Oliveira S"
        assert merchant.city == "Sao Paulo"

    def test_normalization_is_stable(self):
        merchant = MerchantProfile(name="João", city="Brasília", pix_key=self._key())
        again = MerchantProfile(name=merchant.name, city=merchant.city, pix_key=merchant.pix_key)
        assert again == merchant

    def test_pix_key_from_dict(self):
        merchant = MerchantProfile(name="Joao", city="Recife", pix_key={"value": "a@b.co", "key_type": "email"})
        assert merchant.pix_key.key_type is PixKeyType.EMAIL

    def test_invalid_pix_key_from_dict(self):
        with pytest.raises(PixKeyValidationError):
            MerchantProfile(name="Joao", city="Recife", pix_key={"value": "a@b", "key_type": "email"})

    def test_empty_name(self):
        with pytest.raises(PixFieldError) as exc:
            MerchantProfile(name="!!", city="Recife", pix_key=self._key())
        assert exc.value.tag == "59"

    def test_city_overflow(self):
        with pytest.raises(FieldOverflowError):
            MerchantProfile(name="Joao", city="x" * 100, pix_key=self._key())

    def test_non_string_name(self):
        with pytest.raises(PixFieldError):
            MerchantProfile(name=None, city="Recife", pix_key=self._key())


class TestDecodedPayload:
    """Tests for DecodedPayload."""

    def _payload(self, **kwargs):
        data = dict(
            payload_format_indicator="01",
            gui="BR.GOV.BCB.PIX",
            pix_key="11144477735",
            merchant_category_code="0000",
            transaction_currency="986",
            country_code="BR",
            merchant_name="Joao",
            merchant_city="Recife",
            crc="ABCD",
        )
        data.update(kwargs)
        return DecodedPayload(**data)

    def test_qr_type(self):
        assert self._payload().qr_type is QrPixType.STATIC
        assert self._payload(point_of_initiation="11").qr_type is QrPixType.STATIC
        single = self._payload(point_of_initiation=PointOfInitiation.SINGLE_USE)
        assert single.qr_type is QrPixType.DYNAMIC
        assert single.is_single_use is True

    def test_to_json(self):
        data = json.loads(self._payload(transaction_amount=Decimal("25.50")).to_json())
        assert data["transaction_amount"] == "25.50"
        assert data["reference_label"] is None
        assert data["raw_fields"] == []
