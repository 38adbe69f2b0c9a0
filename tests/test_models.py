"""Unit tests for data models, query encoding and configuration."""

import pytest

from mikud.config import Config, ISRAEL_POST_URL
from mikud.models import Address, ErrorKind, LookupResult, ZipLookupError
from mikud.params import encode_params


class TestEncodeParams:
    """Tests for encode_params."""

    def test_omits_blank_values(self):
        query = encode_params({"Location": "Haifa", "Street": "  ", "House": None, "Entrance": ""})
        assert query == "Location=Haifa"

    def test_keeps_order_and_zero(self):
        assert encode_params({"House": 0, "Entrance": 2}) == "House=0&Entrance=2"

    def test_percent_encodes_hebrew_and_spaces(self):
        query = encode_params({"Location": "תל אביב"})
        assert query == "Location=%D7%AA%D7%9C%20%D7%90%D7%91%D7%99%D7%91"

    def test_reserved_characters(self):
        assert encode_params({"Street": "a&b=c/d"}) == "Street=a%26b%3Dc%2Fd"
        assert encode_params({"Street": "O'Neil (north)"}) == "Street=O'Neil%20(north)"

    def test_empty_mapping(self):
        assert encode_params({}) == ""


class TestAddress:
    """Tests for Address construction and keys."""

    def test_from_wire_mapping(self):
        address = Address.from_mapping({"city": "חיפה", "street": "הנביאים", "houseNumber": 25})
        assert address == Address(city="חיפה", street="הנביאים", house_number=25)

    @pytest.mark.parametrize("bad", [None, "חיפה", 7, [], {}])
    def test_from_mapping_rejects(self, bad):
        with pytest.raises(ZipLookupError) as exc_info:
            Address.from_mapping(bad)
        assert exc_info.value.kind is ErrorKind.INVALID_INPUT

    def test_query_fields_order(self):
        address = Address(city="a", street="b", house_number=1, entrance="c")
        assert list(address.query_fields()) == ["Location", "Street", "House", "Entrance"]

    def test_cache_key_is_deterministic(self):
        address = Address(city="ירושלים", street="הרצל", house_number=10)
        assert address.cache_key() == '["ירושלים","הרצל",10,null]'

    def test_to_dict_uses_wire_names(self):
        assert Address(city="x", house_number=3).to_dict() == {
            "city": "x",
            "street": "",
            "houseNumber": 3,
            "entrance": None,
        }


class TestLookupResult:
    """Tests for the exactly-one-of contract."""

    def test_ok(self):
        result = LookupResult.ok("6423207", cached=True)
        assert result.success
        assert result.to_dict() == {"success": True, "zipcode": "6423207", "cached": True, "error": None}

    def test_fail(self):
        result = LookupResult.fail(ZipLookupError(ErrorKind.TIMEOUT))
        assert not result.success
        assert result.to_dict()["error"]["kind"] == "timeout"

    def test_rejects_both_or_neither(self):
        with pytest.raises(ValueError):
            LookupResult()
        with pytest.raises(ValueError):
            LookupResult(zipcode="6423207", error=ZipLookupError(ErrorKind.TIMEOUT))


class TestZipLookupError:
    """Tests for error messages and serialization."""

    def test_http_error_message(self):
        error = ZipLookupError(ErrorKind.HTTP_ERROR, status=404, status_text="Not Found")
        assert str(error) == "HTTP error: 404 Not Found"
        assert error.to_dict() == {
            "kind": "http_error",
            "message": "HTTP error: 404 Not Found",
            "status": 404,
            "status_text": "Not Found",
        }

    def test_upstream_error_message(self):
        error = ZipLookupError(ErrorKind.UPSTREAM_ERROR, code="512")
        assert error.message == "Israeli Post returned error code: 512"
        assert error.to_dict()["code"] == "512"

    def test_every_kind_has_a_message(self):
        for kind in ErrorKind:
            assert ZipLookupError(kind).message


class TestConfig:
    """Tests for environment-driven configuration."""

    def test_defaults(self, monkeypatch):
        for name in ("MIKUD_ENDPOINT_URL", "MIKUD_REQUEST_TIMEOUT", "MIKUD_CACHE_TTL",
                     "MIKUD_CACHE_MAX_ENTRIES", "MIKUD_ENABLE_CACHE", "MIKUD_LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)
        cfg = Config()
        assert cfg.endpoint_url == ISRAEL_POST_URL
        assert cfg.request_timeout == 15.0
        assert cfg.get_cache_config() == {"ttl": 300, "max_entries": 100}
        assert cfg.enable_cache is True
        assert cfg.log_level == "INFO"

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("MIKUD_CACHE_TTL", "60")
        monkeypatch.setenv("MIKUD_CACHE_MAX_ENTRIES", "not-a-number")
        monkeypatch.setenv("MIKUD_ENABLE_CACHE", "off")
        monkeypatch.setenv("MIKUD_LOG_LEVEL", "debug")
        cfg = Config()
        assert cfg.cache_ttl == 60
        assert cfg.cache_max_entries == 100
        assert cfg.enable_cache is False
        assert cfg.log_level == "DEBUG"
