"""
Tests for logging setup and app wiring in main.
"""
import logging

from visa_fees.main import SensitiveDataFilter


def make_record(msg):
    return logging.LogRecord("test", logging.INFO, __file__, 1, msg, None, None)


def test_redacts_api_key():
    record = make_record("Using key sk-ant-api03-AbC_123-xyz for request")

    SensitiveDataFilter().filter(record)

    assert record.msg == "Using key [REDACTED] for request"


def test_redacts_passport_numbers():
    record = make_record("Checking A1234567 and B12 34567")

    SensitiveDataFilter().filter(record)

    assert "A1234567" not in record.msg
    assert "B12 34567" not in record.msg


def test_leaves_application_ids_alone():
    record = make_record("Stored application app-3f9c2a7b1d04 (4 total)")

    SensitiveDataFilter().filter(record)

    assert record.msg == "Stored application app-3f9c2a7b1d04 (4 total)"


def test_allowed_origins_appends_configured_origins():
    from visa_fees.main import DEV_ORIGINS, allowed_origins

    assert allowed_origins("") == DEV_ORIGINS
    assert allowed_origins(" https://visa.example.si, ,https://admin.example.si ") == DEV_ORIGINS + [
        "https://visa.example.si",
        "https://admin.example.si",
    ]
