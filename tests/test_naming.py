"""Tests for src.core.naming."""

import pytest

from src.core.naming import animal_name_from_document, document_matches, treatment_sheet_name


@pytest.mark.parametrize(
    "file_name, expected",
    [
        ("Max 985112345678901", "Max"),
        ("עותק של Max 985112345678901.xlsx", "Max"),
        ("Copy of Luna.xls", "Luna"),
        ("Big Ben", "Big Ben"),
        ("Rex 12345", "Rex 12345"),
        ("985112345678901", "985112345678901"),
    ],
)
def test_animal_name_from_document(file_name, expected):
    assert animal_name_from_document(file_name) == expected


def test_treatment_sheet_name():
    assert treatment_sheet_name(" Max ", "985112345678901") == "Max 985112345678901"
    assert treatment_sheet_name("Luna") == "Luna"


@pytest.mark.parametrize(
    "file_name, key, expected",
    [
        ("Max 985112345678901", "Max", True),
        ("עותק של Max 985112345678901.xlsx", "Max", True),
        ("Max 985112345678901", "985112345678901", True),
        ("Max 985112345678901", "Max 985112345678901", True),
        ("Maxine 985112345678902", "Max", False),
        ("Max 985112345678901", "98511234", False),
        ("Big Ben", "Ben", False),
        ("Max", "", False),
    ],
)
def test_document_matches(file_name, key, expected):
    assert document_matches(file_name, key) is expected
