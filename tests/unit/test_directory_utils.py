import pytest

from app.domain.directory_utils import (
    extract_file_date,
    match_text,
    matches_package_name,
    normalize_name,
    slugify,
)


@pytest.mark.parametrize("value", ["My-Package", "mypackage", "MY_PACKAGE", "My Package", " my - package "])
def test_normalize_name_ignores_case_and_separators(value):
    assert normalize_name(value) == "mypackage"


def test_extract_file_date_reformats_time_portion():
    assert extract_file_date("pdf-reader_2025-01-31T08-15-00.json") == "2025-01-31T08:15:00"


def test_extract_file_date_without_fragment():
    assert extract_file_date("pdf-reader.json") is None
    assert extract_file_date("pdf-reader_2025-01-31.json") is None


@pytest.mark.parametrize("query", ["My-Package", "mypackage", "MY_PACKAGE", "my package"])
def test_matches_display_name(query):
    assert matches_package_name(query, "My Package", "someone/unrelated")


def test_matches_last_identifier_segment():
    assert matches_package_name("pdf_reader", "Something Else", "acme/pdf-reader")


def test_matches_identifier_substring_case_insensitive():
    assert matches_package_name("ACME/PDF", "Something Else", "acme/pdf-reader")


def test_no_match():
    assert not matches_package_name("excel", "PDF Reader", "acme/pdf-reader")


def test_match_text():
    assert match_text(["PDF Reader", "acme"], "reader")
    assert match_text(["PDF Reader"], "")
    assert match_text(["PDF Reader"], None)
    assert not match_text(["PDF Reader", None], "excel")


def test_slugify():
    assert slugify("PDF  Reader Tool") == "pdf-reader-tool"
