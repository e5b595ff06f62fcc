import pytest

from createverse.utils.data_processing import (
    sanitize_identifier, clean_email, clean_mobile, normalize_name, clean_text_field
)


@pytest.mark.parametrize('raw, expected', [
    ('A1001', 'A1001'),
    ('  A1001  ', 'A1001'),
    ('  7f\u200b001  ', '7f001'),
    ('\ufeffRA2111003010001', 'RA2111003010001'),
    ('RA21\u200c11\u200d003\u2060', 'RA2111003'),
    ('A1001\r\n', 'A1001'),
    ('A\x001001\x1b', 'A1001'),
    ('A1001\u0085', 'A1001'),
    ('REG   2024    17', 'REG 2024 17'),
    ('REG\u00a0\u00a02024', 'REG 2024'),
    ('REG\u20032024', 'REG 2024'),
])
def test_sanitize_identifier(raw, expected):
    assert sanitize_identifier(raw) == expected


def test_sanitize_drops_control_separators():
    # Tabs and newlines are control characters: removed, never turned into spaces
    assert sanitize_identifier('A10\t01') == 'A1001'
    assert sanitize_identifier('A10\n\n01') == 'A1001'


@pytest.mark.parametrize('raw', [
    '', '   ', '\t\n\r', '\u200b\u200c\u200d', '\ufeff \u2060 ', '\x00\x1f\x7f', None,
])
def test_sanitize_blank_and_invisible_input_is_empty(raw):
    assert sanitize_identifier(raw) == ''


def test_sanitize_output_has_single_ascii_space_separators():
    value = sanitize_identifier(' \u200b TEAM \u00a0\t \u2060 42\n ')
    assert value == 'TEAM 42'
    assert '  ' not in value
    assert value == value.strip()


def test_sanitize_coerces_scalars():
    assert sanitize_identifier(1001) == '1001'
    assert sanitize_identifier(7.5) == '7.5'


def test_clean_email():
    assert clean_email('  Leader@Example.EDU ') == 'leader@example.edu'
    assert clean_email(None) == ''


def test_clean_mobile():
    assert clean_mobile('98765 43210') == '9876543210'
    assert clean_mobile('+91-98765-43210') == '919876543210'
    assert clean_mobile('') == ''


def test_normalize_name():
    assert normalize_name('  asha   k  rao ') == 'Asha K Rao'


def test_clean_text_field():
    assert clean_text_field('  CSE   AI ') == 'CSE AI'
    assert clean_text_field(3) == '3'
    assert clean_text_field(None) == ''
