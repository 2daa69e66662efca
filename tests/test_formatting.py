from datetime import date

import pytest

from frontend.formatting import (
    QUOTE_STATUS_LABELS, format_currency, format_date, parse_currency, status_label,
)


@pytest.mark.parametrize('cents, expected', [
    (12345, 'R$ 123,45'),
    (0, 'R$ 0,00'),
    (None, 'R$ 0,00'),
    (123456789, 'R$ 1.234.567,89'),
    (-500, '-R$ 5,00'),
])
def test_format_currency(cents, expected):
    assert format_currency(cents) == expected


@pytest.mark.parametrize('text, cents', [
    ('1.234,56', 123456),
    ('R$ 10', 1000),
    ('10.5', 1050),
    ('0,07', 7),
])
def test_parse_currency(text, cents):
    assert parse_currency(text) == cents


@pytest.mark.parametrize('text', ['', 'abc', '1,234'])
def test_parse_currency_rejects_garbage(text):
    with pytest.raises(ValueError):
        parse_currency(text)


def test_format_date():
    assert format_date('2026-03-09') == '09/03/2026'
    assert format_date('2026-03-09T14:30:00Z') == '09/03/2026'
    assert format_date(date(2025, 12, 31)) == '31/12/2025'
    assert format_date(None) == '-'


def test_status_label():
    assert status_label('in_progress') == 'Em andamento'
    assert status_label('approved', QUOTE_STATUS_LABELS) == 'Aprovado'
    assert status_label('archived') == 'archived'
