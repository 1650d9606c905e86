import string

import pytest

from showready.helpers import format_amount, new_order_id, to_iso


@pytest.mark.parametrize("amount, currency, expected", [
    (4200, "usd", "$42.00"),
    (6500, "EUR", "€65.00"),
    (1999, "chf", "CHF 19.99"),
])
def test_format_amount(amount, currency, expected):
    assert format_amount(amount, currency) == expected


def test_order_ids_look_like_provider_tokens():
    oid = new_order_id()
    assert oid.startswith("ord_")
    assert len(oid) == 10
    assert set(oid[4:]) <= set(string.ascii_lowercase + string.digits)


def test_to_iso_reads_milliseconds():
    assert to_iso(None) is None
    assert to_iso(0) == "1970-01-01T00:00:00+00:00"
    assert to_iso(1500) == "1970-01-01T00:00:01.500000+00:00"
