"""Number parsing utilities for request input."""
import math
import re
from decimal import Decimal, InvalidOperation

ID_NUMBER_PATTERN = re.compile(r"^-?(?:\d{1,3}(?:\.\d{3})+|\d+),\d+$")


def parse_id_number(value) -> float:
    """
    Parse a number sent by a form or JSON body.

    Accepts:
    - int/float values as they are (JSON bodies)
    - plain strings with a dot decimal separator: "0.025", "1500"
    - Indonesian strings with a comma decimal separator: "1.234,56", "0,025"

    A string without a comma is never read as thousands-grouped, so
    coefficients like "0.025" keep their meaning.

    Raises:
        ValueError: if the value is invalid, empty or not finite.
    """
    if isinstance(value, bool):
        raise ValueError('Format angka tidak valid')

    if isinstance(value, (int, float)):
        number = float(value)
    else:
        if value is None:
            raise ValueError('Format angka tidak valid')
        cleaned = str(value).strip().replace(' ', '')
        if not cleaned:
            raise ValueError('Format angka tidak valid')

        if ',' in cleaned:
            if not ID_NUMBER_PATTERN.match(cleaned):
                raise ValueError('Format angka tidak valid. Gunakan 1.234,56 atau 1234.56')
            cleaned = cleaned.replace('.', '').replace(',', '.')

        try:
            number = float(Decimal(cleaned))
        except (InvalidOperation, ValueError):
            raise ValueError('Format angka tidak valid. Gunakan 1.234,56 atau 1234.56')

    if not math.isfinite(number):
        raise ValueError('Format angka tidak valid')
    return number
