"""
Input coercion shared by the business layer.

Each parser returns (value, error): exactly one of them is None.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from marketplace.business.core.outcomes import ValidationError

CENT = Decimal('0.01')

# Largest value an INTEGER column holds (signed 64-bit)
MAX_INTEGER = 2 ** 63 - 1
# Numeric(10, 2) price column
MAX_PRICE = Decimal('99999999.99')


def parse_int(value, field: str, *, minimum: int | None = None, maximum: int = MAX_INTEGER):
    # bool is an int subclass; True is not a quantity
    if isinstance(value, bool) or value is None:
        return None, ValidationError(f"The {field} field must be an integer.")
    if isinstance(value, int):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = int(value.strip())
        except ValueError:
            return None, ValidationError(f"The {field} field must be an integer.")
    else:
        return None, ValidationError(f"The {field} field must be an integer.")
    if minimum is not None and parsed < minimum:
        return None, ValidationError(f"The {field} field must be at least {minimum}.")
    if parsed > maximum:
        return None, ValidationError(f"The {field} field may not be greater than {maximum}.")
    return parsed, None


def parse_price(value, field: str = 'price'):
    if isinstance(value, bool) or value is None:
        return None, ValidationError(f"The {field} field must be a number.")
    try:
        parsed = Decimal(str(value))
    except InvalidOperation:
        return None, ValidationError(f"The {field} field must be a number.")
    if not parsed.is_finite():
        return None, ValidationError(f"The {field} field must be a number.")
    if parsed < 0:
        return None, ValidationError(f"The {field} field must be at least 0.")
    if parsed > MAX_PRICE:
        return None, ValidationError(f"The {field} field may not be greater than {MAX_PRICE}.")
    return parsed.quantize(CENT, rounding=ROUND_HALF_UP), None


def parse_text(value, field: str, *, max_length: int | None = None, allow_empty: bool = False):
    if not isinstance(value, str):
        return None, ValidationError(f"The {field} field is required.")
    parsed = value.strip()
    if not parsed and not allow_empty:
        return None, ValidationError(f"The {field} field is required.")
    if max_length is not None and len(parsed) > max_length:
        return None, ValidationError(f"The {field} field may not be greater than {max_length} characters.")
    return parsed, None
