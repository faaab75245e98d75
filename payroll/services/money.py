"""
Fixed-point money helpers.

Amounts travel through the calculator as ``int`` counts of the currency's
minor unit (cents for two decimal places). Decimal values appear only at the
edges: parsing inputs and rendering display values.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation


def _exponent(minor_units):
    return Decimal(1).scaleb(-minor_units)


def parse_decimal(value) -> Decimal:
    """
    Decimal from str/int/Decimal. Floats go through ``str`` so that 0.1
    becomes Decimal('0.1') rather than its binary expansion.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise InvalidOperation(f"Not a number: {value!r}")
    try:
        return Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as e:
        raise InvalidOperation(f"Not a number: {value!r}") from e


def to_minor(amount, minor_units: int = 2) -> int:
    """Major-unit amount to minor units, rounding half up"""
    value = parse_decimal(amount)
    if not value.is_finite():
        raise InvalidOperation(f"Not a finite amount: {amount!r}")
    scaled = value.scaleb(minor_units)
    return int(scaled.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def from_minor(minor: int, minor_units: int = 2) -> Decimal:
    return Decimal(minor).scaleb(-minor_units).quantize(_exponent(minor_units))


def apply_percentage(base_minor: int, fraction: Decimal) -> int:
    """``base * fraction`` in minor units, rounded half up (10% == 0.10)"""
    return int((Decimal(base_minor) * fraction).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def display(minor: int, minor_units: int = 2) -> str:
    """Decimal display string, e.g. 495000 -> '4950.00'"""
    return str(from_minor(minor, minor_units))
