# =============================================================================
# core/amounts.py  —  Decimal-String Amount Helpers
# =============================================================================
#
# Monetary amounts always travel as decimal STRINGS ("1000", "0.5", "8.5").
# These helpers turn them into Decimal for arithmetic and back into plain
# strings for output.  Nothing here ever produces a float.
#
# Parsed arguments are capped at MAX_AMOUNT in magnitude; anything larger is
# a malformed argument, not an upstream failure.
# =============================================================================

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext
from typing import Any, Optional

from core.errors import MalformedArgument


MAX_AMOUNT = Decimal("1e30")


def parse_amount(
    value: Any,
    field_name: str,
    *,
    minimum: Optional[Decimal] = None,
    maximum: Optional[Decimal] = None,
) -> Decimal:
    """Parse a decimal string argument, rejecting anything non-finite.

    Args:
        value: The raw argument (normally a string such as "1000.50").
        field_name: Argument name, used in the error message.
        minimum: Smallest accepted value (inclusive), if any.
        maximum: Largest accepted value (inclusive), if any.

    Returns:
        The value as a Decimal.

    Raises:
        MalformedArgument: if the value is missing, not numeric, NaN or
            infinite, at least MAX_AMOUNT in magnitude, or outside
            [minimum, maximum].
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        raise MalformedArgument(f"'{field_name}' is required")
    if isinstance(value, bool):
        raise MalformedArgument(f"'{field_name}' must be a decimal string, got {value!r}")
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        raise MalformedArgument(f"'{field_name}' must be a decimal string, got {value!r}") from None
    if not amount.is_finite():
        raise MalformedArgument(f"'{field_name}' must be a finite number, got {value!r}")
    if abs(amount) >= MAX_AMOUNT:
        raise MalformedArgument(f"'{field_name}' exceeds the supported range, got {value!r}")
    if minimum is not None and amount < minimum:
        raise MalformedArgument(f"'{field_name}' must be at least {minimum}, got {value!r}")
    if maximum is not None and amount > maximum:
        raise MalformedArgument(f"'{field_name}' must be at most {maximum}, got {value!r}")
    return amount


def to_decimal(value: Any) -> Decimal:
    """Lenient conversion used when summing upstream fields.

    Missing or unparsable values count as zero.
    """
    if value is None or isinstance(value, bool):
        return Decimal(0)
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        return Decimal(0)
    return amount if amount.is_finite() else Decimal(0)


def format_amount(value: Decimal, places: Optional[int] = None) -> str:
    """Render a Decimal as a plain decimal string.

    With `places`, the value is rounded half-up to that many digits and the
    trailing zeros are kept ("119.640000").  Without it, trailing zeros are
    dropped and exponent notation is never used ("85", "0.005").
    """
    if places is not None:
        with localcontext() as ctx:
            # quantize needs room for every integer digit plus `places`
            ctx.prec = max(ctx.prec, value.adjusted() + places + 2)
            return str(value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP))
    if value == 0:
        return "0"
    return format(value.normalize(), "f")
