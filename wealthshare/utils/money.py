from decimal import Decimal, ROUND_HALF_UP

ZERO = Decimal("0.00")


def money(x) -> Decimal:
    """Always return 2-decimal Decimal with HALF_UP rounding."""
    if x is None:
        x = 0
    if not isinstance(x, Decimal):
        x = Decimal(str(x))
    return x.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def flat_interest(principal: Decimal, interest_rate_percent: Decimal) -> Decimal:
    """
    FLAT (simple, non-compounding):
      interest = principal * (rate% / 100)

    Example:
      principal=1000, rate=10 => 100.00
    """
    principal = money(principal)
    rate = Decimal(str(interest_rate_percent))
    return money(principal * rate / Decimal("100"))
