"""Cost calculation for sessions.

All functions are pure. Amounts are Decimal and are never rounded here;
rounding to two places happens only in format_currency.
"""

from decimal import ROUND_HALF_UP, Decimal

from shuttlehub.models.session import Session, parse_clock, parse_time_range

_CENTS = Decimal("0.01")
_MINUTES_PER_HOUR = Decimal(60)


def duration_hours(start: str, end: str) -> Decimal:
    """Length of a time range in fractional hours.

    Examples:
        ("19:00", "21:30") -> Decimal("2.5")
        ("19:00", "19:00") -> Decimal("0")

    Returns:
        max(0, end - start). Zero means the range cannot be priced.

    Raises:
        ValueError: If either time is not a valid HH:MM string
    """
    minutes = parse_clock(end) - parse_clock(start)
    if minutes <= 0:
        return Decimal(0)
    return Decimal(minutes) / _MINUTES_PER_HOUR


def session_duration(session: Session) -> Decimal:
    """Duration of a session's stored time range."""
    start, end = parse_time_range(session.time)
    return duration_hours(start, end)


def total_court_fee(rate: Decimal, court_count: int, duration: Decimal) -> Decimal:
    """Court rental for ``court_count`` courts at an hourly ``rate``."""
    return Decimal(rate) * court_count * Decimal(duration)


def total_shuttle_cost(qty: int, price: Decimal) -> Decimal:
    return qty * Decimal(price)


def total_event_cost(session: Session) -> Decimal:
    """Court fee plus shuttlecocks."""
    return session.court_fee + total_shuttle_cost(session.shuttle_qty, session.shuttle_price)


def cost_per_person(session: Session) -> Decimal:
    """Equal (AA) share of the total cost.

    With nobody signed up the whole total is reported, so the value is
    always defined and matches what a single participant would owe.
    """
    total = total_event_cost(session)
    count = len(session.participants)
    if count == 0:
        return total
    return total / count


def round_currency(amount: Decimal) -> Decimal:
    """Round to cents for display."""
    return Decimal(amount).quantize(_CENTS, rounding=ROUND_HALF_UP)


def format_currency(amount: Decimal, currency: str = "RM") -> str:
    """Format an amount for display, e.g. ``RM 65.00``."""
    return f"{currency} {round_currency(amount):,.2f}"
