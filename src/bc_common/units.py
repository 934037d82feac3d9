"""Integer arithmetic utilities for 18-decimal base units.

All reserve amounts, token amounts and prices are int base units (1e18 per
whole unit). No float, no Decimal. Amounts are persisted as decimal strings
because uint256-sized values do not fit in BIGINT.
"""

WAD = 10**18
BASIS_POINTS = 10_000


def calculate_fee(amount: int, fee_bps: int) -> int:
    """Fee taken out of a gross amount: floor(amount * fee_bps / 10000)."""
    if amount == 0 or fee_bps == 0:
        return 0
    return amount * fee_bps // BASIS_POINTS


def fee_for_net(net_amount: int, fee_bps: int) -> int:
    """Fee that grosses a net amount up at the same rate (ceiling division).

    gross = net + fee with fee / gross == fee_bps / 10000, rounded up so the
    fee recipient never receives less than the nominal rate.
    """
    if net_amount == 0 or fee_bps == 0:
        return 0
    den = BASIS_POINTS - fee_bps
    return (net_amount * fee_bps + den - 1) // den


def max_gross_for_net(net_room: int, fee_bps: int) -> int:
    """Largest gross amount whose net-of-fee part stays within net_room."""
    return net_room * BASIS_POINTS // (BASIS_POINTS - fee_bps)


def amount_to_display(amount: int, decimals: int = 6) -> str:
    """Convert base units to display string: 1500000000000000000 -> '1.500000'."""
    sign = "-" if amount < 0 else ""
    whole, frac = divmod(abs(amount), WAD)
    frac_digits = str(frac).rjust(18, "0")[:decimals]
    if decimals == 0:
        return f"{sign}{whole:,}"
    return f"{sign}{whole:,}.{frac_digits}"


def encode_amount(amount: int) -> str:
    """int → DB text column. Rejects negatives (every stored amount is unsigned)."""
    if amount < 0:
        raise ValueError(f"Stored amounts must be non-negative, got {amount}")
    return str(amount)


def decode_amount(raw: str | int | None) -> int:
    """DB text column → int. NULL reads as zero."""
    if raw is None:
        return 0
    return int(raw)
