"""Purse and prize calculations."""

from typing import Optional

from .models import Purse
from .schemas import League


def get_league_purse(league: League) -> Optional[Purse]:
    """The league's purse, or None when every pool is zero."""
    if league.purse is None:
        return None
    purse = league.purse.to_purse()
    if purse.season == 0 and purse.weekly == 0 and purse.elevated == 0:
        return None
    return purse


def calculate_week_prize(purse: Optional[Purse], is_elevated: bool) -> float:
    """Weekly pool, plus the elevated pool on elevated weeks."""
    if purse is None:
        return 0
    total = purse.weekly
    if is_elevated:
        total += purse.elevated
    return total


def calculate_season_prize(purse: Optional[Purse]) -> float:
    """Championship prize paid once when the season completes."""
    return purse.season if purse else 0


def format_prize(amount: float, currency: str = 'USD') -> str:
    """
    Human readable prize amount.

    Whole amounts print without decimals ($50, not $50.0). Zero or negative
    amounts format as an empty string.
    """
    if not amount or amount <= 0:
        return ''
    value = int(amount) if float(amount).is_integer() else f'{amount:.2f}'
    if currency == 'USD':
        return f'${value}'
    return f'{value} {currency}'
