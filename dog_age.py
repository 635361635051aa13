from dataclasses import dataclass
from datetime import date, datetime, timedelta
from fractions import Fraction
import logging

from errors import InvalidDateError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AgeResult:
    """Elapsed calendar age of a dog"""
    whole_years: int
    remainder_months: int
    total_years: Fraction


def parse_birth_date(value):
    """Turn a date, datetime or ISO-8601 string into a date"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise InvalidDateError(f"Unsupported birth date value: {value!r}")

    text = value.strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        raise InvalidDateError(f"Invalid birth date: {value!r}") from None


def days_in_previous_month(day):
    """Number of days in the month before the one containing ``day``"""
    return (day.replace(day=1) - timedelta(days=1)).day


def compute_age(birth_date, reference_date=None):
    """Calculate a dog's age in whole years, months and fractional years

    Months are counted calendar-correctly: a month is only complete once the
    birth day of month has been reached. Future birth dates are not rejected
    here, they produce a negative total_years.
    """
    birth = parse_birth_date(birth_date)
    if reference_date is None:
        today = date.today()
    elif isinstance(reference_date, datetime):
        today = reference_date.date()
    else:
        today = reference_date

    years = today.year - birth.year
    months = today.month - birth.month
    days = today.day - birth.day

    if days < 0:
        months -= 1
        days += days_in_previous_month(today)

    if months < 0:
        years -= 1
        months += 12

    total_years = years + Fraction(months, 12)
    logger.debug(f"Age from {birth} to {today}: {years}y {months}m ({float(total_years):.3f} years)")
    return AgeResult(whole_years=years, remainder_months=months, total_years=total_years)
