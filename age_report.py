"""Shared glue between the calculator and the web / Discord front ends.

Every surface goes through build_report() so the input checks, the future
date policy and the result formatting stay identical everywhere.
"""
from dataclasses import dataclass
from datetime import date, timedelta
import logging

from dog_age import AgeResult, compute_age, parse_birth_date
from errors import FutureDateError, InvalidDateError, MissingBirthDateError
from pet_calculator import LARGE_DOG_CAP, SizeCategory, to_human_age

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = SizeCategory.SMALL
DEFAULT_AGE_YEARS = 3

MISSING_DATE_MESSAGE = "Please enter your dog's birth date!"
INVALID_DATE_MESSAGE = "The date format is invalid, please check your input!"
FUTURE_DATE_MESSAGE = "Your dog hasn't been born yet! Please check the birth date."
LARGE_DOG_NOTE = "* Large dogs older than 17 have a human-equivalent age beyond 120 years."


@dataclass(frozen=True)
class AgeReport:
    birth_date: date
    category: SizeCategory
    age: AgeResult
    human_age: int

    @property
    def dog_age_display(self):
        return format_dog_age(self.age.whole_years, self.age.remainder_months)

    @property
    def note(self):
        if self.category is SizeCategory.LARGE and self.human_age == LARGE_DOG_CAP:
            return LARGE_DOG_NOTE
        return None

    def to_dict(self):
        return {
            'birthdate': self.birth_date.isoformat(),
            'category': self.category.value,
            'category_label': self.category.label,
            'whole_years': self.age.whole_years,
            'remainder_months': self.age.remainder_months,
            'total_years': float(self.age.total_years),
            'dog_age': self.dog_age_display,
            'human_age': self.human_age,
            'note': self.note,
        }


def format_dog_age(years, months):
    """'2 years 3 months', or just '3 months' for puppies"""
    if years > 0:
        return f"{years} years {months} months"
    return f"{months} months"


def default_birth_date(today=None):
    """Birth date of a dog that turns three today, used on first visit"""
    today = today or date.today()
    try:
        return today.replace(year=today.year - DEFAULT_AGE_YEARS)
    except ValueError:
        # 29 February rolls over into March
        return today.replace(year=today.year - DEFAULT_AGE_YEARS, day=28) + timedelta(days=1)


def build_report(birth_value, category, now=None):
    """Validate the inputs and run the full conversion

    Raises MissingBirthDateError, InvalidDateError, FutureDateError or
    InvalidCategoryError. Nothing is persisted here.
    """
    if birth_value is None or (isinstance(birth_value, str) and not birth_value.strip()):
        raise MissingBirthDateError(MISSING_DATE_MESSAGE)

    size = SizeCategory.parse(category)
    birth = parse_birth_date(birth_value)
    age = compute_age(birth, now)

    if age.total_years < 0:
        raise FutureDateError(FUTURE_DATE_MESSAGE)

    human_age = to_human_age(age.total_years, size)
    logger.info(f"Converted {age.whole_years}y {age.remainder_months}m ({size.value}) to human age {human_age}")
    return AgeReport(birth_date=birth, category=size, age=age, human_age=human_age)


def user_message(error):
    """Text shown to the user for a failed conversion"""
    if isinstance(error, (MissingBirthDateError, FutureDateError)):
        return str(error)
    if isinstance(error, InvalidDateError):
        return INVALID_DATE_MESSAGE
    return "Please pick a valid size category."
