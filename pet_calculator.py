from enum import Enum
from fractions import Fraction
import logging
import math

from errors import InvalidCategoryError

logger = logging.getLogger(__name__)


class SizeCategory(Enum):
    SMALL = 'small'
    MEDIUM = 'medium'
    LARGE = 'large'

    @property
    def index(self):
        """Column of this category in AGE_TABLE"""
        return WEIGHT_MAP[self.value]

    @property
    def label(self):
        return CATEGORY_LABELS[self]

    @classmethod
    def parse(cls, token):
        """Look up a category from its token, e.g. 'large'"""
        if isinstance(token, cls):
            return token
        try:
            return cls(token)
        except ValueError:
            raise InvalidCategoryError(f"Unknown size category: {token!r}") from None


# Size token -> column index
WEIGHT_MAP = {
    'small': 0,   # under 10 kg
    'medium': 1,  # 10-26 kg
    'large': 2,   # over 26 kg
}

CATEGORY_LABELS = {
    SizeCategory.SMALL: 'Small (under 10 kg)',
    SizeCategory.MEDIUM: 'Medium (10-26 kg)',
    SizeCategory.LARGE: 'Large (over 26 kg)',
}

# Dog age in years -> human-equivalent age for (small, medium, large)
# Fractional checkpoints are months: 0.25 is 3 months
AGE_TABLE = (
    (0.25, (4, 4, 3)),
    (0.5, (7.5, 7.5, 6)),
    (0.75, (11, 11, 9)),
    (1, (15, 15, 12)),
    (2, (24, 24, 19)),
    (3, (28, 28, 28)),
    (4, (32, 32, 32)),
    (5, (36, 36, 36)),
    (6, (40, 42, 45)),
    (7, (44, 47, 50)),
    (8, (48, 51, 55)),
    (9, (52, 56, 61)),
    (10, (56, 60, 66)),
    (11, (60, 65, 72)),
    (13, (68, 74, 82)),
    (15, (76, 83, 93)),
    (17, (84, 92, 120)),  # large > 120
    (19, (92, 100, 120)),  # large > 120
    (20, (100, 100, 120)),  # large > 120
)

TABLE_MAX_AGE = AGE_TABLE[-1][0]

# Human age shown for large dogs once the table runs out of resolution
LARGE_DOG_CAP = 120


def round_half_up(value):
    """Round to the nearest integer, halves away from zero"""
    value = Fraction(value)
    if value < 0:
        return -math.floor(-value + Fraction(1, 2))
    return math.floor(value + Fraction(1, 2))


def table_value(age, category):
    """Tabulated human age at an exact checkpoint"""
    category = SizeCategory.parse(category)
    for checkpoint, values in AGE_TABLE:
        if checkpoint == age:
            return values[category.index]
    raise KeyError(age)


def to_human_age(total_years, category):
    """Estimate a dog's human-equivalent age from the lookup table

    Ages between checkpoints are linearly interpolated. Ages past the end of
    the table keep growing at the slope of the last two checkpoints.
    Exact checkpoint hits return the tabulated value unchanged.
    """
    category = SizeCategory.parse(category)
    column = category.index
    dog_years = Fraction(total_years)

    if dog_years <= 0:
        return 0

    if dog_years >= TABLE_MAX_AGE:
        prev_age, last_age = AGE_TABLE[-2][0], AGE_TABLE[-1][0]
        last_value = Fraction(table_value(last_age, category))
        rate = (last_value - Fraction(table_value(prev_age, category))) / Fraction(last_age - prev_age)
        return round_half_up(last_value + (dog_years - last_age) * rate)

    lower_age, lower_values = AGE_TABLE[0]
    upper_age, upper_values = AGE_TABLE[-1]
    for checkpoint, values in AGE_TABLE:
        if checkpoint <= dog_years:
            lower_age, lower_values = checkpoint, values
        if checkpoint >= dog_years:
            upper_age, upper_values = checkpoint, values
            break

    if dog_years == lower_age:
        return lower_values[column]

    x1, y1 = Fraction(lower_age), Fraction(lower_values[column])
    x2, y2 = Fraction(upper_age), Fraction(upper_values[column])

    if x1 == x2:
        return lower_values[column]

    interpolated = y1 + (dog_years - x1) * (y2 - y1) / (x2 - x1)
    return round_half_up(interpolated)
