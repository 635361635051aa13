"""Errors raised while converting a dog's age."""


class PetAgeError(ValueError):
    """Base class for dog age calculator errors"""


class InvalidDateError(PetAgeError):
    """Birth date does not parse to a real calendar date"""


class MissingBirthDateError(PetAgeError):
    """No birth date was entered"""


class FutureDateError(PetAgeError):
    """Birth date lies after the reference date"""


class InvalidCategoryError(PetAgeError):
    """Size category is not one of small, medium or large"""
