"""Exception types raised across the catering engine."""


class CateringError(Exception):
    """Base class for engine errors."""


class UnknownCategoryError(CateringError, ValueError):
    """Raised when a category key is not in the canonical mapping table."""


class CatalogError(CateringError):
    """Raised by catalog sources when a category cannot be read."""


class UnknownPackageError(CateringError, KeyError):
    """Raised when a package id is not found."""
