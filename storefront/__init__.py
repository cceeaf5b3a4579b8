"""Product showcase storefront."""

__version__ = "0.1.0"
