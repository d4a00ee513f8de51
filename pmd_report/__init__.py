"""PMD/CPD report formatting and violation checking."""

__version__ = "0.1.0"
