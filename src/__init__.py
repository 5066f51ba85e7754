"""values-guard — conditional requirement checks for Helm chart values."""

__version__ = "0.1.0"
