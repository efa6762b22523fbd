"""Annotate QuickSight datasets with Redshift column comments."""

__version__ = "0.1.0"
