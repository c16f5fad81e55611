"""Veterinary blood donor registry: donor records, eligibility and spreadsheet ingestion."""

__version__ = "0.1.0"
