"""Local patient record keeping: patients, case histories and examination reports."""

__version__ = "1.0.0"
