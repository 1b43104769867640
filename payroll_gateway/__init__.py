"""Payroll calculator gateway: state tax rates and payroll arithmetic"""

__version__ = "0.1.0"
