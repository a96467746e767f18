"""Trade execution reconciliation against symbol reference data and fills."""

__version__ = "0.1.0"
