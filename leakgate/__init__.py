"""leakgate: pre-release leak gate for PowerShell script repositories."""

__version__ = "0.3.0"
