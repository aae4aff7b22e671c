"""discretion: terminal browser for Azure Key Vault secrets."""

__version__ = "0.3.0"
