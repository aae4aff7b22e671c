"""Interfaces the navigation core needs from the outside world."""
from __future__ import annotations

import logging
from typing import Protocol, Sequence

import pyperclip

from .errors import ClipboardError
from .models import SecretInfo, VaultInfo

logger = logging.getLogger(__name__)


class MetadataProvider(Protocol):
    """Supplies vault and secret metadata."""

    def list_containers(self) -> Sequence[VaultInfo]:
        ...

    def list_secrets(self, container: VaultInfo) -> Sequence[SecretInfo]:
        """List the secrets of one vault.

        May raise `EnumerationError`; the caller skips that vault.
        """
        ...


class SecretResolver(Protocol):
    """Fetches secret values."""

    def resolve(self, vault_url: str, name: str, version: str) -> str:
        """Return the secret value or raise `ResolutionError`."""
        ...


class ClipboardSink(Protocol):
    def write(self, text: str) -> None:
        ...


class PyperclipSink:
    """Clipboard sink backed by pyperclip."""

    def write(self, text: str) -> None:
        try:
            pyperclip.copy(text)
        except pyperclip.PyperclipException as e:
            # No clipboard mechanism on this host (headless, no xclip/xsel).
            logger.warning("Clipboard write failed: %s", e)
            raise ClipboardError(str(e)) from e
