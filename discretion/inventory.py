"""Walk a metadata provider into an immutable inventory snapshot."""
from __future__ import annotations

import logging

from .errors import EnumerationError
from .models import Inventory, SecretRecord
from .providers import MetadataProvider

logger = logging.getLogger(__name__)


def collect_inventory(provider: MetadataProvider, *, include_disabled: bool = True) -> Inventory:
    """Enumerate every vault and its secrets.

    A vault whose listing fails is kept in the vault list but contributes no
    secrets; its name is recorded in `Inventory.skipped`.
    """
    vaults = tuple(provider.list_containers())
    secrets: list[SecretRecord] = []
    skipped: list[str] = []

    for vault in vaults:
        try:
            listing = provider.list_secrets(vault)
        except EnumerationError as e:
            logger.warning("Skipping vault %s: %s", vault.name, e)
            skipped.append(vault.name)
            continue

        for secret in listing:
            if not secret.enabled and not include_disabled:
                continue
            secrets.append(SecretRecord.from_listing(vault, secret))

    logger.info(
        "Inventory collected: %d vaults, %d secrets, %d skipped",
        len(vaults),
        len(secrets),
        len(skipped),
    )
    return Inventory(vaults=vaults, secrets=tuple(secrets), skipped=tuple(skipped))
