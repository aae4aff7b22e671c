"""Domain models for vaults, secrets and the table datasets built from them."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ViewType(Enum):
    """Which logical table is on screen."""

    VAULTS = "vaults"
    SECRETS = "secrets"

    def __str__(self) -> str:
        return self.value

    def other(self) -> ViewType:
        return ViewType.SECRETS if self is ViewType.VAULTS else ViewType.VAULTS


@dataclass(frozen=True)
class Column:
    title: str
    width: int = 20


@dataclass(frozen=True)
class Row:
    """One table row.

    `values` are the display strings, one per field. `key` is the stable
    backing key used to act on the row (secret identifier, vault URL); it is
    never shown and never matched against.
    """

    values: tuple[str, ...]
    key: str = ""

    def text(self) -> str:
        """Space-joined field text used for fuzzy matching."""
        return " ".join(self.values)

    def __len__(self) -> int:
        return len(self.values)

    def __getitem__(self, index: int) -> str:
        return self.values[index]


@dataclass(frozen=True)
class Dataset:
    """Ordered rows backing one view, plus the column schema."""

    rows: tuple[Row, ...] = ()
    columns: tuple[Column, ...] = ()

    def __len__(self) -> int:
        return len(self.rows)

    def __getitem__(self, index: int) -> Row:
        return self.rows[index]

    def __iter__(self):
        return iter(self.rows)

    def with_rows(self, rows) -> Dataset:
        return Dataset(rows=tuple(rows), columns=self.columns)

    def window(self, start: int, end: int) -> tuple[Row, ...]:
        if not self.rows:
            return ()
        return self.rows[start:end]


@dataclass(frozen=True)
class VaultInfo:
    """A Key Vault as reported by the management plane."""

    name: str
    url: str
    region: str = ""
    resource_group: str = ""
    subscription: str = ""
    id: str = ""


@dataclass(frozen=True)
class SecretInfo:
    """Listing metadata for one secret (no value)."""

    name: str
    version: str
    enabled: bool = True


@dataclass(frozen=True)
class SecretRecord:
    """A secret known to the cache.

    Records are immutable; resolving a value produces a new record that
    replaces the old one under the cache lock.
    """

    vault_name: str
    vault_url: str
    name: str
    version: str
    identifier: str
    enabled: bool = True
    resolved_value: str = ""

    @classmethod
    def from_listing(cls, vault: VaultInfo, secret: SecretInfo) -> SecretRecord:
        return cls(
            vault_name=vault.name,
            vault_url=vault.url,
            name=secret.name,
            version=secret.version,
            identifier=secret_identifier(vault.url, secret.name, secret.version),
            enabled=secret.enabled,
        )


@dataclass(frozen=True)
class Inventory:
    """Snapshot of one enumeration pass."""

    vaults: tuple[VaultInfo, ...] = ()
    secrets: tuple[SecretRecord, ...] = ()
    skipped: tuple[str, ...] = field(default=())


def secret_identifier(vault_url: str, name: str, version: str) -> str:
    """Versioned secret URL, unique per vault/name/version and stable across refreshes."""
    base = vault_url.rstrip("/")
    if version:
        return f"{base}/secrets/{name}/{version}"
    return f"{base}/secrets/{name}"


def resource_group_from_id(resource_id: str) -> str:
    """Extract the resource group from an ARM id.

    `/subscriptions/<sub>/resourceGroups/<rg>/providers/...` -> `<rg>`
    """
    parts = resource_id.split("/")
    for i, part in enumerate(parts[:-1]):
        if part.lower() == "resourcegroups":
            return parts[i + 1]
    return ""
