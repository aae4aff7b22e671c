"""The two table datasets and their column schemas."""
from __future__ import annotations

from typing import Iterable

from ..models import Column, Dataset, Inventory, Row, SecretRecord, VaultInfo, ViewType


def vault_columns(width: int = 20) -> tuple[Column, ...]:
    return (
        Column("Name", width),
        Column("Region", width),
        Column("Resource Group", width),
    )


def secret_columns(width: int = 20) -> tuple[Column, ...]:
    return (
        Column("Vault", width),
        Column("Name", width),
    )


def vault_rows(vaults: Iterable[VaultInfo]) -> tuple[Row, ...]:
    # Subscription isn't displayed but stays matchable by the filter.
    return tuple(
        Row(values=(v.name, v.region, v.resource_group, v.subscription), key=v.url)
        for v in vaults
    )


def secret_rows(records: Iterable[SecretRecord]) -> tuple[Row, ...]:
    ordered = sorted(records, key=lambda r: (r.vault_name.lower(), r.name.lower(), r.version))
    return tuple(Row(values=(r.vault_name, r.name), key=r.identifier) for r in ordered)


class ViewModel:
    """Holds one dataset per view. Datasets are immutable and swapped whole."""

    def __init__(self, column_width: int = 20):
        self._datasets: dict[ViewType, Dataset] = {
            ViewType.VAULTS: Dataset(columns=vault_columns(column_width)),
            ViewType.SECRETS: Dataset(columns=secret_columns(column_width)),
        }

    def dataset(self, view: ViewType) -> Dataset:
        return self._datasets[view]

    def columns(self, view: ViewType) -> tuple[Column, ...]:
        return self._datasets[view].columns

    def set_dataset(self, view: ViewType, dataset: Dataset) -> None:
        self._datasets[view] = dataset

    def set_rows(self, view: ViewType, rows: Iterable[Row]) -> None:
        self._datasets[view] = self._datasets[view].with_rows(rows)

    def load(self, inventory: Inventory) -> None:
        """Rebuild both datasets from an inventory snapshot."""
        self.set_rows(ViewType.VAULTS, vault_rows(inventory.vaults))
        self.set_rows(ViewType.SECRETS, secret_rows(inventory.secrets))
