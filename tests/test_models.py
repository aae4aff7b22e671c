from __future__ import annotations

from discretion.models import (
    Column,
    Dataset,
    Row,
    ViewType,
    resource_group_from_id,
    secret_identifier,
)


def test_view_type_names_and_toggle():
    assert str(ViewType.VAULTS) == "vaults"
    assert str(ViewType.SECRETS) == "secrets"
    assert ViewType.VAULTS.other() is ViewType.SECRETS
    assert ViewType.SECRETS.other() is ViewType.VAULTS


def test_resource_group_from_arm_id():
    rid = "/subscriptions/0000/resourceGroups/rg-core/providers/Microsoft.KeyVault/vaults/kv-platform"
    assert resource_group_from_id(rid) == "rg-core"
    assert resource_group_from_id("/subscriptions/0000/resourcegroups/rg-lower/providers/x") == "rg-lower"
    assert resource_group_from_id("") == ""
    assert resource_group_from_id("/subscriptions/0000") == ""


def test_secret_identifier():
    assert secret_identifier("https://kv.vault.azure.net/", "db", "abc") == "https://kv.vault.azure.net/secrets/db/abc"
    assert secret_identifier("https://kv.vault.azure.net", "db", "") == "https://kv.vault.azure.net/secrets/db"


def test_row_text_joins_all_fields():
    row = Row(("kv-payments", "westeurope", "rg-shared", "sub-1"), key="https://kv-payments.vault.azure.net")
    assert row.text() == "kv-payments westeurope rg-shared sub-1"
    assert len(row) == 4
    assert row[0] == "kv-payments"


def test_dataset_window_and_with_rows():
    columns = (Column("Name"),)
    ds = Dataset(rows=tuple(Row((str(i),)) for i in range(5)), columns=columns)
    assert [r[0] for r in ds.window(1, 3)] == ["1", "2"]
    assert Dataset().window(0, 10) == ()

    narrowed = ds.with_rows(ds.rows[:2])
    assert narrowed.columns == columns
    assert len(narrowed) == 2
    assert len(ds) == 5
