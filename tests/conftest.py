from __future__ import annotations

import os
import sys
import threading

import pytest


def _ensure_project_root_on_path() -> None:
    # When running via the venv's pytest entrypoint, the CWD is not guaranteed to
    # be on sys.path. Ensure the repository root (containing `discretion/`) is importable.
    project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
    if project_root not in sys.path:
        sys.path.insert(0, project_root)


_ensure_project_root_on_path()

from discretion.errors import EnumerationError, ResolutionError  # noqa: E402
from discretion.models import SecretInfo, VaultInfo  # noqa: E402


class FakeProvider:
    """In-memory MetadataProvider."""

    def __init__(self, vaults, secrets, failing=()):
        self.vaults = list(vaults)
        self.secrets = dict(secrets)
        self.failing = set(failing)
        self.listed: list[str] = []

    def list_containers(self):
        return list(self.vaults)

    def list_secrets(self, container):
        self.listed.append(container.name)
        if container.name in self.failing:
            raise EnumerationError(container.name, "forbidden")
        return list(self.secrets.get(container.name, []))


class FakeResolver:
    """SecretResolver returning `value-of-<name>` unless told otherwise."""

    def __init__(self, values=None, failing=()):
        self.values = dict(values or {})
        self.failing = set(failing)
        self.calls: list[tuple[str, str, str]] = []
        self._lock = threading.Lock()

    def resolve(self, vault_url, name, version):
        with self._lock:
            self.calls.append((vault_url, name, version))
        if name in self.failing:
            raise ResolutionError(f"{vault_url}/secrets/{name}", "403 Forbidden")
        return self.values.get(name, f"value-of-{name}")


class FakeClipboard:
    def __init__(self):
        self.writes: list[str] = []

    def write(self, text):
        self.writes.append(text)


def make_vault(name: str, region: str = "westeurope", rg: str = "rg-shared", sub: str = "sub-1") -> VaultInfo:
    return VaultInfo(
        name=name,
        url=f"https://{name}.vault.azure.net",
        region=region,
        resource_group=rg,
        subscription=sub,
        id=f"/subscriptions/{sub}/resourceGroups/{rg}/providers/Microsoft.KeyVault/vaults/{name}",
    )


@pytest.fixture
def vaults():
    return [make_vault("kv-payments"), make_vault("kv-platform", region="northeurope", rg="rg-core")]


@pytest.fixture
def provider(vaults):
    return FakeProvider(
        vaults,
        {
            "kv-payments": [
                SecretInfo("stripe-api-key", "v1"),
                SecretInfo("db-password", "v3"),
                SecretInfo("old-token", "v1", enabled=False),
            ],
            "kv-platform": [
                SecretInfo("grafana-admin", "v2"),
            ],
        },
    )


@pytest.fixture
def resolver():
    return FakeResolver()


@pytest.fixture
def clipboard():
    return FakeClipboard()
