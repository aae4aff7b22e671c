"""Azure Key Vault adapters for the metadata and resolution interfaces.

Authentication reuses the Azure CLI login (`az login`); nothing here
prompts for credentials.
"""
from __future__ import annotations

import logging
import threading

from azure.core.exceptions import AzureError, ClientAuthenticationError, HttpResponseError
from azure.identity import AzureCliCredential, CredentialUnavailableError
from azure.keyvault.secrets import SecretClient
from azure.mgmt.keyvault import KeyVaultManagementClient
from azure.mgmt.subscription import SubscriptionClient

from .errors import ConfigurationError, EnumerationError, ResolutionError
from .models import SecretInfo, VaultInfo, resource_group_from_id, secret_identifier

logger = logging.getLogger(__name__)

MANAGEMENT_SCOPE = "https://management.azure.com/.default"


def vault_from_resource(subscription: str, resource) -> VaultInfo:
    """Build a VaultInfo from a management-plane vault resource."""
    properties = getattr(resource, "properties", None)
    url = getattr(properties, "vault_uri", None) or f"https://{resource.name}.vault.azure.net"
    resource_id = resource.id or ""
    return VaultInfo(
        name=resource.name,
        url=url.rstrip("/"),
        region=resource.location or "",
        resource_group=resource_group_from_id(resource_id),
        subscription=subscription,
        id=resource_id,
    )


def build_credential() -> AzureCliCredential:
    """Return the Azure CLI credential, failing early if there is no login."""
    credential = AzureCliCredential()
    try:
        credential.get_token(MANAGEMENT_SCOPE)
    except (CredentialUnavailableError, ClientAuthenticationError) as e:
        raise ConfigurationError(f"Azure CLI credential unavailable: {e}") from e
    return credential


class AzureMetadataProvider:
    """Lists vaults through the management plane and secrets through each vault."""

    def __init__(self, credential, subscriptions: list[str] | None = None, *, timeout: float = 15.0):
        self.credential = credential
        self.timeout = timeout
        self._subscriptions = list(subscriptions or [])

    def subscription_ids(self) -> list[str]:
        if self._subscriptions:
            return list(self._subscriptions)
        client = SubscriptionClient(self.credential)
        try:
            ids = [s.subscription_id for s in client.subscriptions.list() if s.subscription_id]
        except ClientAuthenticationError as e:
            raise ConfigurationError(f"Could not list subscriptions: {e}") from e
        if not ids:
            raise ConfigurationError("The signed-in account has no subscriptions")
        return ids

    def list_containers(self) -> list[VaultInfo]:
        vaults: list[VaultInfo] = []
        for subscription in self.subscription_ids():
            client = KeyVaultManagementClient(self.credential, subscription)
            try:
                for resource in client.vaults.list_by_subscription():
                    vaults.append(vault_from_resource(subscription, resource))
            except HttpResponseError as e:
                # One unreadable subscription shouldn't hide the others.
                logger.warning("Skipping subscription %s: %s", subscription, e.message)
        logger.info("Found %d vaults", len(vaults))
        return vaults

    def list_secrets(self, container: VaultInfo) -> list[SecretInfo]:
        client = SecretClient(
            container.url,
            self.credential,
            connection_timeout=self.timeout,
            read_timeout=self.timeout,
        )
        secrets: list[SecretInfo] = []
        try:
            for props in client.list_properties_of_secrets():
                secrets.append(
                    SecretInfo(
                        name=props.name,
                        version=props.version or "",
                        enabled=bool(props.enabled),
                    )
                )
        except HttpResponseError as e:
            if e.status_code == 403:
                # No list permission on this vault; keep whatever pages we got.
                logger.info("Listing %s stopped: forbidden", container.name)
                return secrets
            raise EnumerationError(container.name, e.message) from e
        except AzureError as e:
            raise EnumerationError(container.name, e) from e
        return secrets


class AzureSecretResolver:
    """Fetches secret values, reusing one SecretClient per vault."""

    def __init__(self, credential, *, timeout: float = 15.0):
        self.credential = credential
        self.timeout = timeout
        self._clients: dict[str, SecretClient] = {}
        self._lock = threading.Lock()

    def _client(self, vault_url: str) -> SecretClient:
        with self._lock:
            client = self._clients.get(vault_url)
            if client is None:
                client = SecretClient(
                    vault_url,
                    self.credential,
                    connection_timeout=self.timeout,
                    read_timeout=self.timeout,
                )
                self._clients[vault_url] = client
            return client

    def resolve(self, vault_url: str, name: str, version: str) -> str:
        try:
            secret = self._client(vault_url).get_secret(name, version or None)
        except AzureError as e:
            raise ResolutionError(secret_identifier(vault_url, name, version), e) from e
        return secret.value or ""


def connect(settings) -> tuple[AzureMetadataProvider, AzureSecretResolver]:
    """Build the Azure provider and resolver from settings."""
    credential = build_credential()
    timeout = float(settings.DISCRETION_RESOLVE_TIMEOUT)
    provider = AzureMetadataProvider(credential, settings.subscription_ids(), timeout=timeout)
    resolver = AzureSecretResolver(credential, timeout=timeout)
    return provider, resolver
