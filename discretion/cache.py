"""Process-wide secret cache and the resolution request path."""
from __future__ import annotations

import dataclasses
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Iterable

from .errors import ResolutionError
from .events import EventQueue, ResolutionFinished, ResolutionStarted
from .models import SecretRecord
from .providers import SecretResolver

logger = logging.getLogger(__name__)


class SecretCache:
    """Maps secret identifiers to records and resolves their values.

    - `replace()` swaps the whole mapping; nothing is merged.
    - Records are immutable and replaced whole under the lock, so readers
      never observe a half-updated record.
    - Each `replace()` bumps a generation. A resolution that started before
      the swap does not write its value into the new mapping.
    - Two requests for the same identifier fetch independently; the last one
      to complete wins.
    """

    def __init__(
        self,
        resolver: SecretResolver,
        *,
        events: EventQueue | None = None,
        executor: ThreadPoolExecutor | None = None,
        max_workers: int = 4,
    ):
        self._resolver = resolver
        self._events = events
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="discretion-resolve",
        )
        self._lock = threading.Lock()
        self._records: dict[str, SecretRecord] = {}
        self._generation = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __contains__(self, identifier: object) -> bool:
        with self._lock:
            return identifier in self._records

    def replace(self, records: Iterable[SecretRecord]) -> None:
        fresh = {record.identifier: record for record in records}
        with self._lock:
            self._records = fresh
            self._generation += 1
        logger.debug("Secret cache replaced (%d records)", len(fresh))

    def get(self, identifier: str) -> SecretRecord | None:
        with self._lock:
            return self._records.get(identifier)

    def records(self) -> list[SecretRecord]:
        with self._lock:
            return list(self._records.values())

    def resolve(self, identifier: str) -> tuple[str, bool]:
        """Fetch a secret value from the backend.

        Returns `(value, found)`. `found` is False only when the identifier is
        unknown, in which case the backend is not called. A backend failure
        yields `("", True)` and is reported through the event queue.
        """
        with self._lock:
            record = self._records.get(identifier)
            generation = self._generation

        if record is None:
            logger.info("Resolve requested for unknown secret %s", identifier)
            self._post(ResolutionFinished(identifier=identifier, name="", value="", found=False))
            return "", False

        self._post(ResolutionStarted(identifier=identifier, name=record.name))

        error: str | None = None
        try:
            value = self._resolver.resolve(record.vault_url, record.name, record.version)
        except ResolutionError as e:
            logger.warning("Resolution failed for %s/%s: %s", record.vault_name, record.name, e)
            value, error = "", str(e)
        except Exception as e:
            logger.exception("Unexpected resolver failure for %s/%s", record.vault_name, record.name)
            value, error = "", str(e) or e.__class__.__name__

        self._store(identifier, generation, value)
        self._post(
            ResolutionFinished(
                identifier=identifier,
                name=record.name,
                value=value,
                found=True,
                error=error,
            )
        )
        return value, True

    def resolve_async(self, identifier: str) -> Future:
        """Run `resolve` on the background executor."""
        return self._executor.submit(self.resolve, identifier)

    def shutdown(self) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=False, cancel_futures=True)

    def _store(self, identifier: str, generation: int, value: str) -> None:
        with self._lock:
            if generation != self._generation:
                logger.debug("Dropping stale resolution for %s", identifier)
                return
            current = self._records.get(identifier)
            if current is None:
                return
            self._records[identifier] = dataclasses.replace(current, resolved_value=value)

    def _post(self, event) -> None:
        if self._events is not None:
            self._events.post(event)
