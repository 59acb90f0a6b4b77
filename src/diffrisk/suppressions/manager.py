"""Suppression commands and per-run resolution over local and global stores."""

from __future__ import annotations

import getpass
import hashlib
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

from diffrisk.constants.suppressions import SECURITY_DEFAULT_EXPIRY_DAYS
from diffrisk.exceptions import SuppressionError
from diffrisk.io import canonical_json
from diffrisk.model import Signal, SuppressedSignal, SuppressionEntry, SuppressionMatch
from diffrisk.suppressions.resolver import (
    canonical_key,
    is_security_signal,
    normalize_glob,
    parse_duration,
    resolve,
)
from diffrisk.suppressions.store import SuppressionStore, entries_to_payload
from diffrisk.types import SuppressionScope, SuppressionStats
from diffrisk.utils.globs import glob_error

logger = logging.getLogger(__name__)


def _current_user() -> str:
    try:
        return getpass.getuser()
    except (OSError, KeyError):
        return "unknown"


def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class SuppressionListing:
    local: tuple[SuppressionEntry, ...]
    global_: tuple[SuppressionEntry, ...]
    expired_local: tuple[SuppressionEntry, ...]
    expired_global: tuple[SuppressionEntry, ...]


@dataclass(frozen=True)
class SuppressionSet:
    """Entries loaded once for a run; resolution over it is pure."""

    local: tuple[SuppressionEntry, ...] = ()
    global_: tuple[SuppressionEntry, ...] = ()
    warnings: tuple[str, ...] = field(default=())

    def resolve(self, signal_id: str, path: str, now: datetime) -> SuppressionMatch | None:
        return resolve(signal_id, path, local=list(self.local), global_=list(self.global_), now=now)

    def apply(
        self,
        path: str,
        signals: list[Signal] | tuple[Signal, ...],
        now: datetime,
    ) -> tuple[tuple[Signal, ...], tuple[SuppressedSignal, ...]]:
        """Split ``signals`` into kept and suppressed, preserving order."""
        kept: list[Signal] = []
        suppressed: list[SuppressedSignal] = []
        for signal in signals:
            match = self.resolve(signal.id, path, now)
            if match is None:
                kept.append(signal)
                continue
            suppressed.append(
                SuppressedSignal(
                    signal_id=signal.id,
                    scope=match.scope,
                    matched_pattern=match.entry.signal_id,
                    file_glob=match.entry.file_glob,
                    reason=match.entry.reason,
                )
            )
        return tuple(kept), tuple(suppressed)

    def stats(self, kept: tuple[Signal, ...], suppressed: tuple[SuppressedSignal, ...]) -> SuppressionStats:
        """Counters for one :meth:`apply` call, split by winning scope."""
        local = sum(1 for item in suppressed if item.scope == "local")
        return {
            "total": len(kept) + len(suppressed),
            "suppressed": len(suppressed),
            "local": local,
            "global_": len(suppressed) - local,
        }

    def content_hash(self) -> str:
        """Stable digest of both scopes, used in cache keys."""
        payload = {
            "local": entries_to_payload(list(self.local)),
            "global": entries_to_payload(list(self.global_)),
        }
        return hashlib.sha256(canonical_json(payload).encode("utf-8")).hexdigest()[:16]


class SuppressionManager:
    """Add, remove, list and clean suppressions across two stores."""

    def __init__(
        self,
        local_store: SuppressionStore,
        global_store: SuppressionStore,
        *,
        clock: Callable[[], datetime] = _utc_now,
        user: str | None = None,
    ) -> None:
        self._stores: dict[SuppressionScope, SuppressionStore] = {
            "local": local_store,
            "global": global_store,
        }
        self._clock = clock
        self._user = user

    def store(self, scope: SuppressionScope) -> SuppressionStore:
        if scope not in self._stores:
            raise SuppressionError(f"Unknown suppression scope {scope!r}")
        return self._stores[scope]

    def _load_for_write(self, scope: SuppressionScope) -> tuple[SuppressionStore, list[SuppressionEntry]]:
        store = self.store(scope)
        entries = store.load()
        if store.warnings:
            raise SuppressionError(f"Refusing to rewrite {scope} suppression store: {store.warnings[0]}")
        return store, entries

    def load(self) -> SuppressionSet:
        local = self._stores["local"].load()
        global_ = self._stores["global"].load()
        warnings = (*self._stores["local"].warnings, *self._stores["global"].warnings)
        return SuppressionSet(local=tuple(local), global_=tuple(global_), warnings=tuple(warnings))

    def add(
        self,
        signal_id: str,
        *,
        scope: SuppressionScope = "local",
        file_glob: str | None = None,
        reason: str | None = None,
        expires_in: str | None = None,
        force: bool = False,
    ) -> SuppressionEntry:
        """Create an entry, replacing a same-key entry only when ``force`` is set."""
        signal_id = signal_id.strip()
        if not signal_id:
            raise SuppressionError("Suppression signal id must not be empty")
        reason = reason.strip() if reason else None
        file_glob = normalize_glob(file_glob) or None
        glob_problem = glob_error(file_glob) if file_glob else None
        if glob_problem is not None:
            raise SuppressionError(f"Cannot suppress {signal_id!r}: {glob_problem}")
        now = self._clock()

        expires_at: datetime | None = None
        if expires_in:
            expires_at = now + parse_duration(expires_in)

        if is_security_signal(signal_id):
            if not reason:
                raise SuppressionError(f"Suppressing security signal {signal_id!r} requires a reason")
            if expires_at is None:
                expires_at = now + timedelta(days=SECURITY_DEFAULT_EXPIRY_DAYS)

        entry = SuppressionEntry(
            signal_id=signal_id,
            created_at=now,
            file_glob=file_glob,
            reason=reason,
            expires_at=expires_at,
            created_by=self._user or _current_user(),
        )

        store, entries = self._load_for_write(scope)
        key = canonical_key(signal_id, file_glob)
        existing = [index for index, item in enumerate(entries) if canonical_key(item.signal_id, item.file_glob) == key]
        if existing and not force:
            raise SuppressionError(
                f"A {scope} suppression for {signal_id!r}"
                f"{' on ' + entry.file_glob if entry.file_glob else ''} already exists (use --force to replace)"
            )
        for index in reversed(existing):
            del entries[index]
        entries.append(entry)
        store.save(entries)
        logger.info("Added %s suppression %s", scope, key)
        return entry

    def remove(
        self,
        signal_id: str,
        *,
        scope: SuppressionScope = "local",
        file_glob: str | None = None,
    ) -> SuppressionEntry:
        store, entries = self._load_for_write(scope)
        key = canonical_key(signal_id, file_glob)
        for index, entry in enumerate(entries):
            if canonical_key(entry.signal_id, entry.file_glob) == key:
                del entries[index]
                store.save(entries)
                return entry
        raise SuppressionError(f"No {scope} suppression found for {signal_id!r}")

    def list_entries(self) -> SuppressionListing:
        now = self._clock()
        local = self._stores["local"].load()
        global_ = self._stores["global"].load()
        return SuppressionListing(
            local=tuple(entry for entry in local if not entry.is_expired(now)),
            global_=tuple(entry for entry in global_ if not entry.is_expired(now)),
            expired_local=tuple(entry for entry in local if entry.is_expired(now)),
            expired_global=tuple(entry for entry in global_ if entry.is_expired(now)),
        )

    def clean(self) -> int:
        """Delete expired entries from both stores; returns the number removed."""
        now = self._clock()
        removed = 0
        for scope, store in self._stores.items():
            entries = store.load()
            active = [entry for entry in entries if not entry.is_expired(now)]
            if len(active) != len(entries):
                removed += len(entries) - len(active)
                store.save(active)
                logger.info("Removed %d expired %s suppression(s)", len(entries) - len(active), scope)
        return removed
