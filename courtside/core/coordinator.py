"""
Courtside — Staged Bulk Mutation Coordinator.

Captains edit the availability grid locally (single cells, whole member
rows, whole occurrence columns) and then commit everything at once.

The record store offers no multi-row transactions, so a commit is
best-effort: every staged entry is applied on its own, failures are
collected into a CommitReport, and nothing already applied is rolled back.
Entries that succeed leave the staged set; entries that fail stay staged so
the caller can retry or discard them.

Per entry:
    Staged -> Committed   (removed from the staged set)
    Staged -> Failed      (kept, with the failure reason)
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Final

from courtside.core.defaults import default_status
from courtside.core.errors import NotFoundError, PermissionDeniedError, ValidationError
from courtside.data.models import UNSET, AvailabilityStatus
from courtside.data.records import foreign_key_for
from courtside.ports.record_store import ConflictError, Eq, StoreError

if TYPE_CHECKING:
    from courtside.core.aggregator import AvailabilityView
    from courtside.ports.identity_port import IdentityPort
    from courtside.ports.record_store import RecordStore

logger = logging.getLogger(__name__)

# Staged target meaning "delete the record".
CLEAR: Final = "clear"

_TABLE = "availability"


class EntryState(Enum):
    STAGED = "staged"
    COMMITTED = "committed"
    FAILED = "failed"


class FailureKind(Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    STORE = "store"


@dataclass
class StagedChange:
    member_id: str
    occurrence_key: str
    target: str                      # a status value or CLEAR
    state: EntryState = EntryState.STAGED
    last_error: str | None = None

    @property
    def key(self) -> tuple[str, str]:
        return (self.member_id, self.occurrence_key)


@dataclass
class CommitFailure:
    member_id: str
    occurrence_key: str
    reason: str
    kind: FailureKind


@dataclass
class CommitReport:
    succeeded_count: int = 0
    failures: list[CommitFailure] = field(default_factory=list)
    skipped: int = 0                 # not attempted because of cancellation
    cancelled: bool = False

    @property
    def ok(self) -> bool:
        return not self.failures and not self.skipped


def _target_value(target: AvailabilityStatus | str) -> str:
    if isinstance(target, AvailabilityStatus):
        return target.value
    return str(target)


class StagedBulkMutationCoordinator:
    """Stages availability edits for one team's view and commits them.

    Args:
        store: Record store the edits are written to.
        identity: Acting identity; must be captain or co-captain of the
            view's team to stage or commit.
        view: Current AvailabilityView (the working set). Replace it with
            use_view() after reloading.
        concurrency: Max entries applied at once; defaults to
            settings.COMMIT_CONCURRENCY.
    """

    def __init__(
        self,
        store: RecordStore,
        identity: IdentityPort,
        view: AvailabilityView,
        concurrency: int | None = None,
    ) -> None:
        if concurrency is None:
            from courtside.config import settings
            concurrency = settings.COMMIT_CONCURRENCY
        self._store = store
        self._identity = identity
        self._view = view
        self._concurrency = max(1, concurrency)
        self._staged: dict[tuple[str, str], StagedChange] = {}

    # ------------------------------------------------------------------
    # Working set
    # ------------------------------------------------------------------

    @property
    def view(self) -> AvailabilityView:
        return self._view

    def use_view(self, view: AvailabilityView) -> None:
        """Swap in a freshly built view; staged entries are kept."""
        self._view = view

    @property
    def pending(self) -> list[StagedChange]:
        return list(self._staged.values())

    def get(self, member_id: str, occurrence_key: str) -> StagedChange | None:
        return self._staged.get((member_id, occurrence_key))

    async def _require_permission(self) -> None:
        team_id = self._view.team_id
        if not team_id or not await self._identity.can_edit_team(team_id):
            raise PermissionDeniedError(
                f"User {self._identity.acting_user_id!r} may not edit "
                f"availability for team {team_id!r}"
            )

    # ------------------------------------------------------------------
    # Staging
    # ------------------------------------------------------------------

    async def stage(
        self,
        member_id: str,
        occurrence_key: str,
        target: AvailabilityStatus | str,
    ) -> StagedChange:
        """Stage one cell. The target is validated at commit time."""
        await self._require_permission()
        return self._put(member_id, occurrence_key, target)

    def _put(
        self, member_id: str, occurrence_key: str, target: AvailabilityStatus | str
    ) -> StagedChange:
        change = StagedChange(member_id, occurrence_key, _target_value(target))
        self._staged[change.key] = change
        return change

    async def stage_row(
        self,
        member_id: str,
        target: AvailabilityStatus | str,
        occurrence_keys: list[str] | None = None,
    ) -> int:
        """Stage the same target for a member across occurrences.

        Defaults to every occurrence in the view. Returns how many cells
        were staged.
        """
        await self._require_permission()
        if occurrence_keys is None:
            occurrence_keys = [o.key for o in self._view.occurrences]
        for occurrence_key in occurrence_keys:
            self._put(member_id, occurrence_key, target)
        return len(occurrence_keys)

    async def stage_column(
        self,
        occurrence_key: str,
        target: AvailabilityStatus | str,
        member_ids: list[str] | None = None,
    ) -> int:
        """Stage the same target for every member (or the given ones)."""
        await self._require_permission()
        if member_ids is None:
            member_ids = [m.id for m in self._view.members]
        for member_id in member_ids:
            self._put(member_id, occurrence_key, target)
        return len(member_ids)

    async def stage_defaults(
        self, member_id: str, weekly_defaults: dict[str, list[str]] | None
    ) -> int:
        """Pre-fill a member's unset, unstaged cells from their weekly template."""
        await self._require_permission()
        count = 0
        for o in self._view.occurrences:
            if self._view.status(member_id, o.key) != UNSET:
                continue
            if (member_id, o.key) in self._staged:
                continue
            self._put(member_id, o.key, default_status(o, weekly_defaults))
            count += 1
        return count

    def unstage(self, member_id: str, occurrence_key: str) -> bool:
        return self._staged.pop((member_id, occurrence_key), None) is not None

    def discard(self) -> int:
        """Drop every staged entry; returns how many there were."""
        count = len(self._staged)
        self._staged.clear()
        return count

    # ------------------------------------------------------------------
    # Commit
    # ------------------------------------------------------------------

    async def commit(self, cancel: asyncio.Event | None = None) -> CommitReport:
        """Apply every staged entry, best-effort.

        Args:
            cancel: When set, entries not yet started are left staged and
                counted as skipped. Entries already applied stay applied.

        Raises:
            PermissionDeniedError: Before any entry is attempted.
        """
        await self._require_permission()

        report = CommitReport()
        entries = list(self._staged.values())
        if not entries:
            return report

        semaphore = asyncio.Semaphore(self._concurrency)

        async def run(change: StagedChange) -> None:
            async with semaphore:
                if cancel is not None and cancel.is_set():
                    report.skipped += 1
                    return
                await self._commit_entry(change, report)

        await asyncio.gather(*(run(change) for change in entries))
        report.cancelled = report.skipped > 0

        logger.info(
            "Commit for team %s: %d succeeded, %d failed, %d skipped",
            self._view.team_id, report.succeeded_count,
            len(report.failures), report.skipped,
        )
        return report

    async def _commit_entry(self, change: StagedChange, report: CommitReport) -> None:
        try:
            await self._apply(change)
        except ValidationError as exc:
            kind = FailureKind.VALIDATION
            reason = str(exc)
        except NotFoundError as exc:
            kind = FailureKind.NOT_FOUND
            reason = str(exc)
        except StoreError as exc:
            kind = FailureKind.STORE
            reason = str(exc)
        except Exception as exc:
            kind = FailureKind.STORE
            reason = f"{type(exc).__name__}: {exc}"
            logger.error(
                "Unexpected error applying %s/%s: %s",
                change.member_id, change.occurrence_key, reason,
            )
        else:
            change.state = EntryState.COMMITTED
            change.last_error = None
            report.succeeded_count += 1
            # Only drop it if it was not re-staged while we were writing.
            if self._staged.get(change.key) is change:
                del self._staged[change.key]
            return

        change.state = EntryState.FAILED
        change.last_error = reason
        report.failures.append(
            CommitFailure(change.member_id, change.occurrence_key, reason, kind)
        )
        logger.warning(
            "Staged change %s/%s -> %s failed (%s): %s",
            change.member_id, change.occurrence_key, change.target,
            kind.value, reason,
        )

    async def _apply(self, change: StagedChange) -> None:
        status: AvailabilityStatus | None = None
        if change.target != CLEAR:
            try:
                status = AvailabilityStatus(change.target)
            except ValueError:
                raise ValidationError(
                    f"Invalid availability status: {change.target!r}"
                ) from None

        if self._view.member(change.member_id) is None:
            raise NotFoundError(f"Member {change.member_id} is not in the roster")
        occurrence = self._view.occurrence(change.occurrence_key)
        if occurrence is None:
            raise NotFoundError(f"Occurrence {change.occurrence_key} is not in view")

        fk = foreign_key_for(occurrence.kind)
        where = [Eq("roster_member_id", change.member_id), Eq(fk, occurrence.id)]

        if status is None:
            await self._store.delete(_TABLE, where)
            return

        # Existing-record lookup always goes to the store, not the view.
        existing = await self._store.select_one(_TABLE, where)
        if existing is not None:
            await self._store.update(_TABLE, existing["id"], {"status": status.value})
            return

        try:
            await self._store.insert(
                _TABLE,
                {
                    "roster_member_id": change.member_id,
                    fk: occurrence.id,
                    "status": status.value,
                },
            )
        except ConflictError:
            # Someone inserted the same cell concurrently; update theirs.
            logger.info(
                "Insert conflict for %s/%s, retrying as update",
                change.member_id, change.occurrence_key,
            )
            existing = await self._store.select_one(_TABLE, where)
            if existing is None:
                raise StoreError(
                    "Insert conflicted but no existing record was found"
                ) from None
            await self._store.update(_TABLE, existing["id"], {"status": status.value})
