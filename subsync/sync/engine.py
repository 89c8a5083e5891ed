"""
Diff-based sync engine.

Runs one source through fetch → classify → normalize → load prior →
diff → persist or skip → notify. Nothing is retried here; fatal errors
leave the previous artifact untouched and propagate to the caller.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import Optional

from ..notify.clipboard import Notifier, NullNotifier
from ..source.client import SourceClient, AcquisitionError
from ..source.models import Origin, RawPayload
from ..storage.models import EntrySet
from ..storage.state_store import StateStore, StateStoreError
from .diff import DiffResult, compute_diff
from .encoding import decode_payload
from .normalize import normalize

logger = logging.getLogger(__name__)


class PipelineState(Enum):
    """Stages of a single sync run."""
    IDLE = auto()
    FETCHING = auto()
    CLASSIFYING = auto()
    NORMALIZING = auto()
    LOADING_PRIOR = auto()
    DIFFING = auto()
    DECIDING = auto()
    PERSISTING = auto()
    SKIPPING = auto()
    NOTIFYING = auto()
    DONE = auto()
    FAILED = auto()


class EmptySourceError(Exception):
    """Raised when a source yields no entries but prior state has some."""

    def __init__(self, source: str, prior_count: int):
        super().__init__(
            f"Source returned no entries; refusing to wipe {prior_count} saved "
            f"entries (use --allow-empty to override)"
        )
        self.source = source
        self.prior_count = prior_count


@dataclass
class SyncReport:
    """Outcome of a sync run."""
    source: str
    origin: Optional[Origin] = None
    encoded: bool = False
    diff: DiffResult = field(default_factory=DiffResult)
    entries: EntrySet = field(default_factory=EntrySet)
    persisted: bool = False
    notified: bool = False
    artifact_path: Optional[Path] = None
    state: PipelineState = PipelineState.IDLE

    @property
    def up_to_date(self) -> bool:
        return not self.diff.has_changes

    def __str__(self) -> str:
        return f"Sync {self.state.name.lower()}: {self.source} ({self.diff})"


class SyncEngine:
    """
    Orchestrates synchronization of one subscription source.

    Core principles:
    - Re-running against an unchanged source never rewrites the artifact
    - A failed run never corrupts the previous artifact
    - Notification failures never fail the run

    Usage:
        engine = SyncEngine(
            source_client=client,
            state_store=StateStore(Path("output")),
            notifier=ClipboardNotifier(),
        )

        report = engine.sync("https://example.com/sub")
        print(report)
    """

    def __init__(
        self,
        source_client: SourceClient,
        state_store: StateStore,
        notifier: Optional[Notifier] = None,
        dry_run: bool = False,
        allow_empty: bool = False,
        decode_local_files: bool = False,
    ):
        """
        Initialize sync engine.

        Args:
            source_client: Client used to fetch or read the source
            state_store: Persistent artifact store
            notifier: Called with the saved text after a successful write
            dry_run: If True, compute the diff but write nothing
            allow_empty: If True, an empty source may wipe saved entries
            decode_local_files: If True, local files also go through
                base64 detection
        """
        self.source_client = source_client
        self.state_store = state_store
        self.notifier = notifier or NullNotifier()
        self.dry_run = dry_run
        self.allow_empty = allow_empty
        self.decode_local_files = decode_local_files

        self._state = PipelineState.IDLE

    @property
    def state(self) -> PipelineState:
        """Current pipeline stage."""
        return self._state

    def _transition(self, report: SyncReport, state: PipelineState) -> None:
        logger.debug(f"{self._state.name} -> {state.name}")
        self._state = state
        report.state = state

    def sync(self, source: str) -> SyncReport:
        """
        Execute a full sync of one source.

        Args:
            source: Subscription URL or local file path

        Returns:
            SyncReport describing what happened

        Raises:
            AcquisitionError: If the source cannot be fetched or read
            EmptySourceError: If the source is empty and would wipe saved entries
            StateStoreError: If the artifact cannot be written
        """
        report = SyncReport(source=source)
        self._state = PipelineState.IDLE

        if self.dry_run:
            logger.info("DRY RUN MODE - No changes will be made")

        # Step 1: Acquire
        self._transition(report, PipelineState.FETCHING)
        try:
            payload = self.source_client.acquire(source)
        except AcquisitionError as e:
            self._transition(report, PipelineState.FAILED)
            logger.debug(f"Acquisition failed ({e.kind.value}): {e}")
            raise
        report.origin = payload.origin

        # Step 2: Classify transport encoding
        self._transition(report, PipelineState.CLASSIFYING)
        text, report.encoded = self._classify(payload)

        # Step 3: Normalize
        self._transition(report, PipelineState.NORMALIZING)
        new_entries = normalize(text)
        report.entries = new_entries
        logger.debug(f"Normalized {len(new_entries)} entries")

        with self.state_store.lock(source):
            # Step 4: Load prior state
            self._transition(report, PipelineState.LOADING_PRIOR)
            old_entries = self.state_store.load(source)

            # Step 5: Diff
            self._transition(report, PipelineState.DIFFING)
            report.diff = compute_diff(old_entries, new_entries)
            logger.debug(f"Diff: {report.diff}")

            # Step 6: Decide
            self._transition(report, PipelineState.DECIDING)
            if not report.diff.has_changes:
                self._transition(report, PipelineState.SKIPPING)
                logger.debug("No changes detected, skipping write")
                self._transition(report, PipelineState.DONE)
                return report

            if new_entries.is_empty and not self.allow_empty:
                self._transition(report, PipelineState.FAILED)
                raise EmptySourceError(source, len(old_entries))

            if self.dry_run:
                logger.info(f"DRY RUN: Would write {len(new_entries)} entries")
                self._transition(report, PipelineState.DONE)
                return report

            # Step 7: Persist
            self._transition(report, PipelineState.PERSISTING)
            try:
                report.artifact_path = self.state_store.save(source, new_entries)
            except StateStoreError:
                self._transition(report, PipelineState.FAILED)
                raise
            report.persisted = True

        # Step 8: Notify
        self._transition(report, PipelineState.NOTIFYING)
        report.notified = self._notify(new_entries)

        self._transition(report, PipelineState.DONE)
        logger.debug(str(report))
        return report

    def _classify(self, payload: RawPayload) -> tuple[str, bool]:
        """
        Pick the text to normalize for a payload.

        Returns:
            (text, encoded) where encoded is True if base64 was unwrapped
        """
        if not payload.is_remote and not self.decode_local_files:
            return payload.text, False

        decoded, ok = decode_payload(payload.text)
        if ok:
            return decoded, True
        return payload.text, False

    def _notify(self, entries: EntrySet) -> bool:
        """Run the notifier; any failure is logged and reported as False."""
        try:
            return self.notifier.notify(entries.join())
        except Exception as e:
            logger.warning(f"Notification failed: {e}", exc_info=True)
            return False
