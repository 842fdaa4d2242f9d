"""Run coordinator - one scheduled run of the lead relay.

Acquires the run lock, polls the mailbox, processes candidates one at a time
with a pacing delay, retries failed messages below the attempt ceiling, and
releases the lock. A run that can no longer extend its lock stops early and
leaves the lock to its new holder.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from ..config import Settings
from ..domain.alerts.ports import AlertPort, send_detached
from ..domain.locking import RunLock, default_holder_id
from ..domain.mailbox.ports import MailboxPort, MailTransportError
from ..domain.processing.ports import ProcessingStorePort
from ..observability.metrics import run_duration_seconds, runs_total
from ..observability.run_context import run_scope
from .processor import MessageProcessor, ProcessResult

logger = logging.getLogger(__name__)


@dataclass
class RunSummary:
    """Outcome of one coordinator run.

    Attributes:
        lock_acquired: False if another worker held the lock (nothing was done)
        processed: Messages attempted (new candidates plus retries)
        successful: Attempts that ended in SUCCESS
        failed: Attempts that ended in FAILED
        retried: How many of the attempts came from the retry batch
        duration_seconds: Wall time of the run
        lock_lost: True if the lock could not be extended and the run stopped early
    """
    lock_acquired: bool
    processed: int = 0
    successful: int = 0
    failed: int = 0
    retried: int = 0
    duration_seconds: float = 0.0
    lock_lost: bool = False
    run_id: Optional[str] = None
    results: List[ProcessResult] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "run_id": self.run_id,
            "lock_acquired": self.lock_acquired,
            "processed": self.processed,
            "successful": self.successful,
            "failed": self.failed,
            "retried": self.retried,
            "duration_seconds": round(self.duration_seconds, 3),
            "lock_lost": self.lock_lost,
        }


class RunCoordinator:
    """Drives one run: lock, poll, pace, process, retry, release.

    Example:
        coordinator = RunCoordinator(settings, lock, mailbox, processing, processor, alerter)
        summary = coordinator.run()
    """

    def __init__(
        self,
        settings: Settings,
        lock: RunLock,
        mailbox: MailboxPort,
        processing: ProcessingStorePort,
        processor: MessageProcessor,
        alerter: AlertPort,
        sleep: Callable[[float], None] = time.sleep,
        holder_id_factory: Callable[[], str] = default_holder_id,
    ):
        self.settings = settings
        self.lock = lock
        self.mailbox = mailbox
        self.processing = processing
        self.processor = processor
        self.alerter = alerter
        self.sleep = sleep
        self.holder_id_factory = holder_id_factory
        self._last_refresh = time.monotonic()
        self._lock_lost = False

    def run(self) -> RunSummary:
        """Execute one run.

        Returns:
            RunSummary; lock_acquired=False when another worker is running

        Raises:
            Lock store failures and errors outside per-message processing
            (e.g. the mailbox listing). The lock is released first.
        """
        with run_scope() as run_id:
            holder_id = self.holder_id_factory()
            start_time = time.monotonic()

            if not self.lock.acquire(holder_id):
                logger.info("Another worker is already running, exiting")
                runs_total.labels(outcome="lock_contended").inc()
                return RunSummary(lock_acquired=False, run_id=run_id)

            results: List[ProcessResult] = []
            retried = 0
            self._last_refresh = time.monotonic()
            self._lock_lost = False

            try:
                candidates = self._poll()
                if candidates:
                    logger.info(f"Processing {len(candidates)} messages")
                else:
                    logger.info("No new messages to process")

                self._process_paced(candidates, holder_id, results)

                if not self._lock_lost:
                    retry_ids = self._retry_candidates()
                    logger.info(f"Found {len(retry_ids)} failed messages to retry")
                    before_retries = len(results)
                    self._process_paced(retry_ids, holder_id, results)
                    retried = len(results) - before_retries

            except Exception:
                runs_total.labels(outcome="error").inc()
                logger.error("Fatal error during run", exc_info=True)
                raise

            finally:
                if self._lock_lost:
                    logger.warning("Run lock belongs to another worker, not releasing it")
                else:
                    self._release()

            duration = time.monotonic() - start_time
            summary = RunSummary(
                lock_acquired=True,
                processed=len(results),
                successful=sum(1 for r in results if r.success),
                failed=sum(1 for r in results if not r.success),
                retried=retried,
                duration_seconds=duration,
                lock_lost=self._lock_lost,
                run_id=run_id,
                results=results,
            )

            runs_total.labels(outcome="lock_lost" if self._lock_lost else "completed").inc()
            run_duration_seconds.observe(duration)
            logger.info(
                f"Run complete: processed={summary.processed} successful={summary.successful} "
                f"failed={summary.failed} duration={duration:.1f}s"
            )

            if summary.processed > 0:
                send_detached(self.alerter.notify_run_summary, summary)

            return summary

    def _poll(self) -> List[str]:
        """Unread candidates, minus those already SUCCESS in the processing store.

        SUCCESS messages the mailbox still lists are acknowledged again.
        """
        refs = self.mailbox.list_candidate_messages(
            self.settings.MAILBOX_FILTER,
            self.settings.MAX_MESSAGES_PER_RUN,
        )
        ids = [ref.id for ref in refs]
        done = self.processing.successful_ids(ids)
        if done:
            logger.info(f"Skipping {len(done)} already-processed messages")
            for message_id in sorted(done):
                self._reacknowledge(message_id)
        return [message_id for message_id in ids if message_id not in done]

    def _reacknowledge(self, message_id: str) -> None:
        try:
            self.mailbox.acknowledge(message_id)
        except MailTransportError as e:
            logger.warning(
                f"Could not acknowledge processed message {message_id}: {e}",
                extra={"message_id": message_id},
            )

    def _retry_candidates(self) -> List[str]:
        """FAILED records below the attempt ceiling, oldest attempt first, capped to the batch size."""
        records = self.processing.list_retryable(
            self.settings.RETRY_MAX_ATTEMPTS,
            self.settings.RETRY_BATCH_SIZE,
        )
        return [r.message_id for r in records]

    def _process_paced(self, message_ids: List[str], holder_id: str, results: List[ProcessResult]) -> None:
        """Process sequentially, sleeping RATE_LIMIT_MS between consecutive messages of the run.

        Stops before the next message once the lock is lost.
        """
        delay = self.settings.RATE_LIMIT_MS / 1000.0

        for message_id in message_ids:
            if self._lock_lost:
                break
            if results and delay:
                self.sleep(delay)
            results.append(self.processor.process(message_id))
            self._refresh_lock(holder_id)

    def _refresh_lock(self, holder_id: str) -> None:
        """Extend the lock once half its TTL has passed since the last refresh."""
        if time.monotonic() - self._last_refresh < self.settings.LOCK_TTL_SECONDS / 2:
            return

        if self.lock.extend(holder_id):
            self._last_refresh = time.monotonic()
            return

        self._lock_lost = True
        logger.error(f"Run lock lost by {holder_id}; stopping before the remaining messages")

    def _release(self) -> None:
        try:
            self.lock.release()
        except Exception:
            # Expiry still frees the lock after the TTL
            logger.error("Failed to release run lock", exc_info=True)
