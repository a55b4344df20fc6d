from __future__ import annotations
import enum
import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy import desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from app.core.config import settings
from app.db.database import SessionLocal
from app.models.candidate_metrics import CandidateMetrics
from app.models.engine_run import EngineRun
from app.models.match_score import MatchScore
from app.models.queue_task import QueueTask, TaskType
from app.services import score_store, task_queue
from app.services.errors import InvalidPayloadError, RecomputeError
from app.services.scoring import ScoreCalculator
from app.services.signals import TaskSignal
from app.services.snapshots import (
    CandidateSnapshotProvider,
    DbCandidateSnapshotProvider,
    DbPostingSnapshotProvider,
    PostingSnapshotProvider,
)

logger = logging.getLogger(__name__)

SignalListener = Callable[[TaskSignal], None]


class WorkerState(str, enum.Enum):
    IDLE = "idle"
    PROCESSING = "processing"


@dataclass
class BatchResult:
    claimed: int = 0
    completed: int = 0
    failed: int = 0
    store_errors: int = 0
    skipped: bool = False
    error: str | None = None
    task_errors: list[str] = field(default_factory=list)


def _require_id(payload: dict, key: str) -> int:
    value = payload.get(key)
    if value is None or isinstance(value, bool):
        raise InvalidPayloadError(f"payload is missing {key}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidPayloadError(f"payload has invalid {key}: {value!r}") from None


class RecomputationWorker:
    """Drains the recomputation queue in batches.

    The worker owns its own processing state: a batch started while another is
    still running on the same instance returns immediately as skipped.
    """

    def __init__(
        self,
        session_factory: sessionmaker | Callable[[], Session] = SessionLocal,
        calculator: ScoreCalculator | None = None,
        candidate_provider: CandidateSnapshotProvider | None = None,
        posting_provider: PostingSnapshotProvider | None = None,
        batch_size: int | None = None,
        listeners: list[SignalListener] | None = None,
    ):
        self.session_factory = session_factory
        self.calculator = calculator or ScoreCalculator()
        self.candidate_provider = candidate_provider or DbCandidateSnapshotProvider()
        self.posting_provider = posting_provider or DbPostingSnapshotProvider()
        self.batch_size = batch_size or settings.queue_batch_size
        self.listeners: list[SignalListener] = list(listeners or [])

        self.state = WorkerState.IDLE
        self._batch_lock = threading.Lock()
        self._control_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._interval_seconds: float | None = None

    def add_listener(self, listener: SignalListener) -> None:
        self.listeners.append(listener)

    # -- recomputation -------------------------------------------------

    def recompute_candidate(self, db: Session, candidate_id: int) -> CandidateMetrics:
        """Refresh the candidate's metrics and its match against every active posting."""
        snapshot = self.candidate_provider.load(db, candidate_id)
        metrics = score_store.upsert_candidate_metrics(db, self.calculator.compute_candidate_metrics(snapshot))
        posting_ids = self.posting_provider.active_ids(db)
        for posting_id in posting_ids:
            posting = self.posting_provider.load(db, posting_id)
            score_store.upsert_match_score(db, self.calculator.compute_match_score(snapshot, posting))
        logger.debug(f"candidate {candidate_id} recomputed against {len(posting_ids)} active postings")
        return metrics

    def recompute_posting(self, db: Session, posting_id: int) -> list[MatchScore]:
        posting = self.posting_provider.load(db, posting_id)
        rows = []
        for candidate_id in self.candidate_provider.active_ids(db):
            candidate = self.candidate_provider.load(db, candidate_id)
            rows.append(score_store.upsert_match_score(db, self.calculator.compute_match_score(candidate, posting)))
        logger.debug(f"posting {posting_id} recomputed against {len(rows)} active candidates")
        return rows

    def recompute_pair(self, db: Session, candidate_id: int, posting_id: int) -> MatchScore:
        candidate = self.candidate_provider.load(db, candidate_id)
        posting = self.posting_provider.load(db, posting_id)
        result = self.calculator.compute_match_score(candidate, posting)
        return score_store.upsert_match_score(db, result)

    def execute(self, db: Session, task_type: str, payload: dict) -> None:
        if task_type == TaskType.RECOMPUTE_CANDIDATE.value:
            self.recompute_candidate(db, _require_id(payload, "candidate_id"))
        elif task_type == TaskType.RECOMPUTE_PAIR.value:
            self.recompute_pair(db, _require_id(payload, "candidate_id"), _require_id(payload, "posting_id"))
        elif task_type == TaskType.RECOMPUTE_POSTING.value:
            self.recompute_posting(db, _require_id(payload, "posting_id"))
        else:
            raise InvalidPayloadError(f"unknown task type: {task_type}")

    # -- batch ---------------------------------------------------------

    def process_queue(self) -> BatchResult:
        if not self._batch_lock.acquire(blocking=False):
            logger.debug("queue batch already in flight; skipping")
            return BatchResult(skipped=True)
        self.state = WorkerState.PROCESSING
        try:
            return self._process_batch()
        finally:
            self.state = WorkerState.IDLE
            self._batch_lock.release()

    def drain(self, max_batches: int | None = None) -> list[BatchResult]:
        results: list[BatchResult] = []
        while max_batches is None or len(results) < max_batches:
            result = self.process_queue()
            results.append(result)
            if result.skipped or result.error or result.claimed == 0:
                break
        return results

    def _process_batch(self) -> BatchResult:
        started_at = datetime.utcnow()
        t0 = time.monotonic()
        db = self.session_factory()
        try:
            try:
                tasks = task_queue.claim_batch(db, self.batch_size)
            except SQLAlchemyError as exc:
                logger.exception("claiming queue batch failed")
                result = BatchResult(error=str(exc))
                self._record_run(db, result, started_at, t0)
                return result

            result = BatchResult(claimed=len(tasks))
            for task in tasks:
                self._run_task(db, task, result)

            if tasks:
                self._record_run(db, result, started_at, t0)
                logger.info(
                    f"processed {result.claimed} queue tasks: "
                    f"completed={result.completed} failed={result.failed} store_errors={result.store_errors}"
                )
            return result
        finally:
            db.close()

    def _run_task(self, db: Session, task: QueueTask, result: BatchResult) -> None:
        task_id = task.id
        task_type = task.task_type
        payload = dict(task.payload or {})

        try:
            self.execute(db, task_type, payload)
        except Exception as exc:
            db.rollback()
            logger.warning(f"queue task {task_id} ({task_type}) failed: {exc}")
            result.task_errors.append(f"task {task_id}: {exc}")
            try:
                outcome = task_queue.mark_failed(db, task_id, exc)
            except (SQLAlchemyError, RecomputeError) as store_exc:
                db.rollback()
                result.store_errors += 1
                result.task_errors.append(f"task {task_id}: {store_exc}")
                logger.exception(f"recording failure for queue task {task_id} failed")
                return
            result.failed += 1
            self._emit(outcome)
            return

        try:
            outcome = task_queue.mark_completed(db, task_id)
        except (SQLAlchemyError, RecomputeError) as exc:
            db.rollback()
            result.store_errors += 1
            result.task_errors.append(f"task {task_id}: {exc}")
            logger.exception(f"marking queue task {task_id} completed failed")
            return
        result.completed += 1
        self._emit(outcome)

    def _emit(self, task: QueueTask) -> None:
        if not self.listeners:
            return
        signal = TaskSignal.from_task(task)
        for listener in self.listeners:
            try:
                listener(signal)
            except Exception:
                logger.exception(f"task signal listener failed for task {signal.task_id}")

    def _record_run(self, db: Session, result: BatchResult, started_at: datetime, t0: float) -> None:
        run = EngineRun(
            run_type="scheduled-batch",
            started_at=started_at,
            finished_at=datetime.utcnow(),
            input_count=result.claimed,
            output_count=result.completed,
            error_count=result.failed + result.store_errors + (1 if result.error else 0),
            runtime_ms=int((time.monotonic() - t0) * 1000),
            success=result.error is None and result.failed == 0 and result.store_errors == 0,
            error_summary=(result.error or "; ".join(result.task_errors))[:2000],
        )
        db.add(run)
        try:
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.exception("recording engine run failed")

    # -- interval loop -------------------------------------------------

    def start_queue_processor(self, interval_seconds: float | None = None) -> bool:
        with self._control_lock:
            if self._thread is not None and self._thread.is_alive():
                logger.info("queue processor already running")
                return False

            interval = interval_seconds if interval_seconds is not None else settings.queue_interval_seconds
            self._interval_seconds = max(0.01, float(interval))
            self._stop_event = threading.Event()
            self._thread = threading.Thread(
                target=self._loop,
                args=(self._stop_event, self._interval_seconds),
                name="recompute-queue-processor",
                daemon=True,
            )
            self._thread.start()
            logger.info(f"queue processor started (interval: {self._interval_seconds}s)")
            return True

    def stop_queue_processor(self, timeout: float | None = None) -> bool:
        with self._control_lock:
            thread = self._thread
            if thread is None:
                return False
            self._stop_event.set()
            self._thread = None
        if thread is not threading.current_thread():
            thread.join(timeout)
        logger.info("queue processor stopped")
        return True

    def _loop(self, stop_event: threading.Event, interval: float) -> None:
        while not stop_event.is_set():
            try:
                self.process_queue()
            except Exception:
                logger.exception("queue processor pass failed")
            if stop_event.wait(interval):
                break

    @property
    def is_processor_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def status(self) -> dict:
        return {
            "state": self.state.value,
            "is_processor_running": self.is_processor_running,
            "is_currently_processing": self.state == WorkerState.PROCESSING,
            "interval_seconds": self._interval_seconds,
            "batch_size": self.batch_size,
        }


def list_runs(db: Session, limit: int = 100) -> list[EngineRun]:
    return db.query(EngineRun).order_by(desc(EngineRun.started_at), desc(EngineRun.id)).limit(limit).all()
