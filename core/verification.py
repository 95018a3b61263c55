"""Submission of comparison results to an external ledger.

A verification record carries both sequences and a SHA-256 digest of the
alignment. The ledger itself is behind :class:`LedgerSubmitter`; the queue
runs each submission as a background job that the caller polls. A job first
waits out an approval window (the wallet prompt) while it is still queued;
it can be cancelled until that window closes and the record is handed to
the submitter.
"""
from __future__ import annotations

import hashlib
import json
import logging
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Protocol

from .aligner import AlignmentResult

logger = logging.getLogger(__name__)

RECORD_TYPE = "sequence_comparison"

STATUS_QUEUED = "queued"
STATUS_SUBMITTING = "submitting"
STATUS_CONFIRMED = "confirmed"
STATUS_FAILED = "failed"
STATUS_CANCELLED = "cancelled"
TERMINAL_STATUSES = {STATUS_CONFIRMED, STATUS_FAILED, STATUS_CANCELLED}


def result_digest(result: AlignmentResult) -> str:
    canonical = json.dumps(
        {
            "original": result.original,
            "edited": result.edited,
            "ops": [op.to_dict() for op in result.ops],
        },
        sort_keys=True,
        separators=(",", ":"),
    )
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class VerificationRecord:
    original: str
    edited: str
    result_digest: str
    record_type: str = RECORD_TYPE

    @classmethod
    def from_result(cls, result: AlignmentResult) -> "VerificationRecord":
        return cls(original=result.original, edited=result.edited, result_digest=result_digest(result))

    def to_dict(self) -> Dict[str, str]:
        return {
            "type": self.record_type,
            "original": self.original,
            "edited": self.edited,
            "result_digest": self.result_digest,
        }


@dataclass(frozen=True)
class TransactionHandle:
    tx_hash: str
    explorer_url: str
    network: str
    submitted_at: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, object]:
        return {
            "tx_hash": self.tx_hash,
            "explorer_url": self.explorer_url,
            "network": self.network,
            "submitted_at": self.submitted_at,
        }


class LedgerSubmitter(Protocol):
    def submit(self, record: VerificationRecord) -> TransactionHandle:
        ...


class LocalLedgerSubmitter:
    """Stand-in ledger that derives a transaction hash from the record digest."""

    def __init__(self, explorer_url: str, network: str, delay_seconds: float = 0.0) -> None:
        self.explorer_url = explorer_url.rstrip("/")
        self.network = network
        self.delay_seconds = delay_seconds

    def submit(self, record: VerificationRecord) -> TransactionHandle:
        if self.delay_seconds > 0:
            time.sleep(self.delay_seconds)
        nonce = uuid.uuid4().hex
        tx_hash = "0x" + hashlib.sha256(f"{record.result_digest}:{nonce}".encode("utf-8")).hexdigest()
        return TransactionHandle(
            tx_hash=tx_hash,
            explorer_url=f"{self.explorer_url}/tx/{tx_hash}",
            network=self.network,
        )


@dataclass
class VerificationJob:
    job_id: str
    record: VerificationRecord
    status: str = STATUS_QUEUED
    error: Optional[str] = None
    transaction: Optional[TransactionHandle] = None
    cancel_requested: bool = False
    cancel_event: threading.Event = field(default_factory=threading.Event, repr=False)
    created_at: float = field(default_factory=time.time)
    updated_at: float = field(default_factory=time.time)
    done: threading.Event = field(default_factory=threading.Event, repr=False)


Launcher = Callable[[Callable[[], None]], None]


def _thread_launcher(target: Callable[[], None]) -> None:
    worker = threading.Thread(target=target, daemon=True)
    worker.start()


class VerificationQueue:
    def __init__(
        self,
        submitter: LedgerSubmitter,
        *,
        job_ttl_seconds: float = 6 * 60 * 60,
        approval_window_seconds: float = 0.0,
        launcher: Optional[Launcher] = None,
    ) -> None:
        self.submitter = submitter
        self.job_ttl_seconds = job_ttl_seconds
        self.approval_window_seconds = approval_window_seconds
        self._launcher = launcher or _thread_launcher
        self._jobs: Dict[str, VerificationJob] = {}
        self._lock = threading.RLock()

    def cleanup_expired(self) -> None:
        now = time.time()
        with self._lock:
            expired = [
                job_id
                for job_id, job in self._jobs.items()
                if job.status in TERMINAL_STATUSES and now - job.created_at > self.job_ttl_seconds
            ]
            for job_id in expired:
                self._jobs.pop(job_id, None)

    def _require(self, job_id: str) -> VerificationJob:
        with self._lock:
            job = self._jobs.get(job_id)
        if job is None:
            raise ValueError("Unknown job_id")
        return job

    def _set_state(
        self,
        job: VerificationJob,
        *,
        status: str,
        error: Optional[str] = None,
        transaction: Optional[TransactionHandle] = None,
    ) -> None:
        with self._lock:
            job.status = status
            if error is not None:
                job.error = error
            if transaction is not None:
                job.transaction = transaction
            job.updated_at = time.time()
        logger.info("Verification job %s is %s", job.job_id, status)

    def start(self, record: VerificationRecord) -> str:
        job = VerificationJob(job_id=uuid.uuid4().hex, record=record)
        with self._lock:
            self._jobs[job.job_id] = job
        logger.info("Queued verification job %s for digest %s", job.job_id, record.result_digest)
        self._launcher(lambda: self._run(job))
        return job.job_id

    def _run(self, job: VerificationJob) -> None:
        try:
            if self.approval_window_seconds > 0:
                job.cancel_event.wait(self.approval_window_seconds)
            with self._lock:
                if job.cancel_requested:
                    cancelled = True
                else:
                    cancelled = False
                    job.status = STATUS_SUBMITTING
                    job.updated_at = time.time()
            if cancelled:
                self._set_state(job, status=STATUS_CANCELLED)
                return
            logger.info("Verification job %s is %s", job.job_id, STATUS_SUBMITTING)

            try:
                handle = self.submitter.submit(job.record)
            except Exception as exc:
                logger.warning("Verification job %s failed: %s", job.job_id, exc)
                self._set_state(job, status=STATUS_FAILED, error=str(exc) or exc.__class__.__name__)
                return
            self._set_state(job, status=STATUS_CONFIRMED, transaction=handle)
        finally:
            job.done.set()

    def get(self, job_id: str) -> Dict[str, object]:
        self.cleanup_expired()
        job = self._require(job_id)
        with self._lock:
            return {
                "job_id": job.job_id,
                "status": job.status,
                "error": job.error,
                "record": job.record.to_dict(),
                "transaction": job.transaction.to_dict() if job.transaction else None,
                "cancel_requested": job.cancel_requested,
                "created_at": job.created_at,
                "updated_at": job.updated_at,
            }

    def cancel(self, job_id: str) -> Dict[str, object]:
        job = self._require(job_id)
        with self._lock:
            if job.status != STATUS_QUEUED:
                raise ValueError(f"Job is {job.status} and can no longer be cancelled")
            job.cancel_requested = True
            job.updated_at = time.time()
        job.cancel_event.set()
        return {"job_id": job_id, "status": "cancelling"}

    def wait(self, job_id: str, timeout: Optional[float] = None) -> Dict[str, object]:
        job = self._require(job_id)
        job.done.wait(timeout)
        return self.get(job_id)
