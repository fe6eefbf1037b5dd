
import asyncio
import threading
import queue
import json
import logging
import uuid
from typing import Dict, Any, List, Optional, Callable
from datetime import datetime, timezone

logger = logging.getLogger(__name__)

MAX_FINISHED_JOBS = 100


class AnalysisJob:
    """State of one background pipeline run"""

    def __init__(self, kind: str):
        self.id = str(uuid.uuid4())
        self.kind = kind
        self.status = "pending"
        self.stage = ""
        self.progress = 0.0
        self.result: Optional[Dict[str, Any]] = None
        self.error: Optional[str] = None
        self.created_at = datetime.now(timezone.utc).isoformat()
        self.finished = threading.Event()
        self.subscribers: List[queue.Queue] = []
        self.last_update: Optional[Dict[str, Any]] = None
        self.thread: Optional[threading.Thread] = None

    @property
    def is_done(self) -> bool:
        return self.status in ("complete", "error")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "kind": self.kind,
            "status": self.status,
            "stage": self.stage,
            "progress": self.progress,
            "result": self.result,
            "error": self.error,
            "createdAt": self.created_at,
        }


class AnalysisJobManager:
    """
    Runs analysis pipelines on background threads.
    Each job gets its own event loop via asyncio.run.
    Supports multiple subscribers per job for streaming updates.
    """
    _instance = None
    _instance_lock = threading.Lock()

    def __init__(self):
        self._lock = threading.Lock()
        self.jobs: Dict[str, AnalysisJob] = {}

    @classmethod
    def get_instance(cls):
        if cls._instance is None:
            with cls._instance_lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    def start_job(self, kind: str, task_func: Callable, on_complete: Optional[Callable] = None) -> AnalysisJob:
        """
        Start a new background job.
        task_func: coroutine function accepting a progress callback (progress, stage)
        and returning an outcome with to_dict().
        on_complete: called with the outcome before the job is marked complete.
        """
        job = AnalysisJob(kind)
        with self._lock:
            self._prune()
            self.jobs[job.id] = job

        def progress(value: float, stage: str):
            self.broadcast(job, {"status": "running", "progress": round(value, 1), "stage": stage})

        def worker():
            try:
                self.broadcast(job, {"status": "running", "progress": 0, "stage": "Starting"})
                outcome = asyncio.run(task_func(progress))
                if on_complete is not None:
                    on_complete(outcome)
                job.result = outcome.to_dict()
                self.broadcast(job, {"status": "complete", "progress": 100, "result": job.result})
            except Exception as e:
                logger.exception(f"[Jobs] {kind} job {job.id} failed")
                job.error = str(e)
                self.broadcast(job, {"status": "error", "error": str(e)})
            finally:
                job.finished.set()

        job.thread = threading.Thread(target=worker, daemon=True)
        job.thread.start()
        logger.info(f"[Jobs] Started {kind} job {job.id}")
        return job

    def get_job(self, job_id: str) -> Optional[AnalysisJob]:
        with self._lock:
            return self.jobs.get(job_id)

    def wait(self, job_id: str, timeout: Optional[float] = None) -> Optional[AnalysisJob]:
        job = self.get_job(job_id)
        if job is not None:
            job.finished.wait(timeout)
        return job

    def subscribe(self, job: AnalysisJob) -> queue.Queue:
        """
        Return a queue that receives updates.
        Also pushes the LAST update immediately so new subscribers get current state.
        """
        q = queue.Queue()
        with self._lock:
            job.subscribers.append(q)
            if job.last_update:
                q.put(self._format(job.last_update))
        return q

    def unsubscribe(self, job: AnalysisJob, q: queue.Queue):
        with self._lock:
            if q in job.subscribers:
                job.subscribers.remove(q)

    def broadcast(self, job: AnalysisJob, update_dict: Dict[str, Any]):
        """
        Send update to all subscribers of a job.
        """
        update = dict(update_dict, jobId=job.id)
        with self._lock:
            job.last_update = update
            # Update internal state for simple polling
            job.status = update.get("status", job.status)
            job.stage = update.get("stage", job.stage)
            if "progress" in update:
                job.progress = max(job.progress, float(update["progress"]))
            msg = self._format(update)
            for q in job.subscribers:
                q.put(msg)

    @staticmethod
    def _format(update: Dict[str, Any]) -> str:
        return f"data: {json.dumps(update)}\n\n"

    def _prune(self):
        finished = [job_id for job_id, job in self.jobs.items() if job.is_done]
        for job_id in finished[:max(0, len(finished) - MAX_FINISHED_JOBS)]:
            del self.jobs[job_id]
