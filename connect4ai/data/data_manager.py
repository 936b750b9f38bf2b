"""
data_manager.py - Training job and model registry for Connect Four AI

Training runs are recorded as JSON files in a data directory:

    jobs.json                 one entry per training run
    models.json               every checkpoint and final model written
    logs/job_<id>_recent.json the most recent episode records of a run

Each file is guarded by a ``filelock`` lock so that ``run.py ai jobs`` can
read status from another process while training writes to it.
"""

import datetime
import json
import os
import shutil
from typing import Any, Dict, List, Optional, Union

import filelock

from connect4ai.debug import debug

DEFAULT_DATA_DIR = os.environ.get('CONNECT4AI_DATA_DIR', os.path.join(os.getcwd(), 'data'))

# Maximum number of recent episode records kept per job
MAX_RECENT_LOGS = 1000


def safe_read_json(file_path: str) -> List[Dict]:
    """
    Read a JSON list under the file's lock.

    Returns:
        Parsed data, or an empty list if the file is missing or corrupt
    """
    if not os.path.exists(file_path):
        return []

    with filelock.FileLock(f"{file_path}.lock"):
        try:
            with open(file_path, 'r') as f:
                return json.load(f)
        except json.JSONDecodeError:
            debug.error(f"Error decoding JSON from {file_path}", "data")
            return []


def safe_write_json(file_path: str, data: Any) -> bool:
    """
    Write JSON under the file's lock through a temporary file and a rename.

    Returns:
        True if the file was replaced, False otherwise
    """
    with filelock.FileLock(f"{file_path}.lock"):
        temp_file = f"{file_path}.tmp"
        try:
            with open(temp_file, 'w') as f:
                json.dump(data, f, indent=2)
            shutil.move(temp_file, file_path)
            return True
        except (OSError, TypeError, ValueError) as e:
            debug.error(f"Error writing to {file_path}: {e}", "data")
            return False


def _now() -> str:
    return datetime.datetime.now().isoformat()


class JobRegistry:
    """Registry of training jobs, their episode logs and saved models."""

    def __init__(self, data_dir: Optional[str] = None):
        self.data_dir = data_dir if data_dir is not None else DEFAULT_DATA_DIR
        self.jobs_file = os.path.join(self.data_dir, 'jobs.json')
        self.models_file = os.path.join(self.data_dir, 'models.json')
        self.logs_dir = os.path.join(self.data_dir, 'logs')
        os.makedirs(self.logs_dir, exist_ok=True)

    def _recent_log_file(self, job_id: int) -> str:
        return os.path.join(self.logs_dir, f"job_{job_id}_recent.json")

    def _update_job(self, job_id: int, **fields) -> bool:
        jobs = safe_read_json(self.jobs_file)
        for job in jobs:
            if job['job_id'] == job_id:
                job.update(fields)
                if safe_write_json(self.jobs_file, jobs):
                    return True
                debug.error(f"Failed to update job {job_id}", "data")
                return False

        debug.error(f"Job {job_id} not found", "data")
        return False

    def create_job(self, parameters: Dict[str, Any]) -> int:
        """
        Record a new training run.

        Args:
            parameters: Training parameters (must be JSON serializable)

        Returns:
            The new job ID, or -1 if the registry could not be written
        """
        jobs = safe_read_json(self.jobs_file)
        job_id = max((job['job_id'] for job in jobs), default=0) + 1

        jobs.append({
            "job_id": job_id,
            "start_time": _now(),
            "end_time": None,
            "total_episodes": parameters.get('num_episodes', 0),
            "episodes_completed": 0,
            "status": "running",
            "parameters": parameters,
        })

        if not safe_write_json(self.jobs_file, jobs):
            debug.error("Failed to create job", "data")
            return -1

        safe_write_json(self._recent_log_file(job_id), [])
        debug.info(f"Created new job with ID {job_id}", "data")
        return job_id

    def update_job_progress(self, job_id: int, episodes_completed: int) -> bool:
        if self._update_job(job_id, episodes_completed=episodes_completed):
            debug.trace(f"Updated job {job_id} progress to {episodes_completed}", "data")
            return True
        return False

    def complete_job(self, job_id: int, status: str = "completed") -> bool:
        """Mark a job as finished ("completed" or "interrupted")."""
        if self._update_job(job_id, end_time=_now(), status=status):
            debug.info(f"Marked job {job_id} as {status}", "data")
            return True
        return False

    def add_episode_log(self, job_id: int, episode_data: Dict[str, Any]) -> bool:
        """Append an episode record, keeping only the newest MAX_RECENT_LOGS."""
        record = dict(episode_data, job_id=job_id)
        record.setdefault('timestamp', _now())

        log_file = self._recent_log_file(job_id)
        logs = safe_read_json(log_file)
        logs.append(record)
        logs = logs[-MAX_RECENT_LOGS:]

        if safe_write_json(log_file, logs):
            return True
        debug.error(f"Failed to add episode log for job {job_id}", "data")
        return False

    def get_episode_logs(self, job_id: int) -> List[Dict]:
        return safe_read_json(self._recent_log_file(job_id))

    def register_model(self, job_id: int, episode: int, path: str,
                       is_final: bool = False) -> bool:
        """
        Record a saved model file.

        Args:
            job_id: Job that produced the model
            episode: Episode at which it was saved
            path: Location of the model file
            is_final: Whether this is the model written at the end of training
        """
        models = safe_read_json(self.models_file)
        models.append({
            "model_id": len(models) + 1,
            "job_id": job_id,
            "episode": episode,
            "path": path,
            "timestamp": _now(),
            "is_final": is_final,
        })

        if safe_write_json(self.models_file, models):
            debug.info(f"Registered model for job {job_id}, episode {episode}", "data")
            return True
        debug.error(f"Failed to register model for job {job_id}", "data")
        return False

    def get_job_data(self, job_id: Optional[int] = None) -> Union[Dict, List[Dict]]:
        """
        Get one job by ID, or every job when ``job_id`` is None.

        Returns:
            The job dict ({} if not found) or the list of all jobs
        """
        jobs = safe_read_json(self.jobs_file)
        if job_id is None:
            return jobs

        for job in jobs:
            if job['job_id'] == job_id:
                return job

        debug.warning(f"Job {job_id} not found", "data")
        return {}

    def get_registered_models(self, job_id: Optional[int] = None) -> List[Dict]:
        models = safe_read_json(self.models_file)
        if job_id is None:
            return models
        return [model for model in models if model['job_id'] == job_id]
