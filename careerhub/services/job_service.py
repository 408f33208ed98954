"""
Job tracking service.

Jobs move through the pipeline statuses in ``JobStatus``; every status
change is also appended to ``job_status_history`` so the analytics pages
can measure time in stage and time to offer.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from careerhub.models.job import Job, JobStatus
from careerhub.services import statistics
from careerhub.services.base import BaseService
from careerhub.services.functions_service import FunctionsService
from careerhub.utils.logger import get_logger


logger = get_logger(__name__)


class JobService(BaseService):
    """CRUD and status tracking for jobs."""

    table = "jobs"

    def list_jobs(self, status: Optional[str] = None, include_archived: bool = False) -> List[Dict[str, Any]]:
        filters = {}
        if status:
            filters["status"] = JobStatus(status).value
        if not include_archived:
            filters["is_archived"] = False
        return self._list(self.table, **filters)

    def get_job(self, job_id: str) -> Dict[str, Any]:
        return self._get(self.table, job_id)

    def create_job(self, data: Dict[str, Any]) -> Dict[str, Any]:
        job = self._create(self.table, Job, data)
        self._record_status_change(job["id"], None, job.get("status", JobStatus.INTERESTED.value))
        return job

    def update_job(self, job_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        if "status" in changes:
            status_changes = {k: v for k, v in changes.items() if k != "status"}
            if status_changes:
                self._update(self.table, Job, job_id, status_changes)
            return self.update_status(job_id, changes["status"])
        return self._update(self.table, Job, job_id, changes)

    def delete_job(self, job_id: str) -> None:
        self._delete(self.table, job_id)

    def archive_job(self, job_id: str, archived: bool = True) -> Dict[str, Any]:
        return self._update(self.table, Job, job_id, {"is_archived": archived})

    # -- status ------------------------------------------------------------

    def _record_status_change(
        self, job_id: str, from_status: Optional[str], to_status: str, notes: Optional[str] = None
    ) -> None:
        self.client.table("job_status_history").insert({
            "job_id": job_id,
            "user_id": self.user_id,
            "from_status": from_status,
            "to_status": to_status,
            "changed_at": datetime.now(timezone.utc).isoformat(),
            "notes": notes,
        }, returning=False).execute()

    def update_status(self, job_id: str, status: str, notes: Optional[str] = None) -> Dict[str, Any]:
        """
        Move a job to a new status and append the change to its history.

        Args:
            job_id: Job id
            status: New status (one of ``JobStatus``)
            notes: Optional note stored with the history row

        Returns:
            The updated job row
        """
        new_status = JobStatus(status).value
        current = self.get_job(job_id)
        old_status = current.get("status")
        if old_status == new_status:
            return current

        updated = self._update(self.table, Job, job_id, {"status": new_status})
        self._record_status_change(job_id, old_status, new_status, notes)
        logger.info(f"📌 Job {job_id}: {old_status} → {new_status}")
        return updated

    def bulk_update_status(self, job_ids: List[str], status: str) -> Dict[str, Any]:
        """Apply one status to several jobs; each update is independent."""
        JobStatus(status)
        updated = [self.update_status(job_id, status) for job_id in job_ids]
        logger.info(f"📌 Updated {len(updated)} job(s) to {status}")
        return {"updated": len(updated), "jobs": updated}

    def get_status_history(self, job_ids: Optional[List[str]] = None) -> List[Dict[str, Any]]:
        query = self.client.table("job_status_history").select("*").eq("user_id", self.user_id)
        if job_ids is not None:
            if not job_ids:
                return []
            query = query.in_("job_id", job_ids)
        return query.order("job_id").order("changed_at", ascending=True).execute().data or []

    def ensure_status_history(self, jobs: List[Dict[str, Any]], history: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """
        Seed a history row for jobs that have none, using the job's creation time.

        Returns:
            The history rows including any newly added ones
        """
        tracked = {row.get("job_id") for row in history}
        missing = [job for job in jobs if job.get("id") not in tracked]
        if not missing:
            return history

        rows = [
            {
                "job_id": job["id"],
                "user_id": self.user_id,
                "from_status": None,
                "to_status": job.get("status"),
                "changed_at": job.get("created_at") or datetime.now(timezone.utc).isoformat(),
            }
            for job in missing
        ]
        result = self.client.table("job_status_history").insert(rows).execute()
        logger.info(f"🕒 Seeded status history for {len(rows)} job(s)")
        return history + (result.data or rows)

    def get_statistics(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        jobs = self.list_jobs(include_archived=True)
        history = self.get_status_history([job["id"] for job in jobs])
        history = self.ensure_status_history(jobs, history)
        return statistics.job_statistics(jobs, history, now=now)

    # -- import ------------------------------------------------------------

    def import_from_url(self, url: str, functions: Optional[FunctionsService] = None,
                        save: bool = False) -> Dict[str, Any]:
        """
        Extract job details from a posting URL via the ``import-job-from-url`` function.

        Args:
            url: Job posting URL
            functions: Functions service to use (defaults to one on this client)
            save: If True, create the job from the extracted fields

        Returns:
            Extracted job fields, or the created row when ``save`` is set
        """
        if not url.startswith(("http://", "https://")):
            raise ValueError("Job URL must start with http:// or https://")

        functions = functions or FunctionsService(self.client)
        result = functions.import_job_from_url(url)
        job_data = result.get("job") or result.get("data") or result
        job_data = {k: v for k, v in job_data.items() if k in Job.model_fields and v not in (None, "")}
        job_data.setdefault("job_url", url)
        logger.info(f"📥 Imported job: {job_data.get('job_title')} at {job_data.get('company_name')}")

        if save:
            return self.create_job(job_data)
        return job_data
