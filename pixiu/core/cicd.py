"""Managing build jobs, views and nodes on a Jenkins-style automation server."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Protocol

from pixiu import log
from pixiu.templates import render_job_config

PIPELINE_STYLE = "PipLineStyle"
LIST_VIEW = "hudson.model.ListView"
DEFAULT_POLL_INTERVAL = 5.0
# The body written by update_config; kept as the server receives it today.
_UPDATE_CONFIG_BODY = "dsfd"


class _Build(Protocol):
    def is_running(self) -> bool: ...

    def poll(self) -> Any: ...


class _Driver(Protocol):
    def build_job(self, name: str) -> int: ...

    def get_build_from_queue_id(self, queue_id: int) -> _Build: ...

    def create_job(self, config: str, name: str) -> Any: ...

    def copy_job(self, old_name: str, new_name: str) -> Any: ...

    def rename_job(self, old_name: str, new_name: str) -> Any: ...

    def delete_job(self, name: str) -> Any: ...

    def get_view(self, name: str) -> Any: ...

    def create_view(self, name: str, view_type: str) -> Any: ...

    def get_all_jobs(self) -> Iterable[Any]: ...

    def get_all_views(self) -> Iterable[Any]: ...

    def get_all_nodes(self) -> Iterable[Any]: ...

    def safe_restart(self) -> Any: ...

    def get_job(self, name: str) -> Any: ...

    def stop_build(self, job: Any) -> Any: ...


@dataclass
class CicdJob:
    """A job to create: its name, its style and the git source it builds."""

    name: str = ""
    style: str = ""
    git: Any = None


class CicdService:
    """Job, view and node operations against one automation server."""

    def __init__(self, driver: _Driver, poll_interval: float = DEFAULT_POLL_INTERVAL) -> None:
        self._driver = driver
        self._poll_interval = poll_interval

    def run_job(self, name: str) -> None:
        """Queue a build of ``name`` and wait until it has finished."""
        queue_id = self._driver.build_job(name)
        build = self._driver.get_build_from_queue_id(queue_id)
        while build.is_running():
            time.sleep(self._poll_interval)
            build.poll()

    def create_job(self, job: CicdJob) -> None:
        """Create ``job`` from the pipeline or the free-style template."""
        style = PIPELINE_STYLE if job.style == PIPELINE_STYLE else job.style
        config = render_job_config(style, job.git).replace("&lt;", "<")
        try:
            self._driver.create_job(config, job.name)
        except Exception as exc:
            log.logger.error("failed to create job %s: %s", job.name, exc)
            raise

    def copy_job(self, old_name: str, new_name: str) -> list[str]:
        """Copy job ``old_name`` to ``new_name``."""
        try:
            self._driver.copy_job(old_name, new_name)
        except Exception as exc:
            log.logger.error("failed to copy job %s: %s", old_name, exc)
            raise
        return []

    def rename_job(self, old_name: str, new_name: str) -> None:
        """Rename a job; a failure is logged and not raised."""
        try:
            self._driver.rename_job(old_name, new_name)
        except Exception as exc:
            log.logger.error("failed to rename job %s: %s", new_name, exc)

    def delete_job(self, name: str) -> None:
        try:
            self._driver.delete_job(name)
        except Exception as exc:
            log.logger.error("failed to delete job %s: %s", name, exc)
            raise

    def delete_view_job(self, name: str, view_name: str) -> bool:
        """Remove job ``name`` from view ``view_name``."""
        try:
            view = self._driver.get_view(view_name)
        except Exception as exc:
            log.logger.error("failed to find view %s: %s", view_name, exc)
            raise
        try:
            view.delete_job(name)
        except Exception as exc:
            log.logger.error("failed to delete view job %s: %s", name, exc)
            raise
        return True

    def delete_node(self, name: str) -> None:
        try:
            self._driver.delete_job(name)
        except Exception as exc:
            log.logger.error("failed to delete node %s: %s", name, exc)
            raise

    def add_view_job(self, view_name: str, name: str) -> None:
        """Create list view ``view_name`` and put job ``name`` in it."""
        try:
            view = self._driver.create_view(view_name, LIST_VIEW)
        except Exception as exc:
            log.logger.error("failed to create view %s: %s", view_name, exc)
            raise
        try:
            added = view.add_job(name)
        except Exception as exc:
            log.logger.error("failed to add view %s: %s", view_name, exc)
            raise
        if not added:
            log.logger.error("failed to add view %s", view_name)

    def get_all_jobs(self) -> list[str]:
        return self._names("jobs", self._driver.get_all_jobs)

    def get_all_views(self) -> list[str]:
        return self._names("views", self._driver.get_all_views)

    def get_all_nodes(self) -> list[str]:
        return self._names("nodes", self._driver.get_all_nodes)

    def restart(self) -> None:
        """Ask the server for a safe restart; a failure is logged and not raised."""
        try:
            self._driver.safe_restart()
        except Exception as exc:
            log.logger.error("failed to restart: %s", exc)

    def disable(self, name: str) -> bool:
        """Disable job ``name``; return False if that did not work."""
        return self._toggle(name, "disable")

    def enable(self, name: str) -> bool:
        """Enable job ``name``; return False if that did not work."""
        return self._toggle(name, "enable")

    def stop(self, name: str) -> bool:
        """Stop the running build of job ``name``."""
        job = self._driver.get_job(name)
        self._driver.stop_build(job)
        return True

    def details(self, name: str) -> Optional[Any]:
        """Return the details of job ``name``, or None if it cannot be read."""
        try:
            job = self._driver.get_job(name)
        except Exception as exc:
            log.logger.error("failed to get job: %s", exc)
            return None
        return job.get_details()

    def config(self, name: str) -> str:
        """Return the configuration of job ``name``, or "" if it cannot be read."""
        try:
            job = self._driver.get_job(name)
        except Exception as exc:
            log.logger.error("failed to get job: %s", exc)
            return ""
        try:
            return job.get_config()
        except Exception as exc:
            log.logger.error("failed to get config: %s", exc)
            return ""

    def update_config(self, name: str) -> None:
        """Write the job's configuration; failures are logged and not raised."""
        try:
            job = self._driver.get_job(name)
        except Exception as exc:
            log.logger.error("failed to get job: %s", exc)
            return
        try:
            job.update_config(_UPDATE_CONFIG_BODY)
        except Exception as exc:
            log.logger.error("failed to update config: %s", exc)

    def last_failed_build(self, name: str) -> Any:
        return self._raw_field(name, "lastFailedBuild")

    def last_successful_build(self, name: str) -> Any:
        return self._raw_field(name, "lastSuccessfulBuild")

    def history(self, name: str) -> list[Any]:
        """Return the build history of job ``name``."""
        try:
            job = self._driver.get_job(name)
        except Exception as exc:
            log.logger.error("failed to get job %s: %s", name, exc)
            raise
        try:
            return list(job.history())
        except Exception as exc:
            log.logger.error("failed to get history: %s", exc)
            raise

    def _names(self, kind: str, fetch) -> list[str]:
        try:
            items = fetch()
        except Exception as exc:
            log.logger.error("failed to get all %s: %s", kind, exc)
            raise
        return [item.base for item in items]

    def _toggle(self, name: str, action: str) -> bool:
        try:
            job = self._driver.get_job(name)
            getattr(job, action)()
        except Exception as exc:
            log.logger.error("failed to %s job %s: %s", action, name, exc)
            return False
        return True

    def _raw_field(self, name: str, key: str) -> Any:
        try:
            job = self._driver.get_job(name)
        except Exception as exc:
            log.logger.error("failed to get job %s: %s", name, exc)
            raise
        return (job.raw or {}).get(key)