from __future__ import annotations

from typing import Any, Iterator

import requests

from storagegc.core.models import CubeInstance, CubeSegment, Job, JobState

# timeFilter=4 asks the server for jobs of every age
_ALL_JOBS_TIME_FILTER = 4


class KylinRestMetadataStore:
    """Reads jobs and cubes from the OLAP server REST API."""

    def __init__(
        self,
        api_url: str,
        *,
        user: str,
        password: str,
        timeout_seconds: float = 30.0,
        page_size: int = 100,
        session: requests.Session | None = None,
    ) -> None:
        if page_size < 1:
            raise ValueError("page_size must be >= 1")
        self.api_url = api_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.page_size = page_size
        self._session = session or requests.Session()
        self._session.auth = (user, password)

    def _get_pages(self, path: str, params: dict[str, Any]) -> Iterator[dict]:
        """Yield items from a limit/offset paged endpoint."""
        offset = 0
        while True:
            response = self._session.get(
                f"{self.api_url}/{path}",
                params={**params, "limit": self.page_size, "offset": offset},
                headers={"Accept": "application/json"},
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
            page = response.json()
            if not isinstance(page, list):
                raise ValueError(f"Unexpected response from {path}: {type(page).__name__}")
            yield from page
            if len(page) < self.page_size:
                return
            offset += self.page_size

    def list_jobs(self) -> list[Job]:
        """Return every job with its state; build jobs carry `segmentId`."""
        jobs: list[Job] = []
        for item in self._get_pages("jobs", {"timeFilter": _ALL_JOBS_TIME_FILTER}):
            job_id = item.get("uuid")
            if not job_id:
                continue
            params = {}
            if item.get("related_segment"):
                params["segmentId"] = str(item["related_segment"])
            jobs.append(
                Job(
                    id=str(job_id),
                    state=JobState.parse(item.get("job_status")),
                    params=params,
                )
            )
        return jobs

    def list_cubes(self) -> list[CubeInstance]:
        """Return every cube with its segments."""
        cubes: list[CubeInstance] = []
        for item in self._get_pages("cubes", {}):
            name = item.get("name")
            if not name:
                continue
            segments = tuple(
                CubeSegment(
                    uuid=str(s.get("uuid") or ""),
                    name=str(s.get("name") or ""),
                    storage_location_identifier=s.get("storage_location_identifier")
                    or None,
                    last_build_job_id=s.get("last_build_job_id") or None,
                )
                for s in item.get("segments") or []
            )
            cubes.append(
                CubeInstance(name=name, status=item.get("status"), segments=segments)
            )
        return cubes
