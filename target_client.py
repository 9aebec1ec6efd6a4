"""REST client for saving monthly targets and listing branches."""
import logging

import requests

from target_config import API_BASE_URL, API_TIMEOUT, BRANCHES_PATH, MONTHLY_TARGETS_PATH
from target_distribution import TargetSpecification, to_request_body

logger = logging.getLogger(__name__)

NO_CACHE_HEADERS = {
    "Content-Type": "application/json",
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


class TargetApiError(Exception):
    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code


class MonthlyTargetClient:
    def __init__(self, base_url: str = API_BASE_URL, timeout: float = API_TIMEOUT, session=None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _request(self, method: str, path: str, **kwargs):
        url = f"{self.base_url}{path}"
        logger.info("%s %s", method, url)
        try:
            res = self.session.request(method, url, headers=NO_CACHE_HEADERS, timeout=self.timeout, **kwargs)
            res.raise_for_status()
        except requests.exceptions.RequestException as exc:
            status = getattr(getattr(exc, "response", None), "status_code", None)
            logger.error("%s %s failed: %s", method, url, exc)
            raise TargetApiError(f"{method} {path} failed: {exc}", status_code=status) from exc

        if not res.content:
            return {}
        try:
            return res.json()
        except ValueError as exc:
            raise TargetApiError(f"{method} {path} returned invalid JSON", status_code=res.status_code) from exc

    def submit(self, spec: TargetSpecification, daily_targets: dict | None = None) -> dict:
        """
        POST the target and its daily breakdown. No retry: on failure the
        caller keeps `spec` as-is so the form can be resubmitted.
        """
        body = to_request_body(spec, daily_targets)
        result = self._request("POST", MONTHLY_TARGETS_PATH, json=body)
        logger.info(
            "Saved monthly target for branch %s %02d/%d (%d daily targets)",
            spec.branch_id, spec.month, spec.year, len(body["dailyTargets"]),
        )
        return result

    def list_branches(self) -> list:
        branches = self._request("GET", BRANCHES_PATH)
        return branches if isinstance(branches, list) else []
