"""HTTP access to catalog metadata APIs."""

from __future__ import annotations

from typing import Any

import requests
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_fixed

from folio.config.settings import get_settings
from folio.utils.log_utils import logger


_TRANSIENT_ERRORS = (requests.ConnectionError, requests.Timeout)


class CatalogClient:
    """Thin JSON-over-HTTP client shared by the catalog resolvers.

    Connection errors and timeouts are retried a few times with a fixed wait;
    HTTP error statuses and undecodable bodies are raised immediately.
    """

    def __init__(
        self,
        session: requests.Session | None = None,
        *,
        timeout: float | None = None,
        retries: int | None = None,
        retry_wait: float = 1.0,
        user_agent: str | None = None,
    ) -> None:
        settings = get_settings()
        self.timeout = timeout if timeout is not None else settings.http.timeout
        self.retries = retries if retries is not None else settings.http.retries
        self.retry_wait = retry_wait
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "User-Agent": user_agent or settings.http.user_agent,
                "Accept": "application/json",
            }
        )

    def get_json(self, url: str, *, timeout: float | None = None) -> Any:
        """GET `url` and decode the JSON body.

        Raises:
            requests.RequestException: On network failure, an error status, or
                a body that is not JSON.
        """
        fetch = retry(
            stop=stop_after_attempt(self.retries),
            wait=wait_fixed(self.retry_wait),
            retry=retry_if_exception_type(_TRANSIENT_ERRORS),
            reraise=True,
        )(self._get_json_once)
        return fetch(url, timeout if timeout is not None else self.timeout)

    def _get_json_once(self, url: str, timeout: float) -> Any:
        logger.debug(f"GET {url}")
        response = self.session.get(url, timeout=timeout)
        response.raise_for_status()
        try:
            return response.json()
        except ValueError as exc:
            raise requests.RequestException(f"Response from {url} is not JSON: {exc}") from exc
