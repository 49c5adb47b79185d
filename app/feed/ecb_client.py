from __future__ import annotations

import logging
from collections.abc import Mapping

from app.feed.base import FetchError
from app.feed.http_client import HTTPClient, HTTPClientConfig, HTTPClientError

logger = logging.getLogger(__name__)


class EcbFeedClientConfig:
    """Configuration parameters for the ECB feed client."""

    def __init__(
        self,
        feed_url: str,
        timeout: float,
        max_retries: int = 3,
        backoff_seconds: float = 0.5,
    ) -> None:
        self.feed_url = feed_url
        self.timeout = timeout
        self.max_retries = max_retries
        self.backoff_seconds = backoff_seconds


class EcbFeedClient:
    """Downloads the ECB historical reference rates document."""

    name = "ecb"

    def __init__(
        self,
        config: EcbFeedClientConfig,
        client: HTTPClient | None = None,
    ) -> None:
        self._config = config
        self._client = client or HTTPClient(
            HTTPClientConfig(
                timeout=config.timeout,
                max_retries=config.max_retries,
                backoff_seconds=config.backoff_seconds,
            )
        )

    @classmethod
    def from_config(cls, config: Mapping[str, str | int | float]) -> EcbFeedClient:
        client_config = EcbFeedClientConfig(
            feed_url=str(config.get("FEED_URL")),
            timeout=float(config.get("REQUEST_TIMEOUT_SECONDS", 30)),
            max_retries=int(config.get("FEED_MAX_RETRIES", 3)),
            backoff_seconds=float(config.get("FEED_BACKOFF_SECONDS", 0.5)),
        )
        return cls(client_config)

    @property
    def feed_url(self) -> str:
        return self._config.feed_url

    def fetch(self) -> bytes:
        try:
            payload = self._client.get_bytes(self._config.feed_url)
        except HTTPClientError as exc:
            raise FetchError(str(exc)) from exc

        logger.debug("Downloaded %d bytes from %s", len(payload), self._config.feed_url)
        return payload
