"""
app/services/dataset_loader.py

Reads the raw inventory dataset from a local path or an HTTP(S) URL.
"""

from __future__ import annotations

import logging
from pathlib import Path
from urllib.parse import urlparse

import requests

logger = logging.getLogger(__name__)

_HTTP_SCHEMES = {"http", "https"}


class DatasetLoadError(RuntimeError):
    """
    Raised when the raw dataset cannot be fetched or read.
    """


class DatasetLoader:
    """
    Fetches dataset text. One attempt per call; failures are not retried.

    A session passed in by the caller is left open; one created here is
    closed by :meth:`close`.
    """

    def __init__(
        self,
        *,
        timeout_seconds: float = 15.0,
        session: requests.Session | None = None,
        encoding: str = "utf-8",
    ) -> None:
        self._timeout_seconds = timeout_seconds
        self._owns_session = session is None
        self._session = session or requests.Session()
        self._encoding = encoding

    def __enter__(self) -> DatasetLoader:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_session:
            self._session.close()

    def read_text(self, source: str | Path) -> str:
        """
        Return the dataset text found at *source*.

        Raises
        ------
        DatasetLoadError
            When the source is malformed, or the file or URL cannot be read
            or decoded.
        """

        source_str = str(source)
        try:
            remote = is_url(source_str)
        except ValueError as exc:
            raise DatasetLoadError(f"Malformed dataset source {source_str!r}: {exc}") from exc

        if remote:
            return self._fetch_url(source_str)
        return self._read_file(Path(source_str))

    def _fetch_url(self, url: str) -> str:
        try:
            response = self._session.get(url, timeout=self._timeout_seconds)
        except (requests.RequestException, ValueError) as exc:
            # urllib3 URL parsing errors can surface as plain ValueError.
            raise DatasetLoadError(f"Request to {url} failed: {exc}") from exc

        if not 200 <= response.status_code < 300:
            raise DatasetLoadError(
                f"Request to {url} returned HTTP {response.status_code}."
            )

        try:
            text = response.content.decode(self._encoding)
        except UnicodeDecodeError as exc:
            raise DatasetLoadError(f"Dataset at {url} is not {self._encoding} encoded.") from exc

        logger.debug("fetched url=%s bytes=%d", url, len(response.content))
        return text

    def _read_file(self, path: Path) -> str:
        try:
            text = path.read_text(encoding=self._encoding)
        except UnicodeDecodeError as exc:
            raise DatasetLoadError(f"Dataset {path} is not {self._encoding} encoded.") from exc
        except (OSError, ValueError) as exc:
            raise DatasetLoadError(f"Dataset {path} could not be read: {exc}") from exc

        logger.debug("read file=%s chars=%d", path, len(text))
        return text


def is_url(source: str) -> bool:
    """
    True for http(s) sources. Raises ValueError for an unparseable URL.
    """

    return urlparse(source).scheme.lower() in _HTTP_SCHEMES
