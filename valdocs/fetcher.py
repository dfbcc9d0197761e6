# Conditional HTML fetcher for the Jötunn source pages.
# Sends If-None-Match with the last ETag so unchanged pages cost a 304 and
# no parsing; changed pages come back as a BeautifulSoup tree that remembers
# its own URL for resolving relative image links.

import logging
from dataclasses import dataclass
from typing import Optional, Union

import requests
from bs4 import BeautifulSoup

from valdocs.config import DEFAULT_TIMEOUT_SECONDS, DEFAULT_USER_AGENT

logger = logging.getLogger(__name__)


class FetchError(RuntimeError):
    """A source page could not be retrieved (transport error or bad status)."""

    def __init__(self, url: str, message: str):
        super().__init__(f"{url}: {message}")
        self.url = url


@dataclass(frozen=True)
class Document:
    soup: BeautifulSoup
    base_url: Optional[str] = None

    @classmethod
    def from_html(cls, html: str, base_url: Optional[str] = None) -> "Document":
        return cls(BeautifulSoup(html, "html.parser"), base_url)


@dataclass(frozen=True)
class Unchanged:
    token: Optional[str]


@dataclass(frozen=True)
class Fetched:
    document: Document
    token: Optional[str]


FetchResult = Union[Unchanged, Fetched]


class DocumentFetcher:
    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        user_agent: str = DEFAULT_USER_AGENT,
        session: Optional[requests.Session] = None,
    ):
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers["User-Agent"] = user_agent

    def fetch(self, url: str, previous_token: Optional[str] = None) -> FetchResult:
        """
        GET `url`, revalidating against `previous_token` when one is known.

        Returns Unchanged on 304 (token kept as-is) or Fetched with the parsed
        page and the response ETag. A response without an ETag keeps the
        previous token. Raises FetchError on any other failure.
        """
        headers = {}
        if previous_token:
            headers["If-None-Match"] = previous_token

        try:
            response = self.session.get(url, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            raise FetchError(url, str(e)) from e

        if response.status_code == 304:
            logger.debug("[NOT MODIFIED] %s", url)
            return Unchanged(previous_token)

        try:
            response.raise_for_status()
        except requests.HTTPError as e:
            raise FetchError(url, f"HTTP {response.status_code}") from e

        base_url = response.url or url
        document = Document.from_html(response.text, base_url)
        token = response.headers.get("ETag") or previous_token
        logger.debug("[FETCHED] %s (etag=%s)", url, token)
        return Fetched(document, token)

    def close(self) -> None:
        self.session.close()
