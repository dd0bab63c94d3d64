"""Test support mocks for the liebert_mpx client."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import requests

TESTDATA = Path(__file__).parent / "testdata"


def load_page(name: str) -> str:
    """Read a stored PDU page from ``tests/testdata``."""
    return (TESTDATA / name).read_text(encoding="utf-8")


@dataclass
class MockResponse:
    """Minimal stand-in for :class:`requests.Response`."""

    status_code: int = 200
    text: str = ""

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}", response=self)  # type: ignore[arg-type]


@dataclass
class MockSession:
    """Recorder mock for :class:`requests.Session`.

    GET requests are answered from ``pages``, keyed by URL path. Unknown paths
    return 404, known paths are answered with ``get_status``. POST requests are
    recorded and answered with ``post_status``.
    Setting ``error`` makes every request raise it, which simulates an
    unreachable PDU without touching the network.
    """

    pages: Dict[str, str] = field(default_factory=dict)
    get_status: int = 200
    post_status: int = 303
    error: Optional[BaseException] = None

    def __post_init__(self):
        self.get_calls: List[Dict[str, Any]] = []
        self.post_calls: List[Dict[str, Any]] = []
        self.closed = False

    @staticmethod
    def _path(url: str) -> str:
        return "/" + url.split("://", 1)[-1].split("/", 1)[-1]

    def get(self, url: str, **kwargs) -> MockResponse:
        self.get_calls.append({"url": url, **kwargs})
        if self.error is not None:
            raise self.error
        path = self._path(url)
        if path not in self.pages:
            return MockResponse(status_code=404, text="Not Found")
        return MockResponse(status_code=self.get_status, text=self.pages[path])

    def post(self, url: str, **kwargs) -> MockResponse:
        self.post_calls.append({"url": url, **kwargs})
        if self.error is not None:
            raise self.error
        return MockResponse(status_code=self.post_status)

    def close(self):
        self.closed = True

    @property
    def last_form(self) -> Dict[str, str]:
        """Form fields of the most recent POST as a dict."""
        return dict(self.post_calls[-1]["data"])


RECEPTACLE_LIST_PATH = "/rpc/rpcReceptacleListData.htm"
ACTIVE_ALARMS_PATH = "/rpc/rpcActiveAlarms.htm"
PDU_INFO_PATH = "/dp/std:1.0.0_0.0.0/rpc/rpcAps.htm"
BRANCH_INFO_PATH = "/dp/std:1.2.0_0.0.0/rpc/rpcRem.htm"
RECEPTACLE_INFO_PATH = "/dp/std:1.2.3_0.0.0/rpc/rpcReceptacle.htm"


def fixture_pages() -> Dict[str, str]:
    """All stored pages at the paths a PDU serves them from."""
    return {
        RECEPTACLE_LIST_PATH: load_page("receptacle-list.htm"),
        ACTIVE_ALARMS_PATH: load_page("events-test.htm"),
        PDU_INFO_PATH: load_page("pdu-info.htm"),
        BRANCH_INFO_PATH: load_page("branch-info.htm"),
        RECEPTACLE_INFO_PATH: load_page("receptacle-info.htm"),
    }
