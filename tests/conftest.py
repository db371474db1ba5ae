from __future__ import annotations

import threading
from typing import Dict, List, Optional, Union

import pytest
import requests
from requests.structures import CaseInsensitiveDict


class FakeResponse:
    """Just enough of ``requests.Response`` for the analyzer."""

    def __init__(
        self,
        status_code: int = 200,
        headers: Optional[Dict[str, str]] = None,
        text: str = "",
        url: str = "",
    ) -> None:
        self.status_code = status_code
        self.headers = CaseInsensitiveDict(headers or {})
        self.text = text
        self.url = url

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error for url: {self.url}")


Outcome = Union[FakeResponse, BaseException]


class FakeHead:
    """Stand-in for ``requests.head`` that serves canned outcomes per URL."""

    def __init__(self) -> None:
        self.outcomes: Dict[str, Outcome] = {}
        self.calls: List[str] = []
        self.kwargs: List[dict] = []
        self._lock = threading.Lock()

    def __call__(self, url: str, **kwargs) -> FakeResponse:
        with self._lock:
            self.calls.append(url)
            self.kwargs.append(kwargs)
        outcome = self.outcomes.get(url)
        if outcome is None:
            raise requests.ConnectionError(f"no route to {url}")
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


@pytest.fixture
def fake_head(monkeypatch) -> FakeHead:
    head = FakeHead()
    monkeypatch.setattr(requests, "head", head)
    return head


@pytest.fixture
def make_response():
    return FakeResponse
