from typing import Iterator, List, Tuple

import httpx
import pytest

from cmap import CMAP, CMAPClient, CMAPConfig


class StubServer:
    """Answers CMAP requests with canned CSV chosen by a substring of the call."""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.routes: List[Tuple[str, str, int]] = []

    def add(self, needle: str, body: str, status: int = 200) -> None:
        self.routes.append((needle, body, status))

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        params = request.url.params
        text = params.get("query") or params.get("spName") or ""
        for needle, body, status in self.routes:
            if needle in text:
                return httpx.Response(status, text=body)
        return httpx.Response(404, text=f"no stub for {text!r}")

    @property
    def queries(self) -> List[str]:
        return [r.url.params.get("query", "") for r in self.requests]


@pytest.fixture
def stub() -> StubServer:
    return StubServer()


@pytest.fixture
def config() -> CMAPConfig:
    return CMAPConfig(api_key="test-key")


@pytest.fixture
def client(stub: StubServer, config: CMAPConfig) -> Iterator[CMAPClient]:
    with CMAPClient(config, transport=httpx.MockTransport(stub)) as c:
        yield c


@pytest.fixture
def api(stub: StubServer, config: CMAPConfig) -> Iterator[CMAP]:
    with CMAP(config=config, transport=httpx.MockTransport(stub)) as c:
        yield c
