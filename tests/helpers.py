"""
Shared test doubles for outbound HTTP
"""
from __future__ import annotations

import json
from typing import Callable, List

import httpx


class RecordingTransport:
    """MockTransport handler that remembers every request it served"""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.handler = handler
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self))

    def paths(self) -> List[str]:
        return [r.url.path for r in self.requests]


def request_json(request: httpx.Request) -> dict:
    return json.loads(request.content or b"{}")


def completion(content: str) -> httpx.Response:
    return httpx.Response(200, json={"choices": [{"message": {"content": content}}]})


def statement_result(columns: List[str], rows: List[list], status_code: int = 200) -> httpx.Response:
    return httpx.Response(
        status_code,
        json={
            "resultSetMetaData": {"numRows": len(rows), "rowType": [{"name": c} for c in columns]},
            "data": rows,
        },
    )
