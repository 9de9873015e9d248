from __future__ import annotations

from typing import Union

from protocol_testers.clients.dns_client import DnsClient
from protocol_testers.clients.httpx_client import HttpxHttpClient
from protocol_testers.clients.requests_client import RequestsHttpClient
from protocol_testers.errors import ConfigError

HttpClient = Union[RequestsHttpClient, HttpxHttpClient]


def make_http_client(name: str, timeout_seconds: float) -> HttpClient:
    n = (name or "requests").strip().lower()
    if n == "httpx":
        return HttpxHttpClient(timeout_seconds)
    if n == "requests":
        return RequestsHttpClient(timeout_seconds)
    raise ConfigError(f"unsupported HTTP client {name!r}, want: requests|httpx")


__all__ = ["DnsClient", "HttpClient", "HttpxHttpClient", "RequestsHttpClient", "make_http_client"]
