from __future__ import annotations

import time
from typing import Iterator

import requests
import urllib3

from protocol_testers.messages import HttpRequest, HttpResponse

CHUNK_SIZE = 64 * 1024


def _read_chunks(r: requests.Response) -> Iterator[bytes]:
    # read1 returns whatever one socket read delivers, so a slow body is seen
    # chunk by chunk instead of blocking until CHUNK_SIZE bytes arrive
    while True:
        chunk = r.raw.read1(CHUNK_SIZE, decode_content=True)
        if not chunk:
            return
        yield chunk


class RequestsHttpClient:
    def __init__(self, timeout_seconds: float) -> None:
        self.timeout = timeout_seconds
        self.session = requests.Session()

    def send(self, request: HttpRequest) -> HttpResponse:
        deadline = time.monotonic() + self.timeout
        prepared = self.session.prepare_request(
            requests.Request(request.method, request.url, headers=request.headers, data=request.body)
        )
        # stream=True leaves the body for the validator to read
        r = self.session.send(prepared, timeout=self.timeout, stream=True)
        return HttpResponse(
            r.status_code,
            r.reason,
            r.headers,
            r,
            chunks=lambda: _read_chunks(r),
            close=r.close,
            read_errors=(urllib3.exceptions.HTTPError, requests.RequestException),
            deadline=deadline,
            timeout_error=lambda msg: requests.ReadTimeout(msg, request=prepared, response=r),
        )
