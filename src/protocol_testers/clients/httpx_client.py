from __future__ import annotations

import time

from protocol_testers.messages import HttpRequest, HttpResponse

try:
    import httpx
except ImportError:  # pragma: no cover
    httpx = None


class HttpxHttpClient:
    def __init__(self, timeout_seconds: float) -> None:
        if httpx is None:
            raise RuntimeError("httpx is not installed. Install with: pip install -e '.[httpx]'")
        self.timeout = timeout_seconds
        self.client = httpx.Client(timeout=timeout_seconds, follow_redirects=True)

    def send(self, request: HttpRequest) -> HttpResponse:
        deadline = time.monotonic() + self.timeout
        req = self.client.build_request(
            request.method, request.url, headers=request.headers, content=request.body
        )
        r = self.client.send(req, stream=True)
        return HttpResponse(
            r.status_code,
            r.reason_phrase,
            r.headers,
            r,
            chunks=r.iter_bytes,
            close=r.close,
            read_errors=(httpx.HTTPError, httpx.StreamError),
            deadline=deadline,
            timeout_error=lambda msg: httpx.ReadTimeout(msg, request=req),
        )
