"""
Envelopes that cross the harness boundary.

The harness only sees ``Request`` and ``Response``; each tester accepts the
variant it owns and rejects the other with ``InvalidRequestError``.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, Mapping, Optional, Tuple, Type, Union

import dns.message

from protocol_testers.errors import InvalidResponseError

# Legacy "don't check" marker for DnsRequest.rcode; None is preferred.
RCODE_UNCHECKED = -1


@dataclass
class DnsRequest:
    message: dns.message.Message
    rcode: Optional[int] = None

    def __post_init__(self) -> None:
        if self.rcode == RCODE_UNCHECKED:
            self.rcode = None

    @classmethod
    def query(
        cls,
        name: str,
        rdtype: Union[str, int] = "A",
        rcode: Optional[int] = None,
    ) -> "DnsRequest":
        return cls(message=dns.message.make_query(name, rdtype), rcode=rcode)

    @property
    def id(self) -> int:
        return self.message.id


HttpValidator = Callable[["HttpRequest", "HttpResponse"], None]


@dataclass
class HttpRequest:
    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[Union[bytes, str]] = None
    # overrides the tester's validator for this request only
    validator: Optional[HttpValidator] = None


class HttpResponse:
    """Backend-neutral view of a streamed HTTP response.

    The body is left on the wire until a validator reads it, so the time spent
    downloading it lands inside the measured request latency. ``deadline`` is a
    ``time.monotonic()`` instant bounding the whole exchange; once it passes,
    reading stops and ``timeout_error`` is raised as a transport error.
    """

    def __init__(
        self,
        status_code: int,
        reason: Optional[str],
        headers: Mapping[str, str],
        raw: Any,
        chunks: Callable[[], Iterator[bytes]],
        close: Callable[[], None],
        read_errors: Tuple[Type[BaseException], ...] = (),
        deadline: Optional[float] = None,
        timeout_error: Callable[[str], BaseException] = TimeoutError,
    ) -> None:
        self.status_code = status_code
        self.reason = reason or ""
        self.headers = headers
        self.raw = raw
        self.bytes_read = 0
        self.drained = False
        self.timed_out = False
        self.deadline = deadline
        self._chunks = chunks
        self._close = close
        self._read_errors = read_errors
        self._timeout_error = timeout_error

    @property
    def status(self) -> str:
        return f"{self.status_code} {self.reason}".rstrip()

    def iter_body(self) -> Iterator[bytes]:
        if self.drained:
            return
        chunks = self._chunks()
        while True:
            try:
                chunk = next(chunks, None)
            except self._read_errors as e:
                raise InvalidResponseError(
                    f"invalid response: body read failed after {self.bytes_read} bytes: {e}", self
                ) from e
            if chunk is None:
                break
            self.bytes_read += len(chunk)
            self._check_deadline()
            yield chunk
        self.drained = True

    def _check_deadline(self) -> None:
        if self.deadline is None or time.monotonic() <= self.deadline:
            return
        self.timed_out = True
        self.close()
        raise self._timeout_error(
            f"read timeout: body still incomplete at deadline after {self.bytes_read} bytes"
        )

    def drain(self) -> int:
        for _ in self.iter_body():
            pass
        return self.bytes_read

    def close(self) -> None:
        self._close()

    def __repr__(self) -> str:
        return f"HttpResponse(status={self.status!r}, bytes_read={self.bytes_read})"


Request = Union[DnsRequest, HttpRequest]
Response = Union[dns.message.Message, HttpResponse]
