"""
Plugin surface shared by every protocol tester.

The harness drives a tester through four lifecycle hooks and asks it for a
``RequestExecutor``, which it then calls once per generated request, possibly
from many threads at once. An executor returns the response on success and
raises otherwise:

* ``InvalidRequestError``: the request was not this tester's envelope; no
  network call was made.
* ``InvalidResponseError``: the exchange happened but validation failed; the
  received response is on ``err.response``.
* anything else: a transport failure from the underlying client, unmodified.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Optional, Protocol, TypeVar

from protocol_testers.errors import InvalidRequestError, InvalidResponseError, TesterError
from protocol_testers.metrics import tester_latency_seconds, tester_requests_total

log = logging.getLogger(__name__)

RequestExecutor = Callable[[int, object], object]

C = TypeVar("C")


class Tester(Protocol):
    def before(self, options: Any = None) -> None: ...

    def after(self, options: Any = None) -> None: ...

    def before_each(self, options: Any = None) -> None: ...

    def after_each(self, options: Any = None) -> None: ...

    def request_executor(self, options: Any = None) -> RequestExecutor: ...


def require_client(client: Optional[C], owner: str) -> C:
    if client is None:
        raise TesterError(f"{owner}.before() must be called before request_executor()")
    return client


def instrument(protocol: str, execute: RequestExecutor) -> RequestExecutor:
    """Wrap ``execute`` to count outcomes and time every call.

    The sequence number is only used to tag log lines.
    """

    def run(n: int, request: object) -> object:
        extra = {"protocol": protocol, "seq": n}
        outcome = "error"
        t0 = time.perf_counter()
        try:
            response = execute(n, request)
            outcome = "ok"
            return response
        except InvalidRequestError as e:
            outcome = "invalid_request"
            log.warning("invalid_request protocol=%s seq=%s err=%s", protocol, n, e, extra=extra)
            raise
        except InvalidResponseError as e:
            outcome = "invalid_response"
            log.debug("invalid_response protocol=%s seq=%s err=%s", protocol, n, e, extra=extra)
            raise
        except Exception as e:
            log.debug("transport_error protocol=%s seq=%s type=%s err=%s",
                      protocol, n, type(e).__name__, e, extra=extra)
            raise
        finally:
            tester_latency_seconds.labels(protocol=protocol).observe(time.perf_counter() - t0)
            tester_requests_total.labels(protocol=protocol, outcome=outcome).inc()

    return run
