from __future__ import annotations

import logging
from typing import Any, Optional

from protocol_testers.clients import HttpClient, make_http_client
from protocol_testers.config import HttpTesterConfig
from protocol_testers.errors import (
    InvalidRequestError,
    InvalidResponseError,
    InvalidResponseStatusError,
    type_name,
)
from protocol_testers.messages import HttpRequest, HttpResponse, HttpValidator
from protocol_testers.tester import RequestExecutor, instrument, require_client

log = logging.getLogger(__name__)

PROTOCOL = "http"

HTTP_STATUS_OK = 200


def validate(request: HttpRequest, response: HttpResponse) -> None:
    """Require 200 OK, then read the whole body so the download is timed."""
    if response.status_code != HTTP_STATUS_OK:
        raise InvalidResponseStatusError(
            f'invalid response status, want: "200 OK", got: "{response.status}"', response
        )

    response.drain()


class HttpTester:
    """Load tester for HTTP endpoints.

    ``validator`` replaces the default 200-and-drain check for every request
    of this tester; an ``HttpRequest.validator`` wins over both.

    ``timeout_seconds`` bounds the whole exchange, body download included.
    Running past it raises the backend's read timeout, not a validation error.
    """

    def __init__(
        self,
        timeout_seconds: float,
        validator: Optional[HttpValidator] = None,
        client: str = "requests",
    ) -> None:
        self.timeout = timeout_seconds
        self.validator = validator
        self.client_name = client
        self.client: Optional[HttpClient] = None

    @classmethod
    def from_config(cls, cfg: HttpTesterConfig, validator: Optional[HttpValidator] = None) -> "HttpTester":
        return cls(cfg.timeout_seconds, validator=validator, client=cfg.client)

    def before(self, options: Any = None) -> None:
        self.client = make_http_client(self.client_name, self.timeout)
        log.info("http_tester ready client=%s timeout=%s", self.client_name, self.timeout)

    def after(self, options: Any = None) -> None:
        pass

    def before_each(self, options: Any = None) -> None:
        pass

    def after_each(self, options: Any = None) -> None:
        pass

    def request_executor(self, options: Any = None) -> RequestExecutor:
        client = require_client(self.client, type(self).__name__)
        default_validator = self.validator or validate

        def execute(n: int, request: object) -> HttpResponse:
            if not isinstance(request, HttpRequest):
                raise InvalidRequestError(
                    f"invalid request: invalid type, want: HttpRequest, got: {type_name(request)}"
                )

            response = client.send(request)
            if not isinstance(response, HttpResponse):
                raise InvalidResponseError(
                    f"invalid response: invalid type, want: HttpResponse, got: {type_name(response)}"
                )

            validator = request.validator or default_validator
            try:
                validator(request, response)
            except InvalidResponseError as e:
                if e.response is None:
                    e.response = response
                raise
            except Exception as e:
                if response.timed_out:
                    raise
                raise InvalidResponseError(f"invalid response: {e}", response) from e
            finally:
                response.close()
            return response

        return instrument(PROTOCOL, execute)
