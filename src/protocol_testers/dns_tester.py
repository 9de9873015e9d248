from __future__ import annotations

import logging
from typing import Any, Optional

import dns.message
import dns.rcode

from protocol_testers.clients import DnsClient
from protocol_testers.config import DnsTesterConfig
from protocol_testers.errors import InvalidRequestError, InvalidResponseError, type_name
from protocol_testers.messages import DnsRequest
from protocol_testers.tester import RequestExecutor, instrument, require_client

log = logging.getLogger(__name__)

PROTOCOL = "dns"


def rcode_name(value: int) -> str:
    try:
        return dns.rcode.to_text(value)
    except ValueError:
        return str(value)


def validate(request: DnsRequest, response: dns.message.Message) -> None:
    """Raise InvalidResponseError unless ``response`` answers ``request``."""
    if request.id != response.id:
        raise InvalidResponseError(
            f"invalid response: id {response.id}, want: {request.id}", response
        )

    if request.rcode is not None and request.rcode != response.rcode():
        raise InvalidResponseError(
            f'invalid response: invalid rcode want: "{rcode_name(request.rcode)}", '
            f'got: "{rcode_name(response.rcode())}"',
            response,
        )


class DnsTester:
    """Load tester for a single DNS server."""

    def __init__(self, target: str, timeout_seconds: float, protocol: str = "udp") -> None:
        self.target = target
        self.timeout = timeout_seconds
        self.protocol = protocol
        self.client: Optional[DnsClient] = None

    @classmethod
    def from_config(cls, cfg: DnsTesterConfig) -> "DnsTester":
        return cls(cfg.target, cfg.timeout_seconds, cfg.protocol)

    def before(self, options: Any = None) -> None:
        self.client = DnsClient(self.target, self.timeout, self.protocol)
        log.info("dns_tester ready target=%s protocol=%s timeout=%s",
                 self.target, self.client.protocol, self.timeout)

    def after(self, options: Any = None) -> None:
        pass

    def before_each(self, options: Any = None) -> None:
        pass

    def after_each(self, options: Any = None) -> None:
        pass

    def request_executor(self, options: Any = None) -> RequestExecutor:
        client = require_client(self.client, type(self).__name__)

        def execute(n: int, request: object) -> dns.message.Message:
            if not isinstance(request, DnsRequest):
                raise InvalidRequestError(
                    f"invalid request: invalid type, want: DnsRequest, got: {type_name(request)}"
                )

            response = client.send(request.message)
            if not isinstance(response, dns.message.Message):
                raise InvalidResponseError(
                    "invalid response: invalid type, want: dns.message.Message, "
                    f"got: {type_name(response)}"
                )

            validate(request, response)
            return response

        return instrument(PROTOCOL, execute)
