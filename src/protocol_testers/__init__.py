from protocol_testers.dns_tester import DnsTester
from protocol_testers.errors import (
    ConfigError,
    InvalidRequestError,
    InvalidResponseError,
    InvalidResponseStatusError,
    TesterError,
)
from protocol_testers.http_tester import HttpTester
from protocol_testers.messages import DnsRequest, HttpRequest, HttpResponse, Request, Response
from protocol_testers.tester import RequestExecutor, Tester

__all__ = [
    "ConfigError",
    "DnsRequest",
    "DnsTester",
    "HttpRequest",
    "HttpResponse",
    "HttpTester",
    "InvalidRequestError",
    "InvalidResponseError",
    "InvalidResponseStatusError",
    "Request",
    "RequestExecutor",
    "Response",
    "Tester",
    "TesterError",
]
