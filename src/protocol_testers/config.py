from __future__ import annotations

import os
from dataclasses import dataclass


def _getenv(name: str, default: str | None = None) -> str:
    v = os.getenv(name, default)
    if v is None:
        raise RuntimeError(f"Missing required env var: {name}")
    return v


def _getenv_int(name: str, default: int) -> int:
    v = os.getenv(name)
    return int(v) if v is not None else default


def _getenv_float(name: str, default: float) -> float:
    v = os.getenv(name)
    return float(v) if v is not None else default


@dataclass(frozen=True)
class DnsTesterConfig:
    target: str  # host or host:port
    timeout_seconds: float
    protocol: str  # udp|tcp|tcp-tls

    @staticmethod
    def load() -> "DnsTesterConfig":
        return DnsTesterConfig(
            target=_getenv("DNS_TARGET"),
            timeout_seconds=_getenv_float("DNS_TIMEOUT_SECONDS", 2.0),
            protocol=_getenv("DNS_PROTOCOL", "udp"),
        )


@dataclass(frozen=True)
class HttpTesterConfig:
    timeout_seconds: float
    client: str  # requests|httpx

    @staticmethod
    def load() -> "HttpTesterConfig":
        return HttpTesterConfig(
            timeout_seconds=_getenv_float("HTTP_TIMEOUT_SECONDS", 3.0),
            client=_getenv("HTTP_CLIENT", "requests"),
        )


@dataclass(frozen=True)
class Config:
    log_level: str

    # metrics
    metrics_bind: str
    metrics_port: int

    # testers, only loaded when asked for
    dns: DnsTesterConfig | None
    http: HttpTesterConfig | None

    @staticmethod
    def load(dns: bool = False, http: bool = False) -> "Config":
        return Config(
            log_level=_getenv("LOG_LEVEL", "INFO"),

            metrics_bind=_getenv("METRICS_BIND", "127.0.0.1"),
            metrics_port=_getenv_int("METRICS_PORT", 9301),

            dns=DnsTesterConfig.load() if dns else None,
            http=HttpTesterConfig.load() if http else None,
        )
