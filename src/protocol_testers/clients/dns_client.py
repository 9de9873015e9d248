from __future__ import annotations

import logging
import socket
from typing import Optional, Tuple

import dns.inet
import dns.message
import dns.query

from protocol_testers.errors import ConfigError

log = logging.getLogger(__name__)

DEFAULT_PORTS = {"udp": 53, "tcp": 53, "tcp-tls": 853}

# protocol name -> (transport, address family); the 4/6 suffixes pin the family
_PROTOCOLS = {
    "udp": ("udp", socket.AF_UNSPEC),
    "udp4": ("udp", socket.AF_INET),
    "udp6": ("udp", socket.AF_INET6),
    "tcp": ("tcp", socket.AF_UNSPEC),
    "tcp4": ("tcp", socket.AF_INET),
    "tcp6": ("tcp", socket.AF_INET6),
    "tcp-tls": ("tcp-tls", socket.AF_UNSPEC),
    "tcp4-tls": ("tcp-tls", socket.AF_INET),
    "tcp6-tls": ("tcp-tls", socket.AF_INET6),
    "tls": ("tcp-tls", socket.AF_UNSPEC),
}


def parse_protocol(protocol: str) -> Tuple[str, int]:
    """Map a protocol name to its transport and address family."""
    p = (protocol or "udp").strip().lower()
    if p not in _PROTOCOLS:
        raise ConfigError(f"unsupported DNS protocol {protocol!r}, want one of: {', '.join(_PROTOCOLS)}")
    return _PROTOCOLS[p]


def parse_target(target: str, default_port: int) -> Tuple[str, int]:
    """Split ``host``, ``host:port`` or ``[v6addr]:port`` into host and port."""
    t = target.strip()
    if not t:
        raise ConfigError("empty DNS target")

    if t.startswith("["):
        host, sep, rest = t[1:].partition("]")
        if not sep or not host:
            raise ConfigError(f"invalid DNS target {target!r}")
        if not rest:
            return host, default_port
        if not rest.startswith(":"):
            raise ConfigError(f"invalid DNS target {target!r}")
        port_text = rest[1:]
    elif t.count(":") == 1:
        host, port_text = t.split(":")
    else:
        # bare hostname, IPv4 or unbracketed IPv6
        return t, default_port

    try:
        port = int(port_text)
    except ValueError:
        raise ConfigError(f"invalid port in DNS target {target!r}") from None
    if not 0 < port < 65536:
        raise ConfigError(f"port out of range in DNS target {target!r}")
    return host, port


def _resolve(host: str, port: int, family: int = socket.AF_UNSPEC) -> str:
    if dns.inet.is_address(host):
        if family != socket.AF_UNSPEC and dns.inet.af_for_address(host) != family:
            raise ConfigError(f"DNS target {host!r} does not match the protocol's address family")
        return host
    try:
        infos = socket.getaddrinfo(host, port, family=family, type=socket.SOCK_DGRAM)
    except socket.gaierror as e:
        raise ConfigError(f"cannot resolve DNS target host {host!r}: {e}") from e
    return infos[0][4][0]


class DnsClient:
    """One-shot DNS exchanges against a fixed server.

    dnspython opens a fresh socket per query, so a single instance is safe to
    share between threads.
    """

    def __init__(self, target: str, timeout_seconds: float, protocol: str = "udp") -> None:
        self.protocol, self.family = parse_protocol(protocol)
        host, self.port = parse_target(target, DEFAULT_PORTS[self.protocol])
        self.where = _resolve(host, self.port, self.family)
        self.server_hostname: Optional[str] = None if dns.inet.is_address(host) else host
        self.timeout = timeout_seconds

        log.debug("dns_client protocol=%s where=%s port=%s timeout=%s",
                  self.protocol, self.where, self.port, self.timeout)

    def send(self, message: dns.message.Message) -> dns.message.Message:
        if self.protocol == "udp":
            return dns.query.udp(message, self.where, timeout=self.timeout, port=self.port)
        if self.protocol == "tcp":
            return dns.query.tcp(message, self.where, timeout=self.timeout, port=self.port)
        return dns.query.tls(
            message, self.where, timeout=self.timeout, port=self.port,
            server_hostname=self.server_hostname,
        )
