"""Asynchronous host name resolution built on dnspython.

A query looks up the A and AAAA records of a name in a background thread.
From the addresses found it chooses one according to the resolver's mode,
and hands it to a callback, or ``None`` if nothing was found.
"""

from __future__ import annotations

import enum
import ipaddress
import logging
import threading
from typing import Callable, Iterable, Sequence

import dns.exception
import dns.resolver

from .netutils import SockAddr

__all__ = ["ResolveMode", "choose_address", "ResolvQuery", "Resolver"]

log = logging.getLogger(__name__)

_QUERY_LIFETIME = 30.0
_LOCAL_NAMESERVER_PREFIXES = ("127.0.0.1", "::1")

Callback = Callable[[SockAddr | None], object]


class ResolveMode(enum.IntEnum):
    """Which record types are queried and which address family is preferred."""

    IPV4_ONLY = 0
    IPV6_ONLY = 1
    IPV4_FIRST = 2
    IPV6_FIRST = 3


def _first_of_family(responses: Sequence[SockAddr], family: int) -> SockAddr | None:
    return next((addr for addr in responses if addr.family == family), None)


def choose_address(responses: Sequence[SockAddr], mode: ResolveMode) -> SockAddr | None:
    """Pick the best address from ``responses`` for ``mode``.

    IPV4_FIRST and IPV6_FIRST take the first address of the preferred family;
    otherwise, and when no address of that family exists, the first address
    is taken. An empty sequence gives None.
    """
    import socket

    chosen = None
    if mode is ResolveMode.IPV4_FIRST:
        chosen = _first_of_family(responses, socket.AF_INET)
    elif mode is ResolveMode.IPV6_FIRST:
        chosen = _first_of_family(responses, socket.AF_INET6)
    if chosen is not None:
        return chosen
    return responses[0] if responses else None


class ResolvQuery:
    """A pending lookup started by :meth:`Resolver.query`."""

    def __init__(self, hostname: str, port: int) -> None:
        self.hostname = hostname
        self.port = port
        self._cancelled = threading.Event()
        self._finished = threading.Event()

    def cancel(self) -> None:
        """Stop the query from calling its callback."""
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        """True once :meth:`cancel` has been called."""
        return self._cancelled.is_set()

    def wait(self, timeout: float | None = None) -> bool:
        """Wait for the lookup to end; return True if it ended in time."""
        return self._finished.wait(timeout)


class Resolver:
    """Resolves names through the system's or the given name servers."""

    def __init__(self, nameservers: Iterable[str] | None = None, ipv6first: bool = False) -> None:
        self.mode = ResolveMode.IPV6_FIRST if ipv6first else ResolveMode.IPV4_FIRST
        if nameservers is None:
            self._dns = dns.resolver.Resolver(configure=True)
            servers: list[str] = []
        else:
            servers = list(nameservers)
            self._dns = dns.resolver.Resolver(configure=False)
            self._dns.nameservers = servers
        self._dns.lifetime = _QUERY_LIFETIME
        self._source: str | None = None
        if len(servers) == 1 and servers[0].startswith(_LOCAL_NAMESERVER_PREFIXES):
            try:
                ipaddress.ip_address(servers[0])
            except ValueError:
                log.error("bind_to_address: %s is not an IP address", servers[0])
            else:
                log.debug("bind UDP resolver to %s", servers[0])
                self._source = servers[0]

    def _lookup(self, hostname: str, rdtype: str, port: int) -> list[SockAddr]:
        try:
            answer = self._dns.resolve(hostname, rdtype, source=self._source)
        except dns.exception.DNSException as exc:
            log.debug("%s resolv: %s", "IPv4" if rdtype == "A" else "IPv6", exc)
            return []
        found = []
        for rdata in answer:
            try:
                found.append(SockAddr.from_ip(rdata.address, port))
            except ValueError:
                log.error("invalid address in DNS response: %r", rdata.address)
        return found

    def _collect(self, hostname: str, port: int) -> list[SockAddr]:
        responses: list[SockAddr] = []
        if self.mode is not ResolveMode.IPV6_ONLY:
            responses.extend(self._lookup(hostname, "A", port))
        if self.mode is not ResolveMode.IPV4_ONLY:
            responses.extend(self._lookup(hostname, "AAAA", port))
        return responses

    def resolve(self, hostname: str, port: int = 0) -> SockAddr | None:
        """Look ``hostname`` up now and return the chosen address, or None."""
        return choose_address(self._collect(hostname, port), self.mode)

    def query(self, hostname: str, callback: Callback, port: int = 0) -> ResolvQuery:
        """Start looking ``hostname`` up in the background.

        Unless the query is cancelled first, ``callback`` is called once with
        the chosen address, or with None when nothing was found.
        """
        handle = ResolvQuery(hostname, port)

        def run() -> None:
            try:
                best = self.resolve(hostname, port)
                if not handle.cancelled:
                    callback(best)
            except Exception:
                log.exception("DNS query callback for %s failed", hostname)
            finally:
                handle._finished.set()

        threading.Thread(target=run, name=f"resolv-{hostname}", daemon=True).start()
        return handle