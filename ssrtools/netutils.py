"""Socket address helpers: comparison, host name validation and resolution."""

from __future__ import annotations

import ipaddress
import logging
import socket
import time
from dataclasses import dataclass
from typing import Union

__all__ = [
    "INET_SIZE",
    "INET6_SIZE",
    "SockAddr",
    "sockaddr_cmp",
    "sockaddr_cmp_addr",
    "validate_hostname",
    "get_sockaddr",
    "get_sockaddr_len",
    "set_reuseport",
    "bind_to_address",
]

log = logging.getLogger(__name__)

INET_SIZE = 4
INET6_SIZE = 16

_SOCKADDR_IN_LEN = 16
_SOCKADDR_IN6_LEN = 28
_SO_REUSEPORT = getattr(socket, "SO_REUSEPORT", 15)
_VALID_LABEL_CHARS = frozenset(
    "-0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ_abcdefghijklmnopqrstuvwxyz"
)
_RESOLVE_ATTEMPTS = 7

Port = Union[int, str, None]


@dataclass(frozen=True)
class SockAddr:
    """An IPv4 or IPv6 socket address: family, packed address bytes and port."""

    family: int
    address: bytes
    port: int = 0
    flowinfo: int = 0
    scope_id: int = 0

    @classmethod
    def from_ip(cls, host: str, port: int = 0) -> SockAddr:
        """Build an address from an IP literal and a port number."""
        ip = ipaddress.ip_address(host)
        family = socket.AF_INET if ip.version == 4 else socket.AF_INET6
        return cls(family, ip.packed, port & 0xFFFF)

    @classmethod
    def from_tuple(cls, family: int, sockaddr: tuple) -> SockAddr:
        """Build an address from a ``(host, port, ...)`` tuple as sockets return it."""
        host, port = sockaddr[0], sockaddr[1]
        if family == socket.AF_INET6:
            flowinfo = sockaddr[2] if len(sockaddr) > 2 else 0
            scope_id = sockaddr[3] if len(sockaddr) > 3 else 0
            packed = socket.inet_pton(socket.AF_INET6, host.split("%", 1)[0])
            return cls(socket.AF_INET6, packed, port, flowinfo, scope_id)
        return cls(family, socket.inet_pton(family, host), port)

    @property
    def host(self) -> str:
        """The address in its textual form."""
        return socket.inet_ntop(self.family, self.address)

    def to_tuple(self) -> tuple:
        """Return the tuple that ``socket.connect`` and ``bind`` expect."""
        if self.family == socket.AF_INET6:
            return (self.host, self.port, self.flowinfo, self.scope_id)
        return (self.host, self.port)


def _sign(a, b) -> int:
    return (a > b) - (a < b)


def sockaddr_cmp(addr1: SockAddr, addr2: SockAddr) -> int:
    """Order two addresses by family, then port, then address; return -1, 0 or 1."""
    if addr1.family != addr2.family:
        return _sign(addr1.family, addr2.family)
    if addr1.port != addr2.port:
        return _sign(addr1.port, addr2.port)
    return _sign(addr1.address, addr2.address)


def sockaddr_cmp_addr(addr1: SockAddr, addr2: SockAddr) -> int:
    """Order two addresses by family, then address, ignoring the port."""
    if addr1.family != addr2.family:
        return _sign(addr1.family, addr2.family)
    if addr1.family in (socket.AF_INET, socket.AF_INET6):
        return _sign(addr1.address, addr2.address)
    return _sign((addr1.address, addr1.port), (addr2.address, addr2.port))


def validate_hostname(hostname: str | bytes | None) -> bool:
    """Return True if ``hostname`` is a syntactically valid DNS name.

    The name is 1 to 255 characters long, does not start with a dot, and each
    dot-separated label is 1 to 63 characters of letters, digits, ``-`` or
    ``_`` that neither starts nor ends with ``-``. One trailing dot is allowed.
    """
    if hostname is None:
        return False
    if isinstance(hostname, bytes):
        hostname = hostname.decode("latin-1")
    if not 1 <= len(hostname) <= 255:
        return False
    if hostname[0] == ".":
        return False
    body = hostname[:-1] if hostname.endswith(".") else hostname
    for label in body.split("."):
        if not 1 <= len(label) <= 63:
            return False
        if label[0] == "-" or label[-1] == "-":
            return False
        if not set(label) <= _VALID_LABEL_CHARS:
            return False
    return True


def _atoi(text: Port) -> int:
    if text is None:
        return 0
    if isinstance(text, int):
        return text
    text = text.lstrip()
    sign = 1
    if text[:1] in ("+", "-"):
        sign = -1 if text[0] == "-" else 1
        text = text[1:]
    digits = ""
    for char in text:
        if not char.isdigit():
            break
        digits += char
    return sign * int(digits) if digits else 0


def _ip_version(host: str | None) -> int | None:
    if host is None:
        return None
    try:
        return ipaddress.ip_address(host).version
    except ValueError:
        return None


def get_sockaddr(host: str, port: Port = None, block: bool = False,
                 ipv6first: bool = False) -> SockAddr:
    """Turn a host and port into a socket address.

    IP literals are converted directly. Other names are resolved; with
    ``block`` the lookup is retried with growing waits. The first address of
    the preferred family (IPv6 with ``ipv6first``, else IPv4) is chosen,
    falling back to the first address returned. Raises ``OSError`` when the
    name cannot be resolved.
    """
    if _ip_version(host) is not None:
        return SockAddr.from_ip(host, _atoi(port))

    service = None if port is None else str(port)
    result = None
    error: OSError | None = None
    for attempt in range(1, _RESOLVE_ATTEMPTS + 1):
        try:
            result = socket.getaddrinfo(host, service, socket.AF_UNSPEC, socket.SOCK_STREAM)
            error = None
        except OSError as exc:
            error = exc
        if not block or error is None:
            break
        wait = 2 ** attempt
        time.sleep(wait)
        log.error("failed to resolve server name, wait %d seconds", wait)

    if error is not None:
        log.error("getaddrinfo: %s", error)
        raise error
    if not result:
        raise OSError(f"failed to resolve remote addr {host!r}")

    prefer = socket.AF_INET6 if ipv6first else socket.AF_INET
    chosen = next((entry for entry in result if entry[0] == prefer), result[0])
    return SockAddr.from_tuple(chosen[0], chosen[4])


def get_sockaddr_len(addr: SockAddr) -> int:
    """Return the size of the C socket address structure for ``addr``'s family."""
    if addr.family == socket.AF_INET:
        return _SOCKADDR_IN_LEN
    if addr.family == socket.AF_INET6:
        return _SOCKADDR_IN6_LEN
    return 0


def set_reuseport(sock: socket.socket) -> None:
    """Enable ``SO_REUSEPORT`` on ``sock``; raises ``OSError`` if unsupported."""
    sock.setsockopt(socket.SOL_SOCKET, _SO_REUSEPORT, 1)


def bind_to_address(sock: socket.socket, host: str | None) -> None:
    """Bind ``sock`` to the IP literal ``host`` on an ephemeral port.

    Raises ``ValueError`` if ``host`` is not an IPv4 or IPv6 address, and
    ``OSError`` if the bind itself fails.
    """
    version = _ip_version(host)
    if version is None:
        raise ValueError(f"not an IP address: {host!r}")
    if version == 6:
        sock.bind((host, 0, 0, 0))
    else:
        sock.bind((host, 0))