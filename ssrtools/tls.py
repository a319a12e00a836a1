"""Extract the Server Name Indication host name from a TLS ClientHello."""

from __future__ import annotations

__all__ = [
    "TLS_DEFAULT_PORT",
    "TlsParseError",
    "IncompleteRequestError",
    "NoHostnameError",
    "parse_tls_header",
]

TLS_DEFAULT_PORT = 443

_TLS_HEADER_LEN = 5
_TLS_HANDSHAKE_CONTENT_TYPE = 0x16
_TLS_HANDSHAKE_TYPE_CLIENT_HELLO = 0x01


class TlsParseError(ValueError):
    """The data is not a valid TLS ClientHello."""


class IncompleteRequestError(TlsParseError):
    """More data is needed before the ClientHello can be parsed."""


class NoHostnameError(TlsParseError):
    """The ClientHello is well formed but carries no server name."""


def _u16(data: bytes, pos: int) -> int:
    return (data[pos] << 8) + data[pos + 1]


def _signed(byte: int) -> int:
    return byte - 256 if byte >= 128 else byte


def parse_tls_header(data: bytes | bytearray | memoryview) -> str:
    """Return the first host name in the SNI extension of a ClientHello record.

    Raises :class:`IncompleteRequestError` if the record is not complete yet,
    :class:`NoHostnameError` if the hello cannot or does not carry a server
    name, and :class:`TlsParseError` if the data is not a valid ClientHello.
    """
    data = bytes(data)
    if len(data) < _TLS_HEADER_LEN:
        raise IncompleteRequestError("TLS header is incomplete")

    if data[0] & 0x80 and data[2] == 1:
        raise NoHostnameError("SSL 2.0 Client Hello can not support SNI")

    if data[0] != _TLS_HANDSHAKE_CONTENT_TYPE:
        raise TlsParseError("request did not begin with TLS handshake")

    version_major = _signed(data[1])
    version_minor = _signed(data[2])
    if version_major < 3:
        raise NoHostnameError(
            f"SSL {version_major}.{version_minor} handshake can not support SNI"
        )

    record_len = _u16(data, 3) + _TLS_HEADER_LEN
    data = data[:record_len]
    if len(data) < record_len:
        raise IncompleteRequestError("TLS record is incomplete")
    data_len = len(data)

    pos = _TLS_HEADER_LEN
    if pos + 1 > data_len:
        raise TlsParseError("missing handshake type")
    if data[pos] != _TLS_HANDSHAKE_TYPE_CLIENT_HELLO:
        raise TlsParseError("not a client hello")

    # Handshake type, length, version and random.
    pos += 38

    if pos + 1 > data_len:
        raise TlsParseError("truncated session id")
    pos += 1 + data[pos]

    if pos + 2 > data_len:
        raise TlsParseError("truncated cipher suites")
    pos += 2 + _u16(data, pos)

    if pos + 1 > data_len:
        raise TlsParseError("truncated compression methods")
    pos += 1 + data[pos]

    if pos == data_len and version_major == 3 and version_minor == 0:
        raise NoHostnameError("SSL 3.0 handshake without extensions")

    if pos + 2 > data_len:
        raise TlsParseError("truncated extensions length")
    length = _u16(data, pos)
    pos += 2
    if pos + length > data_len:
        raise TlsParseError("extensions exceed the record")
    return _parse_extensions(data[pos:pos + length])


def _parse_extensions(data: bytes) -> str:
    pos = 0
    data_len = len(data)
    while pos + 4 <= data_len:
        length = _u16(data, pos + 2)
        if data[pos] == 0x00 and data[pos + 1] == 0x00:
            if pos + 4 + length > data_len:
                raise TlsParseError("server name extension exceeds extensions")
            return _parse_server_name_extension(data[pos + 4:pos + 4 + length])
        pos += 4 + length
    if pos != data_len:
        raise TlsParseError("extensions do not end where expected")
    raise NoHostnameError("no server name extension")


def _parse_server_name_extension(data: bytes) -> str:
    pos = 2  # server name list length
    data_len = len(data)
    while pos + 3 < data_len:
        length = _u16(data, pos + 1)
        if pos + 3 + length > data_len:
            raise TlsParseError("server name exceeds extension")
        if data[pos] == 0x00:
            name = data[pos + 3:pos + 3 + length].split(b"\x00", 1)[0]
            return name.decode("latin-1")
        pos += 3 + length
    if pos != data_len:
        raise TlsParseError("server name extension does not end where expected")
    raise NoHostnameError("no host name in server name extension")