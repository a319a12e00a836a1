import struct

import pytest

from ssrtools.tls import (
    IncompleteRequestError,
    NoHostnameError,
    TlsParseError,
    parse_tls_header,
)


def sni_extension(*names):
    entries = b"".join(
        bytes([name_type]) + struct.pack(">H", len(name)) + name for name_type, name in names
    )
    body = struct.pack(">H", len(entries)) + entries
    return b"\x00\x00" + struct.pack(">H", len(body)) + body


def other_extension(ext_type=0x0017, payload=b""):
    return struct.pack(">HH", ext_type, len(payload)) + payload


def client_hello(extensions=b"", version=b"\x03\x03", with_extensions=True, record_version=b"\x03\x01"):
    body = version + bytes(32)
    body += b"\x00"  # session id
    body += struct.pack(">H", 2) + b"\x13\x01"
    body += b"\x01\x00"  # compression methods
    if with_extensions:
        body += struct.pack(">H", len(extensions)) + extensions
    handshake = b"\x01" + struct.pack(">I", len(body))[1:] + body
    return b"\x16" + record_version + struct.pack(">H", len(handshake)) + handshake


def test_extracts_host_name():
    record = client_hello(sni_extension((0, b"example.com")))
    assert parse_tls_header(record) == "example.com"


def test_accepts_bytearray_and_trailing_data():
    record = client_hello(sni_extension((0, b"example.org")))
    assert parse_tls_header(bytearray(record + b"extra")) == "example.org"


def test_skips_other_extensions_before_sni():
    ext = other_extension(0x000A, b"\x00\x02\x00\x17") + sni_extension((0, b"a.example.com"))
    assert parse_tls_header(client_hello(ext)) == "a.example.com"


def test_skips_unknown_name_type():
    ext = sni_extension((1, b"ignored"), (0, b"host.example.com"))
    assert parse_tls_header(client_hello(ext)) == "host.example.com"


def test_short_header_is_incomplete():
    with pytest.raises(IncompleteRequestError):
        parse_tls_header(b"\x16\x03\x01")


def test_truncated_record_is_incomplete():
    record = client_hello(sni_extension((0, b"example.com")))
    with pytest.raises(IncompleteRequestError):
        parse_tls_header(record[:-3])


def test_not_handshake_is_invalid():
    record = b"\x17" + client_hello(sni_extension((0, b"example.com")))[1:]
    with pytest.raises(TlsParseError) as info:
        parse_tls_header(record)
    assert not isinstance(info.value, (IncompleteRequestError, NoHostnameError))


def test_ssl2_hello_has_no_hostname():
    with pytest.raises(NoHostnameError):
        parse_tls_header(b"\x80\x2e\x01\x03\x01" + bytes(10))


def test_old_version_has_no_hostname():
    record = b"\x16\x02\x00" + client_hello()[3:]
    with pytest.raises(NoHostnameError):
        parse_tls_header(record)


def test_not_client_hello_is_invalid():
    record = bytearray(client_hello(sni_extension((0, b"example.com"))))
    record[5] = 0x02
    with pytest.raises(TlsParseError):
        parse_tls_header(bytes(record))


def test_ssl3_without_extensions_has_no_hostname():
    record = client_hello(version=b"\x03\x00", with_extensions=False, record_version=b"\x03\x00")
    with pytest.raises(NoHostnameError):
        parse_tls_header(record)


def test_tls_without_extensions_is_invalid():
    record = client_hello(with_extensions=False)
    with pytest.raises(TlsParseError) as info:
        parse_tls_header(record)
    assert not isinstance(info.value, NoHostnameError)


def test_no_sni_extension_has_no_hostname():
    with pytest.raises(NoHostnameError):
        parse_tls_header(client_hello(other_extension()))


def test_sni_without_host_name_entry():
    with pytest.raises(NoHostnameError):
        parse_tls_header(client_hello(sni_extension((1, b"other"))))


def test_oversized_name_is_invalid():
    entry = b"\x00" + struct.pack(">H", 50) + b"short"
    body = struct.pack(">H", len(entry)) + entry
    ext = b"\x00\x00" + struct.pack(">H", len(body)) + body
    with pytest.raises(TlsParseError):
        parse_tls_header(client_hello(ext))


def test_hierarchy_of_errors():
    assert issubclass(IncompleteRequestError, TlsParseError)
    assert issubclass(NoHostnameError, TlsParseError)
    with pytest.raises(ValueError):
        parse_tls_header(b"\x00" * 10)