import socket
import threading
from types import SimpleNamespace
from unittest import mock

import dns.resolver
import pytest

from ssrtools.netutils import SockAddr
from ssrtools.resolv import ResolveMode, Resolver, ResolvQuery, choose_address

V4A = SockAddr.from_ip("192.0.2.1", 80)
V4B = SockAddr.from_ip("192.0.2.2", 80)
V6 = SockAddr.from_ip("2001:db8::1", 80)


def _fake_resolve(records):
    def fake(self, qname, rdtype, **kwargs):
        addresses = records.get(rdtype)
        if not addresses:
            raise dns.resolver.NXDOMAIN()
        return [SimpleNamespace(address=a) for a in addresses]

    return fake


def _patched(records):
    return mock.patch.object(
        dns.resolver.Resolver, "resolve", autospec=True, side_effect=_fake_resolve(records)
    )


def test_choose_ipv4_first():
    assert choose_address([V6, V4A, V4B], ResolveMode.IPV4_FIRST) is V4A


def test_choose_ipv6_first():
    assert choose_address([V4A, V4B, V6], ResolveMode.IPV6_FIRST) is V6


@pytest.mark.parametrize("mode", list(ResolveMode))
def test_choose_falls_back_to_first(mode):
    assert choose_address([V4B, V4A], mode if mode != ResolveMode.IPV6_FIRST else mode) is V4B


def test_choose_any_returns_first():
    assert choose_address([V6, V4A], ResolveMode.IPV4_ONLY) is V6


@pytest.mark.parametrize("mode", list(ResolveMode))
def test_choose_empty(mode):
    assert choose_address([], mode) is None


def test_mode_from_ipv6first():
    assert Resolver(["192.0.2.53"], ipv6first=True).mode is ResolveMode.IPV6_FIRST
    assert Resolver(["192.0.2.53"]).mode is ResolveMode.IPV4_FIRST


def test_resolve_prefers_ipv4():
    with _patched({"A": ["192.0.2.1"], "AAAA": ["2001:db8::1"]}):
        result = Resolver(["192.0.2.53"]).resolve("example.com", 443)
    assert result == SockAddr.from_ip("192.0.2.1", 443)
    assert result.family == socket.AF_INET


def test_resolve_prefers_ipv6():
    with _patched({"A": ["192.0.2.1"], "AAAA": ["2001:db8::1"]}):
        result = Resolver(["192.0.2.53"], ipv6first=True).resolve("example.com", 443)
    assert result == SockAddr.from_ip("2001:db8::1", 443)


def test_resolve_falls_back_when_preferred_family_missing():
    with _patched({"A": ["192.0.2.7"]}):
        result = Resolver(["192.0.2.53"], ipv6first=True).resolve("example.com", 8080)
    assert result.host == "192.0.2.7"
    assert result.port == 8080


def test_resolve_nothing_found():
    with _patched({}):
        assert Resolver(["192.0.2.53"]).resolve("missing.example.com") is None


def test_local_nameserver_is_used_as_source():
    with _patched({"A": ["192.0.2.1"]}) as patched:
        result = Resolver(["127.0.0.1"]).resolve("example.com", 80)
    assert result == SockAddr.from_ip("192.0.2.1", 80)
    sources = {call.kwargs["source"] for call in patched.call_args_list}
    assert sources == {"127.0.0.1"}


@pytest.mark.parametrize("servers", [["192.0.2.53"], ["127.0.0.1", "192.0.2.53"]])
def test_no_source_binding_otherwise(servers):
    with _patched({"A": ["192.0.2.1"]}) as patched:
        result = Resolver(servers).resolve("example.com", 80)
    assert result == SockAddr.from_ip("192.0.2.1", 80)
    sources = {call.kwargs["source"] for call in patched.call_args_list}
    assert sources == {None}


def test_query_calls_callback():
    results = []
    called = threading.Event()

    def callback(addr):
        results.append(addr)
        called.set()

    with _patched({"A": ["192.0.2.1"]}):
        handle = Resolver(["192.0.2.53"]).query("example.com", callback, 53)
        assert handle.wait(5)
    assert called.is_set()
    assert results == [SockAddr.from_ip("192.0.2.1", 53)]
    assert handle.hostname == "example.com"


def test_query_reports_failure_with_none():
    results = []
    with _patched({}):
        handle = Resolver(["192.0.2.53"]).query("missing.example.com", results.append)
        assert handle.wait(5)
    assert results == [None]


def test_cancel_suppresses_callback():
    gate = threading.Event()
    results = []

    def blocking(self, qname, rdtype, **kwargs):
        gate.wait(5)
        raise dns.resolver.NXDOMAIN()

    with mock.patch.object(dns.resolver.Resolver, "resolve", autospec=True, side_effect=blocking):
        handle = Resolver(["192.0.2.53"]).query("example.com", results.append)
        handle.cancel()
        gate.set()
        assert handle.wait(5)
    assert handle.cancelled
    assert results == []


def test_new_query_is_not_cancelled():
    handle = ResolvQuery("example.com", 80)
    assert handle.cancelled is False
    handle.cancel()
    assert handle.cancelled is True