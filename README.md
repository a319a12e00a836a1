# ssrtools

Small, self-contained pieces for building a proxy server in Python.

## Installation

```
pip install ssrtools
```

To run the test suite:

```
pip install "ssrtools[test]"
pytest
```

## What is inside

- `ssrtools.jsonparse`: `parse(data, settings=None)` reads a JSON document
  into a `JsonValue` tree. The document can be bytes or str and may start
  with a UTF-8 byte-order mark. The parser is lenient. It accepts trailing
  commas in arrays and objects and reads a lone `-` as 0. An unknown escape
  keeps the escaped character. Integers wrap to signed 64 bits. Malformed
  input raises `JsonParseError`, a `ValueError`. Where a position is known,
  the error carries it in its `line` and `column` attributes. The same error
  is raised when the estimated memory use exceeds `JsonSettings.max_memory`.
- `ssrtools.jsonvalue`: `JsonType`, `JsonSettings` and `JsonValue`.
  - `JsonSettings(max_memory=0, enable_comments=False)` holds the parser
    options. With `enable_comments`, the parser accepts `//` and `/* */`
    comments.
  - A `JsonValue` is indexed by position for arrays or by name for objects.
    A lookup that misses returns an empty value of type `JsonType.NONE`, so
    lookups can be chained safely.
  - `int()`, `float()`, `str()`, `bool()` and `len()` give lenient
    conversions. A value of the wrong type gives 0, `""` or `False`.
  - `to_python()` returns plain lists, dicts and scalars.
- `ssrtools.linkedlist`: `LinkedList`, an ordered collection.
  - `add_back` and `add_front` add items at either end.
  - `delete_node` removes an item found by a `match(item, data)` callable.
  - `delete_at` and `modify_at` raise `IndexError` for an out-of-range
    index.
  - Also provided: `have_same`, `have_same_cmp`, `foreach`, `clear`, and a
    selection sort, `sort(greater)`.
- `ssrtools.obfsutil`:
  - `get_head_size(data, def_size)` returns the length of an address header
    from its type byte.
  - `XorShift128Plus(seed=None)` is a 64-bit xorshift128+ generator. Its
    `next()` method returns the next value. Without a seed it uses the
    current time.
- `ssrtools.tls`: `parse_tls_header(data)` returns the first SNI host name
  of a TLS ClientHello record. It raises these errors:
  - `IncompleteRequestError` when more bytes are needed.
  - `NoHostnameError` when the hello carries no name.
  - `TlsParseError`, the base of both, for malformed data.
- `ssrtools.netutils`:
  - `SockAddr` is an IPv4/IPv6 address with a port. It is built with
    `SockAddr.from_ip` or `SockAddr.from_tuple`.
  - `sockaddr_cmp` orders addresses by family, port and address.
    `sockaddr_cmp_addr` orders them by family and address only.
  - `validate_hostname` checks DNS name syntax.
  - `get_sockaddr(host, port, block, ipv6first)` converts IP literals
    directly and resolves other names. It raises `OSError` on failure.
  - `get_sockaddr_len`, `set_reuseport` and `bind_to_address` are socket
    helpers. `bind_to_address` raises `ValueError` for a non-IP host.
- `ssrtools.rule`:
  - A `Rule` holds one regular expression that is searched anywhere in a
    name. Use `accept_arg`, `compile` and `matches`.
  - A `RuleSet` keeps rules in order. `lookup(name)` returns the first rule
    that matches.
- `ssrtools.resolv`: `Resolver(nameservers=None, ipv6first=False)` looks up
  A and AAAA records through dnspython.
  - It picks one address by its `ResolveMode`, using
    `choose_address(responses, mode)`.
  - `resolve(hostname, port)` answers at once.
  - `query(hostname, callback, port)` runs the lookup in a background
    thread and returns a `ResolvQuery`. The query has `cancel()`,
    `cancelled` and `wait(timeout)`.

## Example

```python
from ssrtools.jsonparse import parse
from ssrtools.jsonvalue import JsonSettings
from ssrtools.tls import parse_tls_header, IncompleteRequestError

settings = JsonSettings(enable_comments=True)
config = parse(b'{"server_port": 8388, // listening port\n "timeout": 60}', settings)
print(int(config["server_port"]), config.to_python())

try:
    hostname = parse_tls_header(b"\x16\x03\x01")
except IncompleteRequestError:
    hostname = None  # wait for more bytes
```

## What it does not do

This is a library of parts, not a proxy. It has no command to run and no
listening server or connection relay. It also provides no ciphers and no
protocol or obfuscation plugins. Those pieces have to come from the
application that uses it.