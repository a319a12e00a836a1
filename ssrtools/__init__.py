"""Proxy server building blocks: JSON parsing, a linked list, TLS SNI, addresses, rules and DNS."""

__version__ = "0.1.0"