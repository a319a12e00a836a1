[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ssrtools"
version = "0.1.0"
description = "Building blocks for a proxy server: a tolerant JSON parser, TLS SNI extraction, address helpers, host rules and an asynchronous DNS resolver"
requires-python = ">=3.10"
keywords = ["proxy", "json", "tls", "sni", "dns", "resolver", "networking"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: Proxy Servers",
    "Topic :: Internet :: Name Service (DNS)",
    "Topic :: Software Development :: Libraries :: Python Modules",
]
dependencies = [
    "dnspython",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["ssrtools"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
