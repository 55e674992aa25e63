"""Package discovery."""

from declgraph.index._internal.discovery.scanner import PackageDiscovery

__all__ = ["PackageDiscovery"]
