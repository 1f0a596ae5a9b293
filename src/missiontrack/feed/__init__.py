"""Feed layer.

This package contains the read source adapters (HTTP, in-memory) and the
fixed-rate poller that turns them into change-detected mission snapshots.
"""

__all__: list[str] = []
