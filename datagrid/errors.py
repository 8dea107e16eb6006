from __future__ import annotations


class InvalidConfiguration(ValueError):
    """Raised when view state or engine input references something that cannot work."""
