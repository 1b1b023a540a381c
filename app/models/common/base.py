"""Base entity class for all domain entities."""

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any


def _plain(value: Any) -> Any:
    """Make a value safe for structured log records."""
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, list | tuple):
        return [_plain(v) for v in value]
    return value


@dataclass
class BaseEntity:
    """Base class for all entities."""

    def to_dict(self) -> dict[str, Any]:
        """Convert entity to a plain dictionary (datetimes as ISO strings)."""
        return _plain(asdict(self))
