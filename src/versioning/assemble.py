"""Stable ordering and serialization of resolved sources."""

import json
from typing import Iterable, List

from .models import SourceDescriptor


def sort_sources(sources: Iterable[SourceDescriptor]) -> List[SourceDescriptor]:
    """Order descriptors ascending by destination.

    Resolution completes in arbitrary order; this is the only ordering the
    output guarantees. Equal destinations are ordered by the remaining fields.
    """
    return sorted(sources, key=SourceDescriptor.sort_key)


def sources_to_json(sources: Iterable[SourceDescriptor]) -> str:
    """Serialize descriptors as a pretty-printed JSON array."""
    return json.dumps([s.to_dict() for s in sources], indent=2) + "\n"
