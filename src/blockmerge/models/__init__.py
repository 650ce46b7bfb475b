from __future__ import annotations

from blockmerge.models.config import BlocklistConfig
from blockmerge.models.host import Host
from blockmerge.models.report import MergeReport

__all__ = [
    "Host",
    "BlocklistConfig",
    "MergeReport",
]
