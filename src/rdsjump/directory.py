"""Instance directory: query every region concurrently, filter, merge, sort."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from rdsjump.errors import DiscoveryError, RdsJumpError
from rdsjump.models import InstanceRecord


@runtime_checkable
class InstanceSource(Protocol):
    async def describe(self, region: str) -> list[InstanceRecord]: ...


async def _query_region(
    source: InstanceSource, region: str, filter_: str
) -> list[InstanceRecord]:
    try:
        instances = await source.describe(region)
    except RdsJumpError:
        raise
    except Exception as e:
        raise DiscoveryError(region, e) from e
    return [i for i in instances if filter_ in i.address]


async def discover(
    filter_: str, regions: Iterable[str], source: InstanceSource
) -> list[InstanceRecord]:
    """Return every instance whose address contains ``filter_``, sorted by address.

    One task per region; results are merged only after all regions reply.
    The first region failure propagates as DiscoveryError.
    """
    per_region = await asyncio.gather(
        *(_query_region(source, region, filter_) for region in regions)
    )
    merged = [instance for rows in per_region for instance in rows]
    merged.sort(key=lambda i: i.address)
    return merged
