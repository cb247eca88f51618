"""AWS RDS instance source backed by boto3."""

from __future__ import annotations

import asyncio

import boto3

from rdsjump.models import InstanceRecord


class RDSInstanceSource:
    """Lists RDS instances for one region per call.

    boto3 is synchronous, so each region query runs in a worker thread with
    its own session (sessions are not thread-safe).
    """

    def __init__(self, profile: str | None = None) -> None:
        self._profile = profile

    def _client(self, region: str):
        session = boto3.session.Session(profile_name=self._profile, region_name=region)
        return session.client("rds")

    def describe_sync(self, region: str, client=None) -> list[InstanceRecord]:
        client = client if client is not None else self._client(region)
        records: list[InstanceRecord] = []
        paginator = client.get_paginator("describe_db_instances")
        for page in paginator.paginate():
            for instance in page.get("DBInstances", []):
                # Instances still being created have no endpoint yet.
                address = (instance.get("Endpoint") or {}).get("Address")
                if not address:
                    continue
                records.append(
                    InstanceRecord(
                        address=address,
                        engine=instance.get("Engine", ""),
                        region=region,
                    )
                )
        return records

    async def describe(self, region: str) -> list[InstanceRecord]:
        return await asyncio.to_thread(self.describe_sync, region)
