"""Test the boto3-backed instance source with botocore's Stubber (no network)."""

from __future__ import annotations

import asyncio
from unittest.mock import patch

import boto3
from botocore.stub import Stubber

from rdsjump.aws import RDSInstanceSource
from rdsjump.models import InstanceRecord


def _client():
    return boto3.client(
        "rds",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )


def _instance(identifier: str, address: str | None, engine: str = "postgres") -> dict:
    instance = {"DBInstanceIdentifier": identifier, "Engine": engine}
    if address is not None:
        instance["Endpoint"] = {"Address": address, "Port": 5432}
    return instance


def test_describe_maps_instances_to_records():
    client = _client()
    with Stubber(client) as stubber:
        stubber.add_response(
            "describe_db_instances",
            {"DBInstances": [
                _instance("app-prod", "app-prod.abc.us-east-1.rds.amazonaws.com"),
                _instance("shop-prod", "shop-prod.abc.us-east-1.rds.amazonaws.com", "mysql"),
            ]},
        )
        records = RDSInstanceSource().describe_sync("us-east-1", client=client)

    assert records == [
        InstanceRecord("app-prod.abc.us-east-1.rds.amazonaws.com", "postgres", "us-east-1"),
        InstanceRecord("shop-prod.abc.us-east-1.rds.amazonaws.com", "mysql", "us-east-1"),
    ]


def test_describe_skips_instances_without_endpoint():
    client = _client()
    with Stubber(client) as stubber:
        stubber.add_response(
            "describe_db_instances",
            {"DBInstances": [_instance("creating", None), _instance("ok", "ok.x.rds.amazonaws.com")]},
        )
        records = RDSInstanceSource().describe_sync("us-east-1", client=client)

    assert [r.address for r in records] == ["ok.x.rds.amazonaws.com"]


def test_describe_follows_pagination():
    client = _client()
    with Stubber(client) as stubber:
        stubber.add_response(
            "describe_db_instances",
            {"DBInstances": [_instance("a", "a.x.rds.amazonaws.com")], "Marker": "page-2"},
        )
        stubber.add_response(
            "describe_db_instances",
            {"DBInstances": [_instance("b", "b.x.rds.amazonaws.com")]},
            {"Marker": "page-2"},
        )
        records = RDSInstanceSource().describe_sync("us-east-1", client=client)

    assert [r.address for r in records] == ["a.x.rds.amazonaws.com", "b.x.rds.amazonaws.com"]


def test_async_describe_uses_region_client():
    client = _client()
    source = RDSInstanceSource(profile="work")
    with Stubber(client) as stubber, patch.object(
        RDSInstanceSource, "_client", return_value=client
    ) as make_client:
        stubber.add_response(
            "describe_db_instances",
            {"DBInstances": [_instance("a", "a.x.rds.amazonaws.com")]},
        )
        records = asyncio.run(source.describe("eu-west-1"))

    make_client.assert_called_once_with("eu-west-1")
    assert records[0].region == "eu-west-1"
