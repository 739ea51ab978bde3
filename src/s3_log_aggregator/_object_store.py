"""Listing and byte retrieval from S3, the only parts of the store the aggregator consumes."""

import functools
from collections.abc import Callable
from typing import NamedTuple

import boto3
from botocore.exceptions import ClientError


class LoggingTarget(NamedTuple):
    target_bucket: str
    target_prefix: str


class BucketDescriptor(NamedTuple):
    name: str
    logging_target: Callable[[], LoggingTarget | None]


class ObjectDescriptor(NamedTuple):
    key: str
    fetch: Callable[[], bytes]


class S3ObjectStore:
    def __init__(
        self,
        *,
        aws_access_key_id: str | None = None,
        aws_secret_access_key: str | None = None,
        endpoint_url: str | None = None,
        client=None,
    ):
        """
        Thin wrapper around a boto3 S3 client.

        Parameters
        ----------
        aws_access_key_id, aws_secret_access_key : str, optional
            Explicit credentials. When omitted, boto3 resolves its usual credential chain (environment, profile, ...).
        endpoint_url : str, optional
            For S3-compatible stores other than AWS.
        client : botocore client, optional
            A preconfigured client; takes precedence over all other arguments.
        """
        self.client = client or boto3.client(
            "s3",
            aws_access_key_id=aws_access_key_id,
            aws_secret_access_key=aws_secret_access_key,
            endpoint_url=endpoint_url,
        )

    def list_buckets(self) -> list[BucketDescriptor]:
        response = self.client.list_buckets()

        return [
            BucketDescriptor(
                name=bucket["Name"],
                logging_target=functools.partial(self.get_logging_target, bucket=bucket["Name"]),
            )
            for bucket in response.get("Buckets", [])
        ]

    def get_logging_target(self, *, bucket: str) -> LoggingTarget | None:
        try:
            response = self.client.get_bucket_logging(Bucket=bucket)
        except ClientError as exception:
            # Buckets in other regions or without permission report no logging information
            if exception.response.get("Error", {}).get("Code") in ("AccessDenied", "PermanentRedirect"):
                return None
            raise

        logging_enabled = response.get("LoggingEnabled")
        if logging_enabled is None:
            return None

        return LoggingTarget(
            target_bucket=logging_enabled["TargetBucket"],
            target_prefix=logging_enabled.get("TargetPrefix", ""),
        )

    def list_objects(self, *, bucket: str, key_prefix: str) -> list[ObjectDescriptor]:
        """List all objects under a prefix, in the order returned by the store (ascending by key for S3)."""
        paginator = self.client.get_paginator("list_objects_v2")

        return [
            ObjectDescriptor(
                key=content["Key"],
                fetch=functools.partial(self.fetch_object, bucket=bucket, key=content["Key"]),
            )
            for page in paginator.paginate(Bucket=bucket, Prefix=key_prefix)
            for content in page.get("Contents", [])
        ]

    def fetch_object(self, *, bucket: str, key: str) -> bytes:
        response = self.client.get_object(Bucket=bucket, Key=key)

        return response["Body"].read()
