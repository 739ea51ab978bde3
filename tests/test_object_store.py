import io

import boto3
import pytest
from botocore.exceptions import ClientError
from botocore.response import StreamingBody
from botocore.stub import Stubber

import s3_log_aggregator


@pytest.fixture
def stubbed_client():
    client = boto3.client(
        "s3", region_name="us-east-1", aws_access_key_id="testing", aws_secret_access_key="testing"
    )
    with Stubber(client) as stubber:
        yield client, stubber
        stubber.assert_no_pending_responses()


def test_list_buckets_with_logging_targets(stubbed_client) -> None:
    client, stubber = stubbed_client
    stubber.add_response("list_buckets", {"Buckets": [{"Name": "website"}, {"Name": "private"}]})
    stubber.add_response(
        "get_bucket_logging",
        {"LoggingEnabled": {"TargetBucket": "logfilebucket", "TargetPrefix": "website/"}},
        expected_params={"Bucket": "website"},
    )
    stubber.add_response("get_bucket_logging", {}, expected_params={"Bucket": "private"})

    object_store = s3_log_aggregator.S3ObjectStore(client=client)
    buckets = object_store.list_buckets()

    assert [bucket.name for bucket in buckets] == ["website", "private"]
    assert buckets[0].logging_target() == s3_log_aggregator.LoggingTarget(
        target_bucket="logfilebucket", target_prefix="website/"
    )
    assert buckets[1].logging_target() is None


def test_get_logging_target_access_denied(stubbed_client) -> None:
    client, stubber = stubbed_client
    stubber.add_client_error("get_bucket_logging", service_error_code="AccessDenied", http_status_code=403)

    object_store = s3_log_aggregator.S3ObjectStore(client=client)

    assert object_store.get_logging_target(bucket="website") is None


def test_get_logging_target_other_errors_propagate(stubbed_client) -> None:
    client, stubber = stubbed_client
    stubber.add_client_error("get_bucket_logging", service_error_code="NoSuchBucket", http_status_code=404)

    object_store = s3_log_aggregator.S3ObjectStore(client=client)

    with pytest.raises(ClientError):
        object_store.get_logging_target(bucket="website")


def test_list_objects_across_pages(stubbed_client) -> None:
    client, stubber = stubbed_client
    stubber.add_response(
        "list_objects_v2",
        {
            "Contents": [{"Key": "logs/2013-02-11-00-05-23-AAAA"}],
            "IsTruncated": True,
            "NextContinuationToken": "next",
        },
        expected_params={"Bucket": "logfilebucket", "Prefix": "logs/2013-02-11"},
    )
    stubber.add_response(
        "list_objects_v2",
        {"Contents": [{"Key": "logs/2013-02-11-00-06-23-BBBB"}], "IsTruncated": False},
        expected_params={"Bucket": "logfilebucket", "Prefix": "logs/2013-02-11", "ContinuationToken": "next"},
    )
    content = b"AWS LOGLINE\n"
    stubber.add_response(
        "get_object",
        {"Body": StreamingBody(io.BytesIO(content), len(content))},
        expected_params={"Bucket": "logfilebucket", "Key": "logs/2013-02-11-00-06-23-BBBB"},
    )

    object_store = s3_log_aggregator.S3ObjectStore(client=client)
    s3_objects = object_store.list_objects(bucket="logfilebucket", key_prefix="logs/2013-02-11")

    assert [s3_object.key for s3_object in s3_objects] == [
        "logs/2013-02-11-00-05-23-AAAA",
        "logs/2013-02-11-00-06-23-BBBB",
    ]
    assert s3_objects[1].fetch() == content


def test_list_objects_empty_prefix(stubbed_client) -> None:
    client, stubber = stubbed_client
    stubber.add_response("list_objects_v2", {"IsTruncated": False})

    object_store = s3_log_aggregator.S3ObjectStore(client=client)

    assert object_store.list_objects(bucket="logfilebucket", key_prefix="logs/2013-02-11") == []


def test_fetch_object(stubbed_client) -> None:
    client, stubber = stubbed_client
    content = b"AWS LOGLINE\n"
    stubber.add_response(
        "get_object",
        {"Body": StreamingBody(io.BytesIO(content), len(content))},
        expected_params={"Bucket": "logfilebucket", "Key": "logs/2013-02-11-00-05-23-AAAA"},
    )

    object_store = s3_log_aggregator.S3ObjectStore(client=client)

    assert object_store.fetch_object(bucket="logfilebucket", key="logs/2013-02-11-00-05-23-AAAA") == content
