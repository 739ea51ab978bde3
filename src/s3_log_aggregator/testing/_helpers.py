"""Collection of helper objects and functions related to testing and generating example lines."""

import collections
import datetime
import functools

from .._object_store import BucketDescriptor, LoggingTarget, ObjectDescriptor


class InMemoryObjectStore:
    """
    An object store holding its content in memory, with the same surface as `S3ObjectStore`.

    Every fetch is counted per (bucket, key) in `fetch_counts`. Keys listed in `failing_keys` raise on fetch.
    """

    def __init__(
        self,
        *,
        objects: dict[str, dict[str, bytes]] | None = None,
        logging_targets: dict[str, LoggingTarget | None] | None = None,
        failing_keys: set[str] | None = None,
    ):
        self.objects = objects or dict()
        self.logging_targets = logging_targets or dict()
        self.failing_keys = failing_keys or set()
        self.fetch_counts = collections.defaultdict(int)

    def put_object(self, *, bucket: str, key: str, content: bytes) -> None:
        self.objects.setdefault(bucket, dict())[key] = content

    def list_buckets(self) -> list[BucketDescriptor]:
        bucket_names = sorted(set(self.objects.keys()) | set(self.logging_targets.keys()))

        return [
            BucketDescriptor(name=name, logging_target=functools.partial(self.logging_targets.get, name))
            for name in bucket_names
        ]

    def list_objects(self, *, bucket: str, key_prefix: str) -> list[ObjectDescriptor]:
        keys = sorted(key for key in self.objects.get(bucket, dict()) if key.startswith(key_prefix))

        return [
            ObjectDescriptor(key=key, fetch=functools.partial(self.fetch_object, bucket=bucket, key=key))
            for key in keys
        ]

    def fetch_object(self, *, bucket: str, key: str) -> bytes:
        self.fetch_counts[(bucket, key)] += 1
        if key in self.failing_keys:
            raise ConnectionError(f"Simulated failure fetching '{key}' from '{bucket}'!")

        return self.objects[bucket][key]


def generate_raw_s3_log_line(
    *,
    timestamp: datetime.datetime,
    bucket: str = "example-bucket",
    ip_address: str = "192.0.2.0",
    requester: str = "-",
    operation: str = "REST.GET.OBJECT",
    object_key: str = "index.html",
    request_line: str = "GET /index.html HTTP/1.1",
    status_code: str = "200",
    bytes_sent: str = "512",
    referrer: str = "-",
    user_agent: str = "Example/1.0",
) -> str:
    """Render a raw S3 log line (with trailing line break) whose placeholder values are safe for sharing."""
    formatted_timestamp = timestamp.strftime("%d/%b/%Y:%H:%M:%S %z")

    return (
        f"79a59df900b949e55d96a1e698fbacedfd6e09d98eacf8f8d5218e7cd47ef2be {bucket} [{formatted_timestamp}] "
        f"{ip_address} {requester} 3E57427F3EXAMPLE {operation} {object_key} "
        f'"{request_line}" {status_code} - {bytes_sent} {bytes_sent} 70 10 "{referrer}" "{user_agent}" -\n'
    )
