"""Primary functions for aggregating the raw S3 access logs of one or more buckets."""

import datetime
import pathlib
import traceback
from typing import NamedTuple

import tqdm

from ._combiner import combine_month
from ._config import AggregatorConfig
from ._date_range import get_date_range
from ._error_collection import _collect_error
from ._exceptions import CacheDirectoryMissing, DownloadFailed
from ._merger import merge_s3_log_files
from ._object_cache import ObjectCache
from ._object_store import S3ObjectStore
from ._output_router import OutputRouter
from ._path_template import render_path_template
from ._resource_budget import ensure_descriptor_budget


class LogSource(NamedTuple):
    name: str  # Rendered into ':bucket'
    log_bucket: str
    log_prefix: str


class BucketSummary(NamedTuple):
    name: str
    number_of_log_files: int
    number_of_records: int
    number_of_malformed_records: int
    number_of_dropped_records: int
    combined_file_paths: list[pathlib.Path]


class AggregationResult(NamedTuple):
    summaries: list[BucketSummary]
    failures: dict[str, str]


def get_log_sources(*, config: AggregatorConfig, object_store) -> list[LogSource]:
    """
    Resolve where the logs of each bucket live.

    Configured buckets hold their own logs under the configured prefix. Without configured buckets, every visible
    bucket with logging enabled is processed through its logging target.
    """
    if config.log_buckets is not None:
        return [
            LogSource(name=log_bucket, log_bucket=log_bucket, log_prefix=config.log_prefix)
            for log_bucket in config.log_buckets
        ]

    log_sources = list()
    for bucket in object_store.list_buckets():
        logging_target = bucket.logging_target()
        if logging_target is None:
            continue

        log_sources.append(
            LogSource(
                name=bucket.name,
                log_bucket=logging_target.target_bucket,
                log_prefix=logging_target.target_prefix,
            )
        )

    return log_sources


def list_buckets_with_logging(*, object_store) -> list[str]:
    """Describe every visible bucket as '<name> [<target bucket>/<target prefix>]', or '<name> [-]' without logging."""
    descriptions = list()
    for bucket in object_store.list_buckets():
        logging_target = bucket.logging_target()
        if logging_target is None:
            descriptions.append(f"{bucket.name} [-]")
        else:
            descriptions.append(f"{bucket.name} [{logging_target.target_bucket}/{logging_target.target_prefix}]")

    return descriptions


def process_bucket(
    *,
    log_source: LogSource,
    object_store,
    config: AggregatorConfig,
    today: datetime.date | None = None,
    object_cache: ObjectCache | None = None,
) -> BucketSummary:
    """
    Download, merge, translate, and route the logs of a single bucket for the configured date range.

    Parameters
    ----------
    log_source : LogSource
        The bucket to process and the location of its logs.
    object_store : S3ObjectStore or compatible
        Provides `list_objects(*, bucket, key_prefix)` and `fetch_object(*, bucket, key)`.
    config : AggregatorConfig
    today : datetime.date, optional
        The reference date of the lookback window. Defaults to the current local date.
    object_cache : ObjectCache, optional
        Defaults to a cache in `config.cache_dir` rendered with the name of the processed bucket.

    Returns
    -------
    bucket_summary : BucketSummary
    """
    dates = get_date_range(
        days_to_look_back=config.days_to_look_back, days_to_ignore=config.days_to_ignore, today=today
    )
    object_cache = object_cache or ObjectCache(
        object_store=object_store,
        # One cache root per processed bucket, not per logging bucket
        cache_directory_template=render_path_template(template=config.cache_dir, bucket=log_source.name),
        log_prefix=log_source.log_prefix,
    )

    log_file_paths = list()
    for date in tqdm.tqdm(
        iterable=dates,
        total=len(dates),
        desc=f"Downloading logs of {log_source.name}...",
        position=1,
        leave=False,
    ):
        s3_objects = object_store.list_objects(
            bucket=log_source.log_bucket, key_prefix=f"{log_source.log_prefix}{date.isoformat()}"
        )
        for s3_object in s3_objects:
            log_file_paths.append(
                object_cache.ensure_local(bucket=log_source.log_bucket, object_key=s3_object.key)
            )

    # The router holds one descriptor per date while the merge reads the cached files
    is_budget_sufficient = ensure_descriptor_budget(file_count=len(log_file_paths) + len(dates))
    if not is_budget_sufficient:
        message = (
            f"Could not raise the open file descriptor limit for {len(log_file_paths)} log files "
            f"and {len(dates)} output files of '{log_source.name}'; proceeding with the current limit."
        )
        _collect_error(message=message, error_type="descriptor_budget", task_id=log_source.name)

    merged_s3_logs = merge_s3_log_files(file_paths=log_file_paths, tqdm_kwargs=dict(position=1))

    if len(merged_s3_logs.malformed_records) != 0:
        message = "\n".join(malformed_record.text for malformed_record in merged_s3_logs.malformed_records)
        _collect_error(message=message, error_type="malformed_line", task_id=log_source.name)

    with OutputRouter(bucket=log_source.name, output_file_template=config.output_file) as output_router:
        output_router.ensure_output_directories(dates)
        output_router.open_file_descriptors(dates)
        number_of_records = output_router.write(merged_s3_logs.records)
    number_of_dropped_records = output_router.number_of_dropped_records

    combined_file_paths = list()
    if config.combined_output_file is not None:
        months = sorted({(date.year, date.month) for date in dates})
        for year, month in months:
            combined_file_path = combine_month(
                bucket=log_source.name,
                year=year,
                month=month,
                output_file_template=config.output_file,
                combined_output_file_template=config.combined_output_file,
            )
            combined_file_paths.append(combined_file_path)

    bucket_summary = BucketSummary(
        name=log_source.name,
        number_of_log_files=len(log_file_paths),
        number_of_records=number_of_records,
        number_of_malformed_records=len(merged_s3_logs.malformed_records),
        number_of_dropped_records=number_of_dropped_records,
        combined_file_paths=combined_file_paths,
    )

    return bucket_summary


def aggregate_s3_access_logs(
    *,
    config: AggregatorConfig,
    object_store=None,
    today: datetime.date | None = None,
) -> AggregationResult:
    """
    Aggregate the logs of every configured bucket.

    A missing cache directory or a failed download aborts only the affected bucket; the failure is collected and the
    remaining buckets are still processed.

    Parameters
    ----------
    config : AggregatorConfig
    object_store : S3ObjectStore or compatible, optional
        Defaults to an `S3ObjectStore` built from the credentials and endpoint of the configuration.
    today : datetime.date, optional
        The reference date of the lookback window. Defaults to the current local date.

    Returns
    -------
    aggregation_result : AggregationResult
        The summary of every processed bucket and the error message of every failed one.
    """
    # Fail on a bad range before touching the store
    get_date_range(days_to_look_back=config.days_to_look_back, days_to_ignore=config.days_to_ignore, today=today)

    object_store = object_store or S3ObjectStore(
        aws_access_key_id=config.aws_access_key_id,
        aws_secret_access_key=config.aws_secret_access_key,
        endpoint_url=config.endpoint_url,
    )

    log_sources = get_log_sources(config=config, object_store=object_store)

    summaries = list()
    failures = dict()
    for log_source in tqdm.tqdm(
        iterable=log_sources,
        total=len(log_sources),
        desc="Aggregating bucket logs...",
        position=0,
        leave=True,
    ):
        try:
            bucket_summary = process_bucket(
                log_source=log_source, object_store=object_store, config=config, today=today
            )
        except (CacheDirectoryMissing, DownloadFailed) as exception:
            message = (
                f"Processing the logs of bucket '{log_source.name}' failed!\n\n"
                f"{type(exception)}: {exception}\n\n"
                f"{traceback.format_exc()}"
            )
            _collect_error(message=message, error_type="bucket", task_id=log_source.name)
            failures[log_source.name] = str(exception)
            continue

        summaries.append(bucket_summary)

    return AggregationResult(summaries=summaries, failures=failures)
