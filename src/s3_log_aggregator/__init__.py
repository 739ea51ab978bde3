"""
S3 log aggregator
=================

Retrieval, ordering, and translation of S3 server access logs.

S3 delivers the access log of a bucket as many small objects, each covering the requests of a few minutes and
uploaded in no particular order. For every day of a lookback window this package...

- downloads the log objects once into a local cache,
- merges their lines into a single chronologically ordered sequence,
- translates each line into the Apache combined log format,
- and writes one file per bucket per day, optionally concatenated into one file per month.

The most recent days of the window can be ignored, since S3 keeps delivering logs for a day some hours after it ends.
"""

from ._config import S3_LOG_AGGREGATOR_BASE_FOLDER_PATH, AggregatorConfig, load_config
from ._exceptions import CacheDirectoryMissing, DownloadFailed, InvalidConfiguration, S3LogAggregatorError
from ._buffered_text_reader import BufferedTextReader
from ._date_range import get_date_range
from ._path_template import render_path_template
from ._record_translator import MalformedRecord, TranslatedRecord, translate_s3_log_line
from ._merger import MergedS3Logs, merge_s3_log_files
from ._object_store import BucketDescriptor, LoggingTarget, ObjectDescriptor, S3ObjectStore
from ._object_cache import ObjectCache
from ._output_router import OutputRouter
from ._combiner import combine_month
from ._resource_budget import ensure_descriptor_budget
from ._bucket_processor import (
    AggregationResult,
    BucketSummary,
    LogSource,
    aggregate_s3_access_logs,
    get_log_sources,
    list_buckets_with_logging,
    process_bucket,
)

__all__ = [
    "S3_LOG_AGGREGATOR_BASE_FOLDER_PATH",
    "AggregatorConfig",
    "load_config",
    "S3LogAggregatorError",
    "InvalidConfiguration",
    "CacheDirectoryMissing",
    "DownloadFailed",
    "BufferedTextReader",
    "get_date_range",
    "render_path_template",
    "TranslatedRecord",
    "MalformedRecord",
    "translate_s3_log_line",
    "MergedS3Logs",
    "merge_s3_log_files",
    "S3ObjectStore",
    "BucketDescriptor",
    "LoggingTarget",
    "ObjectDescriptor",
    "ObjectCache",
    "OutputRouter",
    "combine_month",
    "ensure_descriptor_budget",
    "LogSource",
    "BucketSummary",
    "AggregationResult",
    "get_log_sources",
    "list_buckets_with_logging",
    "process_bucket",
    "aggregate_s3_access_logs",
]
