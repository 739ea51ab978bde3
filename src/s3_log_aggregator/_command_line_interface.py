"""Call the S3 log aggregator from the command line."""

import click

from ._bucket_processor import aggregate_s3_access_logs, list_buckets_with_logging
from ._config import load_config
from ._exceptions import S3LogAggregatorError
from ._object_store import S3ObjectStore


@click.command(name="aggregate_s3_access_logs")
@click.option(
    "--config_file_path",
    help="The YAML configuration file. Defaults to '~/.s3_log_aggregator.yaml', then '/etc/s3_log_aggregator.yaml'.",
    required=False,
    type=click.Path(exists=True, dir_okay=False),
    default=None,
)
@click.option(
    "--buckets",
    help="A comma-separated list of buckets whose logs to aggregate. Defaults to all buckets with logging enabled.",
    required=False,
    type=str,
    default=None,
)
@click.option(
    "--days_to_look_back",
    help="The number of calendar days, ending today, eligible for processing.",
    required=False,
    type=click.IntRange(min=1),
    default=None,
)
@click.option(
    "--days_to_ignore",
    help="The number of most recent days to skip since their logs may not be fully delivered yet.",
    required=False,
    type=click.IntRange(min=0),
    default=None,
)
@click.option(
    "--cache_dir",
    help="Path template of the cache directory, e.g. './cache/:bucket'. The directory must already exist.",
    required=False,
    type=str,
    default=None,
)
@click.option(
    "--output_file",
    help="Path template of each day file, e.g. './logs/:year/:month/:day/:bucket.log'.",
    required=False,
    type=str,
    default=None,
)
@click.option(
    "--combined_output_file",
    help="Path template of each month file, e.g. './logs/:year/:month/:bucket.log'. Enables month combination.",
    required=False,
    type=str,
    default=None,
)
@click.option(
    "--log_prefix",
    help="The key prefix of the log objects inside each bucket.",
    required=False,
    type=str,
    default=None,
)
@click.option(
    "--endpoint_url",
    help="The endpoint of an S3-compatible store other than AWS.",
    required=False,
    type=str,
    default=None,
)
def _aggregate_s3_access_logs_cli(
    config_file_path: str | None,
    buckets: str | None,
    days_to_look_back: int | None,
    days_to_ignore: int | None,
    cache_dir: str | None,
    output_file: str | None,
    combined_output_file: str | None,
    log_prefix: str | None,
    endpoint_url: str | None,
) -> None:
    split_buckets = buckets.split(",") if buckets is not None else None

    try:
        config = load_config(
            config_file_path=config_file_path,
            overrides=dict(
                log_buckets=split_buckets,
                days_to_look_back=days_to_look_back,
                days_to_ignore=days_to_ignore,
                cache_dir=cache_dir,
                output_file=output_file,
                combined_output_file=combined_output_file,
                log_prefix=log_prefix,
                endpoint_url=endpoint_url,
            ),
        )
        aggregation_result = aggregate_s3_access_logs(config=config)
    except S3LogAggregatorError as exception:
        raise click.ClickException(message=str(exception)) from exception

    for bucket_summary in aggregation_result.summaries:
        click.echo(
            f"{bucket_summary.name}: {bucket_summary.number_of_log_files} files, "
            f"{bucket_summary.number_of_records} records, "
            f"{bucket_summary.number_of_malformed_records} malformed, "
            f"{bucket_summary.number_of_dropped_records} dropped"
        )

    if len(aggregation_result.failures) != 0:
        failed_buckets = ", ".join(aggregation_result.failures.keys())
        raise click.ClickException(message=f"Processing failed for: {failed_buckets}")

    return None


@click.command(name="list_s3_log_buckets")
@click.option(
    "--config_file_path",
    help="The YAML configuration file providing credentials.",
    required=False,
    type=click.Path(exists=True, dir_okay=False),
    default=None,
)
@click.option(
    "--endpoint_url",
    help="The endpoint of an S3-compatible store other than AWS.",
    required=False,
    type=str,
    default=None,
)
def _list_s3_log_buckets_cli(config_file_path: str | None, endpoint_url: str | None) -> None:
    aws_access_key_id = None
    aws_secret_access_key = None
    if config_file_path is not None:
        try:
            config = load_config(config_file_path=config_file_path, overrides=dict(endpoint_url=endpoint_url))
        except S3LogAggregatorError as exception:
            raise click.ClickException(message=str(exception)) from exception
        aws_access_key_id = config.aws_access_key_id
        aws_secret_access_key = config.aws_secret_access_key
        endpoint_url = config.endpoint_url

    object_store = S3ObjectStore(
        aws_access_key_id=aws_access_key_id,
        aws_secret_access_key=aws_secret_access_key,
        endpoint_url=endpoint_url,
    )
    for description in list_buckets_with_logging(object_store=object_store):
        click.echo(description)

    return None
