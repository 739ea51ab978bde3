import datetime
import importlib.metadata

from ._config import S3_LOG_AGGREGATOR_BASE_FOLDER_PATH


def _collect_error(message: str, error_type: str, task_id: str | None = None) -> None:
    """
    Append a diagnostic report to the error collection of the current run.

    Reports land in '~/.s3_log_aggregator/errors/v<version>_<yymmdd>_<error_type>_errors[_<task_id>].txt', one file
    per version, day, error type, and bucket. Nothing is ever written to the aggregated output files.

    The aggregator writes the following error types:

    - "malformed_line": every line of a bucket that could not be translated, each prefixed with '# ERROR: '.
    - "dropped_record": the translated records of a write whose day had no open output file (e.g., clock skew).
    - "descriptor_budget": a refused attempt to raise the open file descriptor limit.
    - "bucket": a bucket whose processing was aborted, with the exception and its traceback.

    Parameters
    ----------
    message : str
        The report to be collected; several lines are kept together as one entry.
        This message is automatically padded in the file with some empty lines for readability.
    error_type : str
        The type of error message being collected.
        Added as an identifying tag on the error collection file name.
    task_id : str or None, optional
        A unique identifier for the task that generated the error, such as the bucket being processed.
        Added as an identifying tag on the error collection file name.
    """
    errors_folder_path = S3_LOG_AGGREGATOR_BASE_FOLDER_PATH / "errors"
    errors_folder_path.mkdir(exist_ok=True)

    s3_log_aggregator_version = importlib.metadata.version(distribution_name="s3_log_aggregator")
    date = datetime.datetime.now().strftime("%y%m%d")

    error_collection_file_name = f"v{s3_log_aggregator_version}_{date}_{error_type}_errors"
    if task_id is not None:
        error_collection_file_name += f"_{task_id}"
    error_collection_file_name += ".txt"
    error_collection_file_path = errors_folder_path / error_collection_file_name

    padded_message = f"{message}\n\n"
    with open(file=error_collection_file_path, mode="a") as io:
        io.write(padded_message)

    return None
