"""Merge many small raw S3 log files into a single chronologically ordered sequence of translated records."""

from typing import NamedTuple

import pandas
import tqdm
from pydantic import FilePath, validate_call

from ._buffered_text_reader import BufferedTextReader
from ._record_translator import MalformedRecord, TranslatedRecord, translate_s3_log_line


class MergedS3Logs(NamedTuple):
    records: list[TranslatedRecord]
    malformed_records: list[MalformedRecord]


@validate_call
def merge_s3_log_files(
    *,
    file_paths: list[FilePath],
    maximum_buffer_size_in_bytes: int = 10**8,
    tqdm_kwargs: dict | None = None,
) -> MergedS3Logs:
    """
    Read, translate, and order the lines of all given raw S3 log files.

    This is an in-memory full sort rather than a streaming merge; the number of files per run is bounded by the
    lookback window.

    Parameters
    ----------
    file_paths : list of file paths
        The raw S3 log files, in enumeration order.
    maximum_buffer_size_in_bytes : int, default: 100 MB
        The theoretical maximum amount of RAM (in bytes) to use on each buffer iteration when reading a file.
    tqdm_kwargs : dict, optional
        Keyword arguments to pass to the tqdm progress bar over files.

    Returns
    -------
    merged_s3_logs : MergedS3Logs
        `records` holds the translated records sorted ascending by timestamp; ties keep their encounter order (file
        order, then line order).
        `malformed_records` holds every line that could not be translated, in encounter order. These never enter the
        sorted sequence.
    """
    tqdm_kwargs = tqdm_kwargs or dict()
    resolved_tqdm_kwargs = dict(desc="Merging log files...", leave=False, mininterval=3.0)
    resolved_tqdm_kwargs.update(tqdm_kwargs)

    records = list()
    malformed_records = list()
    for file_path in tqdm.tqdm(iterable=file_paths, total=len(file_paths), **resolved_tqdm_kwargs):
        buffered_text_reader = BufferedTextReader(
            file_path=file_path,
            maximum_buffer_size_in_bytes=maximum_buffer_size_in_bytes,
        )
        for buffered_raw_lines in buffered_text_reader:
            for raw_line in buffered_raw_lines:
                if raw_line.strip() == "":
                    continue

                record = translate_s3_log_line(raw_s3_log_line=raw_line)
                if isinstance(record, MalformedRecord):
                    malformed_records.append(record)
                else:
                    records.append(record)

    if len(records) == 0:
        return MergedS3Logs(records=records, malformed_records=malformed_records)

    # A stable sort keeps same-second requests in encounter order
    timestamps = pandas.DataFrame(data={"timestamp": [record.timestamp for record in records]})
    ordered_timestamps = timestamps.sort_values(by="timestamp", kind="stable")
    ordered_records = [records[encounter_index] for encounter_index in ordered_timestamps.index]

    return MergedS3Logs(records=ordered_records, malformed_records=malformed_records)
