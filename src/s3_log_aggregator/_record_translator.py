"""
Translation of a single line of a raw S3 server access log into the Apache combined log format.

The strategy is to...

1) Match the raw line against the fixed-arity field pattern of the S3 log format.
2) Parse the bracketed timestamp, keeping its embedded offset, and normalize it to UTC for sorting and routing.
3) Render the standard line, substituting '-' for every empty field.

Lines that cannot be translated come back as a `MalformedRecord` rather than raising, since bad lines are an expected
part of real S3 logs.
"""

import datetime
from typing import NamedTuple

from ._globals import (
    _COMBINED_LOG_LINE_TEMPLATE,
    _ERROR_MARKER,
    _S3_LOG_LINE_REGEX,
    _S3_LOG_TIMESTAMP_FORMAT,
)

_RENDERED_FIELDS = (
    "ip_address",
    "requester",
    "timestamp",
    "request_line",
    "status_code",
    "bytes_sent",
    "referrer",
    "user_agent",
)


class TranslatedRecord(NamedTuple):
    timestamp: datetime.datetime
    text: str


class MalformedRecord(NamedTuple):
    line: str

    @property
    def text(self) -> str:
        return f"{_ERROR_MARKER}{self.line}"


def translate_s3_log_line(*, raw_s3_log_line: str) -> TranslatedRecord | MalformedRecord:
    """
    Translate one raw S3 log line.

    Parameters
    ----------
    raw_s3_log_line : str
        A single line of a raw S3 log file, with or without its trailing line break.

    Returns
    -------
    record : TranslatedRecord or MalformedRecord
        The UTC timestamp and the rendered combined log line, or the raw line tagged as malformed when the field
        pattern does not match, the status code is not a number, or the timestamp cannot be parsed.
    """
    stripped_line = raw_s3_log_line.rstrip("\r\n")

    match = _S3_LOG_LINE_REGEX.fullmatch(string=stripped_line)
    if match is None:
        return MalformedRecord(line=stripped_line)

    fields = match.groupdict()
    # `isdigit` alone also accepts digits such as superscripts that `int` rejects
    if not (fields["status_code"].isascii() and fields["status_code"].isdigit()):
        return MalformedRecord(line=stripped_line)

    try:
        timestamp = datetime.datetime.strptime(fields["timestamp"], _S3_LOG_TIMESTAMP_FORMAT)
    except ValueError:
        return MalformedRecord(line=stripped_line)

    rendered_fields = {field: fields[field] or "-" for field in _RENDERED_FIELDS}
    rendered_fields["status_code"] = int(fields["status_code"])
    text = _COMBINED_LOG_LINE_TEMPLATE.format(**rendered_fields)

    return TranslatedRecord(timestamp=timestamp.astimezone(datetime.timezone.utc), text=text)
