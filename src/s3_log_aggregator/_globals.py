import re

# The object key is matched lazily since unescaped spaces have been seen in it
# Fields that newer logs append after the user agent are ignored
_S3_LOG_LINE_REGEX = re.compile(
    pattern=(
        r"(?P<bucket_owner>[^ ]*) (?P<bucket>[^ ]*) \[(?P<timestamp>[^\]]*)\] "
        r"(?P<ip_address>[^ ]*) (?P<requester>[^ ]*) (?P<request_id>[^ ]*) (?P<operation>[^ ]*) "
        r'(?P<object_key>.*?) "(?P<request_line>[^"]*)" '
        r"(?P<status_code>[^ ]*) (?P<error_code>[^ ]*) (?P<bytes_sent>[^ ]*) (?P<object_size>[^ ]*) "
        r"(?P<total_time>[^ ]*) (?P<turn_around_time>[^ ]*) "
        r'"(?P<referrer>[^"]*)" "(?P<user_agent>[^"]*)"'
        r"(?: .*)?"
    )
)

_S3_LOG_TIMESTAMP_FORMAT = "%d/%b/%Y:%H:%M:%S %z"

_COMBINED_LOG_LINE_TEMPLATE = (
    '{ip_address} - {requester} [{timestamp}] "{request_line}" {status_code} {bytes_sent} "{referrer}" "{user_agent}"'
)

_ERROR_MARKER = "# ERROR: "
