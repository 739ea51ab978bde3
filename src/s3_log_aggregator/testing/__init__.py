from ._helpers import InMemoryObjectStore, generate_raw_s3_log_line

__all__ = [
    "InMemoryObjectStore",
    "generate_raw_s3_log_line",
]
