import os
import pathlib
import tempfile
import time

from ._exceptions import CacheDirectoryMissing, DownloadFailed
from ._path_template import render_path_template


class ObjectCache:
    def __init__(
        self,
        *,
        object_store,
        cache_directory_template: str,
        log_prefix: str,
        maximum_download_attempts: int = 3,
        retry_backoff_in_seconds: float = 1.0,
    ):
        """
        Local copies of remote log objects, keyed by object name.

        The presence of the local file is the only cache-hit signal; neither size nor modification times are compared.

        Parameters
        ----------
        object_store : S3ObjectStore or compatible
            Any object exposing `fetch_object(*, bucket, key) -> bytes`.
        cache_directory_template : str
            Path template of the cache root, rendered with the bucket name. The root must already exist.
        log_prefix : str
            The key prefix stripped from each object key to form its local file name.
        maximum_download_attempts : int, default: 3
            How many times a failing fetch is attempted before giving up.
        retry_backoff_in_seconds : float, default: 1.0
            The wait before the first retry; doubled after every further failure.
        """
        if maximum_download_attempts < 1:
            raise ValueError(f"`maximum_download_attempts` must be at least 1, received {maximum_download_attempts}!")

        self.object_store = object_store
        self.cache_directory_template = cache_directory_template
        self.log_prefix = log_prefix
        self.maximum_download_attempts = maximum_download_attempts
        self.retry_backoff_in_seconds = retry_backoff_in_seconds

    def get_cache_root(self, *, bucket: str) -> pathlib.Path:
        return pathlib.Path(render_path_template(template=self.cache_directory_template, bucket=bucket))

    def get_local_path(self, *, bucket: str, object_key: str) -> pathlib.Path:
        relative_name = object_key.removeprefix(self.log_prefix).lstrip("/")

        return self.get_cache_root(bucket=bucket) / relative_name

    def ensure_local(self, *, bucket: str, object_key: str) -> pathlib.Path:
        """Return the local copy of an object, downloading it only if it is not cached yet."""
        cache_root = self.get_cache_root(bucket=bucket)
        if not cache_root.is_dir():
            raise CacheDirectoryMissing(f"Cache directory '{cache_root}' for bucket '{bucket}' does not exist!")

        local_path = self.get_local_path(bucket=bucket, object_key=object_key)
        if local_path.exists():
            return local_path

        content = self._fetch_with_retries(bucket=bucket, object_key=object_key)

        local_path.parent.mkdir(parents=True, exist_ok=True)
        file_descriptor, temporary_file_path = tempfile.mkstemp(
            dir=local_path.parent, prefix=f".{local_path.name}.", suffix=".part"
        )
        try:
            with os.fdopen(file_descriptor, mode="wb") as io:
                io.write(content)
            os.replace(temporary_file_path, local_path)
        except BaseException:
            pathlib.Path(temporary_file_path).unlink(missing_ok=True)
            raise

        return local_path

    def _fetch_with_retries(self, *, bucket: str, object_key: str) -> bytes:
        backoff_in_seconds = self.retry_backoff_in_seconds
        for attempt in range(1, self.maximum_download_attempts + 1):
            try:
                return self.object_store.fetch_object(bucket=bucket, key=object_key)
            except Exception as exception:
                if attempt == self.maximum_download_attempts:
                    raise DownloadFailed(
                        f"Downloading '{object_key}' from bucket '{bucket}' failed after {attempt} attempt(s)!"
                    ) from exception

            time.sleep(backoff_in_seconds)
            backoff_in_seconds *= 2
