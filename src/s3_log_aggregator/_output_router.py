import contextlib
import datetime
import pathlib
from collections.abc import Iterable
from typing import TextIO

from ._error_collection import _collect_error
from ._exceptions import InvalidConfiguration
from ._path_template import render_path_template
from ._record_translator import TranslatedRecord


class OutputRouter:
    def __init__(self, *, bucket: str, output_file_template: str):
        """
        Route translated records to one output file per calendar day.

        Destinations are opened eagerly for the whole date range and owned exclusively by this router. Use the router
        as a context manager so that every destination is closed on all exit paths.

        Parameters
        ----------
        bucket : str
            The bucket name used to render the ':bucket' placeholder.
        output_file_template : str
            Path template of a day file, e.g. './logs/:year/:month/:day/:bucket.log'.
        """
        self.bucket = bucket
        self.output_file_template = output_file_template

        self.open_files: dict[datetime.date, TextIO] = dict()
        self.number_of_dropped_records = 0
        self._exit_stack = contextlib.ExitStack()

    def __enter__(self) -> "OutputRouter":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close_file_descriptors()

    def get_output_file_path(self, *, date: datetime.date) -> pathlib.Path:
        return pathlib.Path(render_path_template(template=self.output_file_template, bucket=self.bucket, date=date))

    def ensure_output_directories(self, dates: Iterable[datetime.date]) -> None:
        for date in dates:
            self.get_output_file_path(date=date).parent.mkdir(parents=True, exist_ok=True)

    def open_file_descriptors(self, dates: Iterable[datetime.date]) -> None:
        """
        Open one destination per date, truncating any previous content.

        Raises `InvalidConfiguration` before opening anything if two dates would share a destination, since their
        handles would overwrite each other.
        """
        output_file_paths = {
            date: self.get_output_file_path(date=date) for date in dates if date not in self.open_files
        }

        dates_by_path = {self.get_output_file_path(date=date): date for date in self.open_files}
        for date, output_file_path in output_file_paths.items():
            other_date = dates_by_path.setdefault(output_file_path, date)
            if other_date != date:
                raise InvalidConfiguration(
                    f"The output file template '{self.output_file_template}' renders the same path "
                    f"'{output_file_path}' for {other_date.isoformat()} and {date.isoformat()}!"
                )

        for date, output_file_path in output_file_paths.items():
            self.open_files[date] = self._exit_stack.enter_context(open(file=output_file_path, mode="w"))

    def write(self, records: Iterable[TranslatedRecord]) -> int:
        """
        Write each record to the destination of its (UTC) day.

        Records whose day has no open destination, such as those shifted by clock skew, are skipped, counted in
        `number_of_dropped_records`, and reported to the error collection.

        Returns
        -------
        number_of_written_records : int
        """
        number_of_written_records = 0
        dropped_lines = list()
        for record in records:
            io = self.open_files.get(record.timestamp.date())
            if io is None:
                dropped_lines.append(record.text)
                continue

            io.write(f"{record.text}\n")
            number_of_written_records += 1

        if len(dropped_lines) != 0:
            self.number_of_dropped_records += len(dropped_lines)
            message = (
                f"Skipped {len(dropped_lines)} record(s) outside of the opened date range for bucket "
                f"'{self.bucket}':\n" + "\n".join(dropped_lines)
            )
            _collect_error(message=message, error_type="dropped_record", task_id=self.bucket)

        return number_of_written_records

    def close_file_descriptors(self) -> None:
        try:
            self._exit_stack.close()
        finally:
            self.open_files = dict()
