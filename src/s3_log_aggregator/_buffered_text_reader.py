import math
import pathlib


class BufferedTextReader:
    def __init__(self, *, file_path: str | pathlib.Path, maximum_buffer_size_in_bytes: int = 10**9):
        """
        Lazily read a text file into RAM using buffers of a specified size.

        Every buffer ends on a line break (or at the end of the file), so a line is never split across buffers.

        Parameters
        ----------
        file_path : string or pathlib.Path
            The path to the text file to be read.
        maximum_buffer_size_in_bytes : int, default: 1 GB
            The theoretical maximum amount of RAM (in bytes) to be used by the BufferedTextReader object.
        """
        self.file_path = file_path
        self.maximum_buffer_size_in_bytes = maximum_buffer_size_in_bytes

        # The actual amount of bytes to read per iteration is 3x less than theoretical maximum usage
        # due to decoding and handling
        self.buffer_size_in_bytes = max(int(maximum_buffer_size_in_bytes / 3), 1)

        self.total_file_size = pathlib.Path(file_path).stat().st_size
        self.offset = 0

    def __iter__(self):
        return self

    def __len__(self) -> int:
        """The number of buffers needed for a file whose lines all end exactly on buffer boundaries."""
        return math.ceil(self.total_file_size / self.buffer_size_in_bytes)

    def __next__(self) -> list[str]:
        """Retrieve the next buffer from the file, or raise StopIteration if the file is exhausted."""
        if self.offset >= self.total_file_size:
            raise StopIteration

        with open(file=self.file_path, mode="rb", buffering=0) as io:
            io.seek(self.offset)
            intermediate_bytes = io.read(self.buffer_size_in_bytes)

        # Check if we are at the end of the file
        if self.offset + len(intermediate_bytes) >= self.total_file_size:
            self.offset = self.total_file_size
            return _decode_lines(intermediate_bytes)

        # Cut on the last complete line in bytes so that multi-byte characters are never split between buffers
        last_line_break_index = intermediate_bytes.rfind(b"\n")
        if last_line_break_index == -1:
            raise ValueError(
                f"BufferedTextReader encountered a line at offset {self.offset} that exceeds the buffer "
                "size! Try increasing the `maximum_buffer_size_in_bytes` to account for this line."
            )

        complete_bytes = intermediate_bytes[: last_line_break_index + 1]
        self.offset += len(complete_bytes)

        return _decode_lines(complete_bytes)


def _decode_lines(line_bytes: bytes) -> list[str]:
    # Only '\n' and '\r' end a line; user agents and referrers may contain separators such as U+2028
    return [line.decode(encoding="utf-8", errors="replace") for line in line_bytes.splitlines()]
