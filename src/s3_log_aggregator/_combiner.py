import glob
import pathlib
import shutil
from typing import Annotated

import natsort
from pydantic import Field, validate_call

from ._path_template import render_path_template

_DAY_GLOB_PATTERN = "[0-3][0-9]"


@validate_call
def combine_month(
    *,
    bucket: str,
    year: int,
    month: Annotated[int, Field(ge=1, le=12)],
    output_file_template: str,
    combined_output_file_template: str,
) -> pathlib.Path:
    """
    Concatenate all existing day files of a month, in ascending day order, into one combined file.

    Missing days are skipped; nothing is written in their place.

    Parameters
    ----------
    bucket : str
        The bucket name used to render the ':bucket' placeholder.
    year : int
    month : int
    output_file_template : str
        Path template of a day file, e.g. './logs/:year/:month/:day/:bucket.log'.
    combined_output_file_template : str
        Path template of the month file, e.g. './logs/:year/:month/:bucket.log'.

    Returns
    -------
    combined_file_path : pathlib.Path
    """
    combined_file_path = pathlib.Path(
        render_path_template(template=combined_output_file_template, bucket=bucket, year=year, month=month)
    )
    day_file_pattern = render_path_template(
        template=output_file_template, bucket=bucket, year=year, month=month, day=_DAY_GLOB_PATTERN
    )

    # Natural sorting orders by the numeric day rather than by the file name
    day_file_paths = [
        pathlib.Path(day_file_path)
        for day_file_path in natsort.natsorted(glob.glob(day_file_pattern))
        if pathlib.Path(day_file_path) != combined_file_path
    ]

    combined_file_path.parent.mkdir(parents=True, exist_ok=True)
    with open(file=combined_file_path, mode="wb") as combined_io:
        for day_file_path in day_file_paths:
            with open(file=day_file_path, mode="rb") as day_io:
                shutil.copyfileobj(day_io, combined_io)

    return combined_file_path
