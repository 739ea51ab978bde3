import datetime
import re

from ._exceptions import InvalidConfiguration

_PLACEHOLDER_REGEX = re.compile(pattern=r":(bucket|year|month|day)")


def render_path_template(
    *,
    template: str,
    bucket: str | None = None,
    date: datetime.date | None = None,
    year: int | str | None = None,
    month: int | str | None = None,
    day: int | str | None = None,
) -> str:
    """
    Expand the ':bucket', ':year', ':month', and ':day' placeholders of a path template.

    Integers are zero-padded (4 digits for the year, 2 for month and day); strings are inserted verbatim, which allows
    rendering glob patterns such as `day="[0-3][0-9]"`. A `date` fills in any of year, month, or day left unset.
    """
    if date is not None:
        year = year if year is not None else date.year
        month = month if month is not None else date.month
        day = day if day is not None else date.day

    values = {"bucket": bucket, "year": year, "month": month, "day": day}
    widths = {"bucket": 0, "year": 4, "month": 2, "day": 2}

    def substitute(match: re.Match) -> str:
        name = match.group(1)
        value = values[name]
        if value is None:
            raise InvalidConfiguration(f"No value was given for the ':{name}' placeholder of '{template}'!")
        if isinstance(value, int):
            return str(value).zfill(widths[name])
        return value

    return _PLACEHOLDER_REGEX.sub(repl=substitute, string=template)
