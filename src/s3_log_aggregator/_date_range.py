import datetime

from ._exceptions import InvalidConfiguration


def get_date_range(
    *,
    days_to_look_back: int,
    days_to_ignore: int = 0,
    today: datetime.date | None = None,
) -> list[datetime.date]:
    """
    Determine the calendar dates to process.

    The lookback window counts back from today inclusively; the ignore window then trims the most recent days, since
    the store may not have finished delivering their logs yet.

    Parameters
    ----------
    days_to_look_back : int
        The number of calendar days ending today that are eligible for processing. Must be at least 1.
    days_to_ignore : int, default: 0
        The number of most recent days to exclude. Must be smaller than `days_to_look_back`.
    today : datetime.date, optional
        The reference date. Defaults to the current local date.

    Returns
    -------
    dates : list of datetime.date
        The `days_to_look_back - days_to_ignore` consecutive dates in ascending order.
    """
    if days_to_look_back < 1:
        raise InvalidConfiguration(f"`days_to_look_back` must be positive, received {days_to_look_back}!")
    if days_to_ignore < 0:
        raise InvalidConfiguration(f"`days_to_ignore` must not be negative, received {days_to_ignore}!")
    if days_to_ignore >= days_to_look_back:
        raise InvalidConfiguration(
            f"`days_to_ignore` ({days_to_ignore}) must be smaller than `days_to_look_back` ({days_to_look_back})!"
        )

    today = today or datetime.date.today()
    start_date = today - datetime.timedelta(days=days_to_look_back - 1)
    number_of_days = days_to_look_back - days_to_ignore

    dates = [start_date + datetime.timedelta(days=offset) for offset in range(number_of_days)]

    return dates
