import resource
from collections.abc import Callable

from ._config import RLIMIT_NOFILE_HEADROOM


def _get_rlimit_nofile() -> tuple[int, int]:
    return resource.getrlimit(resource.RLIMIT_NOFILE)


def _set_rlimit_nofile(limits: tuple[int, int]) -> None:
    resource.setrlimit(resource.RLIMIT_NOFILE, limits)


def ensure_descriptor_budget(
    *,
    file_count: int,
    headroom: int = RLIMIT_NOFILE_HEADROOM,
    get_limit: Callable[[], tuple[int, int]] | None = None,
    set_limit: Callable[[tuple[int, int]], None] | None = None,
) -> bool:
    """
    Raise the soft limit of open file descriptors so that `file_count` files can be handled at once.

    A refusal to raise the limit (e.g., above the hard limit without privileges) is not an error: processing goes on
    and individual opens fail if the budget is truly insufficient.

    Parameters
    ----------
    file_count : int
        The number of files the upcoming step may touch.
    headroom : int, default: 100
        Descriptors reserved on top of `file_count` for everything else the process has open.
    get_limit : callable, optional
        Returns the current (soft, hard) limits. Defaults to `resource.getrlimit(resource.RLIMIT_NOFILE)`.
    set_limit : callable, optional
        Applies new (soft, hard) limits. Defaults to `resource.setrlimit(resource.RLIMIT_NOFILE, ...)`.

    Returns
    -------
    is_budget_sufficient : bool
        False only if the soft limit had to be raised and that failed.
    """
    get_limit = get_limit or _get_rlimit_nofile
    set_limit = set_limit or _set_rlimit_nofile

    required_soft_limit = file_count + headroom
    soft_limit, hard_limit = get_limit()
    if soft_limit == resource.RLIM_INFINITY or required_soft_limit <= soft_limit:
        return True

    try:
        set_limit((required_soft_limit, hard_limit))
    except (ValueError, OSError):
        return False

    return True
