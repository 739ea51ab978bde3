import pathlib

import pydantic
import yaml
from pydantic import BaseModel, Field, model_validator

from ._exceptions import InvalidConfiguration

S3_LOG_AGGREGATOR_BASE_FOLDER_PATH = pathlib.Path.home() / ".s3_log_aggregator"
S3_LOG_AGGREGATOR_BASE_FOLDER_PATH.mkdir(exist_ok=True)

DEFAULT_CONFIG_FILE_PATHS = (
    pathlib.Path("~/.s3_log_aggregator.yaml"),
    pathlib.Path("/etc/s3_log_aggregator.yaml"),
)

# Number of file descriptors to allocate above the number of files touched by a merge
RLIMIT_NOFILE_HEADROOM = 100


class AggregatorConfig(BaseModel):
    """
    Settings of one aggregation run.

    Path options are templates understood by `render_path_template`, e.g. './logs/:year/:month/:day/:bucket.log'.
    """

    model_config = dict(extra="forbid")

    cache_dir: str
    output_file: str
    combined_output_file: str | None = None
    days_to_look_back: int = Field(ge=1)
    days_to_ignore: int = Field(ge=0, default=0)
    log_buckets: list[str] | None = None
    log_prefix: str = "logs/"
    aws_access_key_id: str | None = None
    aws_secret_access_key: str | None = None
    endpoint_url: str | None = None

    @model_validator(mode="after")
    def _check_windows_and_templates(self) -> "AggregatorConfig":
        if self.days_to_ignore >= self.days_to_look_back:
            raise ValueError(
                f"`days_to_ignore` ({self.days_to_ignore}) must be smaller than "
                f"`days_to_look_back` ({self.days_to_look_back})!"
            )

        if ":day" not in self.output_file:
            raise ValueError("`output_file` requires the ':day' placeholder so that every day has its own file!")

        processes_many_buckets = self.log_buckets is None or len(self.log_buckets) > 1
        if processes_many_buckets and ":bucket" not in self.output_file:
            raise ValueError("`output_file` requires the ':bucket' placeholder when processing several buckets!")
        if (
            processes_many_buckets
            and self.combined_output_file is not None
            and ":bucket" not in self.combined_output_file
        ):
            raise ValueError(
                "`combined_output_file` requires the ':bucket' placeholder when processing several buckets!"
            )

        return self


def load_config(
    *,
    config_file_path: str | pathlib.Path | None = None,
    overrides: dict | None = None,
) -> AggregatorConfig:
    """
    Read the YAML configuration and apply overrides on top of it.

    Parameters
    ----------
    config_file_path : str or pathlib.Path, optional
        An explicit configuration file. When omitted, the first existing file among `DEFAULT_CONFIG_FILE_PATHS` is
        used; when none exists, only the overrides are used.
    overrides : dict, optional
        Option values that take precedence over the file content. Entries whose value is None are ignored, so the
        command line can forward every option it received.
    """
    overrides = overrides or dict()

    if config_file_path is not None:
        resolved_config_file_path = pathlib.Path(config_file_path).expanduser()
        if not resolved_config_file_path.exists():
            raise InvalidConfiguration(f"Configuration file '{resolved_config_file_path}' does not exist!")
    else:
        resolved_config_file_path = next(
            (
                default_config_file_path.expanduser()
                for default_config_file_path in DEFAULT_CONFIG_FILE_PATHS
                if default_config_file_path.expanduser().exists()
            ),
            None,
        )

    options = dict()
    if resolved_config_file_path is not None:
        with open(file=resolved_config_file_path) as stream:
            options = yaml.load(stream=stream, Loader=yaml.SafeLoader) or dict()
        if not isinstance(options, dict):
            raise InvalidConfiguration(f"Configuration file '{resolved_config_file_path}' must contain a mapping!")

    options.update({key: value for key, value in overrides.items() if value is not None})

    try:
        return AggregatorConfig(**options)
    except pydantic.ValidationError as exception:
        raise InvalidConfiguration(f"Invalid configuration!\n\n{exception}") from exception
