import pathlib

import py
import pytest

import s3_log_aggregator

EXAMPLE_CONFIG_TEXT = """\
cache_dir: ./cache/:bucket
output_file: ./logs/:year/:month/:day/:bucket.log
combined_output_file: ./logs/:year/:month/:bucket.log
days_to_look_back: 5
days_to_ignore: 2
log_buckets:
  - website
  - downloads
"""


@pytest.fixture
def example_config_file_path(tmpdir: py.path.local) -> pathlib.Path:
    config_file_path = pathlib.Path(tmpdir) / "s3_log_aggregator.yaml"
    config_file_path.write_text(EXAMPLE_CONFIG_TEXT)

    return config_file_path


def test_load_config(example_config_file_path: pathlib.Path) -> None:
    config = s3_log_aggregator.load_config(config_file_path=example_config_file_path)

    assert config.cache_dir == "./cache/:bucket"
    assert config.output_file == "./logs/:year/:month/:day/:bucket.log"
    assert config.combined_output_file == "./logs/:year/:month/:bucket.log"
    assert config.days_to_look_back == 5
    assert config.days_to_ignore == 2
    assert config.log_buckets == ["website", "downloads"]
    assert config.log_prefix == "logs/"
    assert config.endpoint_url is None


def test_load_config_overrides(example_config_file_path: pathlib.Path) -> None:
    config = s3_log_aggregator.load_config(
        config_file_path=example_config_file_path,
        overrides=dict(days_to_look_back=3, log_buckets=["website"], output_file="./logs/:day.log", cache_dir=None),
    )

    assert config.days_to_look_back == 3
    assert config.log_buckets == ["website"]
    assert config.output_file == "./logs/:day.log"
    # Overrides of None keep the file value
    assert config.cache_dir == "./cache/:bucket"


def test_aggregator_config_defaults() -> None:
    config = s3_log_aggregator.AggregatorConfig(
        cache_dir="./cache", output_file="./logs/:day.log", days_to_look_back=1, log_buckets=["website"]
    )

    assert config.days_to_ignore == 0
    assert config.combined_output_file is None


def test_load_config_missing_file(tmpdir: py.path.local) -> None:
    missing_config_file_path = pathlib.Path(tmpdir) / "missing.yaml"

    with pytest.raises(s3_log_aggregator.InvalidConfiguration):
        s3_log_aggregator.load_config(config_file_path=missing_config_file_path)


def test_load_config_not_a_mapping(tmpdir: py.path.local) -> None:
    config_file_path = pathlib.Path(tmpdir) / "list.yaml"
    config_file_path.write_text("- cache_dir\n- output_file\n")

    with pytest.raises(s3_log_aggregator.InvalidConfiguration):
        s3_log_aggregator.load_config(config_file_path=config_file_path)


@pytest.mark.parametrize(
    "overrides",
    [
        dict(days_to_look_back=0),
        dict(days_to_ignore=-1),
        dict(days_to_ignore=5),
        dict(days_to_look_back="many"),
        dict(unknown_option="value"),
    ],
)
def test_load_config_invalid(example_config_file_path: pathlib.Path, overrides: dict) -> None:
    with pytest.raises(s3_log_aggregator.InvalidConfiguration):
        s3_log_aggregator.load_config(config_file_path=example_config_file_path, overrides=overrides)


def test_invalid_configuration_is_a_value_error(example_config_file_path: pathlib.Path) -> None:
    with pytest.raises(ValueError):
        s3_log_aggregator.load_config(config_file_path=example_config_file_path, overrides=dict(days_to_ignore=7))


def test_load_config_requires_bucket_placeholder_for_several_buckets(example_config_file_path: pathlib.Path) -> None:
    with pytest.raises(s3_log_aggregator.InvalidConfiguration, match="':bucket' placeholder"):
        s3_log_aggregator.load_config(
            config_file_path=example_config_file_path, overrides=dict(output_file="./logs/:year/:month/:day.log")
        )


def test_load_config_allows_missing_bucket_placeholder_for_one_bucket(example_config_file_path: pathlib.Path) -> None:
    config = s3_log_aggregator.load_config(
        config_file_path=example_config_file_path,
        overrides=dict(
            log_buckets=["website"], output_file="./logs/:day.log", combined_output_file="./logs/:month.log"
        ),
    )

    assert config.output_file == "./logs/:day.log"


def test_load_config_requires_day_placeholder(example_config_file_path: pathlib.Path) -> None:
    with pytest.raises(s3_log_aggregator.InvalidConfiguration, match="':day' placeholder"):
        s3_log_aggregator.load_config(
            config_file_path=example_config_file_path, overrides=dict(output_file="./logs/:year/:month/:bucket.log")
        )
