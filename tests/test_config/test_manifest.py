"""
Test Suite for the configuration schemas and the Config manifest.

Covers defaults, field validation, cross-field validation and the
YAML-under-CLI layering performed by Config.from_args.
"""

# =========================================================================== #
#                         Standard Imports                                    #
# =========================================================================== #
from pathlib import Path

# =========================================================================== #
#                         Third-Party Imports                                 #
# =========================================================================== #
import pytest
import yaml
from pydantic import ValidationError

# =========================================================================== #
#                         Internal Imports                                    #
# =========================================================================== #
from turnstile.core.config import Config, LaunchConfig, SchedulerConfig, TelemetryConfig
from turnstile.core.errors import ConfigurationError

# =========================================================================== #
#                    SCHEMAS                                                  #
# =========================================================================== #


@pytest.mark.unit
def test_scheduler_defaults():
    cfg = SchedulerConfig()

    assert cfg.num_resources == 1
    assert cfg.poll_interval == 1.0
    assert cfg.lock_name == "gpu-waiter.lock"
    assert cfg.runtime_dir is None


@pytest.mark.unit
def test_scheduler_lock_file_path(tmp_path):
    cfg = SchedulerConfig(runtime_dir=tmp_path, lock_name="team.lock")

    assert cfg.resolved_runtime_dir == tmp_path.resolve()
    assert cfg.lock_file_path == tmp_path.resolve() / "team.lock"


@pytest.mark.unit
@pytest.mark.parametrize(
    "field,value",
    [
        ("num_resources", 0),
        ("poll_interval", 0.0),
        ("poll_interval", -1.0),
        ("lock_name", "../escape.lock"),
        ("lock_name", ""),
    ],
)
def test_scheduler_rejects_invalid_values(field, value):
    with pytest.raises(ValidationError):
        SchedulerConfig(**{field: value})


@pytest.mark.unit
def test_schemas_are_frozen_and_strict():
    cfg = SchedulerConfig()

    with pytest.raises(ValidationError):
        cfg.num_resources = 3
    with pytest.raises(ValidationError):
        SchedulerConfig(unknown=1)


@pytest.mark.unit
def test_launch_defaults_and_validation():
    cfg = LaunchConfig(command=["python", "train.py"])

    assert cfg.env_var == "CUDA_VISIBLE_DEVICES"
    assert cfg.monitor_interval == 0.1
    assert cfg.force_env is False

    with pytest.raises(ValidationError):
        LaunchConfig(command=["", "x"])
    with pytest.raises(ValidationError):
        LaunchConfig(command=["run"], env_var="BAD=NAME")


@pytest.mark.unit
def test_telemetry_log_level_literal():
    assert TelemetryConfig().log_level == "INFO"

    with pytest.raises(ValidationError):
        TelemetryConfig(log_level="LOUD")


@pytest.mark.unit
def test_monitor_interval_cannot_exceed_poll_interval():
    with pytest.raises(ValidationError, match="monitor_interval"):
        Config(
            scheduler=SchedulerConfig(poll_interval=0.5),
            launch=LaunchConfig(command=["run"], monitor_interval=1.0),
        )


# =========================================================================== #
#                    FROM_ARGS                                                #
# =========================================================================== #


@pytest.mark.unit
def test_from_args_defaults(basic_args):
    cfg = Config.from_args(basic_args)

    assert cfg.launch.command == ["python", "train.py"]
    assert cfg.scheduler.num_resources == 1
    assert cfg.telemetry.show_progress is True


@pytest.mark.unit
def test_from_args_applies_overrides(basic_args, tmp_path):
    basic_args.num = 3
    basic_args.poll_interval = 2.0
    basic_args.force_env = True
    basic_args.log_level = "DEBUG"
    basic_args.log_dir = str(tmp_path)
    basic_args.show_progress = False

    cfg = Config.from_args(basic_args)

    assert cfg.scheduler.num_resources == 3
    assert cfg.scheduler.poll_interval == 2.0
    assert cfg.launch.force_env is True
    assert cfg.telemetry.log_level == "DEBUG"
    assert cfg.telemetry.log_dir == tmp_path.resolve()
    assert cfg.telemetry.show_progress is False


@pytest.mark.unit
def test_from_args_strips_separator(basic_args):
    basic_args.command = ["--", "./run.sh", "{}"]

    assert Config.from_args(basic_args).launch.command == ["./run.sh", "{}"]


@pytest.mark.unit
def test_from_args_requires_command(basic_args):
    basic_args.command = []

    with pytest.raises(ConfigurationError, match="No command"):
        Config.from_args(basic_args)


@pytest.mark.unit
def test_from_args_wraps_validation_errors(basic_args):
    basic_args.num = 0

    with pytest.raises(ConfigurationError, match="num_resources"):
        Config.from_args(basic_args)


@pytest.mark.unit
def test_yaml_layered_under_cli(basic_args, tmp_path):
    config_file = tmp_path / "waiter.yaml"
    config_file.write_text(
        yaml.safe_dump(
            {
                "scheduler": {"num_resources": 2, "poll_interval": 5.0},
                "launch": {"command": ["from-yaml"], "env_var": "HIP_VISIBLE_DEVICES"},
                "telemetry": {"show_progress": False},
            }
        )
    )
    basic_args.config = str(config_file)
    basic_args.num = 4

    cfg = Config.from_args(basic_args)

    assert cfg.scheduler.num_resources == 4
    assert cfg.scheduler.poll_interval == 5.0
    assert cfg.launch.env_var == "HIP_VISIBLE_DEVICES"
    assert cfg.launch.command == ["python", "train.py"]
    assert cfg.telemetry.show_progress is False


@pytest.mark.unit
def test_yaml_command_used_when_cli_has_none(basic_args, tmp_path):
    config_file = tmp_path / "waiter.yaml"
    config_file.write_text(yaml.safe_dump({"launch": {"command": ["./job.sh", "{}"]}}))
    basic_args.config = str(config_file)
    basic_args.command = []

    assert Config.from_args(basic_args).launch.command == ["./job.sh", "{}"]


@pytest.mark.unit
def test_yaml_unknown_section_rejected(basic_args, tmp_path):
    config_file = tmp_path / "bad.yaml"
    config_file.write_text(yaml.safe_dump({"training": {"epochs": 3}}))
    basic_args.config = str(config_file)

    with pytest.raises(ConfigurationError, match="Unknown configuration sections"):
        Config.from_args(basic_args)


@pytest.mark.unit
def test_yaml_must_be_mapping(basic_args, tmp_path):
    config_file = tmp_path / "list.yaml"
    config_file.write_text("- a\n- b\n")
    basic_args.config = str(config_file)

    with pytest.raises(ConfigurationError, match="mapping"):
        Config.from_args(basic_args)


@pytest.mark.unit
def test_missing_yaml_file(basic_args, tmp_path):
    basic_args.config = str(tmp_path / "absent.yaml")

    with pytest.raises(ConfigurationError, match="not found"):
        Config.from_args(basic_args)


@pytest.mark.unit
def test_model_dump_is_yaml_friendly(basic_args, tmp_path):
    basic_args.runtime_dir = str(tmp_path)
    cfg = Config.from_args(basic_args)

    dumped = cfg.model_dump(mode="json")

    assert dumped["scheduler"]["runtime_dir"] == str(Path(tmp_path).resolve())
    assert dumped["launch"]["command"] == ["python", "train.py"]


# =========================================================================== #
#                    PACKAGE API                                              #
# =========================================================================== #


@pytest.mark.unit
def test_lazy_package_attributes_are_cached():
    import turnstile.core.config as config_pkg
    from turnstile.core.config.types import LogLevel

    assert config_pkg.LogLevel is LogLevel
    assert vars(config_pkg)["LogLevel"] is LogLevel
    assert "TelemetryConfig" in dir(config_pkg)


@pytest.mark.unit
def test_lazy_package_unknown_attribute():
    import turnstile.core.config as config_pkg

    with pytest.raises(AttributeError, match="RetryPolicy"):
        config_pkg.RetryPolicy
