import pytest

from jumpkit.core.config import EXAMPLE_CONFIG, load_configuration, parse_configuration
from jumpkit.core.errors import ConfigurationError
from jumpkit.core.models import Configuration


def test_example_config_parses_in_declaration_order(tmp_path):
    path = tmp_path / "config.yml"
    path.write_text(EXAMPLE_CONFIG)
    config = load_configuration(str(path))

    assert config.regions == ("us-east-1", "us-west-2")
    assert [e.prefix for e in config.environments] == ["staging2", "staging", ""]
    assert config.environments[0].jump_host == "jump.staging2.example.com"
    assert config.environments[-1].region == "us-east-1"
    # placeholders are not values
    assert config.credentials[0].database is None
    assert config.credentials[0].password is None
    assert config.ssh_connect_timeout == 10
    assert config.tunnel_timeout == 30.0


def test_missing_regions_fall_back_to_defaults():
    config = parse_configuration({"aws": {"environments": [{"jumphost": "jump"}]}})
    assert config.regions == ("us-east-1", "us-west-2")
    assert config.environments[0].prefix == ""


def test_missing_file_gives_defaults(tmp_path):
    assert load_configuration(str(tmp_path / "nope.yml")) == Configuration()


def test_invalid_yaml_is_fatal(tmp_path):
    path = tmp_path / "config.yml"
    path.write_text("aws: [unclosed\n")
    with pytest.raises(ConfigurationError):
        load_configuration(str(path))


def test_wrong_shapes_are_fatal():
    with pytest.raises(ConfigurationError):
        parse_configuration({"aws": {"rds": "staging"}})
    with pytest.raises(ConfigurationError):
        parse_configuration({"aws": ["us-east-1"]})
    with pytest.raises(ConfigurationError):
        parse_configuration({"ssh": {"connectTimeout": "soon"}})


def test_zero_timeouts_are_kept():
    config = parse_configuration({"ssh": {"connectTimeout": 0}, "tunnel": {"timeout": 0}})
    assert config.ssh_connect_timeout == 0
    assert config.tunnel_timeout == 0.0
