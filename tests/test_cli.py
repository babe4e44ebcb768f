from click.testing import CliRunner

from jumpkit import cli
from jumpkit.connect import direct, tunnel
from jumpkit.core.errors import ClientExitError, NoResourcesFound
from jumpkit.core.models import Instance, Outcome


def test_config_prints_example():
    result = CliRunner().invoke(cli.main, ["config"])
    assert result.exit_code == 0
    assert "environments:" in result.output


def test_ec2_passes_flags_and_args(monkeypatch, tmp_path):
    seen = {}

    def fake_connect(config, params):
        seen["params"] = params
        return [Outcome(params.filter)]

    monkeypatch.setattr(direct, "connect_to_compute", fake_connect)
    result = CliRunner().invoke(
        cli.main,
        ["--config", str(tmp_path / "none.yml"), "ec2", "-j", "api", "exec", "ls", "-la"],
    )

    assert result.exit_code == 0, result.output
    params = seen["params"]
    assert params.filter == "api"
    assert params.args == ("exec", "ls", "-la")
    assert params.use_jump_host and not params.output and not params.all


def test_fatal_errors_exit_non_zero(monkeypatch, tmp_path):
    def fake_connect(config, params):
        raise NoResourcesFound("no instances found.")

    monkeypatch.setattr(direct, "connect_to_compute", fake_connect)
    result = CliRunner().invoke(cli.main, ["--config", str(tmp_path / "none.yml"), "ec2", "nothing"])

    assert result.exit_code == 1
    assert "no instances found." in result.output


def test_client_exit_status_is_kept(monkeypatch, tmp_path):
    def fake_connect(config, filter, args, all_mode=False, connector=None):
        raise ClientExitError("psql", 3)

    monkeypatch.setattr(tunnel, "connect_to_database", fake_connect)
    result = CliRunner().invoke(cli.main, ["--config", str(tmp_path / "none.yml"), "rds", "staging"])

    assert result.exit_code == 3


def test_batch_with_failures_exits_non_zero(monkeypatch, tmp_path):
    def fake_connect(config, filter, args, all_mode=False, connector=None):
        return [Outcome("a"), Outcome("b", ClientExitError("psql", 2))]

    monkeypatch.setattr(tunnel, "connect_to_database", fake_connect)
    result = CliRunner().invoke(cli.main, ["--config", str(tmp_path / "none.yml"), "rds", "-a", "staging"])

    assert result.exit_code == 1


def test_missing_ssh_binary_is_one_line(monkeypatch, tmp_path):
    def missing_ssh(cmd, **kwargs):
        raise FileNotFoundError(2, "No such file or directory", cmd[0])

    def fake_connect(config, params):
        instance = Instance(name="api-1", instance_id="i-1", public_address="ec2-1.example.com")
        direct.DirectConnector(config, runner=missing_ssh).connect(instance, params)
        return [Outcome(instance)]

    monkeypatch.setattr(direct, "connect_to_compute", fake_connect)
    result = CliRunner().invoke(cli.main, ["--config", str(tmp_path / "none.yml"), "ec2", "api"])

    assert result.exit_code == 1
    assert not isinstance(result.exception, FileNotFoundError)
    assert "Install ssh." in result.output
