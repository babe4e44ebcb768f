from jumpkit.connect.dispatch import prepare_args, resolve_command


def test_no_args_means_plain_login():
    assert prepare_args([]) == []


def test_known_verbs_map_to_scripts():
    assert prepare_args(["bash"]) == ["-tC", "/opt/bench/exec bash"]
    assert prepare_args(["exec", "ls", "-la"]) == ["-tC", "/opt/bench/exec", "ls", "-la"]
    assert prepare_args(["jstack", "1234"]) == ["-tC", "/opt/bench/jstack", "1234"]
    assert prepare_args(["jmap"]) == ["-tC", "/opt/bench/jmap"]
    assert prepare_args(["logs", "-f"]) == ["-tC", "/opt/bench/logs", "-f"]


def test_unknown_verbs_pass_through():
    assert resolve_command("uptime") == "uptime"
    assert prepare_args(["tail", "-f", "/var/log/syslog"]) == ["-tC", "tail", "-f", "/var/log/syslog"]
