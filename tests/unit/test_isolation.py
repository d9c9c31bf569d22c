from judge.config import Settings
from judge.engine import IsolationPolicy


def test_wrapper_prefixes_command():
    policy = IsolationPolicy(wrapper=("prlimit", "--as=268435456", "--"))

    assert policy.command(["node", "/tmp/a.js"]) == [
        "prlimit",
        "--as=268435456",
        "--",
        "node",
        "/tmp/a.js",
    ]


def test_environment_only_passes_listed_variables(monkeypatch):
    monkeypatch.setenv("PATH", "/usr/bin")
    monkeypatch.setenv("DATABASE_PASSWORD", "hunter2")
    policy = IsolationPolicy(env_passthrough=("PATH",), extra_env={"LC_ALL": "C"})

    assert policy.environment() == {"PATH": "/usr/bin", "LC_ALL": "C"}


def test_policy_from_settings():
    settings = Settings(
        sandbox_wrapper=["nice", "-n", "10"],
        sandbox_new_session=False,
        sandbox_env_passthrough=["PATH"],
        work_dir="/var/tmp/judge",
    )

    policy = IsolationPolicy.from_settings(settings)

    assert policy.wrapper == ("nice", "-n", "10")
    assert not policy.new_session
    assert policy.env_passthrough == ("PATH",)
    assert policy.spawn_options()["cwd"] == "/var/tmp/judge"
    assert policy.spawn_options()["start_new_session"] is False
