"""Tests for the HTTP API and the flowctl command."""

import pytest
from fastapi.testclient import TestClient

from cli.api import create_app
from cli.flowctl import main, parse_assignment, parse_bool
from flow.runtime import create_runtime
from flow.settings import Settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("FLOW_CONFIG", "USE_REDIS", "REDIS_HOST", "REDIS_PORT", "REDIS_DB",
                 "FLOW_STRICT_CONDITIONS", "FLOW_LOG_LEVEL", "FLOW_LOG_FILE"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def client(store):
    runtime = create_runtime(Settings(), store=store)
    return TestClient(create_app(runtime))


class TestApi:
    """Tests for the FastAPI app."""

    def test_health(self, client):
        assert client.get("/health").json() == {"ok": True, "flow": "onboarding"}

    def test_next_step_follows_flags(self, client):
        assert client.get("/flow/next").json() == {"destination": "privacy_policy", "step_id": "privacy"}

        res = client.put("/flags/privacy_policy_agreed", json={"value": True})
        assert res.status_code == 200
        assert res.json()["destination"] == "login"

        client.put("/flags/logged_in", json={"value": True})
        assert client.get("/flow/next").json()["destination"] == "main"

    def test_can_reach(self, client):
        assert client.get("/flow/can-reach/login").json() == {"destination": "login", "reachable": False}
        client.put("/flags/privacy_policy_agreed", json={"value": True})
        assert client.get("/flow/can-reach/login").json()["reachable"] is True

    def test_can_reach_unknown_destination(self, client):
        assert client.get("/flow/can-reach/settings").status_code == 404

    def test_flags(self, client):
        client.put("/flags/logged_in", json={"value": True})
        assert client.get("/flags").json() == {"flags": {"logged_in": True}}

    def test_graph(self, client):
        body = client.get("/flow/graph").json()
        assert body["tree"].startswith("DAG dependency tree:")
        assert body["snapshot"]["order"] == ["privacy", "login", "main"]

    def test_transition_report(self, client):
        body = client.post("/flow/transitions", json={"destination": "main", "source": "privacy_policy"}).json()
        assert body == {"destination": "main", "expected": "privacy_policy", "matched": False}


class TestFlowctl:
    """Tests for the flowctl CLI."""

    def test_parse_bool(self):
        assert parse_bool("Yes") is True
        assert parse_bool("0") is False
        with pytest.raises(ValueError):
            parse_bool("maybe")

    def test_parse_assignment(self):
        assert parse_assignment("logged_in=true") == ("logged_in", True)
        with pytest.raises(ValueError):
            parse_assignment("logged_in")

    def test_validate_only(self, onboarding_config, capsys):
        assert main(["--config", onboarding_config, "--validate-only"]) == 0
        assert "successfully" in capsys.readouterr().out

    def test_validate_only_missing_file(self, tmp_path):
        assert main(["--config", str(tmp_path / "nope.json"), "--validate-only"]) == 1

    def test_can_reach_with_flags(self, capsys):
        assert main(["--set", "privacy_policy_agreed=true", "--can-reach", "login"]) == 0
        assert "login: reachable" in capsys.readouterr().out

    def test_can_reach_blocked(self, capsys):
        assert main(["--can-reach", "main"]) == 3
        assert "main: blocked" in capsys.readouterr().out

    def test_print_graph(self, capsys):
        assert main(["--print-graph"]) == 0
        out = capsys.readouterr().out
        assert "└── main (main) ✗" in out
        assert "Next: privacy_policy" in out

    def test_bad_assignment(self):
        assert main(["--set", "logged_in"]) == 2

    def test_missing_config(self, tmp_path):
        assert main(["--config", str(tmp_path / "nope.json"), "--print-graph"]) == 1


class TestSettings:
    """Tests for environment-driven settings."""

    def test_defaults(self):
        settings = Settings.from_env(dotenv=False)
        assert settings.flow_config is None
        assert not settings.use_redis
        assert settings.redis_port == 6379

    def test_from_env(self, monkeypatch, onboarding_config):
        monkeypatch.setenv("FLOW_CONFIG", onboarding_config)
        monkeypatch.setenv("USE_REDIS", "1")
        monkeypatch.setenv("REDIS_PORT", "6380")
        monkeypatch.setenv("FLOW_STRICT_CONDITIONS", "true")
        monkeypatch.setenv("FLOW_LOG_LEVEL", "debug")

        settings = Settings.from_env(dotenv=False)
        assert settings.flow_config == onboarding_config
        assert settings.use_redis
        assert settings.redis_port == 6380
        assert settings.strict_conditions
        assert settings.log_level == "DEBUG"

    def test_runtime_from_config_file(self, onboarding_config, store):
        runtime = create_runtime(Settings(flow_config=onboarding_config), store=store)
        assert runtime.flow_def.name == "onboarding"
        assert runtime.resolver.next_step() == "privacy_policy"

    def test_boolean_env_uses_shared_tokens(self, monkeypatch):
        monkeypatch.setenv("USE_REDIS", "off")
        monkeypatch.setenv("FLOW_STRICT_CONDITIONS", "y")
        settings = Settings.from_env(dotenv=False)
        assert not settings.use_redis
        assert settings.strict_conditions

    def test_invalid_boolean_env(self, monkeypatch):
        monkeypatch.setenv("USE_REDIS", "maybe")
        with pytest.raises(ValueError):
            Settings.from_env(dotenv=False)
