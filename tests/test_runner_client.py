"""Integration tests for RunnerClient against the fake stdio worker."""

import time
from pathlib import Path

import pytest

from rails_runner.client import runner_client
from rails_runner.client.runner_client import ClientState, RunnerClient
from rails_runner.core.contracts import RunnerClientContract
from rails_runner.core.protocol import ResponseKind
from rails_runner.process.supervisor import is_alive
from rails_runner.utils.exceptions import (
    EmptyMessageError,
    IncompleteMessageError,
    InitializationError,
    MalformedFrameError,
)


@pytest.fixture
def client(rails_app, worker_config):
    runner = RunnerClient(config=worker_config(), work_dir=rails_app)
    yield runner
    runner.close()


def _wait_for(predicate, timeout: float = 10.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.05)
    return predicate()


def test_boot_handshake_reaches_ready(client):
    assert client.state is ClientState.READY
    assert isinstance(client, RunnerClientContract)
    assert not client.stopped()


def test_route_returns_result_of_matching_frame(client):
    assert client.route(controller="users", action="index") == {"path": "/users", "verb": "GET"}
    assert client.request("route_info", {"controller": "users", "action": "show"}) == {
        "path": "/users/:id",
        "verb": "GET",
    }


def test_typed_lookups(client):
    user = client.model("User")
    assert user["name"] == "User"
    assert ["id", "integer"] in user["columns"]
    assert client.route_location("users_path") == {"location": "config/routes.rb:3 (users_path)"}
    assert client.association_target_location(model_name="User", association_name="posts") == {
        "location": "app/models/post.rb:1"
    }


def test_request_params_round_trip_through_worker(client):
    params = {"name": "Ünïcødé", "ids": [1, 2, 3], "nested": {"flag": True, "missing": None}}
    assert client.request("echo", params) == {"method": "echo", "params": params}
    assert client.request("echo") == {"method": "echo", "params": None}


def test_error_response_returns_absent_and_never_raises(client, log_messages):
    assert client.request("no_such_method") is None
    assert client.model("Ghost") is None
    assert client.call("no_such_method").kind is ResponseKind.ERROR
    assert any("unknown method no_such_method" in line for line in log_messages)
    # connection stays usable after a worker-reported error
    assert client.route("users", "index") == {"path": "/users", "verb": "GET"}


def test_malformed_frame_is_absent_for_wrappers(client, log_messages):
    with pytest.raises(MalformedFrameError):
        client.call("model", {"name": "Corrupt"})
    assert client.model("Corrupt") is None
    assert any("failed to get model information" in line for line in log_messages)
    assert client.model("User")["name"] == "User"


def test_empty_frame_after_boot_is_reported(client):
    assert client.call("empty").kind is ResponseKind.EMPTY
    with pytest.raises(EmptyMessageError):
        client.request("empty")


def test_truncated_response_raises_from_request(client):
    with pytest.raises(IncompleteMessageError):
        client.request("model", {"name": "Truncated"})


def test_truncated_response_is_absent_for_wrappers(client, log_messages):
    assert client.model("Truncated") is None
    assert any("failed to get model information" in line for line in log_messages)
    assert client.route("users", "index") is None
    assert client.route_location("users_path") is None


def test_boot_retries_through_five_empty_frames(rails_app, worker_config, log_messages):
    with RunnerClient(config=worker_config("--empty", "5"), work_dir=rails_app) as runner:
        assert runner.state is ClientState.READY
    retries = [line for line in log_messages if "retrying initialize" in line]
    assert len(retries) == 5


def test_sixth_empty_frame_fails_initialization(rails_app, worker_config):
    with pytest.raises(InitializationError) as excinfo:
        RunnerClient(config=worker_config("--empty", "6"), work_dir=rails_app)
    assert "booting fake worker" in excinfo.value.stderr


def test_crash_during_boot_carries_stderr(rails_app, worker_config):
    with pytest.raises(InitializationError) as excinfo:
        RunnerClient(config=worker_config("--crash"), work_dir=rails_app)
    assert "missing gem pg" in excinfo.value.stderr
    assert excinfo.value.code == "INITIALIZATION_FAILED"


def test_worker_runs_in_work_dir(client, rails_app):
    result = client.request("pwd")
    assert Path(result["cwd"]).resolve() == rails_app.resolve()


def test_shutdown_stops_worker_within_grace(client):
    client.shutdown()
    assert _wait_for(client.stopped, timeout=2.0)
    assert client.state is ClientState.STOPPED
    client.shutdown()


def test_requests_after_shutdown_are_absent(client):
    client.shutdown()
    assert client.request("model", {"name": "User"}) is None
    assert client.model("User") is None
    client.notify("reload")


def test_closed_streams_with_live_worker_is_not_stopped(rails_app, worker_config):
    runner = RunnerClient(config=worker_config("--ignore-shutdown"), work_dir=rails_app)
    runner.shutdown()
    assert not runner.stopped()
    assert runner.state is ClientState.SHUTTING_DOWN
    runner.close()
    assert runner.stopped()


def test_notify_after_worker_closes_input_only_logs(rails_app, worker_config, log_messages):
    runner = RunnerClient(config=worker_config("--close-stdin"), work_dir=rails_app)
    try:
        assert _wait_for(lambda: "stdin closed" in runner.stderr_output)
        runner.notify("reload")
        runner.trigger_reload()
    finally:
        runner.close()
    assert any("failed to send reload" in line for line in log_messages)
    assert any("failed to trigger reload" in line for line in log_messages)


def test_trigger_reload_reaches_worker(client):
    client.trigger_reload()
    assert _wait_for(lambda: "reloaded application" in client.stderr_output)


def test_close_force_kills_worker_ignoring_shutdown(rails_app, worker_config, log_messages):
    runner = RunnerClient(config=worker_config("--ignore-shutdown", register_exit_hook=True), work_dir=rails_app)
    runner.close()
    assert runner.stopped()
    assert any("force killing the server" in line for line in log_messages)
    runner.close()


def test_oversized_frame_is_absent_for_wrappers(client, log_messages):
    assert client.model("Oversized") is None
    assert any("failed to get model information" in line for line in log_messages)


def test_oversized_frame_during_boot_kills_worker(rails_app, worker_config, monkeypatch):
    spawned = []
    real_spawn = runner_client.spawn_worker

    def recording_spawn(*args, **kwargs):
        handle = real_spawn(*args, **kwargs)
        spawned.append(handle)
        return handle

    monkeypatch.setattr(runner_client, "spawn_worker", recording_spawn)
    config = worker_config("--oversized-boot", register_exit_hook=False)
    with pytest.raises(InitializationError, match="byte limit"):
        RunnerClient(config=config, work_dir=rails_app)
    assert len(spawned) == 1
    assert not is_alive(spawned[0])
    assert spawned[0].streams_closed
