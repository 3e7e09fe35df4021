# tests/core/test_step_runner.py
"""
StepRunner tests - the handshake / step loop / reporting contract

Tests cover:
1. Successful steps yield exactly one completion signal and no error
2. Failing steps yield exactly one send_error and the loop continues
3. Unknown step names are reported, never fatal
4. Termination sentinel ends the session with exit code 0
5. Handshake failures are fatal and nothing else runs
6. Handlers are passed through to get_step and are replaceable
7. Watchdog timeout
8. Transport failures on runner-issued calls
9. Bounded session history
"""

import asyncio

import pytest

from monitorcore import presets
from monitorcore.core.channel import ScriptedChannel, CLEANUP, TEARDOWN
from monitorcore.core.errors import (
    FatalSessionError,
    MonitorError,
    ProtocolTransportError,
    codes,
)
from monitorcore.core.reporting import Reporter
from monitorcore.core.runner import StepRunner, RunnerConfig, RunnerState, DEFAULT_EXIT_MESSAGE
from monitorcore.core.steps import StepRegistry


def build(script, *, config=None, on_config=None, provider=presets.test_monitor, channel=None):
    channel = channel or ScriptedChannel(script)
    reporter = Reporter(channel)
    registry = StepRegistry()
    if provider is not None:
        provider(registry, reporter)
    runner = StepRunner(channel, registry, reporter=reporter, config=config, on_config=on_config)
    return runner, channel, registry, reporter


def calls_for_step(channel, name):
    """Calls issued between get_step(name) and the next get_step."""
    out = []
    collecting = False
    for call in channel.calls:
        if call.kind == "get_step":
            if collecting:
                break
            collecting = call.payload == name
            continue
        if collecting:
            out.append((call.kind, call.payload))
    return out


class FailingHandshakeChannel(ScriptedChannel):
    async def handshake(self, config_callback):
        raise ConnectionError("orchestrator went away")


class BrokenGetStepChannel(ScriptedChannel):
    async def get_step(self, cleanup_handler, teardown_handler):
        raise ConnectionResetError("pipe closed")


class BrokenAnnounceChannel(ScriptedChannel):
    async def log_debug(self, text):
        raise ConnectionResetError("pipe closed")


class BrokenOkChannel(ScriptedChannel):
    async def send_ok(self):
        raise ConnectionResetError("pipe closed")


class BrokenSendErrorChannel(ScriptedChannel):
    async def send_error(self, error):
        raise ConnectionResetError("pipe closed")


class BrokenExitChannel(ScriptedChannel):
    async def log_info(self, text):
        if text == DEFAULT_EXIT_MESSAGE:
            raise ConnectionResetError("pipe closed")
        await super().log_info(text)


class RecordingHandlersChannel(ScriptedChannel):
    def __init__(self, script):
        super().__init__(script)
        self.handlers_seen = []

    async def get_step(self, cleanup_handler, teardown_handler):
        self.handlers_seen.append((cleanup_handler, teardown_handler))
        return await super().get_step(cleanup_handler, teardown_handler)


# ---------------------------
# Concrete scenarios
# ---------------------------

@pytest.mark.asyncio
async def test_test_logging_step_reports_in_order():
    runner, channel, _, _ = build(["TestLogging"])

    summary = await runner.run()

    assert calls_for_step(channel, "TestLogging") == [
        ("debug", "Starting step TestLogging"),
        ("debug", "Test Logging: DEBUG"),
        ("info", "Test Logging: INFO"),
        ("error", "Test Logging: ERROR"),
        ("time", 2.0),
    ]
    assert channel.of_kind("send_error") == []
    # sent its own time, so the runner owes no OK
    assert channel.of_kind("ok") == []
    assert channel.kinds()[-2:] == ["get_step", "info"]
    assert summary.executed == 1
    assert summary.failed == 0
    assert summary.outcomes[0].reported is True


@pytest.mark.asyncio
async def test_error_step_reports_one_error_and_loop_continues():
    runner, channel, _, _ = build(["Error", "TestLogging"])

    summary = await runner.run()

    errors = channel.of_kind("send_error")
    assert [e.payload for e in errors] == ["Error!"]
    assert calls_for_step(channel, "Error") == [
        ("debug", "Starting step Error"),
        ("send_error", "Error!"),
    ]
    # next step still ran
    assert ("time", 2.0) in calls_for_step(channel, "TestLogging")
    assert summary.executed == 2
    assert summary.failed == 1
    assert summary.outcomes[0].error.error_code == codes.STEP_RAISED


@pytest.mark.asyncio
async def test_sentinel_on_first_call_exits_zero_without_steps():
    runner, channel, _, _ = build([])

    summary = await runner.run()

    assert summary.exit_code == 0
    assert summary.executed == 0
    assert channel.kinds() == ["handshake", "get_step", "info"]
    assert channel.calls[-1].payload == DEFAULT_EXIT_MESSAGE
    assert runner.state == RunnerState.EXITED


# ---------------------------
# Success / failure paths
# ---------------------------

@pytest.mark.asyncio
async def test_silent_step_gets_exactly_one_ok():
    runner, channel, registry, _ = build(["Quiet"], provider=None)

    @registry.step("Quiet")
    async def quiet():
        await asyncio.sleep(0)

    summary = await runner.run()

    assert len(channel.of_kind("ok")) == 1
    assert channel.of_kind("send_error") == []
    assert summary.outcomes[0].ok
    assert summary.outcomes[0].reported is False


@pytest.mark.asyncio
async def test_step_sending_its_own_ok_is_not_doubled():
    runner, channel, _, _ = build(["PrintStderr"])

    await runner.run()

    assert len(channel.of_kind("ok")) == 1


@pytest.mark.asyncio
async def test_sync_step_body_is_supported():
    runner, channel, registry, _ = build(["Sync"], provider=None)
    ran = []
    registry.register("Sync", lambda: ran.append(True))

    await runner.run()

    assert ran == [True]
    assert len(channel.of_kind("ok")) == 1


@pytest.mark.asyncio
async def test_step_that_reports_error_itself_counts_as_failed():
    runner, channel, registry, reporter = build(["SoftFail"], provider=None)

    @registry.step("SoftFail")
    async def soft_fail():
        await reporter.send_error("upstream returned 503")

    summary = await runner.run()

    assert [c.payload for c in channel.of_kind("send_error")] == ["upstream returned 503"]
    assert channel.of_kind("ok") == []
    assert summary.failed == 1
    assert summary.outcomes[0].error is None


@pytest.mark.asyncio
async def test_step_raising_after_its_own_error_report_is_reported_once():
    runner, channel, registry, reporter = build(["Twice"], provider=None)

    @registry.step("Twice")
    async def twice():
        await reporter.send_error("first")
        raise RuntimeError("second")

    summary = await runner.run()

    assert [c.payload for c in channel.of_kind("send_error")] == ["first"]
    assert channel.of_kind("ok") == []
    assert summary.failed == 1
    assert summary.outcomes[0].reported is True
    assert summary.outcomes[0].error.message == "second"


@pytest.mark.asyncio
async def test_step_raising_after_its_own_ok_is_not_reported_again():
    runner, channel, registry, reporter = build(["Late"], provider=None)

    @registry.step("Late")
    async def late():
        await reporter.send_ok()
        raise ValueError("cleanup after ok failed")

    summary = await runner.run()

    assert len(channel.of_kind("ok")) == 1
    assert channel.of_kind("send_error") == []
    assert summary.failed == 1


@pytest.mark.asyncio
async def test_exception_without_message_uses_class_name():
    runner, channel, registry, _ = build(["Boom"], provider=None)

    @registry.step("Boom")
    async def boom():
        raise KeyError()

    await runner.run()

    assert [c.payload for c in channel.of_kind("send_error")] == ["KeyError"]


@pytest.mark.asyncio
async def test_unknown_step_is_reported_and_session_continues():
    runner, channel, _, _ = build(["Nope", "TestLogging"])

    summary = await runner.run()

    assert [c.payload for c in channel.of_kind("send_error")] == ["Step not found: Nope"]
    assert summary.outcomes[0].error.error_code == codes.STEP_NOT_FOUND
    assert summary.outcomes[1].ok
    assert summary.exit_code == 0


@pytest.mark.asyncio
async def test_log_calls_keep_issue_order():
    runner, channel, registry, reporter = build(["Chatty"], provider=None)

    @registry.step("Chatty")
    async def chatty():
        for i in range(5):
            await reporter.log_info(f"line {i}")
            await asyncio.sleep(0)
        await reporter.log_error("done")

    await runner.run()

    body = [p for k, p in calls_for_step(channel, "Chatty") if k in ("info", "error")]
    assert body == ["line 0", "line 1", "line 2", "line 3", "line 4", "done"]


@pytest.mark.asyncio
async def test_announcement_can_be_disabled():
    runner, channel, _, _ = build(["TestLogging"], config=RunnerConfig(announce_steps=False))

    await runner.run()

    assert calls_for_step(channel, "TestLogging")[0] == ("debug", "Test Logging: DEBUG")


@pytest.mark.asyncio
async def test_steps_never_overlap():
    runner, channel, registry, _ = build(["A", "B", "A"], provider=None)
    active = []
    max_active = []

    async def body():
        active.append(1)
        max_active.append(len(active))
        await asyncio.sleep(0.01)
        active.pop()

    registry.register("A", body)
    registry.register("B", body)

    summary = await runner.run()

    assert summary.executed == 3
    assert max(max_active) == 1


# ---------------------------
# Handshake
# ---------------------------

@pytest.mark.asyncio
async def test_handshake_passes_config_through():
    seen = []
    channel = ScriptedChannel([], config={"api_key": "abc", "region": "eu"})
    runner, _, _, _ = build([], channel=channel, on_config=seen.append)

    summary = await runner.run()

    assert seen == [{"api_key": "abc", "region": "eu"}]
    assert runner.orchestrator_config == {"api_key": "abc", "region": "eu"}
    assert summary.orchestrator_config == {"api_key": "abc", "region": "eu"}


@pytest.mark.asyncio
async def test_async_config_callback_is_awaited():
    seen = []

    async def on_config(config):
        await asyncio.sleep(0)
        seen.append(config)

    runner, _, _, _ = build([], on_config=on_config)
    await runner.run()

    assert seen == [{}]


@pytest.mark.asyncio
async def test_handshake_failure_is_fatal():
    channel = FailingHandshakeChannel(["TestLogging"])
    runner, _, _, _ = build(["TestLogging"], channel=channel)

    with pytest.raises(FatalSessionError) as exc_info:
        await runner.run()

    assert exc_info.value.error_code == codes.HANDSHAKE_FAILED
    assert isinstance(exc_info.value.cause, ConnectionError)
    assert runner.state == RunnerState.FAILED
    assert "get_step" not in channel.kinds()


@pytest.mark.asyncio
async def test_config_callback_failure_is_fatal():
    def on_config(config):
        raise ValueError("missing api_key")

    runner, channel, _, _ = build(["TestLogging"], on_config=on_config)

    with pytest.raises(FatalSessionError) as exc_info:
        await runner.run()

    assert "missing api_key" in exc_info.value.message
    assert "get_step" not in channel.kinds()


@pytest.mark.asyncio
async def test_run_twice_is_rejected():
    runner, _, _, _ = build([])
    await runner.run()

    with pytest.raises(MonitorError) as exc_info:
        await runner.run()

    assert exc_info.value.error_code == codes.INVALID_STATE


@pytest.mark.asyncio
async def test_registry_is_frozen_once_running():
    runner, _, registry, _ = build([])
    await runner.run()

    assert registry.frozen


# ---------------------------
# Transport errors
# ---------------------------

@pytest.mark.asyncio
async def test_get_step_failure_propagates_as_transport_error():
    channel = BrokenGetStepChannel([])
    runner, _, _, _ = build([], channel=channel)

    with pytest.raises(ProtocolTransportError):
        await runner.run()

    assert runner.state == RunnerState.FAILED


@pytest.mark.asyncio
async def test_announcement_failure_propagates_as_transport_error():
    channel = BrokenAnnounceChannel(["TestLogging", "Error"])
    runner, _, _, reporter = build([], channel=channel)

    with pytest.raises(ProtocolTransportError) as exc_info:
        await runner.run()

    assert isinstance(exc_info.value.cause, ConnectionResetError)
    assert runner.state == RunnerState.FAILED
    assert reporter.current_step is None
    assert len(channel.of_kind("get_step")) == 1


@pytest.mark.asyncio
async def test_runner_ok_failure_propagates_as_transport_error():
    channel = BrokenOkChannel(["Quiet", "Quiet"])
    runner, _, registry, reporter = build([], channel=channel, provider=None)

    @registry.step("Quiet")
    async def quiet():
        return None

    with pytest.raises(ProtocolTransportError) as exc_info:
        await runner.run()

    assert exc_info.value.error_code == codes.TRANSPORT_FAILED
    assert runner.state == RunnerState.FAILED
    assert reporter.current_step is None
    assert len(channel.of_kind("get_step")) == 1


@pytest.mark.asyncio
async def test_runner_error_report_failure_propagates_as_transport_error():
    channel = BrokenSendErrorChannel(["Error", "TestLogging"])
    runner, _, _, reporter = build([], channel=channel)

    with pytest.raises(ProtocolTransportError):
        await runner.run()

    assert runner.state == RunnerState.FAILED
    assert reporter.current_step is None
    assert len(channel.of_kind("get_step")) == 1


@pytest.mark.asyncio
async def test_exit_message_failure_propagates_as_transport_error():
    channel = BrokenExitChannel(["TestLogging"])
    runner, _, _, _ = build([], channel=channel)

    with pytest.raises(ProtocolTransportError):
        await runner.run()

    assert runner.state == RunnerState.FAILED
    assert [t.dst for t in runner.transitions][-2:] == [RunnerState.TERMINATING, RunnerState.FAILED]


# ---------------------------
# Cleanup / teardown handlers
# ---------------------------

@pytest.mark.asyncio
async def test_default_handlers_are_noops_passed_every_call():
    channel = RecordingHandlersChannel(["TestLogging", CLEANUP, TEARDOWN])
    runner, _, _, _ = build([], channel=channel)

    await runner.run()

    assert len(channel.handlers_seen) == 2
    cleanup, teardown = channel.handlers_seen[0]
    assert await cleanup() is None
    assert await teardown() is None
    assert channel.of_kind("handler_error") == []


@pytest.mark.asyncio
async def test_step_can_install_cleanup_handler():
    cleaned = []
    runner, channel, registry, _ = build(["Create", CLEANUP], provider=None)

    async def cleanup():
        cleaned.append("resource")

    @registry.step("Create")
    async def create():
        runner.on_cleanup(cleanup)

    await runner.run()

    assert cleaned == ["resource"]
    assert "cleanup" in channel.kinds()


@pytest.mark.asyncio
async def test_runner_never_invokes_handlers_itself():
    called = []
    runner, _, _, _ = build(["TestLogging"])

    async def handler():
        called.append(True)

    runner.on_cleanup(handler)
    runner.on_teardown(handler)
    await runner.run()

    assert called == []


# ---------------------------
# Watchdog
# ---------------------------

@pytest.mark.asyncio
async def test_watchdog_timeout_reports_error_and_continues():
    runner, channel, registry, _ = build(
        ["Hang", "Fast"], provider=None, config=RunnerConfig(step_timeout_s=0.05)
    )

    @registry.step("Hang")
    async def hang():
        await asyncio.Event().wait()

    @registry.step("Fast")
    async def fast():
        return None

    summary = await runner.run()

    assert summary.outcomes[0].error.error_code == codes.TIMEOUT
    assert "timed out" in channel.of_kind("send_error")[0].payload
    assert summary.outcomes[1].ok


@pytest.mark.asyncio
async def test_timeout_raised_by_body_is_not_a_watchdog_timeout():
    runner, channel, registry, _ = build(
        ["Connect"], provider=None, config=RunnerConfig(step_timeout_s=30)
    )

    @registry.step("Connect")
    async def connect():
        raise asyncio.TimeoutError("upstream connect timed out")

    summary = await runner.run()

    assert [c.payload for c in channel.of_kind("send_error")] == ["upstream connect timed out"]
    assert summary.outcomes[0].error.error_code == codes.STEP_RAISED


@pytest.mark.asyncio
async def test_fast_step_under_watchdog_reports_ok():
    runner, channel, _, _ = build(["TestLogging"], config=RunnerConfig(step_timeout_s=30))

    summary = await runner.run()

    assert summary.outcomes[0].ok
    assert channel.of_kind("send_error") == []


# ---------------------------
# Long sessions
# ---------------------------

@pytest.mark.asyncio
async def test_history_is_bounded_while_counters_cover_the_session():
    runner, channel, _, _ = build(["Error"] * 50 + ["TestLogging"], config=RunnerConfig(history_limit=5))

    summary = await runner.run()

    assert summary.executed == 51
    assert summary.failed == 50
    assert len(summary.outcomes) == 5
    assert summary.outcomes[-1].step_name == "TestLogging"
    assert len(runner.transitions) <= 2 * 5 + 4
    assert runner.transitions[-1].dst == RunnerState.EXITED
    assert len(channel.of_kind("send_error")) == 50


@pytest.mark.asyncio
async def test_recorded_errors_do_not_keep_tracebacks():
    runner, _, _, _ = build(["Error"])

    summary = await runner.run()

    error = summary.outcomes[0].error
    assert error.__traceback__ is None
    assert error.cause.__traceback__ is None
