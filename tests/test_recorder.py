from __future__ import annotations

import csv
import logging
import math

import pytest

from helpers import FakeSource, ManualClock, ManualSampler, make_command, make_state
from jointlog.config.runtime import RecorderConfig
from jointlog.core.models import CommandMode
from jointlog.core.recorder import JointRecorder, RecorderError

STATE_TOPIC = "/robot/limb/left/joint_states"
POS_TOPIC = "/robot/limb/left/command_joint_angles"
VEL_TOPIC = "/robot/limb/left/command_joint_velocities"


def _recorder(mode: str = "position", **cfg):
    source = FakeSource()
    clock = ManualClock()
    config = RecorderConfig(command_mode=mode, **cfg)
    recorder = JointRecorder(source, config, clock=clock, sampler_factory=ManualSampler)
    return recorder, source, clock


def _read(path):
    with open(path, newline="", encoding="utf-8") as fh:
        return list(csv.reader(fh))


def test_subscribes_to_state_and_mode_specific_command_topic() -> None:
    _, source, _ = _recorder("position")
    assert set(source.topics()) == {STATE_TOPIC, POS_TOPIC}

    _, source, _ = _recorder("velocity", arm_name="right")
    assert set(source.topics()) == {
        "/robot/limb/right/joint_states",
        "/robot/limb/right/command_joint_velocities",
    }


def test_callbacks_only_refresh_latest_message() -> None:
    recorder, source, _ = _recorder()
    source.publish(STATE_TOPIC, "joint_state", make_state(1.0))
    source.publish(STATE_TOPIC, "joint_state", make_state(2.0))
    source.publish(POS_TOPIC, "joint_positions", make_command([0.5, 0.6]))

    assert recorder.latest_state.stamp == 2.0
    assert recorder.latest_command.values == [0.5, 0.6]
    assert recorder.samples == []


def test_command_of_other_mode_is_ignored() -> None:
    recorder, _, _ = _recorder("position")
    recorder.command_callback(make_command([1.0], mode=CommandMode.VELOCITY))
    assert recorder.latest_command is None


def test_state_expired_without_any_state() -> None:
    recorder, _, _ = _recorder()
    assert recorder.state_expired()


def test_state_expires_after_timeout() -> None:
    recorder, source, clock = _recorder(state_expired_timeout_s=1.0)
    source.publish(STATE_TOPIC, "joint_state", make_state(1.0))
    clock.advance(0.9)
    assert not recorder.state_expired()
    clock.advance(0.2)
    assert recorder.state_expired()


def test_each_tick_appends_latest_state_and_command(tmp_path) -> None:
    recorder, source, clock = _recorder()
    out = tmp_path / "rec.csv"
    source.publish(STATE_TOPIC, "joint_state", make_state(10.0))
    recorder.start_recording(out)

    recorder.update()  # no command yet
    source.publish(POS_TOPIC, "joint_positions", make_command([0.5, 0.6]))
    clock.advance(0.01)
    recorder.update()
    source.publish(STATE_TOPIC, "joint_state", make_state(10.02, offset=1.0))
    clock.advance(0.01)
    recorder.update()

    samples = recorder.samples
    assert len(samples) == 3
    assert samples[0][1] is None
    assert samples[1][0].stamp == 10.0
    assert samples[2][0].stamp == 10.02
    assert samples[2][1].values == [0.5, 0.6]

    assert recorder.stop_recording() is True
    rows = _read(out)
    assert rows[0] == [
        "timestamp",
        "left_s0_pos", "left_s0_vel", "left_s0_eff", "left_s0_pos_cmd",
        "left_s1_pos", "left_s1_vel", "left_s1_eff", "left_s1_pos_cmd",
    ]
    assert len(rows) == 4
    assert float(rows[1][0]) == 0.0
    assert math.isnan(float(rows[1][4]))
    assert float(rows[2][4]) == 0.5
    assert float(rows[3][0]) == pytest.approx(0.02)
    assert float(rows[3][1]) == 1.0


def test_stale_state_aborts_and_writes_collected_samples(tmp_path) -> None:
    recorder, source, clock = _recorder(state_expired_timeout_s=1.0)
    out = tmp_path / "aborted.csv"
    source.publish(STATE_TOPIC, "joint_state", make_state(5.0))
    recorder.start_recording(out)
    recorder.update()
    recorder.update()

    clock.advance(1.5)
    recorder.update()

    assert recorder.aborted
    assert not recorder.is_recording
    assert len(recorder.samples) == 2
    assert recorder.wait_until_stopped(0)
    assert out.exists()
    assert len(_read(out)) == 3
    assert ManualSampler.instances[-1].running is False


def test_abort_before_any_sample_writes_nothing(tmp_path) -> None:
    recorder, _, _ = _recorder()
    out = tmp_path / "empty.csv"
    recorder.start_recording(out)
    recorder.update()

    assert recorder.aborted
    assert recorder.stop_recording() is False
    assert not out.exists()


def test_stop_recording_writes_once(tmp_path) -> None:
    recorder, source, _ = _recorder()
    out = tmp_path / "once.csv"
    source.publish(STATE_TOPIC, "joint_state", make_state(1.0))
    recorder.start_recording(out)
    recorder.update()
    assert recorder.stop_recording() is True
    out.unlink()

    assert recorder.stop_recording() is True
    assert not out.exists()


def test_ticks_after_stop_do_not_append(tmp_path) -> None:
    recorder, source, _ = _recorder()
    source.publish(STATE_TOPIC, "joint_state", make_state(1.0))
    recorder.start_recording(tmp_path / "r.csv")
    recorder.update()
    recorder.stop_recording()
    recorder.update()
    assert len(recorder.samples) == 1


def test_start_recording_resets_buffers(tmp_path) -> None:
    recorder, source, _ = _recorder()
    source.publish(STATE_TOPIC, "joint_state", make_state(1.0))
    recorder.start_recording(tmp_path / "a.csv")
    recorder.update()
    recorder.update()
    recorder.stop_recording()

    recorder.start_recording(tmp_path / "b.csv")
    assert recorder.samples == []
    assert not recorder.aborted
    recorder.update()
    recorder.stop_recording()
    assert len(_read(tmp_path / "b.csv")) == 2


def test_lifecycle_errors(tmp_path) -> None:
    recorder, _, _ = _recorder()
    with pytest.raises(RecorderError):
        recorder.stop_recording()

    recorder.start_recording(tmp_path / "x.csv")
    with pytest.raises(RecorderError):
        recorder.start_recording(tmp_path / "y.csv")


def test_sampler_uses_configured_period(tmp_path) -> None:
    recorder, _, _ = _recorder(record_rate_hz=50.0)
    recorder.start_recording(tmp_path / "p.csv")
    sampler = ManualSampler.instances[-1]
    assert sampler.period_s == pytest.approx(0.02)
    assert sampler.callback == recorder.update
    assert sampler.running


def test_wait_for_first_state_times_out() -> None:
    recorder, _, _ = _recorder(wait_poll_s=0.01)
    assert recorder.wait_for_first_state(timeout=0.05) is False


def test_wait_for_first_state_returns_once_state_arrives() -> None:
    recorder, source, _ = _recorder()
    source.publish(STATE_TOPIC, "joint_state", make_state(1.0))
    assert recorder.wait_for_first_state(timeout=0.0) is True


def test_recording_info_reflects_run(tmp_path) -> None:
    recorder, source, _ = _recorder("velocity")
    source.publish(STATE_TOPIC, "joint_state", make_state(1.0))
    recorder.start_recording(tmp_path / "i.csv")
    recorder.update()
    recorder.stop_recording()

    info = recorder.recording_info()
    assert info.sample_count == 1
    assert info.command_mode is CommandMode.VELOCITY
    assert info.joint_names == ["left_s0", "left_s1"]
    assert info.aborted is False


def _messages(caplog, text):
    return [r for r in caplog.records if text in r.getMessage()]


def test_rate_log_skips_first_tick_and_is_throttled(tmp_path, caplog) -> None:
    recorder, source, clock = _recorder(rate_log_period_s=2.0)
    source.publish(STATE_TOPIC, "joint_state", make_state(1.0))
    recorder.start_recording(tmp_path / "rate.csv")

    with caplog.at_level(logging.INFO, logger="jointlog.core.recorder"):
        recorder.update()
        assert _messages(caplog, "Updating at") == []

        for k in range(10):
            clock.advance(0.1)
            source.publish(STATE_TOPIC, "joint_state", make_state(1.0 + 0.1 * (k + 1)))
            recorder.update()
        assert len(_messages(caplog, "Updating at")) == 1

        clock.advance(2.0)
        source.publish(STATE_TOPIC, "joint_state", make_state(5.0))
        recorder.update()
        assert len(_messages(caplog, "Updating at")) == 2


def test_expired_warning_is_throttled_to_once_per_period(caplog) -> None:
    recorder, source, clock = _recorder(state_expired_timeout_s=1.0, expired_warn_period_s=1.0)
    source.publish(STATE_TOPIC, "joint_state", make_state(1.0))
    clock.advance(1.5)

    with caplog.at_level(logging.WARNING, logger="jointlog.core.recorder"):
        for _ in range(4):
            assert recorder.state_expired()
            clock.advance(0.2)
        assert len(_messages(caplog, "State expired")) == 1

        clock.advance(0.3)
        assert recorder.state_expired()
        assert len(_messages(caplog, "State expired")) == 2
