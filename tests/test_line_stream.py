from __future__ import annotations

import io
import json
import time

from helpers import make_command, make_state
from jointlog.core.models import CommandMode, JointCommand, JointState
from jointlog.sources import codec
from jointlog.sources.line_stream import LineStreamSource, file_source, reader_loop

STATE_TOPIC = "/robot/limb/left/joint_states"
POS_TOPIC = "/robot/limb/left/command_joint_angles"


def _collect(source, topic, kind):
    received = []
    source.subscribe(topic, kind, received.append)
    return received


def test_reader_loop_dispatches_by_topic() -> None:
    source = LineStreamSource([])
    states = _collect(source, STATE_TOPIC, "joint_state")
    commands = _collect(source, POS_TOPIC, "joint_positions")
    lines = [
        codec.encode_joint_state(STATE_TOPIC, make_state(1.0)),
        codec.encode_command(POS_TOPIC, make_command([0.1, 0.2], names=("left_s0", "left_s1"))),
        codec.encode_joint_state("/robot/limb/right/joint_states", make_state(2.0)),
    ]
    delivered = reader_loop(lines, source)

    assert delivered == 2
    assert isinstance(states[0], JointState)
    assert states[0].stamp == 1.0
    assert states[0].name == ["left_s0", "left_s1"]
    assert isinstance(commands[0], JointCommand)
    assert commands[0].mode is CommandMode.POSITION
    assert commands[0].values == [0.1, 0.2]


def test_reader_loop_ignores_invalid_records() -> None:
    source = LineStreamSource([])
    states = _collect(source, STATE_TOPIC, "joint_state")
    lines = [
        "not-json",
        "",
        json.dumps([1, 2, 3]),
        json.dumps({"stamp": 1.0, "name": ["a"], "position": [1.0]}),  # missing topic
        json.dumps({"topic": STATE_TOPIC, "name": ["a"], "position": [1.0]}),  # missing stamp
        json.dumps({"topic": STATE_TOPIC, "stamp": 1.0, "name": ["a"], "position": ["x"]}),
        json.dumps({"topic": STATE_TOPIC, "angles": [1.0]}),  # wrong kind for topic
        codec.encode_joint_state(STATE_TOPIC, make_state(3.0)),
    ]
    reader_loop(lines, source)
    assert [s.stamp for s in states] == [3.0]


def test_failing_callback_does_not_stop_the_reader() -> None:
    source = LineStreamSource([])

    def _boom(msg):
        raise RuntimeError("subscriber bug")

    source.subscribe(STATE_TOPIC, "joint_state", _boom)
    good = _collect(source, STATE_TOPIC, "joint_state")
    lines = [codec.encode_joint_state(STATE_TOPIC, make_state(float(i))) for i in range(3)]
    reader_loop(lines, source)
    assert len(good) == 3


def test_source_reads_on_background_thread() -> None:
    stream = io.StringIO(codec.encode_joint_state(STATE_TOPIC, make_state(7.0)) + "\n")
    source = LineStreamSource(stream)
    states = _collect(source, STATE_TOPIC, "joint_state")
    source.start()
    source.join(timeout=1.0)

    deadline = time.time() + 1.0
    while not states and time.time() < deadline:
        time.sleep(0.01)

    source.close()
    assert states[0].stamp == 7.0
    assert source.delivered == 1
    assert stream.closed


def test_velocity_commands_decode() -> None:
    line = codec.encode_command("/v", make_command([1.5], mode=CommandMode.VELOCITY))
    topic, record = codec.parse_line(line)
    assert topic == "/v"
    assert codec.infer_kind(record) == "joint_velocities"
    command = codec.decode_record(record)
    assert command.mode is CommandMode.VELOCITY
    assert command.values == [1.5]


def test_out_of_range_numbers_are_dropped_without_stopping_the_reader() -> None:
    source = LineStreamSource([])
    states = _collect(source, STATE_TOPIC, "joint_state")
    commands = _collect(source, POS_TOPIC, "joint_positions")
    huge = "1" + "0" * 400
    too_many_digits = "1" * 5000
    lines = [
        '{"topic": "%s", "stamp": %s, "name": ["a"], "position": [1.0]}' % (STATE_TOPIC, huge),
        '{"topic": "%s", "stamp": 1.0, "name": ["a"], "position": [%s]}' % (STATE_TOPIC, huge),
        '{"topic": "%s", "names": ["a"], "angles": [%s]}' % (POS_TOPIC, huge),
        '{"topic": "%s", "stamp": %s, "name": ["a"], "position": [1.0]}' % (STATE_TOPIC, too_many_digits),
        codec.encode_joint_state(STATE_TOPIC, make_state(4.0)),
        codec.encode_command(POS_TOPIC, make_command([0.3, 0.4])),
    ]
    delivered = reader_loop(lines, source)

    assert delivered == 2
    assert [s.stamp for s in states] == [4.0]
    assert [c.values for c in commands] == [[0.3, 0.4]]


def test_command_names_must_be_a_list() -> None:
    assert codec.decode_command({"names": "ab", "angles": [1.0, 2.0]}, "joint_positions") is None
    command = codec.decode_command({"angles": [1.0]}, "joint_positions")
    assert command.names == []


def test_file_source_replaces_invalid_bytes(tmp_path) -> None:
    path = tmp_path / "feed.jsonl"
    good = codec.encode_joint_state(STATE_TOPIC, make_state(9.0)).encode("utf-8")
    path.write_bytes(b"\xff\xfe garbage\n" + good + b"\n")

    source = file_source(str(path))
    states = _collect(source, STATE_TOPIC, "joint_state")
    source.start()
    source.join(timeout=1.0)
    source.close()

    assert [s.stamp for s in states] == [9.0]
