import io
import json
import math

import pytest

from repcore.main import iter_frames, main, parse_frame, run
from repcore.session import ExerciseSession


def arm_frame(deg):
    """Push-up frame with both elbows at deg, as JSON-friendly landmark dicts."""
    frame = [{"x": 0.0, "y": 0.0, "visibility": 0.9} for _ in range(33)]
    rad = math.radians(deg)
    for shoulder, elbow, wrist, ox in ((11, 13, 15, 1.0), (12, 14, 16, 3.0)):
        frame[elbow] = {"x": ox, "y": 1.0, "visibility": 0.9}
        frame[shoulder] = {"x": ox + 1.0, "y": 1.0, "visibility": 0.9}
        frame[wrist] = {"x": ox + math.cos(rad), "y": 1.0 + math.sin(rad), "visibility": 0.9}
    return frame


def jsonl(*frames):
    return "\n".join(json.dumps(f) for f in frames) + "\n"


@pytest.fixture
def two_reps(tmp_path):
    path = tmp_path / "frames.jsonl"
    path.write_text(jsonl(
        arm_frame(180), arm_frame(60), None, arm_frame(180),
        {"landmarks": arm_frame(60)}, arm_frame(180),
    ))
    return path


def test_parse_frame():
    assert parse_frame("null") == (True, None)
    assert parse_frame("[[1, 2], [3, 4]]") == (True, [[1, 2], [3, 4]])
    assert parse_frame('{"landmarks": [[1, 2]]}') == (True, [[1, 2]])
    assert parse_frame("{not json") == (False, None)
    assert parse_frame("42") == (False, None)


def test_iter_frames_skips_blank_lines_and_tolerates_garbage(caplog):
    stream = io.StringIO("null\n\n{broken\n[[0, 0]]\n")
    frames = list(iter_frames(stream))
    assert frames == [None, None, [[0, 0]]]
    assert "line 3" in caplog.text


def test_run_counts_reps(two_reps):
    session = ExerciseSession("pushup")
    with open(two_reps) as fh:
        frames, timings = run(fh, session)
    assert frames == 6
    assert len(timings) == 6
    assert session.snapshot().rep_count == 2


def test_main_prints_summary(two_reps, capsys):
    assert main([str(two_reps), "--exercise", "pushup", "--json"]) == 0
    out = capsys.readouterr().out

    assert "Rep 1 (pushup)" in out
    assert "Rep 2 (pushup)" in out
    assert "Total reps: 2" in out
    record = json.loads(out.strip().splitlines()[-1])
    assert record["exercise"] == "pushup"
    assert record["reps"] == 2


def test_main_show_debug(two_reps, capsys):
    main([str(two_reps), "--show_debug"])
    out = capsys.readouterr().out
    assert '"repCount": 0, "stage": "down"' in out


def test_main_min_visibility_gates_frames(two_reps, capsys):
    main([str(two_reps), "--min_visibility", "0.95"])
    assert "Total reps: 0" in capsys.readouterr().out


def test_main_reads_stdin(two_reps, monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO(two_reps.read_text()))
    main(["-"])
    assert "Total reps: 2" in capsys.readouterr().out


def test_main_missing_file_exits(tmp_path):
    with pytest.raises(SystemExit, match="Could not read frames"):
        main([str(tmp_path / "nope.jsonl")])


def test_main_rejects_unknown_exercise(two_reps):
    with pytest.raises(SystemExit):
        main([str(two_reps), "--exercise", "plank"])


def test_main_skips_invalid_utf8_lines(tmp_path, capsys):
    path = tmp_path / "frames.jsonl"
    path.write_bytes(
        jsonl(arm_frame(60)).encode() + b"\xff\xfe garbage\n" + jsonl(arm_frame(180)).encode()
    )
    assert main([str(path)]) == 0
    out = capsys.readouterr().out
    assert "Total reps: 1" in out
    assert "Frames: 3" in out


def test_main_skips_invalid_utf8_on_stdin(monkeypatch, capsys):
    data = jsonl(arm_frame(60)).encode() + b"\xff\xfe\n" + jsonl(arm_frame(180)).encode()
    monkeypatch.setattr("sys.stdin", io.TextIOWrapper(io.BytesIO(data), encoding="utf-8"))
    main(["-"])
    assert "Total reps: 1" in capsys.readouterr().out


def test_parse_frame_rejects_deeply_nested_json():
    assert parse_frame("[" * 200000) == (False, None)


def test_main_skips_deeply_nested_lines(tmp_path, capsys):
    path = tmp_path / "frames.jsonl"
    path.write_text(jsonl(arm_frame(60)) + "[" * 200000 + "\n" + jsonl(arm_frame(180)))
    main([str(path)])
    out = capsys.readouterr().out
    assert "Total reps: 1" in out
    assert "Frames: 3" in out
