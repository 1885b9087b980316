"""
Replay recorded pose landmarks through the rep counter.

Input is JSON Lines: one frame per line, either `null` (no pose), a list of
landmarks, or an object with a "landmarks" list.
"""
import argparse
import io
import json
import logging
import sys
import time
from collections import deque
from dataclasses import replace

import numpy as np

from repcore.exercises import Exercise, config_for, MIN_VISIBILITY
from repcore.session import ExerciseSession

logger = logging.getLogger(__name__)


def parse_frame(line):
    """
    Decode one JSON Lines entry into a frame.

    Returns:
        Tuple of (ok, frame). ok is False for lines that are not valid
        frames; frame is None for "no pose" entries.
    """
    try:
        data = json.loads(line)
    except (ValueError, RecursionError):
        return False, None

    if isinstance(data, dict):
        data = data.get("landmarks")
    if data is None or isinstance(data, list):
        return True, data
    return False, None


def iter_frames(stream):
    """Yield frames from a JSON Lines stream, bad lines become None (no pose)."""
    for lineno, line in enumerate(stream, start=1):
        line = line.strip()
        if not line:
            continue
        ok, frame = parse_frame(line)
        if not ok:
            logger.warning("line %d: not a frame, treating as no pose", lineno)
        yield frame


def build_parser():
    parser = argparse.ArgumentParser(
        description="Count exercise reps from recorded pose landmarks"
    )
    parser.add_argument(
        "input",
        nargs="?",
        default="-",
        help="JSON Lines file of frames ('-' reads stdin)"
    )
    parser.add_argument(
        "--exercise",
        choices=[e.value for e in Exercise],
        default=Exercise.PUSHUP.value,
        help="Exercise to count"
    )
    parser.add_argument(
        "--min_visibility",
        type=float,
        default=MIN_VISIBILITY,
        help="Landmarks below this visibility freeze the counter for that frame"
    )
    parser.add_argument(
        "--show_debug",
        action="store_true",
        help="Print the snapshot for every frame"
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the final workout record as JSON"
    )
    parser.add_argument(
        "--log_level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity"
    )
    return parser


def run(stream, session, show_debug=False):
    """
    Feed every frame of stream into session.

    Returns:
        Tuple of (frames processed, per-update durations in seconds)
    """
    timings = deque(maxlen=300)
    frames = 0

    for frame in iter_frames(stream):
        t0 = time.perf_counter()
        snap = session.update(frame)
        timings.append(time.perf_counter() - t0)
        frames += 1

        if show_debug:
            print(f"[{frames:05d}] {json.dumps(snap.as_dict())}")

    return frames, timings


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    config = replace(config_for(args.exercise), min_visibility=args.min_visibility)

    session = ExerciseSession(
        args.exercise,
        config=config,
        on_rep=lambda snap: print(f"Rep {snap.rep_count} ({args.exercise})")
    )

    if args.input == "-":
        stdin = sys.stdin
        if hasattr(stdin, "buffer"):
            stdin = io.TextIOWrapper(stdin.buffer, encoding="utf-8", errors="replace")
        frames, timings = run(stdin, session, args.show_debug)
    else:
        try:
            with open(args.input, "r", encoding="utf-8", errors="replace") as fh:
                frames, timings = run(fh, session, args.show_debug)
        except OSError as e:
            raise SystemExit(f"Could not read frames from {args.input}: {e}")

    summary = session.finish()
    avg_ms = float(np.mean(timings)) * 1000.0 if timings else 0.0
    print(f"\nSession complete! Total reps: {summary.reps}")
    print(f"Frames: {frames}, avg update: {avg_ms:.3f} ms")

    if args.json:
        print(json.dumps(summary.as_record()))

    return 0


if __name__ == "__main__":
    sys.exit(main())
