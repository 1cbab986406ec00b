import os
import shutil
import sys
import tempfile

import matplotlib
matplotlib.use("Agg")
import numpy as np

from ai2048.board import Board, DecisionState
from ai2048 import play, visual
from ai2048.play import GameRecord, make_policy, play_game, summarize
from ai2048.visual import moving_avg, parse_log


LOCKED = [[1, 2, 1, 2], [2, 1, 2, 1], [1, 2, 1, 2], [2, 1, 2, 1]]


def test_random_game_runs_to_the_end():
    rng = np.random.default_rng(0)
    rec = play_game(make_policy("random", rng=rng), rng=rng)
    assert rec.moves == len(rec.actions) == len(rec.decision_times)
    assert rec.moves > 0
    assert rec.final.is_terminal()
    assert rec.max_tile >= 4


def test_max_moves_caps_the_game():
    rng = np.random.default_rng(1)
    rec = play_game(make_policy("greedy"), rng=rng, max_moves=15)
    assert rec.moves == 15
    assert not rec.reached_2048


def test_expectimax_game_is_reproducible():
    def run():
        rng = np.random.default_rng(7)
        return play_game(make_policy("expectimax", depth=1), rng=rng, max_moves=25)
    a, b = run(), run()
    assert a.actions == b.actions
    assert a.final == b.final


def test_terminal_start_plays_nothing():
    lines = []
    rec = play_game(make_policy("expectimax", depth=2), start=DecisionState(Board(LOCKED)), logger=lines.append)
    assert rec.moves == 0
    assert rec.max_tile == 4
    assert lines == ["game over after 0 moves"]


def test_logger_sees_every_move():
    lines = []
    rng = np.random.default_rng(2)
    rec = play_game(make_policy("random", rng=rng), rng=rng, max_moves=5, logger=lines.append)
    assert len(lines) == rec.moves == 5
    assert lines[0].startswith("[agent |")


def test_unknown_policy():
    try:
        make_policy("minimax")
    except ValueError:
        pass
    else:
        assert False, "expected ValueError"


def test_summarize():
    records = [
        GameRecord(final=DecisionState(Board([[11, 0, 0, 0]] + [[0] * 4] * 3)), moves=900, decision_times=[0.01, 0.03]),
        GameRecord(final=DecisionState(Board(LOCKED)), moves=100),
    ]
    text = summarize(records)
    assert "games=2 avg_moves=500.0 max_moves=900" in text
    assert "win-rate (2048 reached) = 0.500" in text
    assert "max tile   2048: 1 (50.0%)" in text


def test_parse_play_log():
    fd, path = tempfile.mkstemp(suffix=".log")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write("game 0: moves=120 max_tile=256 time=1.5s\n")
            f.write("unrelated line\n")
            f.write("game 0: moves=300 max_tile=1024 time=4.0s\n")
        games, moves, tiles = parse_log(path)
    finally:
        os.remove(path)
    assert games == [0, 1]
    assert moves == [120, 300]
    assert tiles == [256, 1024]


def test_moving_avg():
    assert moving_avg([1.0, 2.0, 3.0], 1) == [1.0, 2.0, 3.0]
    assert moving_avg([2.0, 4.0, 6.0, 8.0], 2) == [2.0, 3.0, 5.0, 7.0]


def run_cli(main, argv):
    saved = sys.argv
    sys.argv = argv
    try:
        main()
    finally:
        sys.argv = saved


def test_play_cli_writes_log_that_plots():
    tmp = tempfile.mkdtemp()
    try:
        log = os.path.join(tmp, "logs", "games.log")
        run_cli(play.main, ["ai2048-play", "--games", "2", "--policy", "random",
                            "--max-moves", "5", "--seed", "3", "--log", log])
        games, moves, tiles = parse_log(log)
        assert games == [0, 1]
        assert moves == [5, 5]
        assert all(t >= 2 for t in tiles)
        # a second run appends
        run_cli(play.main, ["ai2048-play", "--policy", "greedy", "--max-moves", "3",
                            "--start", "1,1,0,0;0,0,0,0;0,0,0,0;0,0,0,0", "--log", log])
        assert parse_log(log)[1] == [5, 5, 3]
        out = os.path.join(tmp, "games.png")
        run_cli(visual.main, ["ai2048-plot", "--log", log, "--out", out, "--smooth", "2"])
        assert os.path.getsize(out) > 0
    finally:
        shutil.rmtree(tmp)


def test_play_cli_closes_log_on_error():
    tmp = tempfile.mkdtemp()
    handles = []
    def tracking_open(*args, **kwargs):
        f = open(*args, **kwargs)
        handles.append(f)
        return f
    def failing_game(*args, **kwargs):
        raise RuntimeError("policy failed")
    real_play_game = play.play_game
    play.open = tracking_open
    play.play_game = failing_game
    try:
        try:
            run_cli(play.main, ["ai2048-play", "--policy", "random", "--log", os.path.join(tmp, "games.log")])
        except RuntimeError:
            pass
        else:
            assert False, "expected the game error to propagate"
        assert len(handles) == 1 and handles[0].closed
    finally:
        play.play_game = real_play_game
        del play.open
        shutil.rmtree(tmp)
