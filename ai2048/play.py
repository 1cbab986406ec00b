from __future__ import annotations
import argparse, os, time
import numpy as np
from collections import Counter
from dataclasses import dataclass, field
from typing import Callable, List, Optional
from tqdm import trange
from .board import Action, Board, DecisionState
from .config import DEFAULT_DEPTH, MAX_MOVES, WIN_EXPONENT
from .heuristic import Heuristic
from .search import Expectimax, select_action_greedily, select_action_randomly
from .utils import parse_board, tile_value

Policy = Callable[[DecisionState], Optional[Action]]
POLICIES = ("expectimax", "greedy", "random")


@dataclass
class GameRecord:
	final: DecisionState
	moves: int = 0
	actions: List[Action] = field(default_factory=list)
	decision_times: List[float] = field(default_factory=list)

	@property
	def max_tile(self) -> int:
		return tile_value(self.final.board.max_exponent())

	@property
	def reached_2048(self) -> bool:
		return self.final.has_at_least_tile(WIN_EXPONENT)

	@property
	def total_time(self) -> float:
		return float(sum(self.decision_times))


def make_policy(name: str, depth: int = DEFAULT_DEPTH, heuristic: Optional[Heuristic] = None,
				rng: Optional[np.random.Generator] = None) -> Policy:
	if name == "expectimax":
		return Expectimax(heuristic=heuristic, depth=depth).select_action
	if name == "greedy":
		return lambda st: select_action_greedily(st, heuristic)
	if name == "random":
		return lambda st: select_action_randomly(st, rng)
	raise ValueError(f"unknown policy {name!r}, expected one of {POLICIES}")


def play_game(
	policy: Policy,
	rng: Optional[np.random.Generator] = None,
	start: Optional[DecisionState] = None,
	max_moves: int = MAX_MOVES,
	logger: Optional[Callable[[str], None]] = None,
) -> GameRecord:
	"""Play until no move is left (or ``max_moves``) and return what happened."""
	cur = start if start is not None else DecisionState.init(rng)
	rec = GameRecord(final=cur)
	while rec.moves < max_moves:
		t0 = time.perf_counter()
		action = policy(cur)
		dt = time.perf_counter() - t0
		if action is None:
			if logger is not None:
				logger(f"game over after {rec.moves} moves")
			break
		played = cur.apply(action)
		if played is None:
			raise RuntimeError(f"policy returned an inapplicable action {action}")
		rec.moves += 1
		rec.actions.append(action)
		rec.decision_times.append(dt)
		if logger is not None:
			logger(f"[agent | {dt * 1000:.2f}ms] move {rec.moves}: {action.name}")
		cur = played.with_random_tile(rng)
		rec.final = cur
	return rec


def summarize(records: List[GameRecord]) -> str:
	n = len(records)
	moves = np.array([r.moves for r in records], dtype=np.float64)
	per_move = [t for r in records for t in r.decision_times]
	tiles = Counter(r.max_tile for r in records)
	lines = [
		f"games={n} avg_moves={moves.mean():.1f} max_moves={int(moves.max())}",
		f"win-rate (2048 reached) = {sum(r.reached_2048 for r in records) / n:.3f}",
		f"avg decision time = {1000 * (np.mean(per_move) if per_move else 0.0):.2f}ms",
	]
	for tile in sorted(tiles, reverse=True):
		lines.append(f"  max tile {tile:>6}: {tiles[tile]} ({tiles[tile] / n:.1%})")
	return "\n".join(lines)


def main():
	ap = argparse.ArgumentParser(description="Play 2048 with an expectimax agent")
	ap.add_argument("--games", type=int, default=1)
	ap.add_argument("--policy", type=str, default="expectimax", choices=POLICIES)
	ap.add_argument("--depth", type=int, default=DEFAULT_DEPTH, help="decision plies searched")
	ap.add_argument("--seed", type=int, default=None)
	ap.add_argument("--max-moves", type=int, default=MAX_MOVES)
	ap.add_argument("--start", type=str, default=None, help="16 row-major exponents, e.g. '1,0,0,0;...'")
	ap.add_argument("--start-values", action="store_true", help="--start holds tile values (2, 4, ...) instead of exponents")
	ap.add_argument("--log", type=str, default=None, help="append one line per finished game to this file")
	ap.add_argument("--verbose", action="store_true", help="print every move with its decision time")
	args = ap.parse_args()

	if args.games < 1:
		raise ValueError("--games must be at least 1")
	rng = np.random.default_rng(args.seed)
	policy = make_policy(args.policy, depth=args.depth, rng=rng)
	start = None
	if args.start is not None:
		start = DecisionState(Board.from_rows(parse_board(args.start, values=args.start_values)))

	log_f = None
	if args.log is not None:
		log_dir = os.path.dirname(args.log)
		if log_dir:
			os.makedirs(log_dir, exist_ok=True)
		log_f = open(args.log, "a", encoding="utf-8")

	records = []
	try:
		for g in trange(args.games, desc=args.policy):
			rec = play_game(policy, rng=rng, start=start, max_moves=args.max_moves,
							logger=print if args.verbose else None)
			records.append(rec)
			msg = f"game {g}: moves={rec.moves} max_tile={rec.max_tile} time={rec.total_time:.1f}s"
			if log_f:
				log_f.write(msg + "\n"); log_f.flush()
			if args.verbose or args.games == 1:
				print(rec.final)
				print(msg)
	finally:
		if log_f:
			log_f.close()
	print(summarize(records))


if __name__ == "__main__":
	main()
