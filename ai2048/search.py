from __future__ import annotations
import numpy as np
from dataclasses import dataclass
from typing import Dict, Optional, Tuple
from .board import ALL_ACTIONS, DEFAULT_RNG, Action, ChanceState, DecisionState
from .config import BEST_SCORE_BASELINE, DEFAULT_DEPTH
from .heuristic import Heuristic

# (chance state, remaining depth) -> expected value
SearchCache = Dict[Tuple[ChanceState, int], float]


@dataclass
class Stats:
	"""Counters accumulated across one search; never read by the search itself."""
	num_evals: int = 0  # heuristic calls at leaves
	cache_hits: int = 0
	chance_nodes: int = 0
	decision_nodes: int = 0

	def __str__(self) -> str:
		return (f"evals={self.num_evals} cache_hits={self.cache_hits} "
				f"chance_nodes={self.chance_nodes} decision_nodes={self.decision_nodes}")


def select_action_randomly(state: DecisionState, rng: Optional[np.random.Generator] = None) -> Optional[Action]:
	legal = state.legal_actions()
	if not legal:
		return None
	rng = rng if rng is not None else DEFAULT_RNG
	return legal[int(rng.integers(len(legal)))]


def select_action_greedily(state: DecisionState, heuristic: Optional[Heuristic] = None,
						   baseline: float = BEST_SCORE_BASELINE) -> Optional[Action]:
	# one ply: the move whose afterstate scores best
	best_action: Optional[Action] = None
	best_score = baseline
	for action in ALL_ACTIONS:
		succ = state.apply(action)
		if succ is None:
			continue
		score = succ.evaluate(heuristic)
		if score > best_score:
			best_action, best_score = action, score
	return best_action


class Expectimax:
	"""Depth-limited expectimax over MAX (agent) and CHANCE (spawn) nodes.

	``depth`` counts agent decision plies. The memo table and the stats are
	rebuilt on every ``select_action`` call, since values computed for one
	horizon are not comparable with another.
	"""

	def __init__(self, heuristic: Optional[Heuristic] = None, depth: int = DEFAULT_DEPTH,
				 baseline: float = BEST_SCORE_BASELINE):
		if depth < 1:
			raise ValueError(f"depth must be a positive integer, got {depth}")
		self.heuristic = heuristic
		self.depth = depth
		self.baseline = baseline
		self.last_stats = Stats()

	def select_action(self, state: DecisionState) -> Optional[Action]:
		"""Best move for ``state``, or None when no move changes the board.

		Actions are tried in canonical order and a later one only wins with a
		strictly greater value, starting from ``baseline``.
		"""
		stats = Stats()
		cache: SearchCache = {}
		best_action: Optional[Action] = None
		best_score = self.baseline
		for action in ALL_ACTIONS:
			succ = state.apply(action)
			if succ is None:
				continue
			score = self.expected_value(succ, self.depth - 1, stats, cache)
			if score > best_score:
				best_action, best_score = action, score
		self.last_stats = stats
		return best_action

	def expected_value(self, state: ChanceState, remaining_depth: int,
					   stats: Stats, cache: SearchCache) -> float:
		key = (state, remaining_depth)
		hit = cache.get(key)
		if hit is not None:
			stats.cache_hits += 1
			return hit
		if remaining_depth == 0:
			stats.num_evals += 1
			return state.evaluate(self.heuristic)
		stats.chance_nodes += 1
		total = 0.0
		for proba, succ in state.successors():
			total += proba * self.decision_value(succ, remaining_depth, stats, cache)
		cache[key] = total
		return total

	def decision_value(self, state: DecisionState, remaining_depth: int,
					   stats: Stats, cache: SearchCache) -> float:
		stats.decision_nodes += 1
		best = self.baseline  # also the value of a dead end
		for action in ALL_ACTIONS:
			succ = state.apply(action)
			if succ is None:
				continue
			v = self.expected_value(succ, remaining_depth - 1, stats, cache)
			if v > best:
				best = v
		return best


def select_action(state: DecisionState, depth: int = DEFAULT_DEPTH,
				  heuristic: Optional[Heuristic] = None) -> Optional[Action]:
	return Expectimax(heuristic=heuristic, depth=depth).select_action(state)
