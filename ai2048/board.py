from __future__ import annotations
import numpy as np
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional, Sequence, Tuple
from .config import BOARD_SIZE, SPAWN_TILES
from .heuristic import Heuristic, evaluate as default_evaluate
from .utils import i_to_rc, format_board

# shared generator when callers do not pass one
DEFAULT_RNG = np.random.default_rng()


class Action(Enum):
	UP = "up"
	DOWN = "down"
	LEFT = "left"
	RIGHT = "right"

# canonical order, also the tie-break order of the selectors
ALL_ACTIONS: Tuple[Action, ...] = (Action.UP, Action.DOWN, Action.LEFT, Action.RIGHT)


def merge_left(row: Sequence[int]) -> Tuple[int, ...]:
	"""Slide one row towards index 0 and merge equal neighbours.

	Single pass, first match wins: a merged tile never merges again in the
	same move, so [1, 1, 1, 0] gives [2, 1, 0, 0].
	"""
	tiles = [int(v) for v in row if v]
	out: List[int] = []
	i = 0
	while i < len(tiles):
		if i + 1 < len(tiles) and tiles[i] == tiles[i + 1]:
			out.append(tiles[i] + 1)
			i += 2
		else:
			out.append(tiles[i])
			i += 1
	out.extend([0] * (len(row) - len(out)))
	return tuple(out)


class Board:
	"""Immutable N x N grid of tile exponents (0 empty, k shows as 2**k).

	Cells live in a read-only uint8 array; equality and hashing go through the
	raw bytes so boards can key the search cache.
	"""
	__slots__ = ("cells", "_key")

	EMPTY: Board  # set below

	def __init__(self, cells):
		raw = np.asarray(cells)
		if raw.shape != (BOARD_SIZE, BOARD_SIZE):
			raise ValueError(f"board must be {BOARD_SIZE}x{BOARD_SIZE}, got shape {raw.shape}")
		if raw.dtype.kind not in "iu":
			raise ValueError(f"tile exponents must be integers, got dtype {raw.dtype}")
		if raw.min() < 0 or raw.max() > 255:
			raise ValueError("tile exponents must lie in [0, 255]")
		arr = raw.astype(np.uint8)
		arr.setflags(write=False)
		self.cells = arr
		self._key = arr.tobytes()

	@classmethod
	def from_rows(cls, rows: Sequence[Sequence[int]]) -> Board:
		return cls(rows)

	def rows(self) -> List[List[int]]:
		return self.cells.tolist()

	def __eq__(self, other) -> bool:
		if not isinstance(other, Board):
			return NotImplemented
		return self._key == other._key

	def __hash__(self) -> int:
		return hash(self._key)

	def __repr__(self) -> str:
		return f"Board({self.rows()})"

	def __str__(self) -> str:
		return format_board(self.cells)

	# symmetries, each one its own inverse
	def transposed(self) -> Board:
		return Board(self.cells.T)

	def mirrored(self) -> Board:
		return Board(self.cells[:, ::-1])

	def pushed_left(self) -> Board:
		return Board([merge_left(row) for row in self.cells.tolist()])

	def apply(self, action: Action) -> Optional[Board]:
		"""Board after sliding towards ``action``, or None when nothing moves."""
		# only push_left exists; the other directions go through symmetries
		if action is Action.LEFT:
			nxt = self.pushed_left()
		elif action is Action.UP:
			nxt = self.transposed().pushed_left().transposed()
		elif action is Action.DOWN:
			nxt = self.transposed().mirrored().pushed_left().mirrored().transposed()
		elif action is Action.RIGHT:
			nxt = self.mirrored().pushed_left().mirrored()
		else:
			raise ValueError(f"unknown action: {action!r}")
		if nxt == self:
			return None
		return nxt

	def num_empty(self) -> int:
		return int(np.count_nonzero(self.cells == 0))

	def empty_cells(self) -> List[Tuple[int, int]]:
		# row-major
		return [i_to_rc(int(i)) for i in np.flatnonzero(self.cells == 0)]

	def max_exponent(self) -> int:
		return int(self.cells.max())

	def values(self) -> np.ndarray:
		out = np.zeros(self.cells.shape, dtype=np.int64)
		nz = self.cells > 0
		out[nz] = np.left_shift(1, self.cells[nz].astype(np.int64))
		return out

	def with_tile(self, r: int, c: int, exponent: int) -> Board:
		arr = self.cells.copy()
		arr[r, c] = exponent
		return Board(arr)

	def with_random_tile(self, rng: Optional[np.random.Generator] = None) -> Board:
		"""Spawn one tile on a uniformly chosen empty cell.

		Exponent 1 with probability 0.9, exponent 2 otherwise. Callers must have
		ruled out a full board (game over is decided by the move rule).
		"""
		rng = rng if rng is not None else DEFAULT_RNG
		empties = self.empty_cells()
		if not empties:
			raise ValueError("cannot spawn a tile on a full board")
		r, c = empties[int(rng.integers(len(empties)))]
		exps = [e for e, _ in SPAWN_TILES]
		probs = [p for _, p in SPAWN_TILES]
		return self.with_tile(r, c, int(rng.choice(exps, p=probs)))

	def random_successors(self) -> Iterator[Tuple[float, Board]]:
		"""Every (probability, board) a single spawn can produce.

		Each of the 2 * empty outcomes gets value_probability / empty, so the
		whole enumeration sums to 1.
		"""
		empties = self.empty_cells()
		n = len(empties)
		for r, c in empties:
			for exponent, proba in SPAWN_TILES:
				yield proba / n, self.with_tile(r, c, exponent)


Board.EMPTY = Board(np.zeros((BOARD_SIZE, BOARD_SIZE), dtype=np.uint8))


@dataclass(frozen=True)
class DecisionState:
	"""Board on which the agent plays next (MAX node)."""
	board: Board

	@staticmethod
	def init(rng: Optional[np.random.Generator] = None) -> DecisionState:
		return DecisionState(Board.EMPTY.with_random_tile(rng))

	def apply(self, action: Action) -> Optional[ChanceState]:
		nxt = self.board.apply(action)
		if nxt is None:
			return None
		return ChanceState(nxt)

	def legal_actions(self) -> List[Action]:
		return [a for a in ALL_ACTIONS if self.board.apply(a) is not None]

	def is_terminal(self) -> bool:
		return all(self.board.apply(a) is None for a in ALL_ACTIONS)

	def has_at_least_tile(self, exponent: int) -> bool:
		return bool((self.board.cells >= exponent).any())

	def __str__(self) -> str:
		return str(self.board)


@dataclass(frozen=True)
class ChanceState:
	"""Board right after a move, waiting for the random spawn (CHANCE node)."""
	board: Board

	def with_random_tile(self, rng: Optional[np.random.Generator] = None) -> DecisionState:
		return DecisionState(self.board.with_random_tile(rng))

	def successors(self) -> Iterator[Tuple[float, DecisionState]]:
		for proba, board in self.board.random_successors():
			yield proba, DecisionState(board)

	def evaluate(self, heuristic: Optional[Heuristic] = None) -> float:
		fn = heuristic if heuristic is not None else default_evaluate
		return float(fn(self.board))

	def __str__(self) -> str:
		return str(self.board)
