from __future__ import annotations
import numpy as np
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable
from .config import BOARD_SIZE, HEURISTIC_WEIGHTS

if TYPE_CHECKING:
	from .board import Board

# any pure Board -> float scorer plugs into the search, higher is better
Heuristic = Callable[["Board"], float]

# snake ordering, highest rank in the bottom-left corner
GRADIENT = np.array([
	[4, 3, 2, 1],
	[5, 6, 7, 8],
	[12, 11, 10, 9],
	[13, 14, 15, 16],
], dtype=np.float64)

_CORNERS = ((0, 0), (0, BOARD_SIZE - 1), (BOARD_SIZE - 1, 0), (BOARD_SIZE - 1, BOARD_SIZE - 1))


@dataclass
class HeuristicWeights:
	empty: float = HEURISTIC_WEIGHTS["empty"]
	gradient: float = HEURISTIC_WEIGHTS["gradient"]
	corner: float = HEURISTIC_WEIGHTS["corner"]
	smooth: float = HEURISTIC_WEIGHTS["smooth"]


def smoothness(cells: np.ndarray) -> float:
	# summed exponent gaps between adjacent non-empty cells (lower is smoother)
	c = cells.astype(np.int64)
	h = (c[:, :-1] > 0) & (c[:, 1:] > 0)
	v = (c[:-1, :] > 0) & (c[1:, :] > 0)
	return float(np.abs(c[:, :-1] - c[:, 1:])[h].sum() + np.abs(c[:-1, :] - c[1:, :])[v].sum())


def make_heuristic(weights: HeuristicWeights) -> Heuristic:
	def _evaluate(board: Board) -> float:
		cells = board.cells
		empty = int(np.count_nonzero(cells == 0))
		gradient = float((GRADIENT * board.values()).sum())
		top = int(cells.max())
		corner = top if any(cells[r, c] == top for r, c in _CORNERS) else 0
		return (
			weights.empty * empty
			+ weights.gradient * gradient
			+ weights.corner * corner
			- weights.smooth * smoothness(cells)
		)
	return _evaluate


evaluate: Heuristic = make_heuristic(HeuristicWeights())
