from __future__ import annotations
import re
import numpy as np
from typing import List, Tuple
from .config import BOARD_SIZE, NUM_CELLS


def i_to_rc(i: int) -> Tuple[int, int]:
	return divmod(i, BOARD_SIZE)


def tile_value(k: int) -> int:
	# exponent code -> displayed value, 0 stays empty
	return 0 if k == 0 else 2 ** int(k)


def tile_exponent(v: int) -> int:
	if v == 0:
		return 0
	k = int(v).bit_length() - 1
	if v < 2 or 2 ** k != v:
		raise ValueError(f"not a tile value: {v}")
	return k


def parse_board(text: str, values: bool = False) -> List[List[int]]:
	"""Parse 16 row-major integers separated by commas, semicolons or whitespace.

	With ``values=True`` the numbers are displayed tile values (0, 2, 4, ...)
	and get converted to exponent codes.
	"""
	vals = [int(x) for x in re.split(r"[,;\s]+", text.strip()) if x]
	if len(vals) != NUM_CELLS:
		raise ValueError(f"board must contain exactly {NUM_CELLS} integers (row-major), got {len(vals)}")
	if values:
		vals = [tile_exponent(v) for v in vals]
	if any(v < 0 or v > 255 for v in vals):
		raise ValueError("tile exponents must lie in [0, 255]")
	return [vals[i * BOARD_SIZE:(i + 1) * BOARD_SIZE] for i in range(BOARD_SIZE)]


def format_board(cells) -> str:
	rows = [[tile_value(k) for k in row] for row in np.asarray(cells).tolist()]
	width = max(4, max(len(str(v)) for row in rows for v in row))
	return "\n".join(" ".join(f"{(v if v else '.'):>{width}}" for v in row) for row in rows)
