import time

import numpy as np

from ai2048.board import DecisionState
from ai2048.search import Expectimax


def main():
	rng = np.random.default_rng(0)
	st = DecisionState.init(rng)
	ai = Expectimax(depth=2)
	print(st)
	steps = 0
	while steps < 30:
		t0 = time.perf_counter()
		a = ai.select_action(st)
		dt = (time.perf_counter() - t0) * 1000
		if a is None:
			break
		steps += 1
		print("Step:", steps, "Action:", a.name, f"({dt:.1f}ms, {ai.last_stats})")
		st = st.apply(a).with_random_tile(rng)
	print(st)
	print("Done. Moves:", steps, "Terminal:", st.is_terminal())

if __name__ == "__main__":
	main()
