from __future__ import annotations
import argparse, re, os
import matplotlib.pyplot as plt
from typing import List, Tuple

# game <n>: moves=<int> max_tile=<int> time=<float>s
PATTERN = re.compile(r"^game\s+(\d+):\s+moves=(\d+)\s+max_tile=(\d+)\s+time=([-+eE0-9\.]+)s$")

def moving_avg(xs: List[float], k: int) -> List[float]:
	if k <= 1:
		return xs
	out, acc = [], 0.0
	for i, v in enumerate(xs):
		acc += v
		if i >= k:
			acc -= xs[i - k]
		out.append(acc / min(i + 1, k))
	return out

def parse_log(path: str) -> Tuple[List[int], List[int], List[int]]:
	# game numbers restart per run, so index lines in file order
	games, moves, tiles = [], [], []
	with open(path, 'r', encoding='utf-8') as f:
		for line in f:
			m = PATTERN.match(line.strip())
			if not m:
				continue
			_g, mv, tile, _t = m.groups()
			games.append(len(games)); moves.append(int(mv)); tiles.append(int(tile))
	return games, moves, tiles

def main():
	ap = argparse.ArgumentParser()
	ap.add_argument('--log', type=str, required=True, help='play log written by ai2048.play --log')
	ap.add_argument('--out', type=str, default=None, help='optional image path (e.g. logs/games.png)')
	ap.add_argument('--smooth', type=int, default=1, help='moving-average window (>1 enables smoothing)')
	ap.add_argument('--title', type=str, default='Expectimax games')
	args = ap.parse_args()

	if not os.path.isfile(args.log):
		raise FileNotFoundError(args.log)
	games, moves, tiles = parse_log(args.log)
	if not games:
		raise RuntimeError('Log lines must match: game <n>: moves=... max_tile=... time=...s')

	fig, (ax_m, ax_t) = plt.subplots(2, 1, figsize=(8, 7), sharex=True)
	ax_m.plot(games, moves, label='Moves', color='#1f77b4', alpha=0.35)
	if args.smooth > 1:
		ax_m.plot(games, moving_avg([float(m) for m in moves], args.smooth), label=f'Moves (MA{args.smooth})', color='#1f77b4')
	ax_m.set_ylabel('Moves')
	ax_m.legend(); ax_m.grid(True, alpha=0.3)
	ax_t.scatter(games, tiles, label='Max tile', color='#ff7f0e', s=12)
	ax_t.set_yscale('log', base=2)
	ax_t.set_xlabel('Game'); ax_t.set_ylabel('Max tile')
	ax_t.legend(); ax_t.grid(True, alpha=0.3)
	fig.suptitle(args.title)
	fig.tight_layout()
	if args.out:
		out_dir = os.path.dirname(args.out)
		if out_dir:
			os.makedirs(out_dir, exist_ok=True)
		fig.savefig(args.out, dpi=160)
		print(f'Saved figure to {args.out}')
	else:
		plt.show()

if __name__ == '__main__':
	main()
