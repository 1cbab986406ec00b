BOARD_SIZE = 4
NUM_CELLS = BOARD_SIZE * BOARD_SIZE

# chance model: (exponent, probability); exponent k shows as 2**k
SPAWN_TILES = ((1, 0.9), (2, 0.1))

# search defaults
DEFAULT_DEPTH = 3
# running best of MAX nodes starts here; a move must score strictly above it
BEST_SCORE_BASELINE = 0.0

# bundled heuristic
HEURISTIC_WEIGHTS = {
	"empty": 270.0,
	"gradient": 1.0,
	"corner": 1000.0,
	"smooth": 0.1,
}

# play loop
MAX_MOVES = 100000  # safety cap
WIN_EXPONENT = 11  # 2**11 == 2048
