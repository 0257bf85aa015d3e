import csv
import random

import numpy as np
from scoop import futures

from mcts_2048 import play_game, SEARCHES_PER_MOVE, DEPTH

N_GAMES = 20
CSV_PATH = "_mcts_eval.csv"


def main():
    results = []
    for i in range(N_GAMES):
        # candidate directions are scored in parallel when run with `python -m scoop`
        mx, sc, mv = play_game(seed=random.randrange(1, 10000),
                               searches_per_move=SEARCHES_PER_MOVE, depth=DEPTH,
                               map_fn=futures.map)
        results.append((i, mx, sc, mv))
        print("Game " + str(i) + " complete")

    avg_max = np.mean([r[1] for r in results])
    avg_score = np.mean([r[2] for r in results])
    avg_moves = np.mean([r[3] for r in results])

    print(f"Results over {N_GAMES} evals:")
    with open(CSV_PATH, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(["Game", "MaxTile", "Score", "Moves"])
        writer.writerows(results)
        writer.writerow([])
        writer.writerow(["Averages", avg_max, avg_score, avg_moves])

    print(f"Saved evaluation results to {CSV_PATH}")


if __name__ == "__main__":
    main()
