import csv
import random

import numpy as np
import pandas as pd
from deap import tools

from agent_2048 import Agent
from neural_net import Activation
from population_2048 import Population

LAYER_SIZES = [16, 12, 8, 4]
ACTIVATIONS = [Activation.RELU] * 3

N_AGENTS = 200
ROUNDS = 10
MAX_STEPS = 10000
NGEN = 200

AGENTS_KEEP_PROPORTION = 0.05
BRAIN_MUTATION_RATE = 0.1
BRAIN_MUTATION_VARIATION = 0.1

SAVE_EVERY = 10
LOG_CSV = "_evolution_log.csv"
BEST_NET = "_best_network.json"
EVAL_CSV = "_best_agent_eval.csv"
N_EVAL = 100


def evaluate_agent(network, n_games, max_steps=MAX_STEPS):
    # fresh agent per game so every row is one independent episode
    results = []
    for i in range(n_games):
        agent = Agent(network, seed=random.randrange(1, 10000))
        agent.play(max_steps)
        results.append((i, agent.highest_tile(), agent.game.score, agent.game.moves))
    return results


def main():
    population = Population(N_AGENTS, LAYER_SIZES, ACTIVATIONS)

    stats = tools.Statistics(lambda agent: agent.avg_score())
    stats.register("avg", np.mean)
    stats.register("std dev", np.std)
    stats.register("min score", np.min)
    stats.register("max score", np.max)

    logbook = tools.Logbook()
    logbook.header = ["gen", "best tile", "avg", "std dev", "min score", "max score"]

    best = None
    for gen in range(NGEN):
        for _ in range(ROUNDS):
            population.play(MAX_STEPS)
            population.reset_agents()

        best = population.get_best_agent()
        logbook.record(gen=population.evolution_step, **{"best tile": best.highest_tile()},
                       **stats.compile(population.agents))
        print(logbook.stream)

        if gen % SAVE_EVERY == 0:
            best.network.save(BEST_NET)

        population.evolve(AGENTS_KEEP_PROPORTION, BRAIN_MUTATION_RATE, BRAIN_MUTATION_VARIATION)

    log_df = pd.DataFrame(logbook)
    log_df.to_csv(LOG_CSV, index=False)
    print("Saved evolution log to " + LOG_CSV + "\n")

    best.network.save(BEST_NET)
    print("Saved best network to " + BEST_NET)

    results = evaluate_agent(best.network, N_EVAL)
    avg_max = np.mean([r[1] for r in results])
    avg_score = np.mean([r[2] for r in results])
    avg_moves = np.mean([r[3] for r in results])

    print(f"Results over {N_EVAL} evals:")
    with open(EVAL_CSV, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(["Game", "MaxTile", "Score", "Moves"])
        writer.writerows(results)
        writer.writerow([])
        writer.writerow(["Averages", avg_max, avg_score, avg_moves])

    print(f"Saved evaluation results to {EVAL_CSV}")

    return population, logbook


if __name__ == "__main__":
    main()
