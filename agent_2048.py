import random
from copy import deepcopy

import numpy as np

from Game2048 import Game2048, DIRECTIONS, SIZE


class Agent:
    """A network playing one live game, with per-episode score history."""

    def __init__(self, network, game=None, seed=None):
        if network.input_size != SIZE * SIZE:
            raise ValueError(f"network takes {network.input_size} inputs, board has {SIZE * SIZE}")
        if network.output_size != len(DIRECTIONS):
            raise ValueError(f"network gives {network.output_size} outputs, need {len(DIRECTIONS)}")
        self.network = network
        self.rng = random.Random(seed)
        self.game = game if game is not None else Game2048(rng=self.rng)
        self.scores = []
        self.highest_tiles = []
        self.steps = 0

    def choose_action(self):
        output = self.network.forward(self.game.encode())
        # argmax keeps the first index on ties
        return DIRECTIONS[int(np.argmax(output))]

    def step(self):
        if self.game.is_terminal():
            return False
        changed = self.game.step(self.choose_action())
        self.steps += 1
        return changed

    def play(self, max_steps):
        while not self.game.is_terminal() and self.steps < max_steps:
            # a no-op choice ends the episode instead of trying the next best move
            if not self.step():
                break
        self.scores.append(self.game.score)
        self.highest_tiles.append(self.game.highest_tile())

    def reset(self):
        self.steps = 0
        self.game = Game2048(rng=self.rng)

    def avg_score(self):
        if not self.scores:
            return 0.0
        return float(np.mean(self.scores))

    def highest_tile(self):
        tiles = [t for t in self.highest_tiles if t is not None]
        return max(tiles) if tiles else None

    def mutate(self, rate, magnitude, rng=None):
        self.network.mutate(rate, magnitude, rng)

    def clone(self, seed=None):
        other = deepcopy(self)
        if seed is not None:
            other.rng.seed(seed)
            other.game.rng = other.rng
        return other


def play_agent(agent, max_steps):
    # unit of work for the population map; returns the agent so workers can ship it back
    agent.play(max_steps)
    return agent
