import math
import random

import numpy as np
from deap import base, creator, tools
from scoop import futures

from agent_2048 import Agent, play_agent
from neural_net import NeuralNetwork

creator.create("FitnessAgent2048", base.Fitness, weights=(1.0,))

toolbox = base.Toolbox()
toolbox.register("map", futures.map)
# truncation selection; sorted() is stable so equal scores keep population order
toolbox.register("select", tools.selBest, fit_attr="fitness")
toolbox.register("play", play_agent)


class Population:
    def __init__(self, agent_count, layer_sizes, activations, seed=None, map_fn=None):
        if agent_count < 0:
            raise ValueError(f"agent count must be non-negative, got {agent_count}")
        self.rng = random.Random(seed)
        self.np_rng = np.random.default_rng(self.rng.getrandbits(64))
        self.map = map_fn or toolbox.map
        self.agents = [
            Agent(NeuralNetwork.create(layer_sizes, activations, rng=self.np_rng),
                  seed=self.rng.getrandbits(64))
            for _ in range(agent_count)
        ]
        self.evolution_step = 0

    def play(self, max_steps):
        # agents are independent; rebind in case the map ran them in other processes
        self.agents = list(self.map(toolbox.play, self.agents, [max_steps] * len(self.agents)))

    def reset_agents(self):
        for agent in self.agents:
            agent.reset()

    def get_scores(self):
        return [agent.avg_score() for agent in self.agents]

    def get_best_agent(self):
        if not self.agents:
            return None
        scores = self.get_scores()
        return self.agents[int(np.argmax(scores))]

    def get_best_agents(self, proportion):
        for agent in self.agents:
            agent.fitness = creator.FitnessAgent2048((agent.avg_score(),))
        top_n = math.ceil(len(self.agents) * proportion)
        return toolbox.select(self.agents, top_n)

    def evolve(self, keep_proportion, mutation_rate, mutation_magnitude):
        if not 0.0 < keep_proportion <= 1.0:
            raise ValueError(f"keep proportion must be in (0, 1], got {keep_proportion}")
        best = self.get_best_agents(keep_proportion)
        new_agents = [agent.clone() for agent in best]

        # refill with mutated copies of the survivors
        for _ in range(len(self.agents) - len(new_agents)):
            parent = self.rng.choice(best)
            child = parent.clone(seed=self.rng.getrandbits(64))
            child.mutate(mutation_rate, mutation_magnitude, self.np_rng)
            child.reset()
            new_agents.append(child)

        self.agents = new_agents
        self.evolution_step += 1

    def run_generation(self, rounds, max_steps, keep_proportion, mutation_rate, mutation_magnitude):
        """Play `rounds` fresh games per agent, then evolve.

        Returns the best agent as ranked before selection, or None for an
        empty population.
        """
        for _ in range(rounds):
            self.play(max_steps)
            self.reset_agents()
        best = self.get_best_agent()
        self.evolve(keep_proportion, mutation_rate, mutation_magnitude)
        return best
