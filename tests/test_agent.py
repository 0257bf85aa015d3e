import numpy as np
import pytest

from Game2048 import Game2048, LEFT, RIGHT, UP, DOWN
from agent_2048 import Agent, play_agent
from neural_net import Activation, Layer, NeuralNetwork

EMPTY_ROWS = [[0, 0, 0, 0]] * 3


def constant_network(preferred):
    # zero weights, so the biases alone decide the action
    biases = [0.0] * 4
    biases[preferred] = 1.0
    return NeuralNetwork([Layer(np.zeros((4, 16)), biases, Activation.IDENTITY)])


def random_network(seed=0):
    return NeuralNetwork.create([16, 16, 8, 4], [Activation.IDENTITY] * 3, rng=np.random.default_rng(seed))


def test_network_shape_is_checked():
    with pytest.raises(ValueError):
        Agent(NeuralNetwork.create([16, 3], [Activation.RELU]))
    with pytest.raises(ValueError):
        Agent(NeuralNetwork.create([9, 4], [Activation.RELU]))


@pytest.mark.parametrize("direction", [LEFT, RIGHT, UP, DOWN])
def test_choose_action_maps_argmax(direction):
    agent = Agent(constant_network(direction), seed=1)
    assert agent.choose_action() == direction


def test_choose_action_ties_go_to_first():
    nn = NeuralNetwork([Layer(np.zeros((4, 16)), [0.0, 1.0, 1.0, 0.0], Activation.IDENTITY)])
    assert Agent(nn, seed=1).choose_action() == RIGHT


def test_step_counts():
    agent = Agent(random_network(), seed=2)
    agent.step()
    assert agent.steps == 1


def test_play_stops_on_noop_move():
    game = Game2048.from_exponents([[1, 2, 3, 4]] + EMPTY_ROWS)
    agent = Agent(constant_network(LEFT), game=game, seed=3)
    agent.play(100)
    assert agent.steps == 1
    assert agent.scores == [0]
    assert agent.highest_tiles == [16]


def test_play_respects_step_budget():
    game = Game2048.from_exponents([[1, 0, 0, 0]] + EMPTY_ROWS)
    agent = Agent(constant_network(DOWN), game=game, seed=4)
    agent.play(1)
    assert agent.steps == 1
    assert len(agent.scores) == 1


def test_play_on_terminal_game_records_without_stepping():
    game = Game2048.from_exponents([[1, 2, 3, 4], [5, 6, 7, 8], [9, 10, 11, 12], [13, 14, 15, 16]])
    agent = Agent(random_network(), game=game, seed=5)
    agent.play(50)
    assert agent.steps == 0
    assert agent.step() is False
    assert agent.highest_tiles == [65536]


def test_histories_accumulate_until_reset():
    agent = Agent(random_network(), seed=6)
    agent.play(50)
    agent.play(50)
    assert len(agent.scores) == 2
    agent.reset()
    assert agent.steps == 0
    assert len(agent.game.tiles()) == 2
    agent.play(50)
    assert len(agent.scores) == 3
    assert agent.avg_score() == pytest.approx(np.mean(agent.scores))
    assert agent.highest_tile() == max(agent.highest_tiles)


def test_empty_history():
    agent = Agent(random_network(), seed=7)
    assert agent.avg_score() == 0.0
    assert agent.highest_tile() is None


def test_clone_is_deep_and_reseeded():
    agent = Agent(random_network(), seed=8)
    agent.play(20)
    child = agent.clone(seed=123)
    assert child.scores == agent.scores
    assert child.network is not agent.network
    assert child.game.rng is child.rng

    child.mutate(1.0, 0.1, np.random.default_rng(9))
    assert not np.array_equal(child.network.layers[0].weights, agent.network.layers[0].weights)

    twin = agent.clone(seed=123)
    child.reset()
    twin.reset()
    assert np.array_equal(child.game.board, twin.game.board)


def test_play_agent_returns_the_agent():
    agent = Agent(random_network(), seed=10)
    assert play_agent(agent, 30) is agent
    assert len(agent.scores) == 1
