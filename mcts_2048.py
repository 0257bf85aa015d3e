import random

from Game2048 import Game2048

DEPTH = 20
SEARCHES_PER_MOVE = 200


def random_move(game, rng):
    return rng.choice(game.legal_moves())


def rollout(game, depth, rng):
    # random play from `game` (already spawned) until terminal or the depth limit
    level = 1
    while not game.is_terminal() and level < depth:
        game.step(random_move(game, rng))
        level += 1
    return game.score


def score_action(game, action, seed, searches_per_move=SEARCHES_PER_MOVE, depth=DEPTH):
    """Aggregate value of playing `action` from `game`.

    The move is applied once without a spawn, its score is the baseline, and
    every rollout starts from a fresh spawn on a copy of that position.
    """
    rng = random.Random(seed)
    current = game.clone(rng=rng)
    current.move(action)
    score = current.score
    for _ in range(searches_per_move):
        search_game = current.clone()
        search_game.spawn_tile()
        score += rollout(search_game, depth, rng)
    return score


def suggest_move(game, searches_per_move=SEARCHES_PER_MOVE, depth=DEPTH, rng=None, map_fn=map):
    """Best direction for `game` by random rollouts, or None when no move is legal.

    Ties go to the earlier direction in LEFT, RIGHT, UP, DOWN order. `game`
    is never modified.
    """
    rng = rng or random.Random()
    actions = game.legal_moves()
    if not actions:
        return None
    # one seed per branch so parallel branches do not share random streams
    seeds = [rng.getrandbits(64) for _ in actions]
    n = len(actions)
    scores = list(map_fn(score_action, [game] * n, actions, seeds,
                         [searches_per_move] * n, [depth] * n))
    best = max(range(n), key=lambda i: scores[i])
    return actions[best]


def play_game(seed=None, searches_per_move=SEARCHES_PER_MOVE, depth=DEPTH, max_moves=3000, map_fn=map):
    rng = random.Random(seed)
    game = Game2048(rng=rng)
    moves = 0
    while moves < max_moves:
        action = suggest_move(game, searches_per_move, depth, rng=rng, map_fn=map_fn)
        if action is None:
            break
        game.step(action)
        moves += 1
    return game.highest_tile(), game.score, moves
