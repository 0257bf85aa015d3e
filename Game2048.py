import random
from copy import copy
from dataclasses import dataclass

import numpy as np

# --------- 2048 game (numpy-based, exponent board) ----------
SIZE = 4
MAX_EXPONENT = 17  # one-hot slots per cell, exponents 0..16
LEFT, RIGHT, UP, DOWN = 0, 1, 2, 3
DIRECTIONS = (LEFT, RIGHT, UP, DOWN)
DIRECTION_NAMES = {LEFT: "left", RIGHT: "right", UP: "up", DOWN: "down"}


@dataclass(frozen=True)
class Tile:
    """One occupied cell as seen by a view layer."""
    id: int
    row: int
    col: int
    exponent: int
    is_new: bool
    just_merged: bool

    @property
    def value(self):
        return 2 ** self.exponent


def _oriented(arr, direction):
    # views, so writing rows back lands in the original array
    if direction == LEFT:
        return arr
    if direction == RIGHT:
        return arr[:, ::-1]
    if direction == UP:
        return arr.T
    if direction == DOWN:
        return arr.T[:, ::-1]
    raise ValueError(f"unknown direction: {direction!r}")


def _slide_row(exponents, ids):
    # compress + merge one row to the left; returns exponents, ids, merge flags, points gained
    tiles = [(int(e), int(t)) for e, t in zip(exponents, ids) if e != 0]
    new_exps, new_ids, merged = [], [], []
    gained = 0
    i = 0
    while i < len(tiles):
        exp, tile_id = tiles[i]
        if i + 1 < len(tiles) and tiles[i + 1][0] == exp:
            new_exps.append(exp + 1)
            new_ids.append(tile_id)
            merged.append(True)
            gained += 2 ** (exp + 1)
            i += 2
        else:
            new_exps.append(exp)
            new_ids.append(tile_id)
            merged.append(False)
            i += 1
    # pad empties
    pad = SIZE - len(new_exps)
    return new_exps + [0] * pad, new_ids + [0] * pad, merged + [False] * pad, gained


class Game2048:
    def __init__(self, rng=None):
        self.rng = rng or random.Random()
        self.reset()

    @classmethod
    def from_exponents(cls, grid, rng=None, score=0):
        game = cls.__new__(cls)
        game.rng = rng or random.Random()
        game.board = np.array(grid, dtype=int)
        if game.board.shape != (SIZE, SIZE):
            raise ValueError(f"board must be {SIZE}x{SIZE}, got {game.board.shape}")
        game.ids = np.zeros((SIZE, SIZE), dtype=int)
        occupied = game.board != 0
        game.ids[occupied] = np.arange(1, occupied.sum() + 1)
        game.is_new = np.zeros((SIZE, SIZE), dtype=bool)
        game.just_merged = np.zeros((SIZE, SIZE), dtype=bool)
        game.score = score
        game.moves = 0
        game.next_tile_id = int(occupied.sum())
        return game

    def reset(self):    # empty board plus two starting tiles
        self.board = np.zeros((SIZE, SIZE), dtype=int)
        self.ids = np.zeros((SIZE, SIZE), dtype=int)
        self.is_new = np.zeros((SIZE, SIZE), dtype=bool)
        self.just_merged = np.zeros((SIZE, SIZE), dtype=bool)
        self.score = 0
        self.moves = 0
        self.next_tile_id = 0
        self.spawn_tile()
        self.spawn_tile()
        return self.encode()

    def clone(self, rng=None):
        other = copy(self)
        other.board = self.board.copy()
        other.ids = self.ids.copy()
        other.is_new = self.is_new.copy()
        other.just_merged = self.just_merged.copy()
        if rng is not None:
            other.rng = rng
        return other

    def empty_cells(self):
        return [(int(i), int(j)) for i, j in zip(*np.where(self.board == 0))]

    def spawn_tile(self):
        empties = self.empty_cells()
        # the id counter moves even when there is nowhere to put the tile
        self.next_tile_id += 1
        if not empties:
            return
        r = self.rng.choice(empties)
        # spawn 2 (90%) or 4 (10%)
        self.board[r] = 2 if self.rng.random() < 0.1 else 1
        self.ids[r] = self.next_tile_id
        self.is_new[r] = True
        self.just_merged[r] = False

    def move(self, direction):
        board = _oriented(self.board, direction)
        ids = _oriented(self.ids, direction)
        is_new = _oriented(self.is_new, direction)
        just_merged = _oriented(self.just_merged, direction)

        # every direction is a left slide on the oriented rows
        moved = False
        for i in range(SIZE):
            new_row, new_ids, merged, gained = _slide_row(board[i], ids[i])
            if new_row != board[i].tolist():
                moved = True
            board[i] = new_row
            ids[i] = new_ids
            just_merged[i] = merged
            is_new[i] = False
            self.score += gained
        return moved

    def step(self, direction):
        moved = self.move(direction)
        if moved:
            self.spawn_tile()
            self.moves += 1
        return moved

    def legal_moves(self):
        return [d for d in DIRECTIONS if self.clone().move(d)]

    def is_terminal(self):
        if np.any(self.board == 0):
            return False
        # check merges in rows, then columns
        if np.any(self.board[:, :-1] == self.board[:, 1:]):
            return False
        if np.any(self.board[:-1, :] == self.board[1:, :]):
            return False
        return True

    def encode(self):
        return self.board.flatten().astype(float)

    def one_hot_encode(self):
        # SIZE*SIZE blocks of MAX_EXPONENT slots; empty cells stay all zero
        flat = self.board.flatten()
        if flat.max() >= MAX_EXPONENT:
            raise ValueError(f"exponent {flat.max()} does not fit in {MAX_EXPONENT} slots")
        encoded = np.zeros(SIZE * SIZE * MAX_EXPONENT)
        cells = np.nonzero(flat)[0]
        encoded[cells * MAX_EXPONENT + flat[cells]] = 1.0
        return encoded

    def highest_tile(self):
        if not self.board.any():
            return None
        return 2 ** int(self.board.max())

    def values(self):
        return np.where(self.board == 0, 0, 2 ** self.board)

    def tiles(self):
        found = []
        for i, j in zip(*np.where(self.board != 0)):
            found.append(Tile(
                id=int(self.ids[i, j]),
                row=int(i),
                col=int(j),
                exponent=int(self.board[i, j]),
                is_new=bool(self.is_new[i, j]),
                just_merged=bool(self.just_merged[i, j]),
            ))
        return sorted(found, key=lambda t: t.id)
