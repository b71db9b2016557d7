# Blocktrix - An SRS Falling-Block Puzzle Engine
# randomizer.py - 7-bag piece generation and next-queue refill

from dataclasses import dataclass
from typing import Tuple

import numpy as np

from .pieces import PieceType

ALL_PIECES: Tuple[PieceType, ...] = tuple(PieceType)


def new_seed() -> int:
    """Fresh entropy for a game whose seed was not fixed."""
    return int(np.random.SeedSequence().entropy)


def shuffled_bag(seed: int, generation: int) -> Tuple[PieceType, ...]:
    """
    One of each piece in random order. The permutation depends only on
    (seed, generation), so a bag can always be reproduced.
    """
    rng = np.random.default_rng([seed, generation])
    return tuple(ALL_PIECES[i] for i in rng.permutation(len(ALL_PIECES)))


@dataclass(frozen=True)
class Bag:
    """
    Generates sequences of pieces using a 7-bag system.
    pieces is what is left of the current permutation, consumed from the front.
    """
    seed: int
    pieces: Tuple[PieceType, ...] = ()
    generation: int = 0  # Number of permutations drawn so far

    def __len__(self):
        return len(self.pieces)


def next_piece(bag: Bag) -> Tuple[PieceType, Bag]:
    """Pop the front of the bag, shuffling a new permutation first when it is empty."""
    pieces, generation = bag.pieces, bag.generation
    if not pieces:
        pieces = shuffled_bag(bag.seed, generation)
        generation += 1
    return pieces[0], Bag(bag.seed, pieces[1:], generation)


def fill_queue(queue: Tuple[PieceType, ...], bag: Bag,
               size: int) -> Tuple[Tuple[PieceType, ...], Bag]:
    """Top the next queue up to size pieces, drawing from the bag."""
    queue = tuple(queue)
    while len(queue) < size:
        piece, bag = next_piece(bag)
        queue += (piece,)
    return queue, bag


def take_next(queue: Tuple[PieceType, ...], bag: Bag,
              size: int) -> Tuple[PieceType, Tuple[PieceType, ...], Bag]:
    """Take the front of the queue and refill it. Returns (piece, queue, bag)."""
    queue, bag = fill_queue(queue, bag, max(size, 1))
    piece, queue = queue[0], queue[1:]
    queue, bag = fill_queue(queue, bag, size)
    return piece, queue, bag


if __name__ == '__main__':
    bag = Bag(seed=new_seed())
    for _ in range(14):
        piece, bag = next_piece(bag)
        print(f"Generated piece: {piece.name} (bag #{bag.generation}, {len(bag)} left)")
