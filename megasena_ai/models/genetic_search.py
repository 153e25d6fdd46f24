"""
Genetic Combination Search for Mega-Sena

Evolves a population of 6-number boards toward the highest fitness:
- Mean number score:                 35%
- Decade distribution:               10%
- Odd/even balance:                  10%
- Sum inside 150-220:                10%
- Cluster spread:                    10% (when cluster analysis is on)
- Golden ratio / Fibonacci pattern:   5%
- Hot numbers share:                 15%
- Spacing quality:                    5%

Elitism keeps the best board found so far, so the tracked best fitness
never decreases between generations. The search is stochastic; pass a
seeded RandomState to reproduce a run.
"""

import numpy as np

from megasena_ai.analysis import ALL_NUMBERS
from megasena_ai.filters import (
    check_cluster_spread,
    check_distribution,
    check_parity,
    check_sum,
    distance_pattern_score,
    golden_pattern_score,
)

BOARD_SIZE = 6
HIGH_TIER_SHARE = 0.25
MEDIUM_TIER_SHARE = 0.40
MAX_POPULATION = 100
DEFAULT_POPULATION = 40
TOURNAMENT_SIZE = 3
CROSSOVER_RATE = 0.9
MUTATION_RATE = 0.3

FITNESS_WEIGHTS = {
    "mean_score": 0.35,
    "distribution": 0.10,
    "parity": 0.10,
    "sum": 0.10,
    "cluster": 0.10,
    "golden": 0.05,
    "hot": 0.15,
    "distance": 0.05,
}


def split_tiers(rankings):
    """Split ranked numbers into high (top 25%), medium (next 40%) and low tiers."""
    ordered = [n for n, _ in rankings]
    total = len(ordered)
    high_limit = int(round(total * HIGH_TIER_SHARE))
    medium_limit = int(round(total * MEDIUM_TIER_SHARE))
    return (
        ordered[:high_limit],
        ordered[high_limit:high_limit + medium_limit],
        ordered[high_limit + medium_limit:],
    )


def search_budget(iteration_depth):
    """(population size, generations) for an iteration budget."""
    if not iteration_depth:
        return DEFAULT_POPULATION, 100
    population = max(TOURNAMENT_SIZE, min(MAX_POPULATION, iteration_depth // 100))
    return population, max(1, iteration_depth // population)


def evaluate_board(board, scores, hot_numbers, use_cluster_analysis=True):
    """Fitness of a board in [0, 1]; 0 for anything that is not 6 distinct numbers."""
    if board is None or len(board) != BOARD_SIZE or len(set(board)) != BOARD_SIZE:
        return 0.0

    w = FITNESS_WEIGHTS
    fitness = w["mean_score"] * sum(scores.get(n, 0.0) for n in board) / BOARD_SIZE
    if check_distribution(board):
        fitness += w["distribution"]
    if check_parity(board):
        fitness += w["parity"]
    if check_sum(board):
        fitness += w["sum"]
    if use_cluster_analysis and check_cluster_spread(board):
        fitness += w["cluster"]
    fitness += w["golden"] * golden_pattern_score(board)

    hot_count = sum(1 for n in board if n in hot_numbers)
    fitness += w["hot"] * hot_count / BOARD_SIZE
    fitness += w["distance"] * distance_pattern_score(board)
    return fitness


class GeneticSearch:
    """
    Genetic-algorithm-style search over 6-number boards.

    Parameters
    ----------
    rankings : list of (number, score)
        Number scorer output, best first.
    hot_numbers : list of int
    cyclical_numbers : list of int
    settings : dict
        Uses 'iteration_depth' and 'use_cluster_analysis'.
    rng : np.random.RandomState, optional
    """

    def __init__(self, rankings, hot_numbers, cyclical_numbers, settings, rng=None):
        self.rankings = list(rankings)
        self.scores = dict(self.rankings)
        self.hot = list(hot_numbers)
        self.hot_set = set(hot_numbers)
        self.cyclical = list(cyclical_numbers)
        self.use_cluster_analysis = settings.get("use_cluster_analysis", True)
        self.rng = rng if rng is not None else np.random.RandomState()
        self.high, self.medium, self.low = split_tiers(self.rankings)
        self.population_size, self.generations = search_budget(settings.get("iteration_depth"))

    # -- random helpers ------------------------------------------------

    def _pick(self, pool, count):
        """Up to `count` distinct elements of pool."""
        pool = list(pool)
        count = min(count, len(pool))
        if count <= 0:
            return []
        return [int(n) for n in self.rng.choice(pool, size=count, replace=False)]

    def _choice(self, pool):
        return int(pool[self.rng.randint(len(pool))])

    # -- population ----------------------------------------------------

    def _repair(self, board, pad_pools=None):
        """Deduplicate, pad to 6 unique numbers, truncate and sort."""
        child = list(dict.fromkeys(int(n) for n in board))
        while len(child) < BOARD_SIZE:
            if pad_pools is None:
                pool = self.high if self.rng.random_sample() < 0.7 else self.medium
            else:
                pool = pad_pools
            candidates = [n for n in pool if n not in child] or [n for n in ALL_NUMBERS if n not in child]
            child.append(self._choice(candidates))
        return sorted(child[:BOARD_SIZE])

    def _seed_individuals(self):
        """Structured starting boards mixing high-tier, hot and cyclical numbers."""
        hot, cyc = self.hot, self.cyclical
        high, medium, low = self.high, self.medium, self.low
        return [
            self._pick(hot if len(hot) >= 4 else high, 4)
            + self._pick(cyc if len(cyc) > 2 else high, 2),
            self._pick(high, 3)
            + self._pick(hot if len(hot) >= 3 else medium, 3),
            self._pick(cyc if len(cyc) >= 3 else high, 3)
            + self._pick(high, 3),
            self._pick(high, 2)
            + self._pick(cyc if len(cyc) >= 2 else medium, 2)
            + self._pick(hot if len(hot) >= 2 else low, 2),
        ]

    def _random_individual(self):
        roll = self.rng.random_sample()
        if roll < 0.3:
            board = self._pick(self.high, 3) + self._pick(self.medium, 2) + self._pick(self.low, 1)
        elif roll < 0.6:
            board = self._pick(self.high, 2) + self._pick(self.medium, 3) + self._pick(self.low, 1)
        elif roll < 0.9:
            board = self._pick(self.high, 2) + self._pick(self.medium, 2) + self._pick(self.low, 2)
        else:
            board = self._pick(ALL_NUMBERS, BOARD_SIZE)
        return board

    def initial_population(self):
        population = []
        seen = set()
        for board in self._seed_individuals():
            board = self._repair(board, pad_pools=ALL_NUMBERS)
            if tuple(board) not in seen:
                seen.add(tuple(board))
                population.append(board)

        attempts = 0
        while len(population) < self.population_size and attempts < self.population_size * 50:
            attempts += 1
            board = self._repair(self._random_individual(), pad_pools=ALL_NUMBERS)
            if tuple(board) not in seen:
                seen.add(tuple(board))
                population.append(board)
        return population

    # -- operators -----------------------------------------------------

    def fitness(self, board):
        return evaluate_board(board, self.scores, self.hot_set, self.use_cluster_analysis)

    def tournament(self, population, fitness):
        """Best of 3 distinct random individuals."""
        size = min(TOURNAMENT_SIZE, len(population))
        idxs = self.rng.choice(len(population), size=size, replace=False)
        best = idxs[0]
        for i in idxs[1:]:
            if fitness[i] > fitness[best]:
                best = i
        return population[best]

    def crossover(self, parent1, parent2):
        """Single-point crossover with a cut between positions 1 and 5."""
        cut = self.rng.randint(1, BOARD_SIZE)
        return list(parent1[:cut]) + list(parent2[cut:])

    def mutate(self, board):
        """With 30% probability replace one gene from a high/medium/cyclical/any pool."""
        mutated = list(board)
        if self.rng.random_sample() >= MUTATION_RATE:
            return mutated

        idx = self.rng.randint(len(mutated))
        roll = self.rng.random_sample()
        if roll < 0.4:
            pool = self.high
        elif roll < 0.7:
            pool = self.medium
        elif roll < 0.9 and self.cyclical:
            pool = self.cyclical
        else:
            pool = ALL_NUMBERS

        valid = [n for n in pool if n not in mutated]
        if valid:
            mutated[idx] = self._choice(valid)
        return mutated

    # -- main loop -----------------------------------------------------

    def run(self, cancel_event=None, verbose=False):
        """
        Evolve the population for the configured number of generations.

        Returns
        -------
        dict with:
            'numbers': best board found (sorted)
            'fitness': its fitness
            'history': best-so-far fitness after each generation
            'generations_run', 'population_size': int
            'cancelled': bool
        """
        population = self.initial_population()
        best_board, best_fitness = [], -1.0
        history = []
        cancelled = False

        if verbose:
            print(f"  [GeneticSearch] Population {self.population_size}, "
                  f"{self.generations} generations")

        for generation in range(self.generations):
            fitness = [self.fitness(b) for b in population]
            gen_best = int(np.argmax(fitness))
            if fitness[gen_best] > best_fitness:
                best_fitness = fitness[gen_best]
                best_board = list(population[gen_best])
            history.append(best_fitness)

            if verbose and generation % max(1, self.generations // 5) == 0:
                print(f"    Generation {generation}: best fitness {best_fitness:.4f}")

            if cancel_event is not None and cancel_event.is_set():
                cancelled = True
                break

            next_population = [list(best_board)]
            while len(next_population) < self.population_size:
                parent1 = self.tournament(population, fitness)
                parent2 = self.tournament(population, fitness)
                if self.rng.random_sample() < CROSSOVER_RATE:
                    child = self.crossover(parent1, parent2)
                else:
                    child = list(parent1 if self.rng.random_sample() < 0.5 else parent2)
                child = self._repair(self.mutate(child))
                next_population.append(child)
            population = next_population

        if verbose:
            print(f"  [GeneticSearch] Best board {best_board} (fitness {best_fitness:.4f})")

        return {
            "numbers": sorted(best_board),
            "fitness": max(best_fitness, 0.0),
            "history": history,
            "generations_run": len(history),
            "population_size": self.population_size,
            "cancelled": cancelled,
        }


def search(rankings, hot_numbers, cyclical_numbers, settings, rng=None,
           cancel_event=None, verbose=False):
    """Convenience wrapper: build a GeneticSearch and run it."""
    engine = GeneticSearch(rankings, hot_numbers, cyclical_numbers, settings, rng=rng)
    return engine.run(cancel_event=cancel_event, verbose=verbose)
