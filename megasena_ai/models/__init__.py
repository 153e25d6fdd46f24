"""
Mega-Sena Recommendation Models

Available models:
- pattern_extractor: Recent-window cluster, sum, parity, pair and gap patterns
- cyclical: Interval-regularity detector for numbers that reappear on a cycle
- number_scorer: Additive multi-factor score for every number 1-60
- genetic_search: Genetic-algorithm search for the best 6-number board
"""

from . import pattern_extractor
from . import cyclical
from . import number_scorer
from . import genetic_search

__all__ = [
    "pattern_extractor",
    "cyclical",
    "number_scorer",
    "genetic_search",
]
