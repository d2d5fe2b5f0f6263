"""Chemical equation balancing.

An equation is split into reactant and product formulas, each formula is
parsed into element counts, and the counts are arranged in an element
conservation matrix: one row per element, one column per component, with
product columns negated. Any coefficient vector ``x`` with ``M @ x == 0``
conserves every element.

Two solvers are available:

- ``"search"`` (default) enumerates every vector with entries in
  ``1..max_coefficient`` in a fixed order and returns the first one that
  zeroes every row. It is only attempted for up to ``max_components``
  components, which keeps the worst case at ``12**5`` candidates. The
  candidates are evaluated in fixed-size chunks.
- ``"nullspace"`` computes the null space with ``scipy.linalg.null_space``
  and scales the basis vector to the smallest integer solution. It has no
  component ceiling but requires a one-dimensional null space.

Note: the search does not reduce its answer by the GCD. The first
solution in enumeration order is returned as is.
"""

from __future__ import annotations

import itertools
import logging
import re
from dataclasses import dataclass, replace
from fractions import Fraction
from functools import reduce
from math import gcd, lcm
from typing import List, Optional, Sequence, Tuple

import numpy as np
from scipy.linalg import null_space

from chembalance.constants import (
    EQUATION_SEPARATORS,
    MAX_COEFFICIENT,
    MAX_COMPONENTS,
    MAX_SEARCH_CANDIDATES,
    RENDER_ARROW,
    RENDER_PLUS,
    SEARCH_CHUNK_SIZE,
)
from chembalance.errors import (
    ChemistryError,
    MalformedEquation,
    MalformedFormula,
    UnbalanceableError,
)
from chembalance.formula import parse_formula
from chembalance.models import BalanceResult, ChemicalComponent, Reaction

logger = logging.getLogger(__name__)

SEPARATOR_PATTERN = re.compile("|".join(re.escape(s) for s in EQUATION_SEPARATORS))
COEFFICIENT_PATTERN = re.compile(r"^(\d+)(.+)$")

METHODS = ("search", "nullspace")


@dataclass(frozen=True)
class BalancerSettings:
    """Bounds for the exhaustive coefficient search."""

    max_coefficient: int = MAX_COEFFICIENT
    max_components: int = MAX_COMPONENTS

    def __post_init__(self) -> None:
        if self.max_coefficient < 1 or self.max_components < 1:
            raise ValueError("Search bounds must be positive")
        if self.max_coefficient**self.max_components > MAX_SEARCH_CANDIDATES:
            raise ValueError(
                f"Search space {self.max_coefficient}**{self.max_components} exceeds "
                f"{MAX_SEARCH_CANDIDATES} candidates"
            )


DEFAULT_SETTINGS = BalancerSettings()


def strip_coefficient(token: str) -> str:
    """Drop a leading integer coefficient, e.g. ``2H2O`` -> ``H2O``."""
    match = COEFFICIENT_PATTERN.match(token)
    return match.group(2) if match else token


def split_equation(equation: str) -> Tuple[List[str], List[str]]:
    """Split an equation into bare reactant and product formulas.

    Raises:
        MalformedEquation: Unless the equation has exactly one separator
            with at least one formula on each side.
    """
    sides = SEPARATOR_PATTERN.split(equation)
    if len(sides) != 2:
        raise MalformedEquation(equation)

    reactants, products = (
        [strip_coefficient(token.strip()) for token in side.split("+") if token.strip()]
        for side in sides
    )
    if not reactants or not products:
        raise MalformedEquation(equation, "equation side is empty")
    return reactants, products


def _component(formula: str) -> ChemicalComponent:
    elements = parse_formula(formula)
    if not elements:
        raise MalformedFormula(formula, "formula contains no elements")
    return ChemicalComponent(formula=formula, coefficient=0, elements=elements)


def parse_equation(equation: str) -> Reaction:
    """Parse every formula of an equation into an unsolved ``Reaction``.

    Coefficients are left at 0.
    """
    reactant_formulas, product_formulas = split_equation(equation)
    return Reaction(
        reactants=[_component(f) for f in reactant_formulas],
        products=[_component(f) for f in product_formulas],
    )


def build_conservation_matrix(
    symbols: Sequence[str],
    reactants: Sequence[ChemicalComponent],
    products: Sequence[ChemicalComponent],
) -> np.ndarray:
    """Element conservation matrix with shape ``(len(symbols), n_components)``."""
    matrix = np.zeros((len(symbols), len(reactants) + len(products)), dtype=np.int64)
    for row, symbol in enumerate(symbols):
        for col, component in enumerate(reactants):
            matrix[row, col] = component.elements.get(symbol, 0)
        for col, component in enumerate(products, start=len(reactants)):
            matrix[row, col] = -component.elements.get(symbol, 0)
    return matrix


def search_coefficients(
    matrix: np.ndarray,
    max_coefficient: int = MAX_COEFFICIENT,
    chunk_size: int = SEARCH_CHUNK_SIZE,
) -> Optional[List[int]]:
    """Return the first vector in ``1..max_coefficient`` that zeroes every row.

    Candidates are ordered with component 0 varying slowest and the last
    component fastest. They are evaluated ``chunk_size`` at a time, so
    memory stays bounded whatever the number of components, and the scan
    stops at the first solution. Returns ``None`` if the grid holds no
    solution.
    """
    n_components = matrix.shape[1]
    candidates = itertools.product(range(1, max_coefficient + 1), repeat=n_components)
    searched = 0

    while True:
        chunk = np.array(list(itertools.islice(candidates, chunk_size)), dtype=np.int64)
        if chunk.size == 0:
            break
        searched += len(chunk)
        hits = np.flatnonzero(~(chunk @ matrix.T).any(axis=1))
        if hits.size:
            logger.debug("Found solution after %d candidates", searched - len(chunk) + hits[0] + 1)
            return [int(value) for value in chunk[hits[0]]]

    logger.debug("Searched %d candidates, no solution", searched)
    return None


def nullspace_coefficients(matrix: np.ndarray, max_denominator: int = 10_000) -> Optional[List[int]]:
    """Smallest positive integer vector spanning a one-dimensional null space.

    Returns ``None`` when the null space is trivial, has more than one
    dimension, or its basis vector mixes signs.
    """
    basis = null_space(matrix.astype(float))
    if basis.shape[1] != 1:
        logger.debug("Null space has dimension %d", basis.shape[1])
        return None

    vector = basis[:, 0]
    vector = vector / vector[np.argmax(np.abs(vector))]
    if np.any(vector <= 0):
        return None

    fractions = [Fraction(float(value)).limit_denominator(max_denominator) for value in vector]
    denominator = reduce(lcm, (f.denominator for f in fractions), 1)
    coefficients = [int(f * denominator) for f in fractions]
    divisor = reduce(gcd, coefficients)
    coefficients = [c // divisor for c in coefficients]

    if np.any(matrix @ np.array(coefficients, dtype=np.int64)):
        return None
    return coefficients


def render_equation(reaction: Reaction) -> str:
    """Render with coefficients; a coefficient of 1 is left implicit."""

    def side(components: Sequence[ChemicalComponent]) -> str:
        return RENDER_PLUS.join(
            f"{c.coefficient if c.coefficient > 1 else ''}{c.formula}" for c in components
        )

    return f"{side(reaction.reactants)}{RENDER_ARROW}{side(reaction.products)}"


def balance(
    equation: str,
    method: str = "search",
    settings: BalancerSettings = DEFAULT_SETTINGS,
) -> Reaction:
    """Balance ``equation`` and return the solved reaction.

    Raises:
        MalformedEquation: Separator or sides are invalid.
        MalformedFormula: A formula cannot be parsed.
        UnbalanceableError: Too many components for the search, or no
            solution was found.
    """
    if method not in METHODS:
        raise ValueError(f"Unknown balancing method: {method}")

    reaction = parse_equation(equation)
    symbols = reaction.element_symbols()
    matrix = build_conservation_matrix(symbols, reaction.reactants, reaction.products)

    if method == "search":
        if matrix.shape[1] > settings.max_components:
            raise UnbalanceableError(
                equation, f"too many components (max {settings.max_components})"
            )
        coefficients = search_coefficients(matrix, settings.max_coefficient)
    else:
        coefficients = nullspace_coefficients(matrix)

    if coefficients is None or not any(coefficients):
        raise UnbalanceableError(equation)

    for component, coefficient in zip(reaction.components, coefficients, strict=True):
        component.coefficient = coefficient
    logger.info("Balanced %s -> %s", equation, render_equation(reaction))
    return reaction


def balance_reaction(
    equation: str,
    method: str = "search",
    settings: BalancerSettings = DEFAULT_SETTINGS,
) -> BalanceResult:
    """Balance an equation, reporting failures in the result instead of raising.

    Returns:
        A ``BalanceResult`` whose ``error`` is set and ``reaction`` is
        ``None`` when the equation is malformed or cannot be balanced.
    """
    try:
        reaction = balance(equation, method=method, settings=settings)
    except ChemistryError as exc:
        logger.warning("Could not balance %r: %s", equation, exc)
        return BalanceResult(balanced="", reaction=None, error=str(exc))
    return BalanceResult(balanced=render_equation(reaction), reaction=reaction)


def check_coefficients(reaction: Reaction, coefficients: Sequence[int]) -> bool:
    """Whether ``coefficients`` (reactants then products) balance ``reaction``."""
    components = reaction.components
    if len(coefficients) != len(components):
        return False
    trial = Reaction(
        reactants=[replace(c, coefficient=int(k)) for c, k in zip(reaction.reactants, coefficients)],
        products=[
            replace(c, coefficient=int(k))
            for c, k in zip(reaction.products, coefficients[len(reaction.reactants):])
        ],
    )
    return trial.is_balanced()
