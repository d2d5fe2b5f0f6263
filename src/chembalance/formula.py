"""Chemical formula parsing and molar mass helpers."""

from __future__ import annotations

import logging
import re
from typing import List, Mapping, Tuple

from chembalance.constants import ATOMIC_MASSES
from chembalance.errors import MalformedFormula, UnknownElement
from chembalance.models import ElementCountMap

logger = logging.getLogger(__name__)

# Element symbol with optional count, an opening bracket, or a closing
# bracket with optional multiplier.
TOKEN_PATTERN = re.compile(r"([A-Z][a-z]?)(\d*)|(\()|(\))(\d*)")


def _count(digits: str, formula: str) -> int:
    if not digits:
        return 1
    count = int(digits)
    if count == 0:
        raise MalformedFormula(formula, "zero subscript in formula")
    return count


def parse_formula(formula: str) -> ElementCountMap:
    """Convert a formula such as ``Ca3(PO4)2`` into element counts.

    Groups in parentheses may nest to any depth; their contents are
    multiplied by the trailing subscript and merged into the enclosing
    scope. Element order follows first appearance in the string.

    Raises:
        MalformedFormula: If any character is not consumed by the token
            grammar, or brackets are unbalanced.
    """
    stack: List[ElementCountMap] = [{}]
    matched = 0

    for match in TOKEN_PATTERN.finditer(formula):
        matched += len(match.group(0))
        symbol, digits, opening, closing, multiplier = match.groups()

        if symbol:
            current = stack[-1]
            current[symbol] = current.get(symbol, 0) + _count(digits, formula)
        elif opening:
            stack.append({})
        elif closing:
            if len(stack) == 1:
                raise MalformedFormula(formula, "unbalanced parentheses in formula")
            group = stack.pop()
            factor = _count(multiplier, formula)
            current = stack[-1]
            for element, count in group.items():
                current[element] = current.get(element, 0) + count * factor

    if matched != len(formula):
        raise MalformedFormula(formula)
    if len(stack) != 1:
        raise MalformedFormula(formula, "unbalanced parentheses in formula")

    logger.debug("Parsed %s -> %s", formula, stack[0])
    return stack[0]


def mass_breakdown(elements: Mapping[str, int]) -> List[Tuple[str, int, float, float]]:
    """Rows of ``(symbol, count, atomic_mass, subtotal)`` for each element."""
    rows = []
    for symbol, count in elements.items():
        try:
            atomic_mass = ATOMIC_MASSES[symbol]
        except KeyError:
            raise UnknownElement(symbol) from None
        rows.append((symbol, count, atomic_mass, atomic_mass * count))
    return rows


def molar_mass(elements: Mapping[str, int], strict: bool = True) -> float:
    """Molar mass in g/mol.

    With ``strict=False`` unknown symbols contribute nothing instead of
    raising ``UnknownElement``.
    """
    if not strict:
        return float(sum(ATOMIC_MASSES.get(symbol, 0.0) * count for symbol, count in elements.items()))
    return float(sum(subtotal for _, _, _, subtotal in mass_breakdown(elements)))
