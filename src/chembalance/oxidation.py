"""Heuristic oxidation state estimation for neutral compounds."""

from __future__ import annotations

import logging

from chembalance.constants import ALKALI_METALS, ALKALINE_EARTH_METALS
from chembalance.errors import MalformedFormula
from chembalance.formula import parse_formula
from chembalance.models import OxidationMap

logger = logging.getLogger(__name__)

# Applied in this order, only for elements present in the formula.
FIXED_STATES = (
    ("O", -2),
    ("H", 1),
    ("F", -1),
    *((metal, 1) for metal in ALKALI_METALS),
    *((metal, 2) for metal in ALKALINE_EARTH_METALS),
)


def get_oxidation_states(formula: str) -> OxidationMap:
    """Estimate oxidation states assuming an overall neutral compound.

    Elements with a fixed rule are assigned first; at most one remaining
    element is solved from charge neutrality. If two or more elements are
    left unassigned the partial map is returned. A non-integer solution is
    kept as a float rather than rounded.

    Never raises; an unparseable formula yields an empty map.
    """
    try:
        elements = parse_formula(formula)
    except MalformedFormula as exc:
        logger.warning("Skipping oxidation states: %s", exc)
        return {}

    if len(elements) == 1:
        return {symbol: 0 for symbol in elements}

    states: OxidationMap = {}
    for symbol, state in FIXED_STATES:
        if symbol in elements:
            states[symbol] = state

    unknown = [symbol for symbol in elements if symbol not in states]
    if len(unknown) > 1:
        logger.debug("%s has %d undetermined elements", formula, len(unknown))
        return states
    if not unknown:
        return states

    symbol = unknown[0]
    known_charge = sum(states[s] * count for s, count in elements.items() if s in states)
    quotient, remainder = divmod(-known_charge, elements[symbol])
    states[symbol] = quotient if remainder == 0 else -known_charge / elements[symbol]
    return states
