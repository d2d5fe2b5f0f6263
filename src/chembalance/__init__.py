"""chembalance core package."""

from chembalance.balancer import BalancerSettings, balance_reaction, check_coefficients
from chembalance.errors import (
    ChemistryError,
    MalformedEquation,
    MalformedFormula,
    SubstanceNotFound,
    UnbalanceableError,
    UnknownElement,
)
from chembalance.formula import molar_mass, parse_formula
from chembalance.kinetics import RateLaw, concentration, concentration_profile
from chembalance.models import BalanceResult, ChemicalComponent, Reaction
from chembalance.oxidation import get_oxidation_states
from chembalance.stoichiometry import TaskType, solve_problem

__all__ = [
    "BalanceResult",
    "BalancerSettings",
    "ChemicalComponent",
    "ChemistryError",
    "MalformedEquation",
    "MalformedFormula",
    "RateLaw",
    "Reaction",
    "SubstanceNotFound",
    "TaskType",
    "UnbalanceableError",
    "UnknownElement",
    "balance_reaction",
    "check_coefficients",
    "concentration",
    "concentration_profile",
    "get_oxidation_states",
    "molar_mass",
    "parse_formula",
    "solve_problem",
]
