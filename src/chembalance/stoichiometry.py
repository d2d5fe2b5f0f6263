"""Mass, mole and gas-volume problems on a balanced equation."""

from __future__ import annotations

import logging
from enum import Enum
from typing import List

from chembalance.balancer import balance, render_equation
from chembalance.constants import GAS_FORMING_ELEMENTS, MOLAR_VOLUME_STP
from chembalance.errors import SubstanceNotFound
from chembalance.formula import molar_mass
from chembalance.models import StoichiometrySolution

logger = logging.getLogger(__name__)


class TaskType(str, Enum):
    MASS_MASS = "mass-mass"
    MASS_VOLUME = "mass-volume"
    MOLES_MASS = "moles-mass"


def solve_problem(
    equation: str,
    known: str,
    value: float,
    target: str,
    task: TaskType = TaskType.MASS_MASS,
) -> StoichiometrySolution:
    """Convert an amount of ``known`` into an amount of ``target``.

    The equation is balanced first; the mole ratio comes from the
    coefficients. ``value`` is grams for the mass tasks and moles for
    ``moles-mass``. A ``mass-volume`` target that contains a gas-forming
    element is reported in litres at STP, anything else in grams.

    Raises:
        MalformedEquation, MalformedFormula, UnbalanceableError: The
            equation could not be balanced.
        SubstanceNotFound: ``known`` or ``target`` is not in the equation.
        UnknownElement: A substance has no tabulated atomic mass.
    """
    task = TaskType(task)
    reaction = balance(equation)
    balanced = render_equation(reaction)

    known_component = reaction.find(known)
    if known_component is None:
        raise SubstanceNotFound(known)
    target_component = reaction.find(target)
    if target_component is None:
        raise SubstanceNotFound(target)

    steps: List[str] = [f"1. Reaction equation: {balanced}"]

    if task is TaskType.MOLES_MASS:
        known_moles = value
        steps.append(f"2. Given amount of {known}: {value} mol")
    else:
        known_mass = molar_mass(known_component.elements)
        known_moles = value / known_mass
        steps.append(
            f"2. Amount of {known}: {value} g / {known_mass:.2f} g/mol = {known_moles:.4f} mol"
        )

    ratio = target_component.coefficient / known_component.coefficient
    target_moles = known_moles * ratio
    steps.append(
        f"3. Mole ratio {target_component.coefficient}/{known_component.coefficient}: "
        f"n({target}) = {known_moles:.4f} x {ratio:.2f} = {target_moles:.4f} mol"
    )

    is_gas = any(symbol in GAS_FORMING_ELEMENTS for symbol in target_component.elements)
    if task is TaskType.MASS_VOLUME and is_gas:
        result = target_moles * MOLAR_VOLUME_STP
        unit = "L"
        steps.append(
            f"4. Gas volume (STP): {target_moles:.4f} mol x {MOLAR_VOLUME_STP} L/mol = {result:.4f} L"
        )
    else:
        target_mass = molar_mass(target_component.elements)
        result = target_moles * target_mass
        unit = "g"
        steps.append(
            f"4. Mass of {target}: {target_moles:.4f} mol x {target_mass:.2f} g/mol = {result:.4f} g"
        )

    logger.debug("Solved %s: %s %s", task.value, result, unit)
    return StoichiometrySolution(
        value=result, unit=unit, moles=target_moles, balanced=balanced, steps=tuple(steps)
    )
