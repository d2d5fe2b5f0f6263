"""Data structures for formulas, components and reactions."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Union

ElementCountMap = Dict[str, int]
OxidationMap = Dict[str, Union[int, float]]


@dataclass
class ChemicalComponent:
    """One formula in an equation together with its coefficient."""

    formula: str
    coefficient: int = 0
    elements: ElementCountMap = field(default_factory=dict)

    def atoms(self, symbol: str) -> int:
        """Atoms of ``symbol`` contributed at the current coefficient."""
        return self.coefficient * self.elements.get(symbol, 0)


@dataclass
class Reaction:
    reactants: List[ChemicalComponent]
    products: List[ChemicalComponent]

    @property
    def components(self) -> List[ChemicalComponent]:
        return [*self.reactants, *self.products]

    @property
    def coefficients(self) -> List[int]:
        return [component.coefficient for component in self.components]

    def element_symbols(self) -> List[str]:
        """Element symbols in first-seen order, reactants first."""
        symbols: Dict[str, None] = {}
        for component in self.components:
            for symbol in component.elements:
                symbols.setdefault(symbol, None)
        return list(symbols)

    def is_balanced(self) -> bool:
        if any(coefficient <= 0 for coefficient in self.coefficients):
            return False
        for symbol in self.element_symbols():
            left = sum(component.atoms(symbol) for component in self.reactants)
            right = sum(component.atoms(symbol) for component in self.products)
            if left != right:
                return False
        return True

    def find(self, formula: str) -> Optional[ChemicalComponent]:
        for component in self.components:
            if component.formula == formula:
                return component
        return None


@dataclass(frozen=True)
class BalanceResult:
    """Outcome of a balancing call.

    Exactly one of ``reaction`` and ``error`` is set. ``balanced`` is the
    rendered equation, or an empty string on failure.
    """

    balanced: str
    reaction: Optional[Reaction] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.reaction is not None

    def to_dict(self) -> dict:
        payload: dict = {"balanced": self.balanced}
        if self.error is not None:
            payload["error"] = self.error
        if self.reaction is not None:
            payload["reaction"] = {
                "reactants": [_component_dict(c) for c in self.reaction.reactants],
                "products": [_component_dict(c) for c in self.reaction.products],
            }
        return payload


@dataclass(frozen=True)
class StoichiometrySolution:
    value: float
    unit: str
    moles: float
    balanced: str
    steps: Sequence[str] = ()


def _component_dict(component: ChemicalComponent) -> dict:
    return {
        "formula": component.formula,
        "coefficient": component.coefficient,
        "elements": dict(component.elements),
    }
