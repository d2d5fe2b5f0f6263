"""Exception hierarchy for chembalance."""

from __future__ import annotations


class ChemistryError(Exception):
    """Base class for every error raised by chembalance."""


class MalformedFormula(ChemistryError, ValueError):
    def __init__(self, formula: str, reason: str = "invalid characters in formula") -> None:
        self.formula = formula
        self.reason = reason
        super().__init__(f"{reason}: {formula!r}")


class MalformedEquation(ChemistryError, ValueError):
    def __init__(self, equation: str, reason: str = "invalid equation format") -> None:
        self.equation = equation
        self.reason = reason
        super().__init__(f"{reason}: {equation!r}")


class UnbalanceableError(ChemistryError):
    """No positive integer coefficients were found for an equation."""

    def __init__(self, equation: str, reason: str = "could not balance") -> None:
        self.equation = equation
        self.reason = reason
        super().__init__(f"{reason}: {equation!r}")


class UnknownElement(ChemistryError, KeyError):
    def __init__(self, symbol: str) -> None:
        self.symbol = symbol
        super().__init__(symbol)

    def __str__(self) -> str:
        return f"unknown element: {self.symbol}"


class SubstanceNotFound(ChemistryError, LookupError):
    def __init__(self, formula: str) -> None:
        self.formula = formula
        super().__init__(f"substance not found in equation: {formula!r}")
