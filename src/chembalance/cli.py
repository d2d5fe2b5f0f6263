"""Command-line entrypoints for chembalance."""

from __future__ import annotations

import json
import logging
from typing import Annotated, Any, Dict, List, NoReturn

import typer

from chembalance.balancer import balance_reaction, check_coefficients, parse_equation
from chembalance.constants import TRAINER_EQUATIONS
from chembalance.errors import ChemistryError
from chembalance.formula import mass_breakdown, parse_formula
from chembalance.kinetics import concentration_profile
from chembalance.oxidation import get_oxidation_states
from chembalance.stoichiometry import TaskType, solve_problem

app = typer.Typer(add_completion=False)


def _fail(message: str) -> NoReturn:
    typer.secho(f"Error: {message}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


def _emit(payload: Dict[str, Any]) -> None:
    typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
) -> None:
    """Chemical formula parsing, equation balancing and related helpers."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(name)s %(levelname)s %(message)s",
        )


@app.command()
def balance(
    equation: Annotated[str, typer.Argument(help="Equation, e.g. 'H2 + O2 -> H2O'.")],
    method: Annotated[str, typer.Option(help="Solver: 'search' or 'nullspace'.")] = "search",
    oxidation: Annotated[bool, typer.Option(help="Also estimate oxidation states.")] = False,
    as_json: Annotated[bool, typer.Option("--json", help="Print the full result as JSON.")] = False,
) -> None:
    """Balance a chemical equation."""
    try:
        result = balance_reaction(equation, method=method)
    except ValueError as exc:
        _fail(str(exc))
    if not result.ok:
        _fail(result.error)

    states = {}
    if oxidation:
        states = {c.formula: get_oxidation_states(c.formula) for c in result.reaction.components}

    if as_json:
        payload = result.to_dict()
        if oxidation:
            payload["oxidation_states"] = states
        _emit(payload)
        return

    typer.echo(result.balanced)
    for formula, mapping in states.items():
        rendered = ", ".join(f"{symbol} {value:+g}" for symbol, value in mapping.items())
        typer.echo(f"  {formula}: {rendered or 'undetermined'}")


@app.command()
def parse(formula: Annotated[str, typer.Argument(help="Chemical formula.")]) -> None:
    """Print the element counts of a formula as JSON."""
    try:
        _emit(parse_formula(formula))
    except ChemistryError as exc:
        _fail(str(exc))


@app.command()
def mass(formula: Annotated[str, typer.Argument(help="Chemical formula.")]) -> None:
    """Calculate the molar mass of a formula."""
    try:
        rows = mass_breakdown(parse_formula(formula))
    except ChemistryError as exc:
        _fail(str(exc))

    for symbol, count, atomic_mass, _ in rows:
        typer.echo(f"{count} x {symbol} ({atomic_mass:.2f})")
    typer.echo(f"{sum(row[3] for row in rows):.2f} g/mol")


@app.command()
def oxidation(formula: Annotated[str, typer.Argument(help="Chemical formula.")]) -> None:
    """Estimate oxidation states of a neutral compound."""
    _emit(get_oxidation_states(formula))


@app.command()
def kinetics(
    order: Annotated[int, typer.Option(help="Reaction order (0, 1 or 2).")] = 1,
    c0: Annotated[float, typer.Option(help="Initial concentration (mol/L).")] = 1.0,
    rate_constant: Annotated[float, typer.Option("--k", "-k", help="Rate constant.")] = 0.1,
    points: Annotated[int, typer.Option(help="Number of output points.")] = 21,
) -> None:
    """Print the reactant concentration over time."""
    try:
        times, values = concentration_profile(order, c0, rate_constant, points)
    except ValueError as exc:
        _fail(str(exc))
    _emit({"time": times.tolist(), "concentration": values.tolist()})


@app.command()
def solve(
    equation: Annotated[str, typer.Argument(help="Reaction equation.")],
    known: Annotated[str, typer.Argument(help="Formula of the given substance.")],
    value: Annotated[float, typer.Argument(help="Given amount (g, or mol for moles-mass).")],
    target: Annotated[str, typer.Argument(help="Formula of the substance to find.")],
    task: Annotated[TaskType, typer.Option(help="Problem type.")] = TaskType.MASS_MASS,
) -> None:
    """Solve a stoichiometry problem step by step."""
    try:
        solution = solve_problem(equation, known, value, target, task)
    except ChemistryError as exc:
        _fail(str(exc))

    for step in solution.steps:
        typer.echo(step)
    typer.echo(f"{solution.value:.2f} {solution.unit}")


@app.command()
def check(
    equation: Annotated[str, typer.Argument(help="Unbalanced equation.")],
    coefficients: Annotated[List[int], typer.Argument(help="Coefficients, reactants first.")],
) -> None:
    """Check whether the given coefficients balance an equation."""
    try:
        reaction = parse_equation(equation)
    except ChemistryError as exc:
        _fail(str(exc))

    if check_coefficients(reaction, coefficients):
        typer.secho("Correct", fg=typer.colors.GREEN)
        return

    expected = balance_reaction(equation)
    hint = f", expected {expected.balanced}" if expected.ok else ""
    typer.secho(f"Incorrect{hint}", fg=typer.colors.YELLOW)
    raise typer.Exit(code=2)


@app.command()
def practice(
    answers: Annotated[bool, typer.Option(help="Show the balanced equations.")] = False,
) -> None:
    """List the practice equations."""
    for equation in TRAINER_EQUATIONS:
        if answers:
            typer.echo(f"{equation}  =>  {balance_reaction(equation).balanced}")
        else:
            typer.echo(equation)
