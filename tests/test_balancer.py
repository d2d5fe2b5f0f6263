import unittest

import numpy as np

from chembalance.balancer import (
    BalancerSettings,
    balance,
    balance_reaction,
    build_conservation_matrix,
    check_coefficients,
    nullspace_coefficients,
    parse_equation,
    search_coefficients,
    split_equation,
    strip_coefficient,
)
from chembalance.constants import TRAINER_EQUATIONS
from chembalance.errors import MalformedEquation, UnbalanceableError
from chembalance.models import ChemicalComponent


class TestSplitEquation(unittest.TestCase):
    def test_separators(self):
        for equation in ("H2 + O2 = H2O", "H2 + O2 -> H2O", "H2 + O2 → H2O"):
            self.assertEqual(split_equation(equation), (["H2", "O2"], ["H2O"]))

    def test_existing_coefficients_are_stripped(self):
        self.assertEqual(strip_coefficient("2H2O"), "H2O")
        self.assertEqual(strip_coefficient("H2O"), "H2O")
        self.assertEqual(split_equation("2H2 + 5O2 -> 3H2O"), (["H2", "O2"], ["H2O"]))

    def test_missing_separator(self):
        with self.assertRaises(MalformedEquation):
            split_equation("H2SO4")

    def test_two_separators(self):
        with self.assertRaises(MalformedEquation):
            split_equation("A = B = C")

    def test_empty_side(self):
        with self.assertRaises(MalformedEquation):
            split_equation("H2 + O2 -> ")


class TestConservationMatrix(unittest.TestCase):
    def test_products_are_negated(self):
        reactants = [
            ChemicalComponent("H2", elements={"H": 2}),
            ChemicalComponent("O2", elements={"O": 2}),
        ]
        products = [ChemicalComponent("H2O", elements={"H": 2, "O": 1})]
        matrix = build_conservation_matrix(["H", "O"], reactants, products)
        np.testing.assert_array_equal(matrix, [[2, 0, -2], [0, 2, -1]])


class TestSolvers(unittest.TestCase):
    def test_search_returns_first_in_enumeration_order(self):
        # H2 + O2 -> H2O + H2O2 has a two-dimensional solution space.
        matrix = np.array([[2, 0, -2, -2], [0, 2, -1, -2]])
        self.assertEqual(search_coefficients(matrix), [3, 2, 2, 1])

    def test_search_order_is_kept_across_chunks(self):
        matrix = np.array([[2, 0, -2, -2], [0, 2, -1, -2]])
        self.assertEqual(search_coefficients(matrix, chunk_size=3), [3, 2, 2, 1])

    def test_search_exhausted(self):
        self.assertIsNone(search_coefficients(np.array([[2, -1]]), max_coefficient=1))

    def test_nullspace_smallest_integers(self):
        matrix = np.array([[3, 0, -1, 0], [8, 0, 0, -2], [0, 2, -2, -1]])
        self.assertEqual(nullspace_coefficients(matrix), [1, 5, 3, 4])

    def test_nullspace_rejects_mixed_signs(self):
        # One-dimensional null space spanned by (1, -1).
        self.assertIsNone(nullspace_coefficients(np.array([[1, 1]])))

    def test_nullspace_rejects_ambiguous_system(self):
        matrix = np.array([[2, 0, -2, -2], [0, 2, -1, -2]])
        self.assertIsNone(nullspace_coefficients(matrix))


class TestBalanceReaction(unittest.TestCase):
    def test_water(self):
        result = balance_reaction("H2 + O2 = H2O")
        self.assertTrue(result.ok)
        self.assertIsNone(result.error)
        self.assertEqual(result.balanced, "2H2 + O2 → 2H2O")
        reactants = [(c.formula, c.coefficient) for c in result.reaction.reactants]
        products = [(c.formula, c.coefficient) for c in result.reaction.products]
        self.assertEqual(reactants, [("H2", 2), ("O2", 1)])
        self.assertEqual(products, [("H2O", 2)])

    def test_iron_oxide(self):
        self.assertEqual(balance_reaction("Fe + O2 -> Fe2O3").balanced, "4Fe + 3O2 → 2Fe2O3")

    def test_ammonia(self):
        self.assertEqual(balance_reaction("N2 + H2 -> NH3").balanced, "N2 + 3H2 → 2NH3")

    def test_combustion(self):
        self.assertEqual(
            balance_reaction("C3H8 + O2 -> CO2 + H2O").balanced,
            "C3H8 + 5O2 → 3CO2 + 4H2O",
        )

    def test_elements_are_conserved(self):
        for equation in TRAINER_EQUATIONS:
            with self.subTest(equation=equation):
                result = balance_reaction(equation)
                self.assertTrue(result.ok)
                self.assertTrue(result.reaction.is_balanced())
                self.assertTrue(all(c > 0 for c in result.reaction.coefficients))

    def test_rebalancing_balanced_output(self):
        first = balance_reaction("CH4 + O2 -> CO2 + H2O")
        second = balance_reaction(first.balanced)
        self.assertEqual(first.reaction.coefficients, second.reaction.coefficients)
        self.assertEqual(first.balanced, second.balanced)

    def test_given_coefficients_are_ignored(self):
        self.assertEqual(balance_reaction("7H2 + 7O2 = 7H2O").balanced, "2H2 + O2 → 2H2O")

    def test_missing_separator_is_reported(self):
        result = balance_reaction("H2SO4")
        self.assertFalse(result.ok)
        self.assertIsNone(result.reaction)
        self.assertEqual(result.balanced, "")
        self.assertIn("invalid equation format", result.error)

    def test_malformed_formula_is_reported(self):
        result = balance_reaction("H2 + o2 -> H2O")
        self.assertIsNone(result.reaction)
        self.assertIn("invalid characters", result.error)

    def test_unbalanceable(self):
        result = balance_reaction("H2 -> O2")
        self.assertIsNone(result.reaction)
        self.assertIn("could not balance", result.error)

    def test_too_many_components(self):
        result = balance_reaction("KMnO4 + HCl -> KCl + MnCl2 + H2O + Cl2")
        self.assertIsNone(result.reaction)
        self.assertIn("too many components", result.error)
        with self.assertRaises(UnbalanceableError):
            balance("KMnO4 + HCl -> KCl + MnCl2 + H2O + Cl2")

    def test_nullspace_method_has_no_component_ceiling(self):
        result = balance_reaction("KMnO4 + HCl -> KCl + MnCl2 + H2O + Cl2", method="nullspace")
        self.assertTrue(result.ok)
        self.assertEqual(result.reaction.coefficients, [2, 16, 2, 2, 8, 5])
        self.assertEqual(result.balanced, "2KMnO4 + 16HCl → 2KCl + 2MnCl2 + 8H2O + 5Cl2")

    def test_five_components_are_searched(self):
        self.assertEqual(
            balance_reaction("Cu + HNO3 -> Cu(NO3)2 + NO + H2O").balanced,
            "3Cu + 8HNO3 → 3Cu(NO3)2 + 2NO + 4H2O",
        )

    def test_raised_component_ceiling_reports_failure(self):
        settings = BalancerSettings(max_coefficient=2, max_components=7)
        result = balance_reaction("KMnO4 + HCl -> KCl + MnCl2 + H2O + Cl2 + K", settings=settings)
        self.assertIsNone(result.reaction)
        self.assertIn("could not balance", result.error)

    def test_oversized_search_settings_are_rejected(self):
        with self.assertRaises(ValueError):
            BalancerSettings(max_components=7)
        with self.assertRaises(ValueError):
            BalancerSettings(max_coefficient=0)

    def test_search_bound_from_settings(self):
        result = balance_reaction("Fe + O2 -> Fe2O3", settings=BalancerSettings(max_coefficient=3))
        self.assertFalse(result.ok)

    def test_unknown_method(self):
        with self.assertRaises(ValueError):
            balance_reaction("H2 + O2 = H2O", method="guess")

    def test_to_dict(self):
        payload = balance_reaction("N2 + H2 -> NH3").to_dict()
        self.assertEqual(payload["balanced"], "N2 + 3H2 → 2NH3")
        self.assertEqual(
            payload["reaction"]["products"],
            [{"formula": "NH3", "coefficient": 2, "elements": {"N": 1, "H": 3}}],
        )
        self.assertNotIn("error", payload)


class TestParseEquation(unittest.TestCase):
    def test_components_are_unsolved(self):
        reaction = parse_equation("2Fe + O2 -> Fe2O3")
        self.assertEqual([c.formula for c in reaction.components], ["Fe", "O2", "Fe2O3"])
        self.assertEqual(reaction.coefficients, [0, 0, 0])
        self.assertEqual(reaction.products[0].elements, {"Fe": 2, "O": 3})


class TestCheckCoefficients(unittest.TestCase):
    def setUp(self):
        self.reaction = balance_reaction("H2 + O2 -> H2O").reaction

    def test_correct_and_scaled(self):
        self.assertTrue(check_coefficients(self.reaction, [2, 1, 2]))
        self.assertTrue(check_coefficients(self.reaction, [4, 2, 4]))

    def test_wrong(self):
        self.assertFalse(check_coefficients(self.reaction, [1, 1, 1]))
        self.assertFalse(check_coefficients(self.reaction, [0, 0, 0]))
        self.assertFalse(check_coefficients(self.reaction, [2, 1]))

    def test_does_not_modify_reaction(self):
        check_coefficients(self.reaction, [4, 2, 4])
        self.assertEqual(self.reaction.coefficients, [2, 1, 2])


if __name__ == '__main__':
    unittest.main()
