import math
import unittest
from valuation_trends.forecasting.assumptions import ScenarioInputs, validate_scenario
from valuation_trends.forecasting.engine import horizon_years, project_log_growth, project_scenario
from valuation_trends.series.types import YearSeries


class TestForecasting(unittest.TestCase):
    def test_validate_scenario(self):
        validate_scenario(ScenarioInputs(growth_rate=0.18))  # should not raise
        for bad in (-1.0, -1.5, 1.5):
            with self.assertRaises(ValueError):
                validate_scenario(ScenarioInputs(growth_rate=bad))

    def test_two_year_projection(self):
        out = project_log_growth(math.log(20), 0.1, 2)
        self.assertEqual(len(out), 2)
        self.assertAlmostEqual(out[0], math.log(22))
        self.assertAlmostEqual(out[1], math.log(24.2))

    def test_horizon(self):
        self.assertEqual(horizon_years(2025, 2028), [2026, 2027, 2028])
        self.assertEqual(horizon_years(2025, 2025), [])

    def test_project_scenario_from_last_observation(self):
        hist = YearSeries((2023, 2024, 2025), (math.log(5), math.log(8), None))
        s = project_scenario(hist, ScenarioInputs(growth_rate=0.25, end_year=2027))
        self.assertEqual(s.years, (2025, 2026, 2027))
        self.assertTrue(all(y > 2024 for y in s.years))
        self.assertAlmostEqual(math.exp(s.values[0]), 10.0)
        # first-order recurrence: constant step in log space
        self.assertAlmostEqual(s.values[2] - s.values[1], math.log(1.25))

    def test_horizon_guardrails(self):
        with self.assertRaises(ValueError):
            validate_scenario(ScenarioInputs(growth_rate=0.1, end_year=1_000_000_000))
        validate_scenario(ScenarioInputs(growth_rate=0.1, end_year=2075), last_year=2025)
        with self.assertRaises(ValueError):
            validate_scenario(ScenarioInputs(growth_rate=0.1, end_year=2076), last_year=2025)
        hist = YearSeries((1999,), (math.log(30),))
        with self.assertRaises(ValueError):
            project_scenario(hist, ScenarioInputs(growth_rate=0.1, end_year=2060))
        longest = project_scenario(YearSeries((2025,), (math.log(30),)), ScenarioInputs(growth_rate=1.0, end_year=2075))
        self.assertEqual(len(longest), 50)
        self.assertTrue(all(math.isfinite(v) for v in longest.values))

    def test_no_observation_gives_empty(self):
        empty = project_scenario(YearSeries((2020,), (None,)), ScenarioInputs(growth_rate=0.1))
        self.assertEqual(len(empty), 0)
        self.assertEqual(len(project_scenario(YearSeries.empty(), ScenarioInputs(growth_rate=0.1))), 0)


if __name__ == '__main__':
    unittest.main()
