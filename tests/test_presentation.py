import math
import unittest
from valuation_trends.presentation.adapter import (
    cohort_change, format_multiple, indices_in_range, table_rows, to_multiple,
)
from valuation_trends.series.types import AlignedDataset


class TestPresentation(unittest.TestCase):
    def setUp(self):
        self.ds = AlignedDataset(
            years=(1999, 2000, 2020, 2021),
            series={
                "dotcom": (math.log(20), math.log(30), None, None),
                "ai": (None, None, math.log(4), math.log(9)),
            },
        )

    def test_multiples(self):
        self.assertIsNone(to_multiple(None))
        self.assertAlmostEqual(to_multiple(math.log(12.5)), 12.5)
        self.assertEqual(format_multiple(math.log(12.34)), "12.3×")
        self.assertEqual(format_multiple(None), "–")

    def test_range_and_table(self):
        self.assertEqual(indices_in_range(self.ds.years, 2000, 2020), [(2000, 1), (2020, 2)])
        rows = table_rows(self.ds, (2000, 2021))
        self.assertEqual([r["year"] for r in rows], [2000, 2020, 2021])
        self.assertEqual(rows[0], {"year": 2000, "dotcom": "30.0×", "ai": "–"})

    def test_cohort_change(self):
        st = cohort_change(self.ds, "ai", (2020, 2021))
        self.assertAlmostEqual(st.start_multiple, 4.0)
        self.assertAlmostEqual(st.end_multiple, 9.0)
        self.assertAlmostEqual(st.change, 5.0)
        self.assertAlmostEqual(st.cagr_pct, 125.0)

    def test_cohort_change_gaps(self):
        self.assertIsNone(cohort_change(self.ds, "dotcom", (1999, 2021)))
        self.assertIsNone(cohort_change(self.ds, "ai", (2030, 2031)))
        self.assertIsNone(cohort_change(self.ds, "missing", (1999, 2021)))


if __name__ == "__main__":
    unittest.main()
