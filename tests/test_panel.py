import unittest
from valuation_trends.panel.tidy import (
    PanelFormatError, TidyRecord, parse_cell, resolve_year_columns, segment_blocks, tidy_panel,
)


def _block(company, mc, rev, vr):
    return [
        {"Company": company, "Metric": "Market Cap ($bn)", "2020": mc[0], "2021": mc[1]},
        {"Company": "", "Metric": "Revenue ($bn)", "2020": rev[0], "2021": rev[1]},
        {"Company": "", "Metric": "Valuation/Revenue", "2020": vr[0], "2021": vr[1]},
    ]


class TestParseCell(unittest.TestCase):
    def test_numbers_and_text(self):
        self.assertEqual(parse_cell("12.5"), 12.5)
        self.assertEqual(parse_cell('"1,234.5"'), 1234.5)
        self.assertEqual(parse_cell("'42'"), 42.0)
        self.assertEqual(parse_cell(7), 7.0)
        self.assertEqual(parse_cell("0"), 0.0)

    def test_missing_and_malformed(self):
        for cell in ("n/a", "N/A", " n/a ", "", "   ", None, "abc", "12x", float("nan"), "inf", True):
            self.assertIsNone(parse_cell(cell), cell)


class TestBlocks(unittest.TestCase):
    def test_blank_rows_do_not_consume_a_block(self):
        companies = ["", "A", "", "", "", "B", "", ""]
        blocks = segment_blocks(companies)
        self.assertEqual([(b.start, b.stop) for b in blocks], [(1, 4), (5, 8)])

    def test_trailing_short_block_is_clipped(self):
        blocks = segment_blocks(["A", "", "", "B", ""])
        self.assertEqual([(b.start, b.stop) for b in blocks], [(0, 3), (3, 5)])

    def test_year_columns(self):
        cols = resolve_year_columns(["Company", "Metric", "2020", 2021, "2022.0"], [2020, 2021, 2022, 2030])
        self.assertEqual(cols, {2020: "2020", 2021: 2021, 2022: "2022.0"})


class TestTidyPanel(unittest.TestCase):
    def test_one_record_per_company_year(self):
        rows = _block("Cisco", ("500", "600"), ("20", "30"), ("25", "20")) + \
            _block("Oracle", ("1,000", "n/a"), ("10", "x"), ("100", ""))
        recs = tidy_panel(rows, [2020, 2021])
        self.assertEqual(len(recs), 4)
        self.assertEqual([(r.company, r.year) for r in recs],
                         [("Cisco", 2020), ("Cisco", 2021), ("Oracle", 2020), ("Oracle", 2021)])
        self.assertEqual(recs[0], TidyRecord("Cisco", 2020, 500.0, 20.0, 25.0))
        self.assertEqual(recs[2].market_cap, 1000.0)
        self.assertIsNone(recs[3].market_cap)
        self.assertIsNone(recs[3].revenue)
        self.assertIsNone(recs[3].val_rev)

    def test_unknown_year_is_absent(self):
        rows = _block("Cisco", ("1", "2"), ("1", "2"), ("1", "2"))
        recs = tidy_panel(rows, [2021, 1999, 2020])
        self.assertEqual([r.year for r in recs], [2020, 2021])

    def test_truncated_block_nulls_missing_metric(self):
        rows = _block("Cisco", ("1", "2"), ("3", "4"), ("5", "6"))[:2]
        recs = tidy_panel(rows, [2020, 2021])
        self.assertEqual(len(recs), 2)
        self.assertEqual(recs[0].revenue, 3.0)
        self.assertTrue(all(r.val_rev is None for r in recs))

    def test_blank_separator_rows(self):
        blank = {"Company": "", "Metric": "", "2020": "", "2021": ""}
        rows = [blank] + _block("A", ("1", "1"), ("1", "1"), ("2", "3")) + [blank, blank] + \
            _block("B", ("1", "1"), ("1", "1"), ("4", "5"))
        recs = tidy_panel(rows, [2020, 2021])
        self.assertEqual([r.company for r in recs], ["A", "A", "B", "B"])
        self.assertEqual([r.val_rev for r in recs], [2.0, 3.0, 4.0, 5.0])

    def test_metric_rows_picked_by_label_not_position(self):
        rows = [
            {"Company": "Yahoo", "Metric": "Revenue ($bn)", "2020": "2"},
            {"Company": "", "Metric": "valuation/revenue", "2020": "50"},
            {"Company": "", "Metric": "MARKET CAP ($BN)", "2020": "100"},
        ]
        recs = tidy_panel(rows, [2020])
        self.assertEqual(recs, [TidyRecord("Yahoo", 2020, 100.0, 2.0, 50.0)])

    def test_positional_metrics_without_metric_column(self):
        rows = [
            {"Company": "A", "2020": "10"},
            {"Company": "", "2020": "2"},
            {"Company": "", "2020": "5"},
        ]
        recs = tidy_panel(rows, [2020])
        self.assertEqual(recs, [TidyRecord("A", 2020, 10.0, 2.0, 5.0)])

    def test_empty_and_headerless(self):
        self.assertEqual(tidy_panel([], [2020]), [])
        with self.assertRaises(PanelFormatError):
            tidy_panel([{"Name": "A", "2020": "1"}], [2020])


if __name__ == "__main__":
    unittest.main()
