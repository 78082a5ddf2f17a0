"""Display contract: log P/S back to multiples, table rows and change stats."""
