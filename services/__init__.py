"""Analytics services over the sales ledger."""
