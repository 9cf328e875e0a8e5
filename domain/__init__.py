"""Domain entities for the sales ledger."""
