"""Money Manager: collection tracker with a per-day portfolio valuation ledger."""
