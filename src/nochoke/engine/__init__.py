"""Analytics engine components."""
