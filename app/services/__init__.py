"""Board building and interaction services."""
