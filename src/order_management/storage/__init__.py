"""Storage adapters for the ordering repositories."""
