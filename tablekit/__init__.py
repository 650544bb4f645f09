"""tablekit — generic tabular data engine."""
