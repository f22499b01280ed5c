"""HTTP boundary of the scheduling engine."""
