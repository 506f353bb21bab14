"""Discovery agent."""
