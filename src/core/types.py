"""Type aliases shared across layers."""

# Identifier types for the two persisted entities
type UserId = int
type GoalId = int
