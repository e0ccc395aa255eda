"""Property-based tests for jsontimeline.

Property-based testing validates invariants that must hold for ALL inputs,
not just the specific examples we think of: flattening is deterministic,
coercion never loses a value's kind, and the sink session never sends the
same timeline attribute twice.
"""
