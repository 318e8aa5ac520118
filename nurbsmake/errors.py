"""
Error taxonomy for primitive construction.

Two kinds of failure are distinguished:
- InvalidArgumentError: the geometric input is malformed or degenerate
  (too few points, non-positive radius, parallel tangents, ...)
- NumericDegeneracyError: an intermediate value became non-finite, e.g.
  a normalization divided by a zero norm

Both derive from NURBSError so callers can catch everything raised by
this package with a single except clause.
"""


class NURBSError(Exception):
    """Base class for all errors raised by nurbsmake."""


class InvalidArgumentError(NURBSError, ValueError):
    """Malformed or geometrically degenerate input."""


class NumericDegeneracyError(NURBSError, ArithmeticError):
    """A computation produced a non-finite value it cannot recover from."""
