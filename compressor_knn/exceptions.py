"""
Exception types raised by Compressor KNN.
"""


class CompressorKNNError(Exception):
  """Base class for all errors raised by this package."""


class InvalidArgument(CompressorKNNError, ValueError):
  """A precondition on the arguments of an operation was violated."""


class ComputationFailure(CompressorKNNError, RuntimeError):
  """The underlying compression call failed."""
