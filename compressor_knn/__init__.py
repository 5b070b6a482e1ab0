"""
Compressor KNN - parameter-free text classification with compressors.

This library implements the compression-based classification method from
"Low-Resource Text Classification: A Parameter-Free Classification Method with Compressors":
texts are compared with the normalised compression distance (NCD) and labelled
by a k-nearest-neighbour vote.
"""

from .classifier import CompressorKNNClassifier
from .compression import Compressor
from .distance import distance_matrix, distance_vector, ncd
from .exceptions import ComputationFailure, CompressorKNNError, InvalidArgument
from .knn import TieBreak, classify, classify_multi, classify_text, classify_text_multi

__version__ = "0.1.0"

__all__ = [
  "CompressorKNNClassifier",
  "Compressor",
  "ComputationFailure",
  "CompressorKNNError",
  "InvalidArgument",
  "TieBreak",
  "classify",
  "classify_multi",
  "classify_text",
  "classify_text_multi",
  "distance_matrix",
  "distance_vector",
  "ncd",
]
