"""
k-nearest-neighbour voting over compression distances.

Reference: "Less is More: Parameter-Free Text Classification with Gzip"
(https://arxiv.org/abs/2212.09410).
"""

import enum
import logging
from typing import Any, Optional, Sequence, Union

import numpy as np

from .distance import CompressorFn, distance_vector
from .exceptions import InvalidArgument
from .utils import Text, most_common_labels

logger = logging.getLogger(__name__)

DEFAULT_K = 2


class TieBreak(str, enum.Enum):
  """Strategy used when several labels share the highest neighbour count."""

  RANDOM = 'random'
  DECREMENT = 'decrement'
  MIN_TOTAL = 'min_total'

  @classmethod
  def parse(cls, value: Union['TieBreak', str]) -> 'TieBreak':
    try:
      return cls(value)
    except ValueError:
      choices = ', '.join(member.value for member in cls)
      raise InvalidArgument(f"Tie break strategy \"{value}\" is not known. "
                            f"Please choose: {choices}.") from None


DEFAULT_TIE_BREAK = TieBreak.RANDOM


def _check_k(k: int, n_labels: int) -> None:
  if not 1 <= k <= n_labels:
    raise InvalidArgument(f"k ({k}) must be between 1 and the number of labels ({n_labels})")


def nearest_neighbours(distances: Sequence[float], k: int) -> np.ndarray:
  """
  Indices of the ``k`` smallest distances, nearest first.

  Equal distances keep their original index order.
  """
  distances = np.asarray(distances, dtype=np.float64)
  _check_k(k, len(distances))
  return np.argsort(distances, kind='stable')[:k]


def _top_labels(distances, labels, k):
  if len(distances) != len(labels):
    raise InvalidArgument(f"Got {len(distances)} distances but {len(labels)} labels")
  _check_k(k, len(labels))
  indices = nearest_neighbours(distances, k)
  return indices, [labels[i] for i in indices]


def decrement_tie_break(sorted_labels: Sequence[Any]) -> Any:
  """
  Shrink the neighbour window one at a time until a single label wins.

  ``sorted_labels`` must already be ordered nearest first; the window is
  re-sliced, never re-sorted. A window of one always has a winner.
  """
  window = len(sorted_labels)
  most_common = most_common_labels(sorted_labels)
  while len(most_common) > 1:
    window -= 1
    most_common = most_common_labels(sorted_labels[:window])
  logger.debug(f"Decrement tie break settled at k={window}")
  return most_common[0]


def min_total_tie_break(
    sorted_labels: Sequence[Any],
    sorted_distances: Sequence[float],
    candidates: Sequence[Any],
) -> Any:
  """
  Pick the candidate label whose neighbours have the lowest summed distance.

  Only neighbours carrying a candidate label contribute. Labels with exactly
  equal totals are not separated further: the one aggregated first wins.
  """
  totals = {}
  for label, distance in zip(sorted_labels, sorted_distances):
    if label in candidates:
      totals[label] = totals.get(label, 0.0) + float(distance)
  logger.debug(f"Min total tie break totals: {totals}")
  return min(totals, key=totals.get)


def classify(
    distances: Sequence[float],
    labels: Sequence[Any],
    k: int = DEFAULT_K,
    tie_break: Union[TieBreak, str] = DEFAULT_TIE_BREAK,
    rng: Optional[Union[int, np.random.Generator]] = None,
) -> Any:
  """
  The most common label among the k nearest neighbours.

  Parameters
  ----------
  distances : sequence of float
      Distance to every reference sample
  labels : sequence
      Labels aligned with ``distances``
  k : int, default=2
      Number of neighbours that vote
  tie_break : TieBreak or str, default='random'
      'random' picks uniformly among the tied labels, 'decrement' shrinks k
      until the tie is broken, 'min_total' picks the tied label with the lowest
      total distance.
  rng : int or np.random.Generator, optional
      Randomness source for the 'random' strategy.

  Returns
  -------
  Any
      Predicted label
  """
  tie_break = TieBreak.parse(tie_break)
  indices, top_labels = _top_labels(distances, labels, k)
  most_common = most_common_labels(top_labels)

  if len(most_common) == 1:
    return most_common[0]

  logger.debug(f"Tie between labels {most_common} at k={k}, using {tie_break.value}")

  if tie_break is TieBreak.RANDOM:
    rng = np.random.default_rng(rng)
    return most_common[rng.integers(len(most_common))]
  elif tie_break is TieBreak.DECREMENT:
    return decrement_tie_break(top_labels)
  else:
    top_distances = [distances[i] for i in indices]
    return min_total_tie_break(top_labels, top_distances, most_common)


def classify_multi(
    distances: Sequence[float],
    labels: Sequence[Any],
    k: int = DEFAULT_K,
) -> list[Any]:
  """
  All labels sharing the highest count among the k nearest neighbours.

  Ties are not broken, matching the evaluation in the reference paper. Labels
  are listed in order of first appearance among the neighbours.
  """
  _, top_labels = _top_labels(distances, labels, k)
  return most_common_labels(top_labels)


def classify_text(
    text: Text,
    reference: Sequence[Text],
    labels: Sequence[Any],
    k: int = DEFAULT_K,
    tie_break: Union[TieBreak, str] = DEFAULT_TIE_BREAK,
    rng: Optional[Union[int, np.random.Generator]] = None,
    compressor: Optional[CompressorFn] = None,
    n_jobs: Optional[int] = None,
) -> Any:
  """Classify raw text against a labelled reference corpus."""
  if len(reference) != len(labels):
    raise InvalidArgument(f"Reference corpus has {len(reference)} samples but {len(labels)} labels")
  # Fail on bad options before doing any compression
  tie_break = TieBreak.parse(tie_break)
  _check_k(k, len(labels))
  distances = distance_vector(text, reference, compressor=compressor, n_jobs=n_jobs)
  return classify(distances, labels, k=k, tie_break=tie_break, rng=rng)


def classify_text_multi(
    text: Text,
    reference: Sequence[Text],
    labels: Sequence[Any],
    k: int = DEFAULT_K,
    compressor: Optional[CompressorFn] = None,
    n_jobs: Optional[int] = None,
) -> list[Any]:
  """Multi-label classification of raw text against a labelled reference corpus."""
  if len(reference) != len(labels):
    raise InvalidArgument(f"Reference corpus has {len(reference)} samples but {len(labels)} labels")
  _check_k(k, len(labels))
  distances = distance_vector(text, reference, compressor=compressor, n_jobs=n_jobs)
  return classify_multi(distances, labels, k=k)
