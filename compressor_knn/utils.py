"""
Utility functions for Compressor KNN.
"""

import logging
from collections import Counter
from typing import Any, Callable, Optional, Sequence, Union

from .exceptions import InvalidArgument

logger = logging.getLogger(__name__)

Text = Union[str, bytes, bytearray, memoryview]


def as_bytes(text: Text) -> bytes:
  """
  Convert a text sample to the bytes that get compressed.

  Parameters
  ----------
  text : str or bytes-like
      Text sample. Strings are encoded as UTF-8.

  Returns
  -------
  bytes
      Byte representation of the sample
  """
  if isinstance(text, str):
    return text.encode('utf-8')
  if isinstance(text, (bytes, bytearray, memoryview)):
    return bytes(text)
  raise TypeError(f"Text samples must be str or bytes, got {type(text).__name__}")


def validate_corpus(texts: Sequence[Text], labels: Optional[Sequence[Any]] = None) -> None:
  """
  Check that a corpus holds only text samples and, if given, one label per sample.

  Parameters
  ----------
  texts : sequence of str or bytes
      Corpus to check
  labels : sequence, optional
      Labels aligned by index with ``texts``

  Raises
  ------
  TypeError
      If a sample is not text
  InvalidArgument
      If ``labels`` does not have one entry per sample
  """
  for i, text in enumerate(texts):
    if not isinstance(text, (str, bytes, bytearray, memoryview)):
      raise TypeError(f"Sample {i} must be str or bytes, got {type(text).__name__}")

  if labels is not None and len(labels) != len(texts):
    raise InvalidArgument(f"Corpus has {len(texts)} samples but {len(labels)} labels")


def most_common_labels(labels: Sequence[Any]) -> list[Any]:
  """Labels reaching the maximum frequency, in order of first appearance."""
  counts = Counter(labels)
  if not counts:
    return []
  max_freq = max(counts.values())
  return [label for label, count in counts.items() if count == max_freq]


def get_corpus_info(
    texts: Sequence[Text],
    labels: Sequence[Any],
    compressor: Callable[[Text], int],
) -> dict[str, Any]:
  """
  Get summary information about a labelled corpus.

  Parameters
  ----------
  texts : sequence of str or bytes
      Corpus samples
  labels : sequence
      Labels aligned with ``texts``
  compressor : callable
      Function returning the compressed length of a sample

  Returns
  -------
  dict
      Dictionary with corpus information
  """
  validate_corpus(texts, labels)

  raw_bytes = sum(len(as_bytes(t)) for t in texts)
  compressed_bytes = sum(compressor(t) for t in texts)

  info = {
    'samples': len(texts),
    'classes': dict(Counter(labels)),
    'raw_bytes': raw_bytes,
    'compressed_bytes': compressed_bytes,
    'compression_ratio': compressed_bytes / raw_bytes if raw_bytes else 0.0,
  }

  logger.debug(f"Corpus info: {info['samples']} samples, "
               f"{len(info['classes'])} classes, {raw_bytes} raw bytes")

  return info
