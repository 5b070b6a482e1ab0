"""
Normalised compression distance and batch distance construction.
"""

import logging
import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Optional, Sequence

import numpy as np
import xarray as xr

from .compression import Compressor
from .exceptions import ComputationFailure, InvalidArgument
from .utils import Text, as_bytes, validate_corpus

logger = logging.getLogger(__name__)

# Joined between the two texts when compressing them together
SEPARATOR = b' '

CompressorFn = Callable[[bytes], int]
ProgressFn = Callable[[str, int, int], None]

_default_compressor = Compressor()


def _compressed_length(compressor: CompressorFn, data: bytes) -> int:
  try:
    return compressor(data)
  except ComputationFailure:
    raise
  except Exception as e:
    raise ComputationFailure(f"Compression of {len(data)} bytes failed: {e}") from e


def _ncd_from_bytes(
    data1: bytes,
    length1: int,
    data2: bytes,
    length2: int,
    compressor: CompressorFn,
) -> float:
  length12 = _compressed_length(compressor, data1 + SEPARATOR + data2)

  max_length = max(length1, length2)
  if max_length == 0:
    logger.warning("Both texts compressed to 0 bytes")
    return 0.0

  return (length12 - min(length1, length2)) / max_length


def ncd(
    text1: Text,
    text2: Text,
    *,
    length1: Optional[int] = None,
    length2: Optional[int] = None,
    compressor: Optional[CompressorFn] = None,
) -> float:
  """
  Calculate the Normalised Compression Distance (NCD) between two texts.

  NCD(x1,x2) = (C(x1 x2) - min(C(x1), C(x2))) / max(C(x1), C(x2))

  where ``x1 x2`` is the two texts joined by a single space.

  Parameters
  ----------
  text1, text2 : str or bytes
      Texts to compare
  length1, length2 : int, optional
      Precomputed compressed lengths. When given, the corresponding text is
      not compressed on its own. The joint length is always recomputed.
  compressor : callable, optional
      Function mapping bytes to a compressed length. Defaults to gzip.

  Returns
  -------
  float
      Normalised compression distance (0 = identical, higher = more different)
  """
  compressor = compressor or _default_compressor
  data1 = as_bytes(text1)
  data2 = as_bytes(text2)

  if length1 is None:
    length1 = _compressed_length(compressor, data1)
  if length2 is None:
    length2 = _compressed_length(compressor, data2)

  return _ncd_from_bytes(data1, length1, data2, length2, compressor)


def _resolve_jobs(n_jobs: Optional[int]) -> int:
  if n_jobs is None:
    return os.cpu_count() or 1
  if n_jobs < 1:
    raise InvalidArgument(f"n_jobs must be at least 1, got {n_jobs}")
  return n_jobs


def _fan_out(
    task: Callable[[int], None],
    total: int,
    n_jobs: int,
    stage: str,
    progress: Optional[ProgressFn],
) -> None:
  """Run ``task(i)`` for every index, each task writing only its own output slot."""
  if n_jobs == 1 or total <= 1:
    for i in range(total):
      task(i)
      if progress is not None:
        progress(stage, i + 1, total)
    return

  with ThreadPoolExecutor(max_workers=min(n_jobs, total)) as executor:
    futures = [executor.submit(task, i) for i in range(total)]
    try:
      for completed, future in enumerate(as_completed(futures), 1):
        future.result()
        if progress is not None:
          progress(stage, completed, total)
    except Exception as e:
      logger.error(f"Aborting {stage} stage: {e}")
      for future in futures:
        future.cancel()
      raise


def distance_vector(
    text: Text,
    reference: Sequence[Text],
    *,
    compressor: Optional[CompressorFn] = None,
    n_jobs: Optional[int] = None,
    progress: Optional[ProgressFn] = None,
) -> np.ndarray:
  """
  Calculate the NCD between one text and every sample of a reference corpus.

  Parameters
  ----------
  text : str or bytes
      Text to compare
  reference : sequence of str or bytes
      Reference corpus
  compressor : callable, optional
      Function mapping bytes to a compressed length. Defaults to gzip.
  n_jobs : int, optional
      Number of worker threads. Defaults to the CPU count; 1 runs serially.
  progress : callable, optional
      Called as ``progress("vector", completed, total)`` after each comparison.

  Returns
  -------
  np.ndarray
      Distances aligned by index with ``reference``
  """
  compressor = compressor or _default_compressor
  n_jobs = _resolve_jobs(n_jobs)
  validate_corpus(reference)

  data = as_bytes(text)
  ref_data = [as_bytes(t) for t in reference]
  length = _compressed_length(compressor, data)

  distances = np.empty(len(ref_data), dtype=np.float64)

  def compare(i):
    ref_length = _compressed_length(compressor, ref_data[i])
    distances[i] = _ncd_from_bytes(data, length, ref_data[i], ref_length, compressor)

  _fan_out(compare, len(ref_data), n_jobs, 'vector', progress)

  logger.debug(f"Computed distance vector over {len(ref_data)} reference samples")
  return distances


def distance_matrix(
    test_data: Sequence[Text],
    reference: Sequence[Text],
    *,
    compressor: Optional[CompressorFn] = None,
    n_jobs: Optional[int] = None,
    progress: Optional[ProgressFn] = None,
) -> xr.DataArray:
  """
  Calculate the NCD between every test sample and every reference sample.

  Compressed lengths of the reference samples are computed once up front and
  reused for every test sample, so each sample is compressed on its own only
  once. Only the joint compressions scale with ``len(test_data) * len(reference)``.

  Parameters
  ----------
  test_data : sequence of str or bytes
      Samples to classify
  reference : sequence of str or bytes
      Reference corpus
  compressor : callable, optional
      Function mapping bytes to a compressed length. Defaults to gzip.
  n_jobs : int, optional
      Number of worker threads. Defaults to the CPU count; 1 runs serially.
  progress : callable, optional
      Called as ``progress(stage, completed, total)`` with stage "reference"
      while reference lengths are computed and "test" as columns complete.

  Returns
  -------
  xr.DataArray
      Matrix with dims ("reference", "test"). Column ``j`` is the distance
      vector of ``test_data[j]``.
  """
  compressor = compressor or _default_compressor
  n_jobs = _resolve_jobs(n_jobs)
  validate_corpus(test_data)
  validate_corpus(reference)

  ref_data = [as_bytes(t) for t in reference]
  test_bytes = [as_bytes(t) for t in test_data]
  nref, ntest = len(ref_data), len(test_bytes)

  lengths_ref = np.empty(nref, dtype=np.int64)

  def measure_reference(i):
    lengths_ref[i] = _compressed_length(compressor, ref_data[i])

  _fan_out(measure_reference, nref, n_jobs, 'reference', progress)
  logger.debug(f"Cached compressed lengths of {nref} reference samples")

  distances = np.empty((nref, ntest), dtype=np.float64)

  def fill_column(j):
    data = test_bytes[j]
    length = _compressed_length(compressor, data)
    for i in range(nref):
      distances[i, j] = _ncd_from_bytes(
        data, length, ref_data[i], int(lengths_ref[i]), compressor)

  _fan_out(fill_column, ntest, n_jobs, 'test', progress)
  logger.debug(f"Computed {nref}x{ntest} distance matrix")

  return xr.DataArray(
    distances,
    dims=('reference', 'test'),
    coords={'reference': np.arange(nref), 'test': np.arange(ntest)},
    name='ncd',
  )
