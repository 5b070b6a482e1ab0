"""
Main classifier module for Compressor KNN.
"""

import logging
from typing import Any, Optional, Sequence

import numpy as np
import xarray as xr

from .compression import DEFAULT_CODEC, DEFAULT_LEVEL, Compressor
from .distance import distance_matrix, distance_vector
from .exceptions import InvalidArgument
from .knn import DEFAULT_K, DEFAULT_TIE_BREAK, TieBreak, classify, classify_multi
from .utils import Text, get_corpus_info, validate_corpus

logger = logging.getLogger(__name__)


class CompressorKNNClassifier:
  """
  K-Nearest Neighbors text classifier using compression distance.

  This classifier implements the Normalized Compression Distance (NCD) method:
  two texts are similar when compressing them together costs little more than
  compressing the larger one alone. There is nothing to train; fitting only
  stores the labelled reference corpus.

  Based on: "Low-Resource Text Classification: A Parameter-Free Classification
  Method with Compressors".

  Parameters
  ----------
  k : int, default=2
      Number of nearest neighbors to consider for classification.
  tie_break : str, default='random'
      How to resolve a vote where several labels share the highest count:
      'random', 'decrement' or 'min_total'.
  codec : str, default='gzip'
      Compression codec: 'gzip', 'zlib', 'bz2' or 'lzma'.
  level : int, default=6
      Compression level for the codec.
  n_jobs : int, optional
      Worker threads used to build distances. Defaults to the CPU count.
  random_state : int or np.random.Generator, optional
      Seed or generator for the 'random' tie break.

  Attributes
  ----------
  training_data_ : list[str | bytes]
      Reference corpus after fitting.
  training_labels_ : list[Any]
      Reference labels after fitting.
  is_fitted_ : bool
      Whether the classifier has been fitted.
  """

  def __init__(
      self,
      k: int = DEFAULT_K,
      tie_break: str = DEFAULT_TIE_BREAK.value,
      codec: str = DEFAULT_CODEC,
      level: int = DEFAULT_LEVEL,
      n_jobs: Optional[int] = None,
      random_state=None,
  ):
    self.k = k
    self.tie_break = TieBreak.parse(tie_break)
    self.codec = codec
    self.level = level
    self.n_jobs = n_jobs
    self.random_state = random_state

    self.compressor = Compressor(codec, level)
    self._rng = np.random.default_rng(random_state)

    # Initialize state
    self.training_data_ = []
    self.training_labels_ = []
    self.is_fitted_ = False

  def fit(self, X: Sequence[Text], y: Sequence[Any]) -> 'CompressorKNNClassifier':
    """
    Fit the classifier with a labelled reference corpus.

    Parameters
    ----------
    X : sequence of str or bytes
        Reference texts
    y : sequence
        Reference labels

    Returns
    -------
    self : CompressorKNNClassifier
        Returns self for method chaining
    """
    if len(X) != len(y):
      raise InvalidArgument("X and y must have the same length")

    if len(X) == 0:
      raise InvalidArgument("Training data cannot be empty")

    if not 1 <= self.k <= len(X):
      raise InvalidArgument(f"k ({self.k}) must be between 1 and the training set size ({len(X)})")

    try:
      validate_corpus(X)
    except TypeError as e:
      raise InvalidArgument(f"Invalid training data: {e}") from e

    self.training_data_ = list(X)
    self.training_labels_ = list(y)
    self.is_fitted_ = True

    logger.debug(f"Fitted classifier with {len(X)} training samples, "
                 f"{len(set(self.training_labels_))} unique classes")

    return self

  def _check_fitted(self) -> None:
    if not self.is_fitted_:
      raise InvalidArgument("Classifier must be fitted before prediction")

  def distances(self, X: Sequence[Text]) -> xr.DataArray:
    """
    Distance matrix between the reference corpus and ``X``.

    Returns
    -------
    xr.DataArray
        Matrix with dims ("reference", "test")
    """
    self._check_fitted()
    return distance_matrix(X, self.training_data_, compressor=self.compressor, n_jobs=self.n_jobs)

  def predict_single(self, x: Text) -> Any:
    """
    Predict the class of a single text.

    Parameters
    ----------
    x : str or bytes
        Text to classify

    Returns
    -------
    Any
        Predicted class label
    """
    self._check_fitted()

    distances = distance_vector(x, self.training_data_, compressor=self.compressor, n_jobs=self.n_jobs)
    prediction = classify(distances, self.training_labels_, k=self.k,
                          tie_break=self.tie_break, rng=self._rng)

    logger.debug(f"Nearest distances: {np.sort(distances)[:self.k].tolist()}, "
                 f"predicted {prediction!r}")
    return prediction

  def predict(self, X: Sequence[Text]) -> list[Any]:
    """
    Predict classes for multiple texts.

    Parameters
    ----------
    X : sequence of str or bytes
        Texts to classify

    Returns
    -------
    list[Any]
        Predicted class labels
    """
    self._check_fitted()

    if len(X) == 0:
      return []

    matrix = self.distances(X).values
    predictions = []
    for j in range(matrix.shape[1]):
      pred = classify(matrix[:, j], self.training_labels_, k=self.k,
                      tie_break=self.tie_break, rng=self._rng)
      predictions.append(pred)
      logger.debug(f"Predicted {pred!r} for test sample {j}")

    return predictions

  def predict_multi(self, X: Sequence[Text]) -> list[list[Any]]:
    """
    Predict every label tied for the highest vote, for multiple texts.

    Parameters
    ----------
    X : sequence of str or bytes
        Texts to classify

    Returns
    -------
    list[list[Any]]
        Tied labels per text, nearest first
    """
    self._check_fitted()

    if len(X) == 0:
      return []

    matrix = self.distances(X).values
    return [classify_multi(matrix[:, j], self.training_labels_, k=self.k)
            for j in range(matrix.shape[1])]

  def corpus_info(self) -> dict:
    """Summary of the fitted reference corpus."""
    self._check_fitted()
    return get_corpus_info(self.training_data_, self.training_labels_, self.compressor)

  def get_params(self) -> dict:
    """Get classifier parameters."""
    return {
      'k': self.k,
      'tie_break': self.tie_break.value,
      'codec': self.codec,
      'level': self.level,
      'n_jobs': self.n_jobs,
      'random_state': self.random_state,
    }

  def set_params(self, **params) -> 'CompressorKNNClassifier':
    """Set classifier parameters."""
    for key in params:
      if key not in self.get_params():
        raise InvalidArgument(f"Invalid parameter: {key}")

    if 'tie_break' in params:
      params['tie_break'] = TieBreak.parse(params['tie_break'])
    if 'codec' in params or 'level' in params:
      self.compressor = Compressor(params.get('codec', self.codec), params.get('level', self.level))
    if 'random_state' in params:
      self._rng = np.random.default_rng(params['random_state'])

    for key, value in params.items():
      setattr(self, key, value)
    return self
