"""
Deterministic lossless compressors used to measure text similarity.
"""

import bz2
import gzip
import logging
import lzma
import zlib

from .exceptions import ComputationFailure, InvalidArgument
from .utils import Text, as_bytes

logger = logging.getLogger(__name__)

DEFAULT_CODEC = 'gzip'
DEFAULT_LEVEL = 6

# Valid compression levels per codec
_LEVELS = {
  'gzip': range(0, 10),
  'zlib': range(-1, 10),
  'bz2': range(1, 10),
  'lzma': range(0, 10),
}


class Compressor:
  """
  Wraps a standard library codec and reports compressed sizes.

  Instances hold no mutable state and can be shared between threads.

  Parameters
  ----------
  codec : str, default='gzip'
      One of 'gzip', 'zlib', 'bz2' or 'lzma'.
  level : int, default=6
      Compression level passed to the codec (the zlib default).
  """

  def __init__(self, codec: str = DEFAULT_CODEC, level: int = DEFAULT_LEVEL):
    if codec not in _LEVELS:
      raise InvalidArgument(f"Codec \"{codec}\" is not supported. "
                            f"Please choose: {', '.join(_LEVELS)}.")
    if level not in _LEVELS[codec]:
      raise InvalidArgument(f"Invalid level {level} for codec \"{codec}\"")
    self.codec = codec
    self.level = level

  def __repr__(self):
    return f"Compressor(codec={self.codec!r}, level={self.level})"

  def __eq__(self, other):
    if not isinstance(other, Compressor):
      return NotImplemented
    return (self.codec, self.level) == (other.codec, other.level)

  def __hash__(self):
    return hash((self.codec, self.level))

  def _compress(self, data: bytes) -> bytes:
    if self.codec == 'gzip':
      # Pinned mtime keeps the header, and so the length, reproducible
      return gzip.compress(data, compresslevel=self.level, mtime=0)
    elif self.codec == 'zlib':
      return zlib.compress(data, self.level)
    elif self.codec == 'bz2':
      return bz2.compress(data, compresslevel=self.level)
    else:
      return lzma.compress(data, preset=self.level)

  def compress(self, text: Text) -> bytes:
    """Compress a text sample."""
    data = as_bytes(text)
    try:
      return self._compress(data)
    except Exception as e:
      raise ComputationFailure(
        f"{self.codec} compression of {len(data)} bytes failed: {e}") from e

  def compressed_length(self, text: Text) -> int:
    """Byte length of the compressed form of a text sample."""
    return len(self.compress(text))

  def __call__(self, text: Text) -> int:
    return self.compressed_length(text)
