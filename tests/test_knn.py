"""
Tests for k-nearest-neighbour voting and tie breaking.
"""

from collections import Counter

import numpy as np
import pytest

from compressor_knn import (
  InvalidArgument,
  TieBreak,
  classify,
  classify_multi,
  classify_text,
  classify_text_multi,
  distance_vector,
)
from compressor_knn.knn import decrement_tie_break, min_total_tie_break, nearest_neighbours
from compressor_knn.utils import most_common_labels


class TestNearestNeighbours:

  def test_sorted_ascending(self, fixed_distances):
    assert nearest_neighbours(fixed_distances, 5).tolist() == [0, 2, 1, 3, 4]

  def test_stable_for_equal_distances(self):
    assert nearest_neighbours([0.5, 0.1, 0.5, 0.1], 4).tolist() == [1, 3, 0, 2]

  @pytest.mark.parametrize('k', [0, 6, -1])
  def test_invalid_k(self, fixed_distances, k):
    with pytest.raises(InvalidArgument, match="must be between 1 and the number of labels"):
      nearest_neighbours(fixed_distances, k)


class TestMostCommonLabels:

  def test_single_winner(self):
    assert most_common_labels([1, 2, 2, 3]) == [2]

  def test_first_appearance_order(self):
    assert most_common_labels([3, 2, 1, 3, 1]) == [3, 1]

  def test_empty(self):
    assert most_common_labels([]) == []


class TestTopOne:
  """k=1 always returns the label of the nearest sample."""

  def test_fixed_distances(self, fixed_distances, classes_int, classes_str):
    assert classify(fixed_distances, classes_int, k=1) == 3
    assert classify(fixed_distances, classes_str, k=1) == 'science'

  def test_from_text(self, test_data, ref_data, classes_int, classes_str):
    distances = distance_vector(test_data[0], ref_data)
    nearest = int(np.argmin(distances))
    assert classify_text(test_data[0], ref_data, classes_int, k=1) == classes_int[nearest]
    assert classify_text(test_data[0], ref_data, classes_str, k=1) == classes_str[nearest]
    assert classify(distances, classes_int, k=1) == classes_int[nearest]

  @pytest.mark.parametrize('tie_break', list(TieBreak))
  def test_never_tied(self, fixed_distances, classes_int, tie_break):
    assert classify(fixed_distances, classes_int, k=1, tie_break=tie_break) == 3


class TestRandomTieBreak:

  def test_distribution(self, fixed_distances, classes_int):
    ntrials = 1000
    rng = np.random.default_rng(2023)
    labels = [classify(fixed_distances, classes_int, k=2, rng=rng) for _ in range(ntrials)]
    frequencies = Counter(labels)
    assert set(frequencies) == {2, 3}
    assert 0.45 <= frequencies[2] / ntrials <= 0.55
    assert 0.45 <= frequencies[3] / ntrials <= 0.55

  def test_seeded_is_reproducible(self, fixed_distances, classes_int):
    first = [classify(fixed_distances, classes_int, k=2, rng=seed) for seed in range(20)]
    second = [classify(fixed_distances, classes_int, k=2, rng=seed) for seed in range(20)]
    assert first == second

  def test_preserves_label_type(self, fixed_distances, classes_str):
    label = classify(fixed_distances, classes_str, k=3, tie_break='random', rng=0)
    assert label in {'science', 'world', 'sports'}
    assert type(label) is str


class TestDecrementTieBreak:

  def test_fixture(self, fixed_distances, classes_int, classes_str):
    assert classify(fixed_distances, classes_int, k=5, tie_break='decrement') == 3
    assert classify(fixed_distances, classes_str, k=5, tie_break='decrement') == 'science'

  def test_idempotent(self, fixed_distances, classes_int):
    label = classify(fixed_distances, classes_int, k=5, tie_break=TieBreak.DECREMENT)
    sorted_labels = [classes_int[i] for i in nearest_neighbours(fixed_distances, 5)]
    # Window where the tie was settled
    assert decrement_tie_break(sorted_labels[:4]) == label
    assert decrement_tie_break(sorted_labels) == label

  def test_reaches_single_neighbour(self):
    assert decrement_tie_break(['a', 'b', 'c', 'd']) == 'a'


class TestMinTotalTieBreak:

  def test_fixture(self, fixed_distances, classes_int, classes_str):
    assert classify(fixed_distances, classes_int, k=5, tie_break='min_total') == 3
    assert classify(fixed_distances, classes_str, k=5, tie_break='min_total') == 'science'

  def test_hand_computed_totals(self):
    # Label 3 only appears once, so it is not a candidate
    labels = [3, 1, 2, 2, 1]
    distances = [0.1, 0.4, 0.5, 0.6, 0.65]
    assert min_total_tie_break(labels, distances, [1, 2]) == 1  # 1.05 < 1.1

  def test_exact_tie_picks_first_aggregated(self):
    distances = [0.1, 0.4, 0.2, 0.3, 0.1]
    labels = [1, 1, 2, 2, 3]
    results = {classify(distances, labels, k=5, tie_break='min_total') for _ in range(10)}
    assert results == {1}


class TestDecrementVersusTotal:

  def test_only_tied_labels_count(self):
    distances = [0.4, 0.65, 0.5, 0.6, 0.1]
    labels = [1, 1, 2, 2, 3]
    assert classify(distances, labels, k=5, tie_break='decrement') == 2
    # Label 3 has the smallest distance but is not among the most common
    assert classify(distances, labels, k=5, tie_break='min_total') == 1

  def test_tied_totals(self):
    distances = [0.1, 0.4, 0.2, 0.3, 0.1]
    labels = [1, 1, 2, 2, 3]
    assert classify(distances, labels, k=5, tie_break='decrement') == 2


class TestClassifyProperties:

  @pytest.mark.parametrize('tie_break', list(TieBreak))
  def test_result_is_most_common(self, tie_break):
    rng = np.random.default_rng(7)
    for _ in range(50):
      n = int(rng.integers(1, 12))
      distances = rng.random(n).round(2)
      labels = rng.integers(0, 3, n).tolist()
      k = int(rng.integers(1, n + 1))
      label = classify(distances, labels, k=k, tie_break=tie_break, rng=rng)
      assert label in classify_multi(distances, labels, k=k)

  def test_multi_is_max_frequency_set(self):
    rng = np.random.default_rng(11)
    for _ in range(50):
      n = int(rng.integers(1, 12))
      distances = rng.random(n)
      labels = rng.integers(0, 4, n).tolist()
      k = int(rng.integers(1, n + 1))
      top = Counter(labels[i] for i in np.argsort(distances, kind='stable')[:k])
      best = max(top.values())
      result = classify_multi(distances, labels, k=k)
      assert len(result) >= 1
      assert set(result) == {label for label, count in top.items() if count == best}


class TestMultiLabel:

  def test_k2_tie(self, fixed_distances, classes_int):
    labels = classify_multi(fixed_distances, classes_int, k=2)
    assert sorted(labels) == [2, 3]
    assert labels == [3, 2]

  def test_single_winner(self, fixed_distances, classes_int):
    assert classify_multi(fixed_distances, classes_int, k=4) == [3]

  def test_from_text(self, test_data, ref_data, classes_int):
    distances = distance_vector(test_data[0], ref_data)
    expected = classify_multi(distances, classes_int, k=2)
    assert classify_text_multi(test_data[0], ref_data, classes_int, k=2, n_jobs=1) == expected


class TestValidation:

  def test_unknown_tie_break(self, fixed_distances, classes_int):
    with pytest.raises(InvalidArgument, match="Tie break strategy \"closest\" is not known"):
      classify(fixed_distances, classes_int, k=2, tie_break='closest')

  def test_parse(self):
    assert TieBreak.parse('min_total') is TieBreak.MIN_TOTAL
    assert TieBreak.parse(TieBreak.RANDOM) is TieBreak.RANDOM

  def test_length_mismatch(self, fixed_distances, classes_int):
    with pytest.raises(InvalidArgument, match="5 distances but 4 labels"):
      classify(fixed_distances, classes_int[:4], k=1)
    with pytest.raises(InvalidArgument):
      classify_multi(fixed_distances[:3], classes_int, k=1)

  @pytest.mark.parametrize('k', [0, 6])
  def test_k_out_of_range(self, fixed_distances, classes_int, k):
    with pytest.raises(InvalidArgument, match=r"k \(\d\) must be between 1"):
      classify(fixed_distances, classes_int, k=k)
    with pytest.raises(InvalidArgument):
      classify_multi(fixed_distances, classes_int, k=k)

  def test_text_reference_mismatch(self, test_data, ref_data, classes_int):
    with pytest.raises(InvalidArgument, match="5 samples but 4 labels"):
      classify_text(test_data[0], ref_data, classes_int[:4])
    with pytest.raises(InvalidArgument, match="5 samples but 4 labels"):
      classify_text_multi(test_data[0], ref_data, classes_int[:4])
