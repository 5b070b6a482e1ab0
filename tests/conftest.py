"""
Shared fixtures for Compressor KNN tests.
"""

import pytest


@pytest.fixture
def test_data():
  return [
    "Japan's Seiko Epson Corp. said Wednesday it has developed a 12-gram flying microrobot, the world's lightest.",
    "Michael Phelps won the gold medal in the 400 individual medley and set a  world record in a time of 4 minutes 8.26 seconds.",
    "Elliptic Curves Yield Their Secrets in a New Number System. Ana Caraiani and James Newton have extended an important result in number theory to the imaginary realm.",
  ]


@pytest.fixture
def ref_data():
  return [
    "The latest tiny flying robot that could help in search and rescue or surveillance has been unveiled in Japan.",
    "Phelps adds yet another gold: Michael Phelps collected his fifth gold medal of the Games with victory in the men's 100 metres butterfly today.",
    "South Africa is a country on the southernmost tip of the African continent, marked by several distinct ecosystems.",
    "Neutrinos offer a new view of the Milky Way. Physicists used the ghostly subatomic particles coming from within our galaxy to make a new map.",
    "Lionel Messi makes it official and signs with Inter Miami. Lionel Messi has finalized his deal to join Major League Soccer, and after years of planning and pursuing, Inter Miami has landed a global icon.",
  ]


@pytest.fixture
def classes_int():
  return [3, 1, 2, 3, 1]


@pytest.fixture
def classes_str():
  return ['science', 'sports', 'world', 'science', 'sport']


@pytest.fixture
def fixed_distances():
  return [0.6348, 0.6589, 0.6435, 0.685, 0.7143]
