#!/usr/bin/env python3
"""
Demo script for Compressor KNN Classifier.

This script builds a tiny labelled news corpus and demonstrates k-nearest
neighbour classification with gzip compression distance, comparing the
three tie break strategies.

Requirements:
- scikit-learn for the metrics (pip install "compressor-knn[examples]")
"""

import logging

from sklearn.metrics import accuracy_score, classification_report

from compressor_knn import CompressorKNNClassifier, TieBreak


TOPICS = {
    'science': [
        "Physicists used neutrinos to make a new map of the Milky Way galaxy.",
        "A tiny flying robot for search and rescue was unveiled by engineers in Japan.",
        "Astronomers detected water vapour in the atmosphere of a distant exoplanet.",
        "Researchers extended an important result in number theory to elliptic curves.",
        "A new telescope captured infrared images of galaxies from the early universe.",
    ],
    'sports': [
        "Michael Phelps collected his fifth gold medal of the Games in the butterfly.",
        "Lionel Messi signed with Inter Miami and will join Major League Soccer.",
        "The sprinter set a new world record in the 100 metres final on Sunday.",
        "The home team won the championship after a dramatic penalty shootout.",
        "The tennis champion won the final in straight sets to claim the title.",
    ],
    'world': [
        "South Africa is a country on the southernmost tip of the African continent.",
        "Leaders met in Geneva to negotiate a ceasefire between the two countries.",
        "Floods displaced thousands of people across the region after heavy rain.",
        "The parliament voted to approve the new constitution after a long debate.",
        "Diplomats from several countries signed a trade agreement in the capital.",
    ],
}

QUERIES = [
    ("Engineers in Japan developed a flying microrobot weighing twelve grams.", 'science'),
    ("Astronomers used a telescope to map distant galaxies in infrared light.", 'science'),
    ("Phelps won the gold medal and set a world record in the individual medley.", 'sports'),
    ("The team won the soccer championship final after extra time.", 'sports'),
    ("The countries signed a ceasefire agreement after talks in the capital.", 'world'),
    ("Heavy rain caused floods that displaced people across several countries.", 'world'),
]


def build_corpus() -> tuple[list[str], list[str]]:
    """Flatten the topic table into texts and labels."""
    texts, labels = [], []
    for topic, samples in TOPICS.items():
        texts.extend(samples)
        labels.extend([topic] * len(samples))
    return texts, labels


def main():
    """Run the demo."""
    logging.basicConfig(level=logging.INFO)

    print("Compressor KNN Classifier Demo")
    print("=" * 40)

    X_train, y_train = build_corpus()
    X_test = [text for text, _ in QUERIES]
    y_test = [label for _, label in QUERIES]

    print(f"Training set: {len(X_train)} samples")
    print(f"Test set: {len(X_test)} samples")
    print(f"Classes: {set(y_train)}")
    print()

    classifier = CompressorKNNClassifier(k=3, random_state=0)
    classifier.fit(X_train, y_train)

    # The distance matrix only depends on the corpus, so compute it once
    distances = classifier.distances(X_test)
    print(f"Distance matrix: {dict(distances.sizes)}")
    print()

    for tie_break in TieBreak:
        classifier.set_params(tie_break=tie_break.value)
        y_pred = classifier.predict(X_test)
        accuracy = accuracy_score(y_test, y_pred)
        print(f"{tie_break.value:>10}: accuracy {accuracy:.2%}")

    print()
    print("Detailed Results (min_total):")
    for i, (true_label, pred_label) in enumerate(zip(y_test, y_pred)):
        status = "✓" if true_label == pred_label else "✗"
        print(f"Sample {i+1}: True={true_label}, Predicted={pred_label} {status}")

    print()
    print("Untied predictions:")
    for text, labels in zip(X_test, classifier.predict_multi(X_test)):
        print(f"  {labels} <- {text[:50]}...")

    print()
    print("Classification Report:")
    print(classification_report(y_test, y_pred, zero_division=0))

    print("Classifier Parameters:")
    params = classifier.get_params()
    for key, value in params.items():
        print(f"  {key}: {value}")


if __name__ == "__main__":
    main()
