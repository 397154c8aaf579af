from __future__ import annotations

import random
from typing import Optional


class RandomClassifier:
    """Stand-in image classifier.

    Guesses whether an image shows a cat. The verdict is an unconditioned coin
    flip; neither the image nor the threshold is inspected."""
    def __init__(self, seed: Optional[int] = None):
        self._rng = random.Random(seed)

    def classify(self, image, confidence_threshold: float) -> bool:
        return self._rng.random() < 0.5


class StaticClassifier:
    """Classifier that always returns the same verdict."""
    def __init__(self, verdict: bool):
        self.verdict = bool(verdict)

    def classify(self, image, confidence_threshold: float) -> bool:
        return self.verdict
