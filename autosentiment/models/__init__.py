"""
Neural text classification networks searched by the AutoML engine.

- BaseTextClassifier: Abstract base class
- FFNTextClassifier: Feed-forward network over mean-pooled embeddings
- CNNTextClassifier: Convolutional network with parallel filter sizes
"""

from .base import BaseTextClassifier
from .ffn import FFNTextClassifier
from .cnn import CNNTextClassifier

__all__ = [
    "BaseTextClassifier",
    "FFNTextClassifier",
    "CNNTextClassifier",
]
