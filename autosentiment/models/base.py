"""
Abstract base class for the neural text classifiers.

Every network searched by the AutoML engine implements this interface so the
training loop in ``autosentiment.trainer`` can treat them uniformly.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import torch
import torch.nn as nn


class BaseTextClassifier(nn.Module, ABC):
    """
    Abstract base class for text classification networks.
    """

    def __init__(
        self,
        vocab_size: int,
        num_classes: int,
        hyperparams: Dict[str, Any]
    ):
        """
        Args:
            vocab_size: Size of the vocabulary
            num_classes: Number of output classes
            hyperparams: Hyperparameters sampled for the trial
        """
        super().__init__()
        self.vocab_size = vocab_size
        self.num_classes = num_classes
        self.hyperparams = hyperparams
        self.model_name = self.__class__.__name__

    @abstractmethod
    def build_model(self) -> None:
        """Define all layers of the network."""

    @abstractmethod
    def forward(self, x: torch.Tensor, attention_mask: Optional[torch.Tensor] = None) -> torch.Tensor:
        """
        Args:
            x: Token ids (batch_size, sequence_length)
            attention_mask: 1 for real tokens, 0 for padding

        Returns:
            Logits (batch_size, num_classes)
        """

    def predict(self, x: torch.Tensor, attention_mask: Optional[torch.Tensor] = None) -> torch.Tensor:
        """Class probabilities for a batch."""
        self.eval()
        with torch.no_grad():
            logits = self.forward(x, attention_mask)
            probabilities = torch.softmax(logits, dim=-1)
        return probabilities

    def get_num_parameters(self) -> int:
        return sum(p.numel() for p in self.parameters() if p.requires_grad)

    def get_model_info(self) -> Dict[str, Any]:
        return {
            'model_name': self.model_name,
            'num_parameters': self.get_num_parameters(),
            'vocab_size': self.vocab_size,
            'num_classes': self.num_classes,
            'hyperparams': self.hyperparams,
        }

    def __str__(self) -> str:
        return f"{self.model_name}(vocab_size={self.vocab_size}, num_classes={self.num_classes}, params={self.get_num_parameters():,})"
