"""
Feed-forward network over averaged word embeddings.
"""

from typing import Any, Dict, Optional

import torch
import torch.nn as nn

from .base import BaseTextClassifier


class FFNTextClassifier(BaseTextClassifier):
    """
    Feed-Forward Network for text classification.

    Architecture:
    - Embedding layer
    - Masked mean pooling over the sequence
    - Fully connected layers with dropout
    - Classification head
    """

    def __init__(self, vocab_size: int, num_classes: int, hyperparams: Dict[str, Any]):
        super().__init__(vocab_size, num_classes, hyperparams)

        self.embedding_dim = int(hyperparams.get('embedding_dim', 64))
        self.hidden_dim = int(hyperparams.get('hidden_dim', 64))
        self.num_layers = int(hyperparams.get('num_layers', 1))
        self.dropout = float(hyperparams.get('dropout', 0.1))
        self.activation = hyperparams.get('activation', 'relu')

        self.build_model()

    def build_model(self) -> None:
        self.embedding = nn.Embedding(
            num_embeddings=self.vocab_size,
            embedding_dim=self.embedding_dim,
            padding_idx=0
        )

        if self.activation == 'gelu':
            self.activation_fn = nn.GELU()
        elif self.activation == 'tanh':
            self.activation_fn = nn.Tanh()
        else:
            self.activation_fn = nn.ReLU()

        self.hidden_layers = nn.ModuleList([nn.Linear(self.embedding_dim, self.hidden_dim)])
        for _ in range(self.num_layers - 1):
            self.hidden_layers.append(nn.Linear(self.hidden_dim, self.hidden_dim))

        self.dropout_layer = nn.Dropout(self.dropout)
        self.classifier = nn.Linear(self.hidden_dim, self.num_classes)

        self._init_weights()

    def _init_weights(self) -> None:
        nn.init.normal_(self.embedding.weight, mean=0.0, std=0.1)
        with torch.no_grad():
            self.embedding.weight[self.embedding.padding_idx].fill_(0)

        for layer in self.hidden_layers:
            nn.init.xavier_uniform_(layer.weight)
            nn.init.constant_(layer.bias, 0)

        nn.init.xavier_uniform_(self.classifier.weight)
        nn.init.constant_(self.classifier.bias, 0)

    def forward(self, x: torch.Tensor, attention_mask: Optional[torch.Tensor] = None) -> torch.Tensor:
        embedded = self.embedding(x)  # (batch_size, seq_len, embedding_dim)

        if attention_mask is not None:
            mask_expanded = attention_mask.unsqueeze(-1).expand_as(embedded).float()
            # Empty texts have no real tokens; avoid dividing by zero.
            pooled = (embedded * mask_expanded).sum(dim=1) / mask_expanded.sum(dim=1).clamp(min=1.0)
        else:
            pooled = embedded.mean(dim=1)

        hidden = pooled
        for layer in self.hidden_layers:
            hidden = self.dropout_layer(self.activation_fn(layer(hidden)))

        return self.classifier(hidden)

    def get_model_info(self) -> Dict[str, Any]:
        base_info = super().get_model_info()
        base_info['architecture'] = 'Feed-Forward Network'
        return base_info
