"""
Convolutional text classifier.

Parallel 1D convolutions with different kernel sizes capture local n-gram
patterns; each is pooled over the sequence and concatenated.
"""

from typing import Any, Dict, List, Optional

import torch
import torch.nn as nn
import torch.nn.functional as F

from .base import BaseTextClassifier


def parse_filter_sizes(value: Any) -> List[int]:
    """Accept ``[2, 3]`` or the string form ``"2,3"`` used for categorical search choices."""
    if isinstance(value, str):
        return [int(part.strip()) for part in value.split(',') if part.strip()]
    return [int(v) for v in value]


class CNNTextClassifier(BaseTextClassifier):
    """
    CNN for text classification.

    Architecture:
    - Embedding layer
    - Convolutional layers with different filter sizes
    - Max or average pooling
    - Dropout and classification head
    """

    def __init__(self, vocab_size: int, num_classes: int, hyperparams: Dict[str, Any]):
        super().__init__(vocab_size, num_classes, hyperparams)

        self.embedding_dim = int(hyperparams.get('embedding_dim', 64))
        self.num_filters = int(hyperparams.get('num_filters', 32))
        self.filter_sizes = parse_filter_sizes(hyperparams.get('filter_sizes', [2, 3]))
        self.dropout = float(hyperparams.get('dropout', 0.1))
        self.pooling = hyperparams.get('pooling', 'max')

        self.build_model()

    def build_model(self) -> None:
        self.embedding = nn.Embedding(
            num_embeddings=self.vocab_size,
            embedding_dim=self.embedding_dim,
            padding_idx=0
        )

        self.convolutions = nn.ModuleList([
            nn.Conv1d(in_channels=self.embedding_dim, out_channels=self.num_filters, kernel_size=size)
            for size in self.filter_sizes
        ])

        self.dropout_layer = nn.Dropout(self.dropout)
        self.classifier = nn.Linear(self.num_filters * len(self.filter_sizes), self.num_classes)

        self._init_weights()

    def _init_weights(self) -> None:
        nn.init.normal_(self.embedding.weight, mean=0.0, std=0.1)
        with torch.no_grad():
            self.embedding.weight[self.embedding.padding_idx].fill_(0)

        for conv in self.convolutions:
            nn.init.xavier_uniform_(conv.weight)
            nn.init.constant_(conv.bias, 0)

        nn.init.xavier_uniform_(self.classifier.weight)
        nn.init.constant_(self.classifier.bias, 0)

    def forward(self, x: torch.Tensor, attention_mask: Optional[torch.Tensor] = None) -> torch.Tensor:
        embedded = self.embedding(x)

        if attention_mask is not None:
            embedded = embedded * attention_mask.unsqueeze(-1).float()

        # Conv1d expects (batch_size, embedding_dim, seq_len)
        embedded = embedded.transpose(1, 2)

        pooled_outputs = []
        for conv in self.convolutions:
            conv_out = F.relu(conv(embedded))
            if self.pooling == 'avg':
                pooled = F.avg_pool1d(conv_out, kernel_size=conv_out.size(2))
            else:
                pooled = F.max_pool1d(conv_out, kernel_size=conv_out.size(2))
            pooled_outputs.append(pooled.squeeze(2))

        features = self.dropout_layer(torch.cat(pooled_outputs, dim=1))
        return self.classifier(features)

    def get_model_info(self) -> Dict[str, Any]:
        base_info = super().get_model_info()
        base_info['architecture'] = 'Convolutional Neural Network'
        return base_info
