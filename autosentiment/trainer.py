"""
Training loop for the neural text trainers.

Wraps the PyTorch networks in a scikit-learn compatible estimator so the
search engine, evaluator and persistence layer handle them exactly like the
linear and tree pipelines.
"""

import copy
import time
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
import torch
import torch.nn as nn
from sklearn.base import BaseEstimator, ClassifierMixin
from sklearn.utils.validation import check_is_fitted
from torch.optim import Adam
from torch.utils.data import DataLoader

from .data_loader import SimpleTokenizer, TextDataset
from .models.base import BaseTextClassifier
from .models.cnn import CNNTextClassifier
from .models.ffn import FFNTextClassifier
from .utils import get_device, setup_logger

ARCHITECTURES = {
    'ffn': FFNTextClassifier,
    'cnn': CNNTextClassifier,
}


class EarlyStopping:
    """Early stopping utility to prevent overfitting."""

    def __init__(self, patience: int = 3, min_delta: float = 0.001, restore_best_weights: bool = True):
        """
        Args:
            patience: Number of epochs to wait after last improvement
            min_delta: Minimum change to qualify as an improvement
            restore_best_weights: Whether to restore best weights when stopping
        """
        self.patience = patience
        self.min_delta = min_delta
        self.restore_best_weights = restore_best_weights
        self.best_loss = float('inf')
        self.counter = 0
        self.best_weights: Optional[Dict[str, torch.Tensor]] = None

    def __call__(self, loss: float, model: nn.Module) -> bool:
        """Record an epoch loss; returns True when training should stop."""
        if loss < self.best_loss - self.min_delta:
            self.best_loss = loss
            self.counter = 0
            if self.restore_best_weights:
                self.best_weights = copy.deepcopy(model.state_dict())
        else:
            self.counter += 1

        return self.counter >= self.patience

    def restore(self, model: nn.Module) -> None:
        if self.restore_best_weights and self.best_weights is not None:
            model.load_state_dict(self.best_weights)


class NeuralTextClassifier(ClassifierMixin, BaseEstimator):
    """
    Embedding-based neural classifier trained on raw texts.

    ``fit`` builds the vocabulary, trains the selected architecture with Adam
    and cross-entropy, and keeps the best epoch's weights. Fitted networks are
    moved to the CPU so the estimator pickles the same way everywhere.
    """

    def __init__(
        self,
        architecture: str = 'ffn',
        embedding_dim: int = 64,
        hidden_dim: int = 64,
        num_layers: int = 1,
        activation: str = 'relu',
        num_filters: int = 32,
        filter_sizes: Any = '2,3',
        pooling: str = 'max',
        dropout: float = 0.1,
        learning_rate: float = 0.001,
        max_epochs: int = 10,
        batch_size: int = 32,
        max_length: int = 64,
        vocab_size: int = 20000,
        min_token_freq: int = 1,
        min_token_length: int = 1,
        lowercase: bool = True,
        patience: int = 3,
        min_delta: float = 0.001,
        max_grad_norm: float = 1.0,
        seed: int = 42,
        device: str = 'cpu',
    ):
        self.architecture = architecture
        self.embedding_dim = embedding_dim
        self.hidden_dim = hidden_dim
        self.num_layers = num_layers
        self.activation = activation
        self.num_filters = num_filters
        self.filter_sizes = filter_sizes
        self.pooling = pooling
        self.dropout = dropout
        self.learning_rate = learning_rate
        self.max_epochs = max_epochs
        self.batch_size = batch_size
        self.max_length = max_length
        self.vocab_size = vocab_size
        self.min_token_freq = min_token_freq
        self.min_token_length = min_token_length
        self.lowercase = lowercase
        self.patience = patience
        self.min_delta = min_delta
        self.max_grad_norm = max_grad_norm
        self.seed = seed
        self.device = device

    def _resolve_device(self) -> torch.device:
        if self.device == 'auto':
            return get_device()
        return torch.device(self.device)

    def _build_network(self, vocab_size: int, num_classes: int) -> BaseTextClassifier:
        if self.architecture not in ARCHITECTURES:
            raise ValueError(f"Unsupported architecture: {self.architecture}")
        hyperparams = {
            'embedding_dim': self.embedding_dim,
            'hidden_dim': self.hidden_dim,
            'num_layers': self.num_layers,
            'activation': self.activation,
            'num_filters': self.num_filters,
            'filter_sizes': self.filter_sizes,
            'pooling': self.pooling,
            'dropout': self.dropout,
        }
        return ARCHITECTURES[self.architecture](vocab_size, num_classes, hyperparams)

    def fit(self, X: Sequence[str], y: Sequence[Any]) -> "NeuralTextClassifier":
        logger = setup_logger(__name__)
        texts = list(X)
        self.classes_, targets = np.unique(np.asarray(y), return_inverse=True)
        if len(self.classes_) < 2:
            raise ValueError("Training data must contain at least two classes")

        torch.manual_seed(self.seed)
        device = self._resolve_device()

        tokenizer = SimpleTokenizer(
            vocab_size=self.vocab_size,
            min_freq=self.min_token_freq,
            min_token_length=self.min_token_length,
            lowercase=self.lowercase,
        )
        tokenizer.build_vocabulary(texts)

        network = self._build_network(tokenizer.get_vocab_size(), len(self.classes_)).to(device)
        self.model_info_ = network.get_model_info()
        logger.debug(f"Training {network} on {device}")
        loader = DataLoader(
            TextDataset(texts, targets.tolist(), tokenizer, self.max_length),
            batch_size=self.batch_size,
            shuffle=True,
            generator=torch.Generator().manual_seed(self.seed),
        )
        optimizer = Adam(network.parameters(), lr=self.learning_rate)
        criterion = nn.CrossEntropyLoss()
        early_stopping = EarlyStopping(patience=self.patience, min_delta=self.min_delta)

        history: List[float] = []
        start_time = time.time()
        for epoch in range(self.max_epochs):
            epoch_loss = self._train_epoch(network, loader, optimizer, criterion, device)
            history.append(epoch_loss)
            logger.debug(f"{network.model_name} epoch {epoch + 1}/{self.max_epochs} - loss {epoch_loss:.4f}")
            if early_stopping(epoch_loss, network):
                logger.debug(f"Early stopping triggered at epoch {epoch + 1}")
                break
        early_stopping.restore(network)

        self.network_ = network.to('cpu').eval()
        self.tokenizer_ = tokenizer
        self.history_ = history
        self.training_time_ = time.time() - start_time
        return self

    def _train_epoch(self, network, loader, optimizer, criterion, device) -> float:
        network.train()
        losses = []
        for batch in loader:
            input_ids = batch['input_ids'].to(device)
            attention_mask = batch['attention_mask'].to(device)
            labels = batch['labels'].to(device)

            optimizer.zero_grad()
            loss = criterion(network(input_ids, attention_mask), labels)
            loss.backward()
            torch.nn.utils.clip_grad_norm_(network.parameters(), self.max_grad_norm)
            optimizer.step()

            losses.append(loss.item())
        return float(np.mean(losses)) if losses else 0.0

    def _logits(self, X: Sequence[str]) -> torch.Tensor:
        check_is_fitted(self, 'network_')
        loader = DataLoader(
            TextDataset(list(X), None, self.tokenizer_, self.max_length),
            batch_size=self.batch_size,
            shuffle=False,
        )
        self.network_.eval()
        outputs = []
        with torch.no_grad():
            for batch in loader:
                outputs.append(self.network_(batch['input_ids'], batch['attention_mask']))
        if not outputs:
            return torch.empty((0, len(self.classes_)))
        return torch.cat(outputs, dim=0)

    def predict_proba(self, X: Sequence[str]) -> np.ndarray:
        return torch.softmax(self._logits(X), dim=-1).numpy()

    def decision_function(self, X: Sequence[str]) -> np.ndarray:
        """Raw margin of the last class over the first (binary only)."""
        logits = self._logits(X)
        if logits.shape[1] != 2:
            raise ValueError("decision_function is only defined for binary classification")
        return (logits[:, 1] - logits[:, 0]).numpy()

    def predict(self, X: Sequence[str]) -> np.ndarray:
        return self.classes_[np.argmax(self.predict_proba(X), axis=1)]
