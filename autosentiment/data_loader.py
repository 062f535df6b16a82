"""
Data loading and tokenization for the AutoSentiment experiment.

Reads tab-separated text/label files into ``Sample`` records and provides the
tokenizer and dataset wrappers used by the neural trainers.
"""

import csv
import re
from collections import Counter
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import pandas as pd
import torch
from nltk.tokenize import wordpunct_tokenize
from torch.utils.data import Dataset

from .exceptions import SchemaError
from .utils import setup_logger

TRUE_LITERALS = {'true', '1', '1.0', 'yes'}
FALSE_LITERALS = {'false', '0', '0.0', 'no'}


@dataclass(frozen=True)
class Sample:
    """One labeled record. ``label`` is None for samples built for inference."""
    text: str
    label: Optional[bool] = None


@dataclass(frozen=True)
class DatasetSchema:
    """Column names and positions of the text and label fields."""
    text_column: str = 'Text'
    label_column: str = 'Label'
    text_index: int = 0
    label_index: int = 1

    @property
    def column_count(self) -> int:
        return max(self.text_index, self.label_index) + 1

    def to_dict(self) -> Dict[str, Any]:
        values = asdict(self)
        values['text_type'] = 'string'
        values['label_type'] = 'bool'
        return values

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> "DatasetSchema":
        return cls(
            text_column=values['text_column'],
            label_column=values['label_column'],
            text_index=int(values['text_index']),
            label_index=int(values['label_index']),
        )

    @classmethod
    def from_config(cls, data_config: Dict[str, Any]) -> "DatasetSchema":
        return cls(
            text_column=data_config.get('text_column', 'Text'),
            label_column=data_config.get('label_column', 'Label'),
            text_index=int(data_config.get('text_index', 0)),
            label_index=int(data_config.get('label_index', 1)),
        )


def parse_label(value: Any) -> bool:
    """Parse a boolean label literal; raises ValueError for anything else."""
    if isinstance(value, bool):
        return value
    normalized = str(value).strip().lower()
    if normalized in TRUE_LITERALS:
        return True
    if normalized in FALSE_LITERALS:
        return False
    raise ValueError(f"not a boolean label: {value!r}")


def load_samples(
    path: Union[str, Path],
    has_header: bool = True,
    schema: Optional[DatasetSchema] = None,
    separator: str = '\t'
) -> List[Sample]:
    """
    Read a delimited text file into samples.

    Args:
        path: File to read
        has_header: Whether the first line is a header row
        schema: Column layout (text at 0, label at 1 by default)
        separator: Field delimiter

    Returns:
        Samples in file order

    Raises:
        FileNotFoundError: If the path does not exist
        SchemaError: If a row cannot be parsed into text and label
    """
    logger = setup_logger(__name__)
    schema = schema or DatasetSchema()
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Data file not found: {path}")

    try:
        frame = pd.read_csv(
            path,
            sep=separator,
            header=0 if has_header else None,
            dtype=str,
            keep_default_na=False,
            quoting=csv.QUOTE_NONE,
            encoding='utf-8',
        )
    except pd.errors.EmptyDataError:
        raise SchemaError("File contains no rows", path=str(path))
    except pd.errors.ParserError as e:
        raise SchemaError(f"Malformed row: {e}", path=str(path))
    except UnicodeDecodeError as e:
        raise SchemaError(f"File is not valid UTF-8: {e}", path=str(path))

    if frame.shape[1] < schema.column_count:
        raise SchemaError(
            f"Expected at least {schema.column_count} columns, found {frame.shape[1]}",
            path=str(path)
        )

    first_row = 2 if has_header else 1
    samples = []
    for offset, (text, raw_label) in enumerate(zip(
        frame.iloc[:, schema.text_index], frame.iloc[:, schema.label_index]
    )):
        if pd.isna(raw_label) or str(raw_label).strip() == '':
            raise SchemaError(
                f"Missing value for '{schema.label_column}'", path=str(path), row=first_row + offset
            )
        try:
            label = parse_label(raw_label)
        except ValueError as e:
            raise SchemaError(
                f"Invalid value for '{schema.label_column}': {e}", path=str(path), row=first_row + offset
            )
        samples.append(Sample(text='' if pd.isna(text) else text, label=label))

    logger.debug(f"Loaded {len(samples)} samples from {path}")
    return samples


def preview(samples: Sequence[Sample], num_rows: int = 4) -> List[Sample]:
    """Return the first ``num_rows`` samples."""
    return list(samples[:num_rows])


def split_texts_and_labels(samples: Sequence[Sample]):
    """Unzip samples into parallel text and label lists."""
    texts = [sample.text for sample in samples]
    labels = [sample.label for sample in samples]
    return texts, labels


class SimpleTokenizer:
    """Vocabulary-based tokenizer for the neural trainers."""

    def __init__(self, vocab_size: int = 20000, min_freq: int = 1, min_token_length: int = 1,
                 lowercase: bool = True):
        """
        Initialize simple tokenizer.

        Args:
            vocab_size: Maximum vocabulary size, including <PAD> and <UNK>
            min_freq: Minimum frequency for token inclusion
            min_token_length: Tokens shorter than this are dropped
            lowercase: Lowercase text before tokenizing
        """
        self.vocab_size = vocab_size
        self.min_freq = min_freq
        self.min_token_length = min_token_length
        self.lowercase = lowercase
        self.token_to_id = {'<PAD>': 0, '<UNK>': 1}
        self.vocab_built = False

    def tokenize(self, text: str) -> List[str]:
        text = re.sub(r'\s+', ' ', text).strip()
        if self.lowercase:
            text = text.lower()
        return [token for token in wordpunct_tokenize(text) if len(token) >= self.min_token_length]

    def build_vocabulary(self, texts: Sequence[str]) -> None:
        """Build vocabulary from training texts."""
        token_counts = Counter()
        for text in texts:
            token_counts.update(self.tokenize(text))

        vocab_tokens = [token for token, count in token_counts.most_common()
                        if count >= self.min_freq]
        # Reserve space for special tokens
        for token in vocab_tokens[:self.vocab_size - 2]:
            self.token_to_id[token] = len(self.token_to_id)

        self.vocab_built = True

    def encode(self, text: str, max_length: int) -> List[int]:
        """Encode text to a fixed-length list of token ids."""
        if not self.vocab_built:
            raise ValueError("Vocabulary not built. Call build_vocabulary first.")

        token_ids = [self.token_to_id.get(token, 1) for token in self.tokenize(text)]
        token_ids = token_ids[:max_length]
        token_ids.extend([0] * (max_length - len(token_ids)))
        return token_ids

    def get_vocab_size(self) -> int:
        return len(self.token_to_id)


class TextDataset(Dataset):
    """PyTorch dataset of encoded texts with optional labels."""

    def __init__(
        self,
        texts: Sequence[str],
        labels: Optional[Sequence[int]],
        tokenizer: SimpleTokenizer,
        max_length: int
    ):
        self.texts = list(texts)
        self.labels = list(labels) if labels is not None else None
        self.tokenizer = tokenizer
        self.max_length = max_length

    def __len__(self) -> int:
        return len(self.texts)

    def __getitem__(self, idx: int) -> Dict[str, torch.Tensor]:
        token_ids = self.tokenizer.encode(self.texts[idx], self.max_length)
        item = {
            'input_ids': torch.tensor(token_ids, dtype=torch.long),
            'attention_mask': torch.tensor([1 if t != 0 else 0 for t in token_ids], dtype=torch.long),
        }
        if self.labels is not None:
            item['labels'] = torch.tensor(self.labels[idx], dtype=torch.long)
        return item
