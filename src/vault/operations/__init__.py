"""Tokenization operations built on the shared BaseTokenOperation pipeline."""

from vault.operations.base import BaseTokenOperation
from vault.operations.batch import (
    MAX_BATCH_DETOKENIZE_SIZE,
    MAX_BATCH_TOKENIZE_SIZE,
    BatchDetokenizeOperation,
    BatchTokenizeOperation,
)
from vault.operations.single import SingleDetokenizeOperation, SingleTokenizeOperation

__all__ = [
    "BaseTokenOperation",
    "SingleTokenizeOperation",
    "SingleDetokenizeOperation",
    "BatchTokenizeOperation",
    "BatchDetokenizeOperation",
    "MAX_BATCH_TOKENIZE_SIZE",
    "MAX_BATCH_DETOKENIZE_SIZE",
]
