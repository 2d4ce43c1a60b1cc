"""Statement segmenter: bounded, transaction-safe chunking of bank documents."""

__version__ = "0.1.0"
