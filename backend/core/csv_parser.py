"""
CSV Ingestion

Reads uploaded CSV bytes into a Dataset with Polars. Every column is read
as text so cells stay loosely typed; type inference resolves them later.
"""

import hashlib
import io
from datetime import datetime
from uuid import uuid4

import chardet
import polars as pl

from config import get_settings
from core.dataset import Dataset
from core.logging_config import upload_logger as logger


class CSVParseError(ValueError):
    """Raised when uploaded bytes cannot be read as CSV."""


class CSVParser:
    """CSV to Dataset reader."""

    def __init__(self):
        self.settings = get_settings()

    def detect_encoding_from_bytes(self, data: bytes) -> str:
        """Detect encoding from the first 100KB of the payload."""
        sample = data[:102400]
        result = chardet.detect(sample)
        encoding = result.get("encoding") or "utf-8"
        # ascii is a subset of utf-8 and fails on any later non-ascii byte
        return "utf-8" if encoding.lower() == "ascii" else encoding

    def decode(self, data: bytes) -> str:
        encoding = self.detect_encoding_from_bytes(data)
        try:
            return data.decode(encoding)
        except (UnicodeDecodeError, LookupError):
            # Fallback to latin-1 which accepts any byte
            return data.decode("latin-1")

    def parse_bytes(self, data: bytes, filename: str = "upload.csv") -> Dataset:
        """
        Parse CSV bytes into a dataset.

        Raises:
            CSVParseError: if the payload is empty or not valid CSV
        """
        text = self.decode(data)
        if not text.strip():
            raise CSVParseError(f"{filename} is empty")

        try:
            df = pl.read_csv(
                io.StringIO(text),
                infer_schema_length=0,
                truncate_ragged_lines=True,
            )
        except pl.exceptions.PolarsError as e:
            raise CSVParseError(f"Could not parse {filename}: {e}") from e

        dataset = Dataset.from_polars(df)
        logger.info(f"Parsed {filename}: {dataset.row_count} rows x {dataset.column_count} columns")
        return dataset

    def generate_session_id(self, filename: str) -> str:
        """
        Generate unique session ID from filename, timestamp and a random nonce.

        Args:
            filename: Original filename

        Returns:
            Unique session ID
        """
        timestamp = datetime.now().isoformat()
        content = f"{filename}_{timestamp}_{uuid4().hex}"
        return hashlib.sha256(content.encode()).hexdigest()[:16]


# Global parser instance
csv_parser = CSVParser()
