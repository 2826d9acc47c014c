"""
CSV decoding of CMAP responses into pandas DataFrames.
"""

import io
from typing import List

import pandas as pd

from .errors import MalformedResponse


class TableDecoder:
    """Parses delimited response bodies and normalizes time columns."""

    # Column names the server uses for timestamps
    TIME_COLUMNS = {
        'time', 'date', 'dt1', 'dt2', 'time_min', 'time_max',
        'start_time', 'end_time'
    }

    def __init__(self):
        self.datetime_columns: List[str] = []

    def parse(self, csv_data: str) -> pd.DataFrame:
        """
        Parse CSV data into a DataFrame.

        Args:
            csv_data: Raw CSV string, header row first

        Returns:
            Parsed pandas DataFrame; empty when the body has no content

        Raises:
            MalformedResponse: If the body is not valid delimited text
        """
        self.datetime_columns = []
        if not csv_data or not csv_data.strip():
            return pd.DataFrame()

        try:
            df = pd.read_csv(io.StringIO(csv_data))
        except pd.errors.EmptyDataError:
            return pd.DataFrame()
        except pd.errors.ParserError as e:
            raise MalformedResponse(f"CSV parsing error: {str(e)}") from e

        self._convert_time_columns(df)
        return df

    def _convert_time_columns(self, df: pd.DataFrame) -> None:
        for col in df.columns:
            if str(col).lower() not in self.TIME_COLUMNS:
                continue
            non_null = df[col].dropna()
            # Numeric time columns are month or day indices, not timestamps
            if len(non_null) == 0 or pd.api.types.is_numeric_dtype(non_null):
                continue
            if self._is_datetime_like(non_null):
                df[col] = pd.to_datetime(df[col], errors='coerce')
                self.datetime_columns.append(col)

    @staticmethod
    def _is_datetime_like(series: pd.Series) -> bool:
        """Check if series contains datetime-like values."""
        try:
            sample = series.iloc[:min(10, len(series))]
            pd.to_datetime(sample, errors='raise')
            return True
        except (ValueError, TypeError):
            return False
