"""
DataSource: the "I have data" abstraction.

DataSource holds named columns and doesn't know what model consumes
them. The walkthrough builds y, X and the grouping indicator Z from a
DataSource, so the dataset is always an explicit input rather than a
package-level global.

Usage:
    from pymixgam import DataSource

    ds = DataSource.from_arrays(Reaction=y, Days=days, Subject=subject)
    ds = DataSource.from_file("sleepstudy.csv")
    ds = DataSource.from_dataframe(df)

    ds.keys()  # frozenset({'Reaction', 'Days', 'Subject'})
    y = ds['Reaction']
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TYPE_CHECKING
import numpy as np
from numpy.typing import NDArray

from pymixgam.core.exceptions import ValidationError, DimensionError

if TYPE_CHECKING:
    import pandas as pd


@dataclass(frozen=True)
class DataSource:
    """
    Column container. Domain-agnostic.

    Construct via factory classmethods, not directly. Numeric columns are
    stored as float64; non-numeric columns (e.g. string group labels) are
    kept with their original dtype.
    """
    _data: dict[str, Any]
    _metadata: dict[str, Any] = field(default_factory=dict)

    # === Array Access ===

    def keys(self) -> frozenset[str]:
        """Return the names of all available columns."""
        return frozenset(self._data.keys())

    def __getitem__(self, key: str) -> Any:
        """
        Access a named column.

        Raises:
            KeyError: If key not found, listing the available keys

        Example:
            >>> ds = DataSource.from_arrays(Reaction=y, Days=days)
            >>> ds['Subject']  # KeyError: "DataSource has no column 'Subject'. ..."
        """
        if key not in self._data:
            available = sorted(self.keys())
            raise KeyError(
                f"DataSource has no column '{key}'. Available: {available}"
            )
        return self._data[key]

    def __contains__(self, key: str) -> bool:
        return key in self._data

    # === Properties ===

    @property
    def n_observations(self) -> int:
        """Number of statistical units (rows)."""
        return self._metadata.get('n_observations', 0)

    @property
    def metadata(self) -> dict[str, Any]:
        return self._metadata.copy()

    # === Factory Methods ===

    @classmethod
    def from_arrays(cls, **named_arrays: Any) -> DataSource:
        """Construct from named 1-D arrays of equal length."""
        storage: dict[str, Any] = {}
        n_obs: int | None = None

        for name, arr in named_arrays.items():
            col = _as_column(arr)
            if col.ndim != 1:
                raise DimensionError(
                    f"{name}: expected 1D column, got shape {col.shape}"
                )
            if n_obs is None:
                n_obs = col.shape[0]
            elif col.shape[0] != n_obs:
                raise DimensionError(
                    f"{name}: has {col.shape[0]} rows, expected {n_obs}"
                )
            storage[name] = col

        return cls(
            _data=storage,
            _metadata={'n_observations': n_obs or 0, 'source': 'arrays'},
        )

    @classmethod
    def from_file(cls, path: str | Path, *, columns: list[str] | None = None) -> DataSource:
        """Construct from a CSV/TSV file (read with pandas)."""
        path = Path(path)
        suffix = path.suffix.lower()

        if suffix == '.csv':
            import pandas as pd
            df = pd.read_csv(path, usecols=columns)
        elif suffix == '.tsv':
            import pandas as pd
            df = pd.read_csv(path, sep='\t', usecols=columns)
        else:
            raise ValidationError(f"Unknown file format: {suffix}")
        return cls.from_dataframe(df, source_path=str(path))

    @classmethod
    def from_dataframe(cls, df: 'pd.DataFrame', *, source_path: str | None = None) -> DataSource:
        """Construct from pandas DataFrame."""
        storage: dict[str, Any] = {}

        for col in df.columns:
            storage[str(col)] = _as_column(df[col].to_numpy())

        metadata = {
            'n_observations': len(df),
            'source': 'dataframe',
            'columns': [str(c) for c in df.columns],
        }
        if source_path:
            metadata['source_path'] = source_path

        return cls(_data=storage, _metadata=metadata)


def _as_column(arr: Any) -> NDArray:
    col = np.asarray(arr)
    if np.issubdtype(col.dtype, np.number) or col.dtype == np.bool_:
        return col.astype(np.float64)
    return col
