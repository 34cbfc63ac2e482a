"""Utilities for loading call sheet text from disk."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterable, List, MutableMapping, Optional, Union

import pandas as pd

from .models import SourceDocument

LOGGER = logging.getLogger(__name__)

PathLike = Union[str, Path]

TEXT_SUFFIXES = {".txt", ".text", ".md"}
SHEET_SUFFIXES = {".csv", ".tsv"}
# Binary formats must be decoded to text before they reach the engine.
BINARY_SUFFIXES = {".pdf", ".doc", ".docx", ".xls", ".xlsx", ".xlsm", ".xlsb", ".png", ".jpg", ".jpeg"}


class UnsupportedFileTypeError(ValueError):
    """Raised when an unsupported file format is passed to the loader."""


def load_document(
    path: PathLike,
    *,
    encoding: str = "utf-8",
    loader_kwargs: Optional[MutableMapping[str, Any]] = None,
) -> SourceDocument:
    """Load one document as plain text.

    Parameters
    ----------
    path:
        Path to a ``.txt``/``.text``/``.md`` file, or a ``.csv``/``.tsv``
        sheet which is rendered as tab-delimited text.
    encoding:
        Text encoding of plain text files. Undecodable bytes are replaced.
    loader_kwargs:
        Extra keyword arguments forwarded to :func:`pandas.read_csv`.
    """

    path_obj = Path(path)
    suffix = path_obj.suffix.lower()

    if suffix in TEXT_SUFFIXES:
        text = path_obj.read_text(encoding=encoding, errors="replace")
        return SourceDocument(text=text, path=path_obj, kind="text")

    if suffix in SHEET_SUFFIXES:
        dataframe = _read_dataframe(path_obj, loader_kwargs=loader_kwargs)
        return SourceDocument(
            text=dataframe_to_text(dataframe),
            path=path_obj,
            kind="sheet",
            metadata={"rows": int(len(dataframe.index)), "columns": [str(column) for column in dataframe.columns]},
        )

    if suffix in BINARY_SUFFIXES:
        raise UnsupportedFileTypeError(
            f"'{path_obj.name}' is a {suffix} file; extract its text before running the extractor"
        )
    raise UnsupportedFileTypeError(f"Unsupported file extension: {path_obj.suffix}")


def load_documents(paths: Iterable[PathLike], **kwargs: Any) -> List[SourceDocument]:
    documents = []
    for path in paths:
        LOGGER.debug("Loading %s", path)
        documents.append(load_document(path, **kwargs))
    return documents


def _read_dataframe(path: Path, *, loader_kwargs: Optional[MutableMapping[str, Any]] = None) -> pd.DataFrame:
    loader_kwargs = dict(loader_kwargs or {})
    if path.suffix.lower() == ".tsv":
        loader_kwargs.setdefault("sep", "\t")
    loader_kwargs.setdefault("dtype", str)
    loader_kwargs.setdefault("keep_default_na", False)
    return pd.read_csv(path, **loader_kwargs)


def dataframe_to_text(dataframe: pd.DataFrame) -> str:
    """Render a sheet as a tab-delimited table with its header row."""

    lines = ["\t".join(_clean_cell(column) for column in dataframe.columns)]
    for _, row in dataframe.iterrows():
        cells = [_clean_cell(value) for value in row.values]
        if not any(cells):
            continue
        lines.append("\t".join(cells))
    return "\n".join(lines)


def _clean_cell(value: Any) -> str:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return ""
    text = str(value).replace("\t", " ").replace("\n", " ").strip()
    if text.lower().startswith("unnamed:"):
        return ""
    return text


__all__ = ["UnsupportedFileTypeError", "dataframe_to_text", "load_document", "load_documents"]
