"""Export utilities for extracted contacts."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, List, MutableMapping, Optional, Sequence, Union

import pandas as pd

from ..models import Contact, ExtractionResult

PathLike = Union[str, Path]

CONTACT_COLUMNS = (
    "source",
    "name",
    "role",
    "email",
    "phone",
    "company",
    "department",
    "confidence",
    "confidence_level",
    "source_lines",
    "strategies",
    "warnings",
)


def export_results(
    results: Sequence[ExtractionResult],
    path: PathLike,
    *,
    include_metadata: bool = True,
    sheet_name: str = "Contacts",
    exporter_kwargs: Optional[MutableMapping[str, object]] = None,
) -> Path:
    """Write extracted contacts to a CSV, TSV, Excel or JSON file."""

    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    if output_path.suffix.lower() == ".json":
        payload = [result.as_dict() for result in results]
        output_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
        return output_path

    dataframe = results_to_dataframe(results, include_metadata=include_metadata)
    _write_dataframe(dataframe, output_path, sheet_name=sheet_name, exporter_kwargs=exporter_kwargs)
    return output_path


def results_to_dataframe(
    results: Sequence[ExtractionResult],
    *,
    include_metadata: bool = True,
) -> pd.DataFrame:
    """Flatten results into a :class:`pandas.DataFrame` with one row per contact."""

    records = [
        _contact_to_row(contact, result, include_metadata=include_metadata)
        for result in results
        for contact in result.contacts
    ]
    if not records:
        return pd.DataFrame(columns=list(CONTACT_COLUMNS))
    return pd.DataFrame(records)


def _contact_to_row(
    contact: Contact,
    result: ExtractionResult,
    *,
    include_metadata: bool,
) -> MutableMapping[str, object]:
    data = contact.as_dict()
    row: MutableMapping[str, object] = {
        "source": result.source,
        "name": data["name"],
        "role": data["role"],
        "email": data["email"],
        "phone": data["phone"],
        "company": data["company"],
        "department": data["department"],
        "confidence": data["confidence"],
        "confidence_level": data["confidenceLevel"],
        "source_lines": _join_list(str(index) for index in contact.raw_source_lines),
        "strategies": _join_list(contact.strategies),
        "warnings": _join_list(contact.warnings),
    }

    if include_metadata:
        for key, value in contact.metadata.items():
            row[f"metadata.{key}"] = _join_list(value) if isinstance(value, (list, tuple)) else value

    return row


def _join_list(values: Iterable[Optional[str]]) -> str:
    cleaned: List[str] = []
    for value in values:
        if not value:
            continue
        text = str(value).strip()
        if text:
            cleaned.append(text)
    return "; ".join(cleaned)


def _write_dataframe(
    dataframe: pd.DataFrame,
    path: Path,
    *,
    sheet_name: str,
    exporter_kwargs: Optional[MutableMapping[str, object]],
) -> None:
    exporter_kwargs = dict(exporter_kwargs or {})
    suffix = path.suffix.lower()

    if suffix in {".csv", ".tsv"}:
        if suffix == ".tsv":
            exporter_kwargs.setdefault("sep", "\t")
        dataframe.to_csv(path, index=False, **exporter_kwargs)
        return

    if suffix in {".xls", ".xlsx", ".xlsm", ".xlsb"}:
        engine = exporter_kwargs.pop("engine", None) or "openpyxl"
        dataframe.to_excel(path, index=False, sheet_name=sheet_name, engine=engine, **exporter_kwargs)
        return

    raise ValueError(f"Unsupported export file extension: {suffix}")


__all__ = ["CONTACT_COLUMNS", "export_results", "results_to_dataframe"]
