"""Loading call sheet text from disk and exporting extracted contacts."""

from .exporters import export_results, results_to_dataframe  # noqa: F401
from .loaders import UnsupportedFileTypeError, load_document, load_documents  # noqa: F401
from .models import SourceDocument  # noqa: F401

__all__ = [
    "SourceDocument",
    "UnsupportedFileTypeError",
    "export_results",
    "load_document",
    "load_documents",
    "results_to_dataframe",
]
