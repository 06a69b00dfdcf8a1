"""mathextract -- find, parse and evaluate arithmetic expressions in text."""

__version__ = "0.1.0"

from mathextract.expressions import FunctionId, lookup_function, supported_functions
from mathextract.extract import ExtractionRecord, extract_and_evaluate

__all__ = [
    "ExtractionRecord",
    "FunctionId",
    "__version__",
    "extract_and_evaluate",
    "lookup_function",
    "supported_functions",
]
