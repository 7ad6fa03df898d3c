"""
Custom exceptions for pdfrecord.

Only fatal conditions are exceptions. Recoverable problems found while
walking the outline or the pages are collected by
:class:`pdfrecord.errors.ErrorTracker` instead.
"""


class PDFRecordException(Exception):
    """Base exception for all pdfrecord errors."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    @property
    def default_message(self) -> str:
        return "An unknown pdfrecord error occurred."


class OpenError(PDFRecordException):
    """Raised when the PDF engine cannot open or parse the document."""

    @property
    def default_message(self) -> str:
        return "Document open error."


class RangeError(PDFRecordException):
    """Raised when the requested page index is outside the document."""

    def __init__(self, page_number: int, num_pages: int) -> None:
        self.page_number = page_number
        self.num_pages = num_pages
        message = (
            f"Error: requested page number {page_number} is not valid "
            f"(document has {num_pages} page{'s' if num_pages != 1 else ''} "
            "and value must be 0-indexed)"
        )
        super().__init__(message)

    @property
    def default_message(self) -> str:
        return "Requested page number is out of range."


class OutputError(PDFRecordException):
    """Raised when the output destination cannot be written."""

    @property
    def default_message(self) -> str:
        return "Unable to write output."
