"""Errors raised by the term-candidate extraction pipeline."""


class TermExtractionConfigError(ValueError):
    """Raised when a TermExtractionConfig is invalid.

    Always raised before any document is processed.
    """


class NounSequenceExtractionError(RuntimeError):
    """
    Raised when the noun-sequence analyzer fails for a document.

    The whole batch fails: skipping the document would make totals and
    statistics disagree with the document list the caller passed in.

    Attributes:
        document_index: Position of the failing document in the input list
    """

    def __init__(self, document_index: int, message: str):
        super().__init__(f"Noun sequence extraction failed for document {document_index}: {message}")
        self.document_index = document_index
