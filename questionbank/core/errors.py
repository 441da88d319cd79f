"""
Error taxonomy shared by the projection, replication and portable engines.

Every failure propagates to the transaction boundary (``core.database.atomic``),
which is the unit of recovery: an operation is retried as a whole, never half of it.
"""
from typing import Any, Optional


class QuestionBankError(Exception):
    """Base class for domain errors."""

    error_type = "question_bank_error"


class UnknownVariant(QuestionBankError):
    """A type tag outside the closed variant set, or a record that does not match its tag.

    Programming or schema-drift error: never user-recoverable.
    """

    error_type = "unknown_variant"

    def __init__(self, tag: Any, detail: Optional[str] = None):
        self.tag = tag
        super().__init__(detail or f"Unknown question variant: {tag!r}")


class SourceNotFound(QuestionBankError):
    """Replication or export requested for a question that does not exist."""

    error_type = "not_found"

    def __init__(self, question_id: Any):
        self.question_id = question_id
        super().__init__(f"Question not found: {question_id}")


class MalformedDocument(QuestionBankError):
    """An import document that cannot be reconstructed."""

    error_type = "validation_error"

    def __init__(self, field: str, message: str):
        self.field = field
        self.reason = message
        super().__init__(f"{field}: {message}")


class PartialWriteFailure(QuestionBankError):
    """A failure inside a transaction after writes were issued; the transaction was rolled back."""

    error_type = "write_failure"

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"{operation} failed and was rolled back")


class UnresolvedReference(QuestionBankError):
    """A write that would reference an identity that does not exist or belongs elsewhere."""

    error_type = "unresolved_reference"


class ProjectionError(QuestionBankError):
    """A projection that names something the mapped model does not have."""

    error_type = "projection_error"
