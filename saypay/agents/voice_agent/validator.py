"""
Save gate for reviewed drafts.

Checks:
1. Amount is greater than zero
2. Description is not blank
"""

from saypay.errors import ExpenseValidationError
from saypay.logging_config import get_logger
from saypay.schemas.extraction import ExtractedExpenseDraft

logger = get_logger(__name__)


def validate_draft(draft: ExtractedExpenseDraft | None) -> list[str]:
    """
    Validate a draft before it is handed to storage.

    Returns:
        List of user-facing error messages (empty when the draft can be saved)
    """
    if draft is None:
        return ["No expense data to save"]

    validation_errors = []

    if draft.amount is None or draft.amount <= 0:
        validation_errors.append("Amount must be greater than zero")

    if not draft.description or not draft.description.strip():
        validation_errors.append("Description is required")

    logger.debug(
        "validate_draft_complete",
        validation_passed=not validation_errors,
        error_count=len(validation_errors),
    )
    return validation_errors


def ensure_valid(draft: ExtractedExpenseDraft | None) -> ExtractedExpenseDraft:
    """
    Raises:
        ExpenseValidationError: If the draft fails validate_draft
    """
    errors = validate_draft(draft)
    if errors:
        raise ExpenseValidationError(errors)
    return draft
