"""Error codes returned inside libs.result.Error

INSUFFICIENT_CREDITS is the only business rule failure of the credit ledger.
STORAGE_ERROR is transient (lock or commit failure) and must be retried.
"""


class ErrorCode:
    # Credit ledger
    INSUFFICIENT_CREDITS = "INSUFFICIENT_CREDITS"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    STORAGE_ERROR = "STORAGE_ERROR"

    # Quota gate
    PAYMENT_REQUIRED = "PAYMENT_REQUIRED"
    ACTION_TIMEOUT = "ACTION_TIMEOUT"

    # Payment webhooks
    INVALID_SIGNATURE = "INVALID_SIGNATURE"
    INVALID_PAYLOAD = "INVALID_PAYLOAD"
    UNKNOWN_PRODUCT = "UNKNOWN_PRODUCT"
    UNKNOWN_USER = "UNKNOWN_USER"

    # Checkout
    UNKNOWN_PACKAGE = "UNKNOWN_PACKAGE"
    CHECKOUT_FAILED = "CHECKOUT_FAILED"

    # Ledger audit
    AUDIT_FAILED = "AUDIT_FAILED"

    # Request validation
    VALIDATION_ERROR = "VALIDATION_ERROR"
