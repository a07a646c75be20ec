"""Registration lifecycle tunables."""

from decouple import Csv, config

# Cancelling a confirmed merchandise order does not put units back on sale unless enabled.
FELICITY_RESTORE_STOCK_ON_CANCEL = config("FELICITY_RESTORE_STOCK_ON_CANCEL", default=False, cast=bool)

PAYMENT_PROOF_MAX_SIZE_BYTES = config("PAYMENT_PROOF_MAX_SIZE_BYTES", default=5 * 1024 * 1024, cast=int)
PAYMENT_PROOF_ALLOWED_CONTENT_TYPES = config(
    "PAYMENT_PROOF_ALLOWED_CONTENT_TYPES",
    default="image/jpeg,image/png,image/gif,image/webp",
    cast=Csv(),
)
PAYMENT_PROOF_UPLOAD_DIR = config("PAYMENT_PROOF_UPLOAD_DIR", default="payment-proofs")

NOTIFICATION_WEBHOOK_TIMEOUT_SECONDS = config("NOTIFICATION_WEBHOOK_TIMEOUT_SECONDS", default=5.0, cast=float)
