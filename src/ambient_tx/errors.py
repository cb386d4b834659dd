# ambient_tx/errors.py
"""
Error taxonomy
──────────────────────────────────────────────
• ConfigurationError    → client/config used before patch_client()
• UnsupportedUsageError → batched / non-callable transaction() while nested
• ContextNotActiveError → writing to the context store with no open context

Errors raised by application code inside a transaction are never wrapped.
"""


class TransactionalError(Exception):
    """Base class for every error raised by ambient_tx itself."""


class ConfigurationError(TransactionalError, RuntimeError):
    pass


class UnsupportedUsageError(TransactionalError, TypeError):
    pass


class ContextNotActiveError(TransactionalError, RuntimeError):
    pass
