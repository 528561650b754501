"""
db/transaction.py
-----------------
Runs a group of dependent writes as one atomic unit.

Used for the operations that touch both `users` and `passwords`
(registration and username changes). One attempt per call: on any
failure everything is rolled back and a typed StoreError is raised.
"""

from typing import Callable, Optional, TypeVar

from db.connection import begin_transaction
from db.constraints import ConstraintTranslator, default_translator
from db.errors import StoreError

T = TypeVar("T")


def run_in_transaction(
    work: Callable[..., T],
    action: str,
    translator: Optional[ConstraintTranslator] = None,
    timeout: Optional[float] = None,
) -> T:
    """
    Execute ``work(cur)`` inside a transaction and commit it.

    Args:
        work: Callable receiving an open cursor; its return value is
            returned once the transaction has committed.
        action: Short description used in error messages.
        translator: Maps driver errors to StoreErrors (default: the
            module-level translator).
        timeout: Seconds to wait for a pooled connection.

    Raises:
        StoreError: Any failure, already classified. Nothing is committed.
    """
    translator = translator or default_translator
    try:
        with begin_transaction(timeout) as tx:
            with tx.cursor() as cur:
                result = work(cur)
            tx.commit()
            return result
    except StoreError:
        raise
    except Exception as e:
        raise translator.translate(e, action) from e
