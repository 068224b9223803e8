"""
Tenant identity accessor.
Multi-account types get their ``account_id`` from the ambient request
context. The default resolver reads a context variable that request
middleware binds for the duration of a request.
"""
from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

from ormgen.core.exceptions import ConversionError

TenantResolver = Callable[[Any], str]

current_account_id: ContextVar[str | None] = ContextVar("current_account_id", default=None)


@contextmanager
def bind_account_id(account_id: str) -> Iterator[None]:
    """Bind ``account_id`` as the ambient tenant for the enclosed block."""
    token = current_account_id.set(account_id)
    try:
        yield
    finally:
        current_account_id.reset(token)


def ambient_account_id(ctx: Any = None) -> str:
    account_id = current_account_id.get()
    if not account_id:
        raise ConversionError("no account id bound to the current request context")
    return account_id
