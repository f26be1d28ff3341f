"""
Thread-local storage for the tenant bound to the current request.

TenantMiddleware binds it at the start of a request and clears it afterwards;
TenantManager reads it to scope tenant-aware querysets.
"""

import threading
from contextlib import contextmanager


class TenantNotSetError(Exception):
    """Raised when tenant-aware code runs without a bound tenant."""

    def __init__(self, message=None):
        super().__init__(
            message
            or "No tenant is bound to this thread. "
            "Bind one with core.tenant_context.set_current_tenant(tenant) "
            "or wrap the code in tenant_scope(tenant)."
        )


_thread_locals = threading.local()


def set_current_tenant(tenant):
    """Bind `tenant` (or None for platform-level requests) to the current thread."""
    _thread_locals.tenant = tenant


def get_current_tenant():
    """Return the bound tenant, or raise TenantNotSetError when nothing is bound."""
    tenant = getattr(_thread_locals, "tenant", None)
    if tenant is None:
        raise TenantNotSetError()
    return tenant


def clear_current_tenant():
    if hasattr(_thread_locals, "tenant"):
        delattr(_thread_locals, "tenant")


@contextmanager
def tenant_scope(tenant):
    """Temporarily bind `tenant`, restoring whatever was bound before."""
    previous = getattr(_thread_locals, "tenant", None)
    set_current_tenant(tenant)
    try:
        yield tenant
    finally:
        if previous is None:
            clear_current_tenant()
        else:
            set_current_tenant(previous)
