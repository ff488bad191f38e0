"""Gate enforcement shared by CommandHandler and QueryHandler."""

from __future__ import annotations

import logging
from collections.abc import Callable, Coroutine
from functools import wraps
from typing import Any

from roletree.domain.shared.authorization.gate import AtLeast, Gate, Public
from roletree.domain.shared.error import AuthorizationError, ConfigurationError

_auth_logger = logging.getLogger("roletree.authz")

# Unbound async handler method: (self, cmd) -> Coroutine -> Result
HandlerMethod = Callable[..., Coroutine[Any, Any, Any]]


def wrap_run_with_gate(original_run: HandlerMethod) -> HandlerMethod:
    """Wrap a handler's run() method with __auth__ gate evaluation.

    ``at_least`` gates read the per-request ``caller`` and the injected
    ``authorization`` service from the handler instance. The service must
    expose ``require_at_least(caller, role)`` and take its own lock.
    """

    @wraps(original_run)
    async def gated_run(self: Any, cmd: Any) -> Any:
        gate = getattr(type(self), "__auth__", None)

        if not isinstance(gate, Gate):
            raise ConfigurationError(f"Handler {type(self).__name__} has no __auth__ declaration")

        if isinstance(gate, Public):
            return await original_run(self, cmd)

        if isinstance(gate, AtLeast):
            caller = getattr(self, "caller", None)
            if caller is None:
                raise AuthorizationError("Caller required", code="missing_caller")

            checker = getattr(self, "authorization", None)
            if checker is None:
                raise ConfigurationError(
                    f"Handler {type(self).__name__} declares at_least() "
                    f"but has no authorization service"
                )

            _auth_logger.debug(
                "Gate check: handler=%s, required=%s, caller=%s",
                type(self).__name__,
                gate.role,
                caller,
            )
            checker.require_at_least(caller, gate.role)
            return await original_run(self, cmd)

        raise ConfigurationError(  # pragma: no cover
            f"Handler {type(self).__name__} has unhandled __auth__ type: {type(gate).__name__}"
        )

    return gated_run
