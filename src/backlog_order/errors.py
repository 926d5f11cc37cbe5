"""Shared contract error types."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ContractContext:
    """Structured context carried by contract violations."""

    reason_code: str
    key: str
    detail: str


class ContractViolation(ValueError):
    """Raised when a configuration, input, or tracker payload contract fails."""

    def __init__(
        self,
        reason_code: str,
        *,
        key: str = "<none>",
        detail: str = "",
    ) -> None:
        self.context = ContractContext(
            reason_code=reason_code,
            key=key,
            detail=detail,
        )
        super().__init__(f"reason_code={reason_code}; key={key}; detail={detail}")

    @property
    def reason_code(self) -> str:
        return self.context.reason_code


class TrackerRequestError(ContractViolation):
    """Raised when the tracking service answers with an HTTP error status."""

    def __init__(self, *, url: str, status_code: int, detail: str = "") -> None:
        self.status_code = int(status_code)
        message = f"status_code={self.status_code}"
        if detail:
            message = f"{message} {detail}"
        super().__init__("http_error", key=url, detail=message)
