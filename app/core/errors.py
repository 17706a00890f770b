"""Error types shared by services and routers.

Services raise these directly; FastAPI turns them into responses with a
stable ``code`` next to the usual ``detail``.
"""

from fastapi import HTTPException, status


class AppError(HTTPException):
    """HTTPException with a stable, machine-readable error code."""

    status_code_default = status.HTTP_400_BAD_REQUEST
    code_default = "error"

    def __init__(
        self,
        detail: str,
        *,
        code: str | None = None,
        errors: list[str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(status_code=self.status_code_default, detail=detail, headers=headers)
        self.code = code or self.code_default
        self.errors = errors or []

    def to_payload(self) -> dict:
        payload: dict = {"detail": self.detail, "code": self.code}
        if self.errors:
            payload["errors"] = self.errors
        return payload


class NotFoundError(AppError):
    status_code_default = status.HTTP_404_NOT_FOUND
    code_default = "not_found"


class ConflictError(AppError):
    status_code_default = status.HTTP_409_CONFLICT
    code_default = "conflict"


class ValidationFailedError(AppError):
    status_code_default = status.HTTP_422_UNPROCESSABLE_CONTENT
    code_default = "validation_failed"


class AuthenticationError(AppError):
    status_code_default = status.HTTP_401_UNAUTHORIZED
    code_default = "unauthorized"


class PermissionDeniedError(AppError):
    status_code_default = status.HTTP_403_FORBIDDEN
    code_default = "forbidden"


class ProvisioningFailedError(AppError):
    """Registration committed but the tenant workspace could not be built."""

    status_code_default = status.HTTP_500_INTERNAL_SERVER_ERROR
    code_default = "workspace_provisioning_failed"


class UpstreamServiceError(AppError):
    """An external collaborator (blob storage) failed."""

    status_code_default = status.HTTP_502_BAD_GATEWAY
    code_default = "upstream_unavailable"
