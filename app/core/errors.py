"""Domain error taxonomy shared by services, storage and the HTTP layer.

Messages are user-facing and in Indonesian; the API layer maps each class to
an HTTP status code via ``status_code``.
"""


class PortalError(Exception):
    """Base class for every failure a portal operation can report."""

    status_code = 400
    default_message = "Permintaan tidak dapat diproses"

    def __init__(self, message: str | None = None, cause: Exception | None = None) -> None:
        self.message = message or self.default_message
        self.cause = cause
        super().__init__(self.message)


class Unauthenticated(PortalError):
    """No actor is attached to the request."""

    status_code = 401
    default_message = "Silakan login terlebih dahulu"


class Forbidden(PortalError):
    """The actor is known but may not perform this operation on this target."""

    status_code = 403
    default_message = "Akses ditolak"


class NotFound(PortalError):
    status_code = 404
    default_message = "Data tidak ditemukan"


class Conflict(PortalError):
    """Uniqueness violation on username, email or NIK."""

    status_code = 409
    default_message = "Data sudah terdaftar"


class ValidationFailed(PortalError):
    status_code = 400
    default_message = "Data tidak valid"


class InvalidTransition(PortalError):
    """Status change not allowed by the submission lifecycle."""

    status_code = 409
    default_message = "Perubahan status tidak diizinkan"

    def __init__(
        self,
        current: str,
        requested: str,
        message: str | None = None,
    ) -> None:
        self.current = current
        self.requested = requested
        super().__init__(
            message
            or f"Status pengajuan tidak dapat diubah dari '{current}' ke '{requested}'"
        )


class UploadRejected(PortalError):
    """File exceeds size, type or count limits."""

    status_code = 400
    default_message = "File tidak dapat diunggah"
