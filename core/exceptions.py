from fastapi import HTTPException, status

# Messages are shown to end users as-is; the client is Arabic-only.
DRIVE_NOT_CONNECTED_MESSAGE = "لم يتم ربط حساب Google Drive. يرجى تسجيل الخروج وتسجيل الدخول مرة أخرى."


class Unauthorized(HTTPException):
    def __init__(self, detail: str = "Unauthorized"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class Forbidden(HTTPException):
    def __init__(self, detail: str = "Forbidden"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class NotFound(HTTPException):
    """Missing entity, or an entity that is not in the state an operation requires."""

    def __init__(self, detail: str = "Not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class StoreWriteFailure(HTTPException):
    def __init__(self, detail: str = "Failed to save changes"):
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)


class DriveNotConnected(HTTPException):
    def __init__(self, detail: str = DRIVE_NOT_CONNECTED_MESSAGE):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class DriveOperationFailed(HTTPException):
    """A Drive call the request cannot succeed without has failed."""

    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_502_BAD_GATEWAY, detail=detail)
