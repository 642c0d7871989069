"""Error kinds raised by the sprite sheet pipeline."""

from __future__ import annotations


class SpriteError(RuntimeError):
    def __init__(self, message: str, *, error_code: str, source_path: str | None = None) -> None:
        super().__init__(message)
        self.error_code = error_code
        self.source_path = source_path

    def as_dict(self) -> dict[str, str | None]:
        return {
            "detail": str(self),
            "error_code": self.error_code,
            "source_path": self.source_path,
        }


class SourceUnreadableError(SpriteError):
    def __init__(self, message: str, *, source_path: str | None = None) -> None:
        super().__init__(message, error_code="source_unreadable", source_path=source_path)


class UnsupportedFormatError(SpriteError):
    def __init__(self, message: str, *, source_path: str | None = None) -> None:
        super().__init__(message, error_code="unsupported_format", source_path=source_path)


class CompositeFailureError(SpriteError):
    def __init__(self, message: str, *, source_path: str | None = None) -> None:
        super().__init__(message, error_code="composite_failure", source_path=source_path)


class InvalidSourcePathError(SpriteError):
    """Source keys must be relative, inside the image root, and carry an extension."""

    def __init__(self, message: str, *, source_path: str | None = None) -> None:
        super().__init__(message, error_code="invalid_source_path", source_path=source_path)
