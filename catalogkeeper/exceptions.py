"""
Exception hierarchy for catalogkeeper.

Every error raised on purpose by catalogkeeper derives from
:class:`CatalogKeeperError`.  Besides a message, each error carries a
``details`` mapping (file, line, URL, status code, ...) which the CLI
appends to the message when reporting it, and which the debug log keeps
verbatim.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

#: Longest response body kept in ``NetworkError.details``.
MAX_BODY_LENGTH = 200


class CatalogKeeperError(Exception):
    """Root of the catalogkeeper error hierarchy.

    Args:
        message: Human-readable error message.
        details: Structured context.  Entries whose value is ``None`` are
            dropped so that only known facts are reported.

    Example:
        >>> str(CatalogKeeperError("Cannot read catalog", {"file": "libs.versions.toml"}))
        'Cannot read catalog (file=libs.versions.toml)'
    """

    __slots__ = ("message", "details")

    def __init__(
        self,
        message: str,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message: str = message
        self.details: Dict[str, Any] = {
            key: value for key, value in (details or {}).items() if value is not None
        }

    def __str__(self) -> str:
        if not self.details:
            return self.message
        context = ", ".join(f"{key}={value}" for key, value in self.details.items())
        return f"{self.message} ({context})"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, details={self.details!r})"


class ParseError(CatalogKeeperError):
    """The version catalog is not valid TOML or not a valid catalog.

    Args:
        message: Error description.
        line_number: 1-based line where the problem was found.
        line_content: Raw text of that line.
        file_path: Catalog being parsed.
    """

    __slots__ = ("line_number", "line_content", "file_path")

    def __init__(
        self,
        message: str,
        *,
        line_number: Optional[int] = None,
        line_content: Optional[str] = None,
        file_path: Optional[str] = None,
    ) -> None:
        self.line_number = line_number
        self.line_content = line_content
        self.file_path = file_path
        super().__init__(
            message,
            {"file": file_path, "line": line_number, "content": line_content},
        )


class NetworkError(CatalogKeeperError):
    """An HTTP exchange failed for good (retries included).

    Args:
        message: Error description.
        url: URL being fetched.
        status_code: HTTP status of the last answer, when there was one.
        response_body: Body of that answer; only its head is kept in ``details``.
    """

    __slots__ = ("url", "status_code", "response_body")

    def __init__(
        self,
        message: str,
        *,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
    ) -> None:
        self.url = url
        self.status_code = status_code
        self.response_body = response_body
        body = response_body
        if body is not None and len(body) > MAX_BODY_LENGTH:
            body = body[:MAX_BODY_LENGTH] + "..."
        super().__init__(
            message,
            {"url": url, "status_code": status_code, "response": body},
        )


class RepositoryError(NetworkError):
    """A Maven repository does not serve the requested resource.

    Args:
        message: Error description.
        module_id: Coordinates being looked up, when known.
        **kwargs: Forwarded to :class:`NetworkError`.
    """

    __slots__ = ("module_id",)

    def __init__(
        self,
        message: str,
        *,
        module_id: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.module_id = module_id
        if module_id is not None:
            self.details["module"] = module_id


class FileOperationError(CatalogKeeperError):
    """Reading, writing or backing up a file failed.

    Args:
        message: Error description.
        file_path: File involved.
        operation: ``read``, ``write``, ``backup`` or ``restore``.
        original_error: Underlying ``OSError``, if any.
    """

    __slots__ = ("file_path", "operation", "original_error")

    def __init__(
        self,
        message: str,
        *,
        file_path: Optional[str] = None,
        operation: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        self.file_path = file_path
        self.operation = operation
        self.original_error = original_error
        super().__init__(
            message,
            {
                "path": file_path,
                "operation": operation,
                "original_error": str(original_error) if original_error else None,
            },
        )


class ConfigError(CatalogKeeperError):
    """The configuration file is unreadable or holds invalid settings."""

    __slots__ = ("config_path", "option")

    def __init__(
        self,
        message: str,
        *,
        config_path: Optional[str] = None,
        option: Optional[str] = None,
    ) -> None:
        self.config_path = config_path
        self.option = option
        super().__init__(message, {"config": config_path, "option": option})


class PolicyError(CatalogKeeperError):
    """A policy is unknown, or could not be registered."""

    __slots__ = ("policy_name",)

    def __init__(self, message: str, *, policy_name: Optional[str] = None) -> None:
        self.policy_name = policy_name
        super().__init__(message, {"policy": policy_name})
