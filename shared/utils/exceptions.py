"""Custom exception hierarchy for better error handling."""
from fastapi import HTTPException, status


class CourseTutorException(Exception):
    """Base exception for all application errors."""
    pass


class SessionNotFoundException(CourseTutorException):
    """Raised when a session is not found."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Session {session_id} not found")

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Session {self.session_id} not found"
        )


class MessageNotFoundException(CourseTutorException):
    """Raised when a message id matches nothing in a session."""

    def __init__(self, session_id: str, message_id: str, admin_only: bool = False):
        self.session_id = session_id
        self.message_id = message_id
        self.admin_only = admin_only
        if admin_only:
            message = f"Admin message {message_id} not found or not deletable"
        else:
            message = f"Message {message_id} not found"
        super().__init__(message)

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(self)
        )


class MessageNotEditableException(CourseTutorException):
    """Raised when an admin tries to edit or delete a learner message."""

    def __init__(self, action: str):
        self.action = action
        super().__init__(f"Cannot {action} user messages")

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=str(self)
        )


class InvalidSettingsException(CourseTutorException):
    """Raised when course settings fall outside the allowed ranges."""

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid {field}: {reason}")

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(self)
        )


class InvalidCardIndexException(CourseTutorException):
    """Raised when a flashcard index is outside the session's card deck."""

    def __init__(self, card_index: int, card_count: int):
        self.card_index = card_index
        self.card_count = card_count
        super().__init__(f"Card {card_index} out of range (deck has {card_count} cards)")

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(self)
        )


class DocumentNotFoundException(CourseTutorException):
    """Raised when a course documentation link is not found."""

    def __init__(self, doc_type: str):
        self.doc_type = doc_type
        super().__init__(f"Documentation link {doc_type} not found")

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(self)
        )


class DocumentFetchException(CourseTutorException):
    """Raised when a documentation page cannot be downloaded."""

    def __init__(self, url: str, original_error: Exception):
        self.url = url
        self.original_error = original_error
        super().__init__(f"Failed to fetch {url}: {original_error}")

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Failed to fetch documentation from {self.url}"
        )


class LLMProviderException(CourseTutorException):
    """Raised when LLM provider fails."""

    def __init__(self, original_error: Exception):
        self.original_error = original_error
        super().__init__(f"LLM provider error: {str(original_error)}")

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="AI service temporarily unavailable"
        )


class ConfigurationException(CourseTutorException):
    """Raised when a required setting is missing at call time."""

    def __init__(self, config_key: str, reason: str):
        self.config_key = config_key
        self.reason = reason
        super().__init__(f"Configuration error for '{config_key}': {reason}")

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(self)
        )


class DatabaseException(CourseTutorException):
    """Raised when database operations fail."""

    def __init__(self, operation: str, original_error: Exception):
        self.operation = operation
        self.original_error = original_error
        super().__init__(f"Database {operation} failed: {str(original_error)}")

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Database operation failed"
        )



class PromptTemplateError(Exception):
    """Raised when prompt template rendering fails."""

    def __init__(self, template_name: str, missing_vars: list[str]):
        message = f"Prompt template '{template_name}' missing variables: {', '.join(missing_vars)}"
        super().__init__(message)
        self.template_name = template_name
        self.missing_vars = missing_vars
