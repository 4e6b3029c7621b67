"""Notification callbacks raised by a comparison session.

Subscribers are optional; a comparison behaves the same with or without them.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from tabular_compare.core.models import ComparisonObjectStatus, ComparisonObjectType
from tabular_compare.utils.logging import get_logger

logger = get_logger(__name__)


class ValidationMessageType(Enum):
    """Severity of a selection validation message."""

    INFORMATIONAL = "Informational"
    WARNING = "Warning"


class DeploymentStatus(Enum):
    """Outcome of a deployment work item or of a whole deployment."""

    SUCCESS = "Success"
    ERROR = "Error"
    CANCEL = "Cancel"


@dataclass
class ValidationMessage:
    """Warning or informational message about the selected actions."""

    message: str
    message_type: ValidationMessageType
    comparison_object_type: ComparisonObjectType | None = None
    status: ComparisonObjectStatus | None = None


@dataclass
class PasswordPromptRequest:
    """Request for the password of an impersonated account.

    The subscriber fills in ``password`` or sets ``user_cancelled``.
    """

    authentication_kind: str
    account_name: str
    password: str = field(default="", repr=False)
    user_cancelled: bool = False


@dataclass
class DatabaseDeploymentRequest:
    """Signal that a database is ready for deployment."""

    database_name: str
    tables_to_process: list[str] = field(default_factory=list)


@dataclass
class DeploymentMessage:
    """Progress message for one deployment work item."""

    work_item: str
    message: str
    status: DeploymentStatus


@dataclass
class DeploymentComplete:
    """Final status of a deployment."""

    status: DeploymentStatus
    error_message: str = ""


@dataclass
class ComparisonEvents:
    """Optional callbacks for the notifications a comparison emits."""

    on_validation_message: Callable[[ValidationMessage], None] | None = None
    on_resize_validation_headers: Callable[[], None] | None = None
    on_password_prompt: Callable[[PasswordPromptRequest], None] | None = None
    on_database_deployment: Callable[[DatabaseDeploymentRequest], None] | None = None
    on_deployment_message: Callable[[DeploymentMessage], None] | None = None
    on_deployment_complete: Callable[[DeploymentComplete], None] | None = None

    def validation_message(self, message: ValidationMessage) -> None:
        logger.debug(
            "validation_message",
            message_type=message.message_type.value,
            message=message.message,
        )
        if self.on_validation_message is not None:
            self.on_validation_message(message)

    def resize_validation_headers(self) -> None:
        if self.on_resize_validation_headers is not None:
            self.on_resize_validation_headers()

    def password_prompt(self, request: PasswordPromptRequest) -> PasswordPromptRequest:
        """Ask the subscriber for a password; unanswered prompts count as cancelled."""
        if self.on_password_prompt is None:
            request.user_cancelled = True
        else:
            self.on_password_prompt(request)
        return request

    def database_deployment(self, request: DatabaseDeploymentRequest) -> None:
        if self.on_database_deployment is not None:
            self.on_database_deployment(request)

    def deployment_message(self, message: DeploymentMessage) -> None:
        logger.debug(
            "deployment_message",
            work_item=message.work_item,
            status=message.status.value,
        )
        if self.on_deployment_message is not None:
            self.on_deployment_message(message)

    def deployment_complete(self, result: DeploymentComplete) -> None:
        logger.info(
            "deployment_complete",
            status=result.status.value,
            error_message=result.error_message or None,
        )
        if self.on_deployment_complete is not None:
            self.on_deployment_complete(result)
