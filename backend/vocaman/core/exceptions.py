"""
领域异常定义

所有业务异常都继承自 VocamanError，并携带对应的 HTTP 状态码。
API 层通过 main.py 中注册的异常处理器统一转换为标准响应格式。
"""
from typing import Optional


class VocamanError(Exception):
    """业务异常基类"""
    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


# --- 400 ---
class ValidationError(VocamanError):
    status_code = 400
    default_message = "Invalid request"


class NoFieldsProvided(ValidationError):
    default_message = "No updatable fields were provided"


# --- 401 ---
class Unauthenticated(VocamanError):
    status_code = 401
    default_message = "Authentication required"


# --- 403 ---
class Forbidden(VocamanError):
    status_code = 403
    default_message = "You are not allowed to perform this action"


class RelationNotApproved(Forbidden):
    default_message = "No approved parent relation exists for this child"


# --- 404 ---
class NotFound(VocamanError):
    status_code = 404
    default_message = "Resource not found"


class AssignmentNotFound(NotFound):
    default_message = "Homework assignment not found"


class DatasetNotFound(NotFound):
    default_message = "Dataset not found"


class TermNotFound(NotFound):
    default_message = "Term not found"


# --- 409 ---
class Conflict(VocamanError):
    status_code = 409
    default_message = "The resource state does not allow this operation"


class AlreadyCompleted(Conflict):
    default_message = "This homework assignment is already completed"


class AssignmentCancelled(Conflict):
    default_message = "This homework assignment was cancelled"


# --- 500 ---
class StoreUnavailable(VocamanError):
    status_code = 500
    default_message = "The server could not complete the request"


# --- 502 ---
class UpstreamUnavailable(VocamanError):
    status_code = 502
    default_message = "An upstream identity service could not be reached"
