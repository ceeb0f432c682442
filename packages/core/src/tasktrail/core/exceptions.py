"""TaskTrail 异常体系

每个异常携带对外错误码与 HTTP 状态码，由 gateway 统一映射为
{"error": {"code", "message"}} 响应体。
"""


class TaskTrailError(Exception):
    """TaskTrail 基础异常"""

    code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(TaskTrailError):
    """输入缺失或格式错误（含日期解析失败）"""

    code = "VALIDATION_ERROR"
    status_code = 400


class NotFoundError(TaskTrailError):
    """任务不存在"""

    code = "TASK_NOT_FOUND"
    status_code = 404

    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task with id {task_id} does not exist")
        self.task_id = task_id


class AuthError(TaskTrailError):
    """缺少或无效的 bearer token"""

    code = "UNAUTHORIZED"
    status_code = 401


class InternalError(TaskTrailError):
    """存储故障等内部错误，对外只返回通用信息"""

    code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: str = "Something went wrong") -> None:
        super().__init__(message)


class ProfileNotFoundError(TaskTrailError):
    """用户档案不存在"""

    code = "PROFILE_NOT_FOUND"
    status_code = 404

    def __init__(self, uid: str) -> None:
        super().__init__(f"User profile {uid} does not exist")
        self.uid = uid
