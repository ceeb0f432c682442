"""Identity 异常体系

任何校验失败在 gateway 层统一转换为 401。
"""


class IdentityError(Exception):
    """Identity 包基础异常"""

    def __init__(self, message: str, recoverable: bool = False) -> None:
        """
        Args:
            message: 错误描述
            recoverable: 是否可通过重试恢复
        """
        super().__init__(message)
        self.recoverable = recoverable


class InvalidTokenError(IdentityError):
    """token 缺失、过期或被身份提供方拒绝"""

    def __init__(self, message: str = "Invalid token") -> None:
        super().__init__(message, recoverable=False)


class IdentityUnreachableError(IdentityError):
    """身份提供方不可达（连接失败、超时、DNS 解析失败等）"""

    def __init__(self, verify_url: str, original_error: Exception) -> None:
        """
        Args:
            verify_url: 尝试连接的校验地址
            original_error: 原始异常
        """
        super().__init__(
            f"Identity provider unreachable: {verify_url} -- {original_error}",
            recoverable=True,
        )
        self.verify_url = verify_url
        self.original_error = original_error
