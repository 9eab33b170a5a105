"""User-facing messages for domain errors.

Terminal failures point at configuration, exhausted retries point at the
network, and a resolution failure says the place was not found. The
technical detail stays in the logs.
"""

from __future__ import annotations

from ..domain.errors import (
    CallCancelledError,
    ConfigurationError,
    ProviderResponseError,
    RenderingError,
    ResolutionFailedError,
    RetryExhaustedError,
    TerminalError,
)

UNKNOWN_ERROR = "发生未知错误"


def describe_error(error: BaseException) -> str:
    """Map an error to a short message for the user."""
    if isinstance(error, CallCancelledError):
        return "操作已取消"
    if isinstance(error, ConfigurationError):
        setting = f"（{error.setting_name}）" if error.setting_name else ""
        return f"配置缺失或无效{setting}，请在设置中检查API密钥"
    if isinstance(error, TerminalError):
        if error.is_auth_failure:
            return "API密钥无效或无权限，请检查配置"
        if error.status_code == 429:
            return "请求过于频繁或额度已用完，请检查配置"
        return "请求被服务拒绝，请检查配置"
    if isinstance(error, RetryExhaustedError):
        return "网络连接失败，请检查网络连接后稍后重试"
    if isinstance(error, ResolutionFailedError):
        return f"未找到地点：{error.query}" if error.query else "未找到该地点"
    if isinstance(error, ProviderResponseError):
        return "服务返回了无法识别的数据，请稍后重试"
    if isinstance(error, RenderingError):
        return "地图生成失败"
    if isinstance(error, (TimeoutError, ConnectionError)):
        return "网络连接超时，请检查网络连接后重试"
    return UNKNOWN_ERROR
