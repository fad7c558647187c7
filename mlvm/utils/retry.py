"""
重试机制工具模块。

提供指数退避与固定间隔两种重试策略：网络请求的临时性错误使用指数退避，
Windows 上被占用文件的重命名使用固定间隔。
"""

import random
import time
from typing import Any, Callable, Optional, Tuple, Type, TypeVar

import requests

from mlvm.utils.logger import get_logger

logger = get_logger()

T = TypeVar('T')

TRANSPORT_ERRORS: Tuple[Type[BaseException], ...] = (
    requests.exceptions.Timeout,
    requests.exceptions.ConnectionError,
    requests.exceptions.ChunkedEncodingError,
)


class RetryHandler:
    """
    重试处理器类。

    按给定的尝试次数执行函数，只对 retry_on 中列出的异常重试，
    其他异常立即抛出。
    """

    def __init__(
        self,
        max_retries: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 60.0,
        backoff_factor: float = 2.0,
        jitter: bool = True,
        retry_on: Tuple[Type[BaseException], ...] = TRANSPORT_ERRORS,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        """
        初始化重试处理器。

        参数:
            max_retries: 最大重试次数（总尝试次数为 max_retries + 1）
            base_delay: 基础延迟时间（秒）
            max_delay: 最大延迟时间（秒）
            backoff_factor: 退避因子，1.0 即固定间隔
            jitter: 是否添加随机抖动
            retry_on: 可重试的异常类型
            sleep: 等待函数，默认 time.sleep
        """
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.backoff_factor = backoff_factor
        self.jitter = jitter
        self.retry_on = retry_on
        self._sleep = sleep or time.sleep

    @classmethod
    def fixed(
        cls,
        attempts: int,
        delay: float,
        retry_on: Tuple[Type[BaseException], ...],
        sleep: Optional[Callable[[float], None]] = None,
    ) -> "RetryHandler":
        """
        创建固定间隔、无抖动的重试处理器。

        参数:
            attempts: 总尝试次数（至少 1 次）
            delay: 每次重试前的等待时间（秒）
            retry_on: 可重试的异常类型
            sleep: 等待函数

        返回:
            RetryHandler 实例
        """
        return cls(
            max_retries=max(attempts, 1) - 1,
            base_delay=delay,
            max_delay=delay,
            backoff_factor=1.0,
            jitter=False,
            retry_on=retry_on,
            sleep=sleep,
        )

    def _calculate_delay(self, attempt: int) -> float:
        """
        计算第 n 次重试的延迟时间。

        参数:
            attempt: 重试次数（从 0 开始）

        返回:
            延迟时间（秒）
        """
        delay = self.base_delay * (self.backoff_factor ** attempt)
        delay = min(delay, self.max_delay)

        if self.jitter:
            delay = delay * (0.5 + random.random() * 0.5)

        return delay

    def _is_retryable_error(self, exception: BaseException) -> bool:
        return isinstance(exception, self.retry_on)

    def execute(
        self,
        func: Callable[..., T],
        *args: Any,
        **kwargs: Any
    ) -> T:
        """
        执行函数，失败时自动重试。

        参数:
            func: 要执行的函数
            *args: 函数位置参数
            **kwargs: 函数关键字参数

        返回:
            函数执行结果

        抛出:
            不可重试的异常立即抛出；超过最大重试次数后抛出最后一次异常
        """
        last_exception: Optional[BaseException] = None

        for attempt in range(self.max_retries + 1):
            try:
                return func(*args, **kwargs)
            except Exception as e:
                last_exception = e

                if not self._is_retryable_error(e):
                    raise

                if attempt >= self.max_retries:
                    logger.error(f"已达到最大尝试次数 {self.max_retries + 1}，放弃重试: {e}")
                    raise

                delay = self._calculate_delay(attempt)
                logger.warning(
                    f"操作失败 (尝试 {attempt + 1}/{self.max_retries + 1}): {e}，"
                    f"{delay:.2f} 秒后重试..."
                )
                self._sleep(delay)

        raise last_exception
