"""
HTTP 客户端模块。

提供下载和版本目录查询功能。网络层的临时错误（超时、连接中断）会按指数
退避重试，HTTP 状态错误不会重试。
"""

from typing import Any, Dict, Optional

import requests

from mlvm.core.interfaces import IHttpClient, ProgressCallback
from mlvm.utils.logger import get_logger
from mlvm.utils.retry import RetryHandler

logger = get_logger()

CHUNK_SIZE = 64 * 1024


class HttpClientError(Exception):
    """HTTP 客户端错误异常。"""
    pass


class HttpStatusError(HttpClientError):
    """服务器返回非 2xx 状态。"""

    def __init__(self, url: str, status_code: int):
        self.url = url
        self.status_code = status_code
        super().__init__(f"HTTP {status_code}: {url}")


class HttpClient(IHttpClient):
    """
    基于 requests.Session 的 HTTP 客户端。
    """

    def __init__(
        self,
        user_agent: str = "mlvm-python",
        request_timeout: float = 30,
        download_timeout: float = 300,
        retry_count: int = 3,
        session: Optional[requests.Session] = None,
    ):
        """
        初始化 HTTP 客户端。

        参数:
            user_agent: User-Agent 请求头（GitHub API 要求必须提供）
            request_timeout: 版本目录请求超时（秒）
            download_timeout: 下载请求超时（秒）
            retry_count: 网络错误最大重试次数
            session: 可选的 requests.Session
        """
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": user_agent})
        self.request_timeout = request_timeout
        self.download_timeout = download_timeout
        self.retry_handler = RetryHandler(max_retries=retry_count)

    @classmethod
    def from_config(cls, config_manager) -> "HttpClient":
        """
        根据配置创建 HTTP 客户端。

        参数:
            config_manager: 配置管理器实例

        返回:
            HttpClient 实例
        """
        return cls(
            user_agent=config_manager.get_setting("user_agent"),
            request_timeout=config_manager.get_setting("request_timeout"),
            download_timeout=config_manager.get_setting("download_timeout"),
            retry_count=config_manager.get_setting("download_retry_count"),
        )

    def _check_status(self, response: requests.Response, url: str) -> None:
        if not 200 <= response.status_code < 300:
            response.close()
            raise HttpStatusError(url, response.status_code)

    def get_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        GET 请求并解析 JSON。

        参数:
            url: 请求地址
            params: 查询参数

        返回:
            解析后的 JSON 数据

        抛出:
            HttpStatusError: 非 2xx 状态
            HttpClientError: 响应不是合法 JSON
        """
        logger.debug(f"请求版本目录: {url} {params or ''}")
        response = self.retry_handler.execute(
            self.session.get, url, params=params, timeout=self.request_timeout
        )
        self._check_status(response, url)
        try:
            return response.json()
        except ValueError as e:
            raise HttpClientError(f"响应不是合法的 JSON: {url}") from e

    def download(self, url: str, progress_callback: Optional[ProgressCallback] = None) -> bytes:
        """
        下载完整内容到内存。

        参数:
            url: 下载地址
            progress_callback: 进度回调 (已下载字节数, 总字节数)，总数未知时为 0

        返回:
            下载的字节内容

        抛出:
            HttpStatusError: 非 2xx 状态
        """
        logger.info(f"正在下载: {url}")

        def _do_download() -> bytes:
            response = self.session.get(url, stream=True, timeout=self.download_timeout)
            self._check_status(response, url)
            with response:
                total = int(response.headers.get("content-length", 0) or 0)
                downloaded = 0
                chunks = []
                for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                    if not chunk:
                        continue
                    chunks.append(chunk)
                    downloaded += len(chunk)
                    if progress_callback:
                        progress_callback(downloaded, total)
                return b"".join(chunks)

        data = self.retry_handler.execute(_do_download)
        logger.info(f"下载完成，共 {len(data)} 字节")
        return data


# 版本目录查询失败时需要统一处理的异常
REQUEST_ERRORS = (HttpClientError, requests.exceptions.RequestException)
