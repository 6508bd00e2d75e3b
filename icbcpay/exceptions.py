"""工行客户端异常定义。"""


class IcbcClientError(Exception):
    """工行客户端异常。"""
    pass


class IcbcTransportError(IcbcClientError):
    """网络层失败：连接失败、超时或 HTTP 状态码非 200。"""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class IcbcHTTPStatusError(IcbcTransportError):
    """HTTP 状态码非 200。"""

    def __init__(self, status_code: int):
        super().__init__(f"工行接口返回 HTTP {status_code}", status_code=status_code)


class IcbcTimeoutError(IcbcTransportError):
    """请求超时。"""
    pass


class IcbcResponseError(IcbcClientError):
    """响应不是合法 JSON。"""
    pass

