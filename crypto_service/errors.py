"""服务异常定义"""

from typing import Optional


class CryptoServiceError(Exception):
    """行情服务异常基类"""


class FetchError(CryptoServiceError):
    """上游行情接口调用失败，或返回了不完整 / 格式错误的数据"""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class InvalidAssetError(CryptoServiceError):
    """查询引用了未配置、或尚无数据的资产"""

    def __init__(self, asset_key: Optional[str], reason: str):
        super().__init__(reason)
        self.asset_key = asset_key
        self.reason = reason
