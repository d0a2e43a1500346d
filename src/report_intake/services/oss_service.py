"""
阿里云 OSS 附件存储服务
"""

import posixpath
from typing import Any, Dict, Optional
from urllib.parse import quote, urlparse

import oss2

from ..config import StorageSettings
from ..utils.logger import get_logger

logger = get_logger(__name__)


class OSSService:
    """阿里云 OSS 文件服务：查询元信息、设为公开、生成访问地址"""

    def __init__(self, settings: StorageSettings, bucket: Optional[oss2.Bucket] = None):
        """
        初始化 OSS 客户端

        Args:
            settings: 存储配置
            bucket: 已创建的 Bucket（可选，测试时注入）
        """
        self.settings = settings
        if bucket is None:
            auth = oss2.Auth(
                settings.aliyun_oss_access_key_id, settings.aliyun_oss_access_key_secret
            )
            bucket = oss2.Bucket(
                auth,
                settings.aliyun_oss_endpoint,
                settings.aliyun_oss_bucket_name,
                connect_timeout=settings.oss_timeout,
            )
        self.bucket = bucket
        self.base_url = self._build_base_url(
            settings.aliyun_oss_endpoint, settings.aliyun_oss_bucket_name
        )
        logger.info(
            f"OSS 服务初始化: bucket={settings.aliyun_oss_bucket_name}, "
            f"endpoint={settings.aliyun_oss_endpoint}"
        )

    @staticmethod
    def _build_base_url(endpoint: str, bucket_name: str) -> str:
        """
        由 endpoint 生成 bucket 访问前缀

        示例:
        oss-cn-hangzhou.aliyuncs.com -> https://my-bucket.oss-cn-hangzhou.aliyuncs.com
        """
        parsed = urlparse(endpoint if "://" in endpoint else f"https://{endpoint}")
        scheme = parsed.scheme or "https"
        return f"{scheme}://{bucket_name}.{parsed.netloc}"

    def get_file_info(self, object_key: str) -> Dict[str, Any]:
        """
        获取文件元信息

        Args:
            object_key: OSS 对象键（表单上传得到的文件引用）

        Returns:
            {"id", "name", "size", "mime_type"}
        """
        try:
            meta = self.bucket.head_object(object_key)
            result = {
                "id": object_key,
                "name": posixpath.basename(object_key) or object_key,
                "size": int(meta.content_length or 0),
                "mime_type": meta.content_type or "application/octet-stream",
            }
            logger.debug(f"获取文件元信息成功: {object_key} -> {result}")
            return result
        except Exception as e:
            logger.error(f"获取文件元信息失败 {object_key}: {e}")
            raise

    def make_public(self, object_key: str) -> None:
        """
        将文件设为公开可读

        Args:
            object_key: OSS 对象键
        """
        try:
            self.bucket.put_object_acl(object_key, oss2.OBJECT_ACL_PUBLIC_READ)
            logger.debug(f"文件已设为公开: {object_key}")
        except Exception as e:
            logger.error(f"设置文件公开失败 {object_key}: {e}")
            raise

    def view_url(self, object_key: str) -> str:
        return f"{self.base_url}/{quote(object_key)}"

    def download_url(self, object_key: str) -> str:
        return f"{self.view_url(object_key)}?response-content-disposition=attachment"

    def thumbnail_url(self, object_key: str) -> str:
        width = self.settings.thumbnail_width
        return f"{self.view_url(object_key)}?x-oss-process=image/resize,w_{width}"
