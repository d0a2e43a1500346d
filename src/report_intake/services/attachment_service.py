"""
附件处理服务

逐个检查上传文件的大小与类型，设为公开并生成访问地址。
单个文件失败只记录错误，不影响其他文件与整体提交。
"""

import asyncio
import posixpath
from typing import List, Sequence, Union

from ..config import StorageSettings
from ..exceptions import AttachmentError
from ..models import AttachmentMeta, AttachmentResolution
from ..utils.logger import get_logger
from .oss_service import OSSService

logger = get_logger(__name__)


def format_size(size: int) -> str:
    """字节数转为可读字符串"""
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"


class AttachmentResolver:
    """附件处理器"""

    def __init__(self, storage: OSSService, settings: StorageSettings):
        """
        Args:
            storage: 文件存储服务
            settings: 存储配置（大小上限、允许的扩展名）
        """
        self.storage = storage
        self.max_file_size = settings.max_file_size
        self.allowed_extensions = set(settings.allowed_extension_set)

    def _check_policy(self, reference: str, name: str, size: int) -> None:
        if size > self.max_file_size:
            raise AttachmentError(
                reference,
                f"{name}: 檔案大小 {format_size(size)} 超過上限 {format_size(self.max_file_size)}",
            )
        extension = posixpath.splitext(name)[1].lower().lstrip(".")
        if extension not in self.allowed_extensions:
            allowed = ", ".join(sorted(self.allowed_extensions))
            raise AttachmentError(
                reference,
                f"{name}: 不支援的檔案類型 .{extension or '?'}（允許: {allowed}）",
            )

    def _resolve_one(self, reference: str) -> AttachmentMeta:
        try:
            info = self.storage.get_file_info(reference)
        except Exception as e:
            raise AttachmentError(reference, f"{reference}: 無法讀取檔案資訊 ({e})") from e

        self._check_policy(reference, info["name"], info["size"])

        try:
            self.storage.make_public(reference)
        except Exception as e:
            raise AttachmentError(reference, f"{info['name']}: 無法設定公開權限 ({e})") from e

        mime_type = info["mime_type"]
        return AttachmentMeta(
            id=info["id"],
            name=info["name"],
            size=info["size"],
            mime_type=mime_type,
            view_url=self.storage.view_url(reference),
            download_url=self.storage.download_url(reference),
            thumbnail_url=(
                self.storage.thumbnail_url(reference) if mime_type.startswith("image/") else None
            ),
        )

    async def resolve(self, references: Sequence[str]) -> AttachmentResolution:
        """
        处理全部附件

        各文件在线程中并发处理，结果顺序与输入顺序一致。

        Args:
            references: 表单上传得到的文件引用列表

        Returns:
            AttachmentResolution
        """
        if not references:
            return AttachmentResolution()

        logger.info(f"处理 {len(references)} 个附件")

        outcomes: List[Union[AttachmentMeta, BaseException]] = await asyncio.gather(
            *(asyncio.to_thread(self._resolve_one, ref) for ref in references),
            return_exceptions=True,
        )

        accepted: List[AttachmentMeta] = []
        errors: List[str] = []
        for outcome in outcomes:
            if isinstance(outcome, AttachmentMeta):
                accepted.append(outcome)
            elif isinstance(outcome, AttachmentError):
                logger.warning(f"附件被拒绝 {outcome.reference}: {outcome}")
                errors.append(str(outcome))
            else:
                # 非预期异常向上抛出，由流水线统一处理
                raise outcome

        resolution = AttachmentResolution(
            accepted=accepted,
            total_size=sum(item.size for item in accepted),
            errors=errors,
        )
        logger.info(
            f"附件处理完成: 接受 {len(accepted)} 个, 拒绝 {len(errors)} 个, "
            f"总大小 {format_size(resolution.total_size)}"
        )
        return resolution
