"""
OSS 文件访问与附件处理单元测试
"""
import logging

import oss2
import pytest

from conftest import MB, FakeBucket
from report_intake.config import StorageSettings
from report_intake.services.attachment_service import AttachmentResolver, format_size
from report_intake.services.oss_service import OSSService


# ============================================================================
# OSS SERVICE
# ============================================================================

class TestOSSService:
    """访问地址生成与文件信息查询"""

    def test_base_url_from_bare_endpoint(self, oss_service):
        assert oss_service.base_url == "https://reports.oss-cn-hangzhou.aliyuncs.com"

    def test_base_url_keeps_scheme(self, storage_settings):
        settings = storage_settings.model_copy(update={"aliyun_oss_endpoint": "http://oss.internal:9000"})
        service = OSSService(settings, bucket=FakeBucket())
        assert service.base_url == "http://reports.oss.internal:9000"

    def test_urls(self, oss_service):
        key = "uploads/my file.png"

        assert oss_service.view_url(key) == "https://reports.oss-cn-hangzhou.aliyuncs.com/uploads/my%20file.png"
        assert oss_service.download_url(key).endswith("?response-content-disposition=attachment")
        assert oss_service.thumbnail_url(key).endswith("?x-oss-process=image/resize,w_400")

    def test_get_file_info(self, oss_service):
        info = oss_service.get_file_info("uploads/screenshot.png")

        assert info == {
            "id": "uploads/screenshot.png",
            "name": "screenshot.png",
            "size": 200 * 1024,
            "mime_type": "image/png",
        }

    def test_make_public_sets_acl(self, oss_service, bucket):
        oss_service.make_public("uploads/photo.jpg")
        assert bucket.acl_calls == [("uploads/photo.jpg", oss2.OBJECT_ACL_PUBLIC_READ)]

    def test_missing_file_raises(self, oss_service):
        with pytest.raises(KeyError):
            oss_service.get_file_info("uploads/nope.png")


# ============================================================================
# RESOLVER
# ============================================================================

@pytest.fixture
def resolver(oss_service, storage_settings):
    return AttachmentResolver(oss_service, storage_settings)


class TestAttachmentResolver:
    """大小、类型限制与部分失败"""

    @pytest.mark.asyncio
    async def test_no_references(self, resolver, bucket):
        resolution = await resolver.resolve([])

        assert resolution.accepted == []
        assert resolution.total_size == 0
        assert bucket.head_calls == []

    @pytest.mark.asyncio
    async def test_accepts_valid_images(self, resolver, bucket):
        resolution = await resolver.resolve(["uploads/screenshot.png", "uploads/photo.jpg"])

        assert [a.name for a in resolution.accepted] == ["screenshot.png", "photo.jpg"]
        assert resolution.total_size == 200 * 1024 + 1 * MB
        assert resolution.errors == []
        assert {key for key, _ in bucket.acl_calls} == {"uploads/screenshot.png", "uploads/photo.jpg"}
        assert resolution.accepted[0].thumbnail_url is not None

    @pytest.mark.asyncio
    async def test_oversize_file_rejected_others_kept(self, resolver, bucket):
        refs = ["uploads/photo.jpg", "uploads/huge.png", "uploads/screenshot.png"]
        resolution = await resolver.resolve(refs)

        assert [a.id for a in resolution.accepted] == ["uploads/photo.jpg", "uploads/screenshot.png"]
        assert len(resolution.errors) == 1
        assert "huge.png" in resolution.errors[0]
        assert ("uploads/huge.png", oss2.OBJECT_ACL_PUBLIC_READ) not in bucket.acl_calls

    @pytest.mark.asyncio
    async def test_disallowed_extension_rejected(self, resolver):
        resolution = await resolver.resolve(["uploads/report.pdf"])

        assert resolution.accepted == []
        assert resolution.errors == [
            "report.pdf: 不支援的檔案類型 .pdf（允許: gif, jpeg, jpg, png, webp）"
        ]

    @pytest.mark.asyncio
    async def test_lookup_failure_is_per_file(self, resolver):
        resolution = await resolver.resolve(["uploads/missing.png", "uploads/photo.jpg"])

        assert [a.id for a in resolution.accepted] == ["uploads/photo.jpg"]
        assert len(resolution.errors) == 1
        assert "uploads/missing.png" in resolution.errors[0]

    @pytest.mark.asyncio
    async def test_rejection_logged_with_object_key(self, resolver, caplog):
        bucket_key = "uploads/huge.png"
        with caplog.at_level(logging.WARNING, logger="report_intake.services.attachment_service"):
            await resolver.resolve(["uploads/photo.jpg", bucket_key])

        assert any(bucket_key in message for message in caplog.messages)

    @pytest.mark.asyncio
    async def test_exactly_at_limit_accepted(self, oss_service, storage_settings, bucket):
        bucket.files["uploads/edge.webp"] = (10 * MB, "image/webp")
        resolver = AttachmentResolver(oss_service, storage_settings)

        resolution = await resolver.resolve(["uploads/edge.webp"])
        assert len(resolution.accepted) == 1

    def test_allowed_extensions_from_env_string(self, monkeypatch):
        monkeypatch.setenv("ATTACHMENT_ALLOWED_EXTENSIONS", ".PNG, jpg")
        settings = StorageSettings(
            ALIYUN_OSS_ACCESS_KEY_ID="id",
            ALIYUN_OSS_ACCESS_KEY_SECRET="secret",
            ALIYUN_OSS_ENDPOINT="oss-cn-hangzhou.aliyuncs.com",
            ALIYUN_OSS_BUCKET_NAME="reports",
        )
        assert settings.allowed_extension_set == ["png", "jpg"]
        assert settings.max_file_size == 10 * MB


def test_format_size():
    assert format_size(512) == "512 B"
    assert format_size(2048) == "2.0 KB"
    assert format_size(3 * MB) == "3.0 MB"
