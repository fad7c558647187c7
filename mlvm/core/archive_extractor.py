"""
压缩包解压模块。

把下载得到的字节内容（zip、tar.gz、tar.zst）解压为目录树，并拒绝会写到
目标目录之外的条目。解压失败时目标目录处于未定义状态，由调用方清理。
"""

import io
import os
import stat
import tarfile
import zipfile
import zlib
from pathlib import Path
from typing import Union

import zstandard

from mlvm.core.errors import FormatError
from mlvm.core.models import ArchiveKind
from mlvm.utils.input_validator import InputValidator, InputValidationError
from mlvm.utils.logger import get_logger

logger = get_logger()


def _check_member_name(name: str) -> None:
    normalized = name.replace("\\", "/")
    if normalized.startswith("/") or (len(normalized) > 1 and normalized[1] == ":"):
        raise FormatError(f"压缩包包含绝对路径: {name}")
    if ".." in normalized.split("/"):
        raise FormatError(f"压缩包包含非法路径: {name}")


def _decompress_zstd_frames(data: bytes) -> bytes:
    # 压缩包可能由多个 zstd 帧拼接而成，逐帧解码直到输入耗尽
    dctx = zstandard.ZstdDecompressor()
    chunks = []
    remaining = data
    try:
        while remaining:
            dobj = dctx.decompressobj()
            chunks.append(dobj.decompress(remaining))
            if not dobj.eof:
                raise FormatError("zstd 数据不完整：最后一个帧没有结束")
            remaining = dobj.unused_data
    except zstandard.ZstdError as e:
        raise FormatError(f"zstd 解码失败: {e}") from e
    return b"".join(chunks)


class ArchiveExtractor:
    """
    压缩包解压器。
    """

    def extract(self, data: bytes, kind: Union[ArchiveKind, str], destination: Path) -> None:
        """
        按压缩包类型把内容解压到目标目录。

        参数:
            data: 压缩包字节内容
            kind: 压缩包类型
            destination: 目标目录（为空或不存在）

        抛出:
            FormatError: 类型无法识别或压缩包损坏
            OSError: 写入目标目录失败
        """
        try:
            kind = ArchiveKind(kind)
        except ValueError as e:
            raise FormatError(f"不支持的压缩包类型: {kind}") from e

        destination = Path(destination)
        destination.mkdir(parents=True, exist_ok=True)
        logger.debug(f"解压 {kind.value} ({len(data)} 字节) 到 {destination}")

        if kind is ArchiveKind.ZIP:
            self._extract_zip(data, destination)
        elif kind is ArchiveKind.TAR_GZ:
            self._extract_tar_gz(data, destination)
        else:
            self._extract_tar_zst(data, destination)

    def _extract_zip(self, data: bytes, destination: Path) -> None:
        try:
            with zipfile.ZipFile(io.BytesIO(data)) as zf:
                members = zf.infolist()
                for member in members:
                    _check_member_name(member.filename)
                zf.extractall(destination)

                # zipfile 不保留权限位，按条目中记录的 Unix 权限恢复
                for member in members:
                    unix_mode = member.external_attr >> 16
                    mode = unix_mode & 0o777
                    if mode and not member.is_dir() and not stat.S_ISLNK(unix_mode):
                        os.chmod(destination / member.filename, mode)
        except (zipfile.BadZipFile, zipfile.LargeZipFile, EOFError) as e:
            raise FormatError(f"zip 压缩包已损坏: {e}") from e

    def _extract_tar_gz(self, data: bytes, destination: Path) -> None:
        try:
            with tarfile.open(fileobj=io.BytesIO(data), mode="r|gz") as tar:
                self._extract_tar_members(tar, destination)
        except (tarfile.TarError, EOFError, zlib.error) as e:
            raise FormatError(f"tar.gz 压缩包已损坏: {e}") from e

    def _extract_tar_zst(self, data: bytes, destination: Path) -> None:
        tar_bytes = _decompress_zstd_frames(data)

        try:
            with tarfile.open(fileobj=io.BytesIO(tar_bytes), mode="r:") as tar:
                self._extract_tar_members(tar, destination)
        except (tarfile.TarError, EOFError) as e:
            raise FormatError(f"tar 压缩包已损坏: {e}") from e

    def _extract_tar_members(self, tar: tarfile.TarFile, destination: Path) -> None:
        base = str(destination)
        extract_kwargs = {"filter": "tar"} if hasattr(tarfile, "tar_filter") else {}
        for member in tar:
            _check_member_name(member.name)
            if member.issym() or member.islnk():
                link_base = os.path.dirname(member.name) if member.issym() else ""
                try:
                    InputValidator.safe_join_path(base, link_base, member.linkname)
                except InputValidationError as e:
                    raise FormatError(f"链接指向目标目录之外: {member.name} -> {member.linkname}") from e
            tar.extract(member, destination, **extract_kwargs)

