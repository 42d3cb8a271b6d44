"""Archive extraction and JDK home discovery."""

from __future__ import annotations

import asyncio
import logging
import os
import stat
import tarfile
import zipfile
from pathlib import Path
from typing import Union

from common.errors import UnexpectedArchiveLayout, UnsupportedArchiveFormat
from common.logging_utils import Timer, extra_context
from common.platform import ArchiveFormat, PlatformInfo

logger = logging.getLogger(__name__)


def _extract_tar(archive: Path, dest: Path) -> None:
    with tarfile.open(archive, "r:gz") as tar:
        if hasattr(tarfile, "data_filter"):
            tar.extractall(dest, filter="data")
        else:
            tar.extractall(dest)


def _extract_zip(archive: Path, dest: Path) -> None:
    with zipfile.ZipFile(archive) as zf:
        for info in zf.infolist():
            extracted = Path(zf.extract(info, dest))
            mode = (info.external_attr >> 16) & 0o777
            if mode and not info.is_dir():
                os.chmod(extracted, mode | stat.S_IRUSR)


class Extractor:
    """Unpacks tar.gz and zip archives."""

    async def extract(
        self,
        archive: Union[str, Path],
        fmt: Union[ArchiveFormat, str],
        dest: Union[str, Path],
    ) -> Path:
        """Extract ``archive`` into ``dest`` and return ``dest``.

        Extraction runs in a worker thread.

        Raises:
            UnsupportedArchiveFormat: For anything but tar.gz and zip.
        """
        try:
            archive_format = ArchiveFormat(fmt) if not isinstance(fmt, ArchiveFormat) else fmt
        except ValueError as exc:
            raise UnsupportedArchiveFormat(f"Unsupported archive format: {fmt}") from exc
        archive = Path(archive)
        dest = Path(dest)
        dest.mkdir(parents=True, exist_ok=True)

        with Timer() as t:
            try:
                if archive_format is ArchiveFormat.TAR_GZ:
                    await asyncio.to_thread(_extract_tar, archive, dest)
                else:
                    await asyncio.to_thread(_extract_zip, archive, dest)
            except (tarfile.TarError, zipfile.BadZipFile) as exc:
                raise UnsupportedArchiveFormat(
                    f"Unable to extract {archive.name} as {archive_format.value}: {exc}"
                ) from exc
        logger.debug(
            "Extracted %s",
            archive.name,
            extra=extra_context(
                event="extract",
                component="extractor",
                outcome="success",
                duration_ms=t.duration_ms(),
                format=archive_format.value,
            ),
        )
        return dest


def locate_jdk_home(directory: Union[str, Path], platform: PlatformInfo) -> Path:
    """Return the JDK home inside an extracted archive.

    The archive must contain exactly one top-level entry; on macOS the home
    is ``Contents/Home`` below it.

    Raises:
        UnexpectedArchiveLayout: If the number of top-level entries is not one.
    """
    directory = Path(directory)
    entries = list(directory.iterdir())
    if len(entries) != 1:
        raise UnexpectedArchiveLayout(
            f"Unexpected amount of directory items found: {len(entries)}"
        )
    home = entries[0]
    if platform.jdk_home_suffix:
        home = home / platform.jdk_home_suffix
    return home
