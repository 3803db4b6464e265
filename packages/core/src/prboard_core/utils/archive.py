from __future__ import annotations

import io
import logging
import zipfile

from prboard_core.errors import ArchiveEmpty
from prboard_core.models import ArtifactData
from prboard_core.utils.extract import extract_pr_references

logger = logging.getLogger(__name__)


def extract_from_archive(data: bytes) -> ArtifactData:
    """Read the release notes out of a run artifact and collect its PR references.

    The release pipeline uploads exactly one notes file per artifact, so the
    first file entry is used whatever its name. Raises ArchiveEmpty when the
    zip holds no files and ``zipfile.BadZipFile`` when the buffer is not a zip.
    """
    with zipfile.ZipFile(io.BytesIO(data)) as archive:
        entries = [info for info in archive.infolist() if not info.is_dir()]
        if not entries:
            raise ArchiveEmpty("Release notes file not found in the artifact")
        entry = entries[0]
        logger.debug("Reading release notes from artifact entry %s", entry.filename)
        text = archive.read(entry).decode("utf-8", errors="replace")

    refs = extract_pr_references(text)
    return ArtifactData(prs=", ".join(ref.number for ref in refs), pr_details=refs)
