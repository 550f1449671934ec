"""
File upload workflow: validate a selection, then store the files one at a time.
"""
import logging
import secrets
import string
import time
from dataclasses import dataclass, field
from pathlib import PurePath
from typing import Dict, List, Optional, Sequence, Tuple, Union

from aas_portal.core.cancellation import CancellationToken
from aas_portal.core.config import settings
from aas_portal.core.errors import StorageError
from aas_portal.core.messages import translate
from aas_portal.storage.object_store import LocalObjectStorage

logger = logging.getLogger(__name__)

IMAGE_TYPES = (".jpg", ".jpeg", ".png")
DOCUMENT_TYPES = IMAGE_TYPES + (".pdf",)
MEDIA_TYPES = IMAGE_TYPES + (".mp4",)

_KEY_ALPHABET = string.ascii_lowercase + string.digits

READ_CHUNK_SIZE = 1024 * 1024


@dataclass(frozen=True)
class UploadPolicy:
    """Where a kind of file goes and what it may look like."""
    bucket: str
    accept: Tuple[str, ...]
    max_size_mb: int = settings.MAX_UPLOAD_SIZE_MB
    multiple: bool = False
    # public | verified | admin
    audience: str = "public"


UPLOAD_POLICIES: Dict[str, UploadPolicy] = {
    "profile_image": UploadPolicy("profiles", IMAGE_TYPES),
    "driver_license": UploadPolicy("profiles", DOCUMENT_TYPES),
    "insurance_document": UploadPolicy("profiles", DOCUMENT_TYPES),
    "accident_images": UploadPolicy("claims", IMAGE_TYPES, multiple=True, audience="verified"),
    "police_report": UploadPolicy("claims", DOCUMENT_TYPES, audience="verified"),
    "insurance_receipt": UploadPolicy("claims", DOCUMENT_TYPES, audience="verified"),
    "post_media": UploadPolicy("posts", MEDIA_TYPES, max_size_mb=200, audience="admin"),
}


@dataclass
class SelectedFile:
    """Name and declared size of a file whose bytes have not been read yet."""
    filename: str
    size: int

    @property
    def extension(self) -> str:
        return PurePath(self.filename).suffix.lower()


@dataclass
class IncomingFile:
    filename: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def extension(self) -> str:
        return PurePath(self.filename).suffix.lower()


@dataclass
class UploadOutcome:
    filename: str
    url: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.url is not None


@dataclass
class UploadResult:
    """
    Per-file outcome of an upload request.

    ``rejection`` is set when validation refused the whole selection; in that
    case no file was sent to storage and ``outcomes`` is empty.
    """
    rejection: Optional[str] = None
    outcomes: List[UploadOutcome] = field(default_factory=list)

    @property
    def rejected(self) -> bool:
        return self.rejection is not None

    @property
    def urls(self) -> List[str]:
        return [o.url for o in self.outcomes if o.ok]

    @property
    def failed(self) -> List[UploadOutcome]:
        return [o for o in self.outcomes if not o.ok]


async def read_capped(source, limit: int, chunk_size: int = READ_CHUNK_SIZE) -> bytes:
    """
    Read at most ``limit + 1`` bytes from an async ``read(n)`` source.

    One byte over the limit is enough for validation to refuse the file.
    """
    chunks: List[bytes] = []
    total = 0
    while total <= limit:
        chunk = await source.read(chunk_size)
        if not chunk:
            break
        chunks.append(chunk)
        total += len(chunk)
    return b"".join(chunks)[: limit + 1]


def generate_object_key(filename: str) -> str:
    """``<epoch ms>-<9 random chars>.<ext>``; the uploaded file name is not kept."""
    ext = PurePath(filename).suffix.lower().lstrip(".") or "bin"
    suffix = "".join(secrets.choice(_KEY_ALPHABET) for _ in range(9))
    return f"{int(time.time() * 1000)}-{suffix}.{ext}"


class UploadWorkflow:
    def __init__(self, storage: LocalObjectStorage, policy: UploadPolicy, locale: Optional[str] = None):
        self.storage = storage
        self.policy = policy
        self.locale = locale

    @property
    def size_limit(self) -> int:
        return self.policy.max_size_mb * 1024 * 1024

    def validate(self, files: Sequence[Union[SelectedFile, IncomingFile]]) -> Optional[str]:
        """
        Check the selection before anything is stored.

        Works on declared sizes before the bytes are read and again on the
        read content. Returns a user-facing message when the whole batch must
        be refused, otherwise None. A single offending file refuses the batch.
        """
        if not files:
            return translate("no_files", self.locale)
        if len(files) > 1 and not self.policy.multiple:
            return translate("too_many_files", self.locale)

        wrong_type = [f.filename for f in files if f.extension not in self.policy.accept]
        if wrong_type:
            return translate(
                "file_type_not_allowed",
                self.locale,
                accept=",".join(self.policy.accept),
                names=", ".join(wrong_type),
            )

        oversized = [f.filename for f in files if f.size > self.size_limit]
        if oversized:
            return translate(
                "files_too_large",
                self.locale,
                max_size=self.policy.max_size_mb,
                names=", ".join(oversized),
            )
        return None

    async def upload(
        self,
        files: Sequence[IncomingFile],
        cancel_token: Optional[CancellationToken] = None,
    ) -> UploadResult:
        rejection = self.validate(files)
        if rejection:
            return UploadResult(rejection=rejection)

        cancel_token = cancel_token or CancellationToken()
        outcomes: List[UploadOutcome] = []
        for index, incoming in enumerate(files):
            if await cancel_token.is_cancelled():
                cancelled = translate("upload_cancelled", self.locale)
                outcomes.extend(UploadOutcome(f.filename, error=cancelled) for f in files[index:])
                logger.info(f"Upload to {self.policy.bucket} cancelled after {index} of {len(files)} files")
                break

            key = generate_object_key(incoming.filename)
            try:
                path = await self.storage.upload(self.policy.bucket, key, incoming.content)
            except StorageError as e:
                logger.error(f"Upload error for {incoming.filename} -> {self.policy.bucket}/{key}: {e}")
                outcomes.append(UploadOutcome(incoming.filename, error=translate("upload_failed", self.locale)))
                continue

            outcomes.append(UploadOutcome(incoming.filename, url=self.storage.get_public_url(self.policy.bucket, path)))

        return UploadResult(outcomes=outcomes)
