from __future__ import annotations

from fbadmin.core import DataModel


class ObjectMetadata(DataModel):
    """Cloud Storage object resource.

    Attributes:
        name: Object name.
        bucket: Bucket name.
        generation: Content generation.
        metageneration: Metadata generation.
        content_type: MIME type.
        size: Size in bytes, as a string.
        md5_hash: Base64 MD5 hash.
        crc32c: Base64 CRC32C checksum.
        metadata: Custom metadata.
    """

    name: str | None = None
    bucket: str | None = None
    generation: str | None = None
    metageneration: str | None = None
    content_type: str | None = None
    time_created: str | None = None
    updated: str | None = None
    storage_class: str | None = None
    size: str | None = None
    md5_hash: str | None = None
    media_link: str | None = None
    content_encoding: str | None = None
    content_disposition: str | None = None
    cache_control: str | None = None
    metadata: dict[str, str] | None = None
    crc32c: str | None = None
    etag: str | None = None
