"""Object naming inside a storage backend."""

import math
from typing import List

from vhd.errors import StorageError

CONTENT_ID_LENGTH = 36


def content_id_to_path(content_id: str) -> str:
    """Spread blobs over nested folders keyed by the id's first bytes.

    Examples:
        >>> content_id_to_path("7b5d41cc-86d6-11ec-a8a3-0242ac120002")
        '7b/5d/41/cc/7b5d41cc-86d6-11ec-a8a3-0242ac120002'

    Raises:
        StorageError: The id is not a 36-character UUID string
    """
    if len(content_id) != CONTENT_ID_LENGTH:
        raise StorageError(f"length of content id {content_id} <> {CONTENT_ID_LENGTH}")
    return "/".join([
        content_id[:2], content_id[2:4], content_id[4:6], content_id[6:8], content_id,
    ])


def chunk_name(target: str, index: int) -> str:
    return f"{target}.{index:03d}"


def part_count(size: int, chunk_size: int) -> int:
    """Number of parts a file of ``size`` bytes is split into (at least one)."""
    return max(1, math.ceil(size / chunk_size))


def parse_part_count(metadata: str) -> int:
    """Read the part count recorded at upload time.

    Raises:
        StorageError: Metadata is not a non-negative integer
    """
    try:
        count = int(metadata)
    except ValueError:
        raise StorageError(f"wrong metadata: {metadata}") from None
    if count < 0:
        raise StorageError(f"wrong metadata: {metadata}")
    return count


def object_names(content_id: str, metadata: str) -> List[str]:
    """Names of the stored objects of a blob.

    An empty metadata string marks a blob stored as a single object.
    """
    target = content_id_to_path(content_id)
    if metadata == "":
        return [target]
    return [chunk_name(target, i) for i in range(parse_part_count(metadata))]
