"""
Tests for storage backends.

Tests focus on:
- Object naming (nested folders, numbered parts)
- Local storage round trips, legacy single-object blobs, cleanup on failure
- Checksums and byte inversion
- Cloud Storage against an in-memory client
"""

import base64
from unittest.mock import patch

import pytest

from vhd.catalog import DriveRecord
from vhd.config import VHDConfig
from vhd.errors import StorageError
from vhd.storage import LocalStorage, open_storage
from vhd.storage.checksum import crc32c, crc32c_file, decode_crc32c, format_crc32c, negate
from vhd.storage.paths import content_id_to_path, object_names, part_count

from conftest import BEACH_ID, CHUNK_SIZE

BEACH_PATH = "7b/5d/41/cc/" + BEACH_ID


class TestObjectNames:

    def test_content_id_to_path(self):
        assert content_id_to_path(BEACH_ID) == BEACH_PATH

    def test_short_id_rejected(self):
        with pytest.raises(StorageError):
            content_id_to_path("abc")

    @pytest.mark.parametrize("size,count", [(0, 1), (1, 1), (16, 1), (17, 2), (48, 3)])
    def test_part_count(self, size, count):
        assert part_count(size, CHUNK_SIZE) == count

    def test_numbered_parts(self):
        assert object_names(BEACH_ID, "3") == [
            BEACH_PATH + ".000",
            BEACH_PATH + ".001",
            BEACH_PATH + ".002",
        ]

    def test_empty_metadata_is_single_object(self):
        assert object_names(BEACH_ID, "") == [BEACH_PATH]

    @pytest.mark.parametrize("metadata", ["x", "-1", "1.5"])
    def test_bad_metadata(self, metadata):
        with pytest.raises(StorageError):
            object_names(BEACH_ID, metadata)


class TestChecksum:

    def test_known_value(self):
        assert crc32c(b"123456789") == 0xE3069283

    def test_file_matches_bytes(self, tmp_path):
        path = tmp_path / "data"
        path.write_bytes(b"123456789")
        assert crc32c_file(path) == 0xE3069283

    def test_decode_cloud_form(self):
        encoded = base64.b64encode((0xE3069283).to_bytes(4, "big")).decode()
        assert decode_crc32c(encoded) == 0xE3069283

    def test_format(self):
        assert format_crc32c(0x1F) == "0000001f"

    def test_negate(self):
        assert negate(b"\x00\xff\x0f") == b"\xff\x00\xf0"
        assert negate(negate(b"hello")) == b"hello"


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(tmp_path / "blobs", CHUNK_SIZE)


@pytest.fixture
def payload(tmp_path):
    path = tmp_path / "payload.bin"
    path.write_bytes(bytes(range(40)))
    return path


class TestLocalStorage:

    def test_name(self, storage, tmp_path):
        assert storage.name == f"local::{tmp_path / 'blobs'}"

    def test_upload_splits_into_parts(self, storage, payload, tmp_path):
        """
        Given: A 40 byte file and 16 byte chunks
        When: Uploading it
        Then: Three parts are stored and the metadata records the count
        """
        metadata = storage.upload(payload, BEACH_ID)

        assert metadata == "3"
        assert storage.list_all() == [
            BEACH_PATH + ".000",
            BEACH_PATH + ".001",
            BEACH_PATH + ".002",
        ]
        assert (tmp_path / "blobs" / (BEACH_PATH + ".002")).stat().st_size == 8

    def test_round_trip(self, storage, payload, tmp_path):
        metadata = storage.upload(payload, BEACH_ID)
        destination = tmp_path / "copy.bin"
        storage.download(BEACH_ID, metadata, destination)
        assert destination.read_bytes() == payload.read_bytes()

    def test_empty_file(self, storage, tmp_path):
        empty = tmp_path / "empty"
        empty.write_bytes(b"")
        assert storage.upload(empty, BEACH_ID) == "1"
        destination = tmp_path / "copy"
        storage.download(BEACH_ID, "1", destination)
        assert destination.read_bytes() == b""

    def test_legacy_blob(self, storage, tmp_path):
        """
        Given: A blob stored whole under the storage root with empty metadata
        When: Downloading and inspecting it
        Then: The single object is used
        """
        (tmp_path / "blobs").mkdir()
        (tmp_path / "blobs" / BEACH_ID).write_bytes(b"123456789")

        destination = tmp_path / "copy"
        storage.download(BEACH_ID, "", destination)
        assert destination.read_bytes() == b"123456789"

        [stat] = storage.remote_stat(BEACH_ID, "")
        assert stat.name == BEACH_ID
        assert stat.size == 9
        assert stat.crc32c == 0xE3069283

    def test_remote_stat(self, storage, payload):
        metadata = storage.upload(payload, BEACH_ID)
        stats = storage.remote_stat(BEACH_ID, metadata)
        assert [s.size for s in stats] == [16, 16, 8]
        assert stats[0].crc32c == crc32c(bytes(range(16)))

    def test_missing_blob(self, storage, tmp_path):
        destination = tmp_path / "copy"
        with pytest.raises(StorageError):
            storage.download(BEACH_ID, "2", destination)
        assert not destination.exists()
        with pytest.raises(StorageError):
            storage.remote_stat(BEACH_ID, "2")

    def test_missing_source(self, storage, tmp_path):
        with pytest.raises(StorageError):
            storage.upload(tmp_path / "nothing", BEACH_ID)

    def test_checksum_mismatch_removes_parts(self, storage, payload):
        """
        Given: A stored part whose checksum does not match what was written
        When: Uploading
        Then: StorageError is raised and no part is left behind
        """
        with patch("vhd.storage.local.crc32c_file", return_value=0):
            with pytest.raises(StorageError):
                storage.upload(payload, BEACH_ID)
        assert storage.list_all() == []

    def test_list_missing_root(self, storage):
        with pytest.raises(StorageError):
            storage.list_all()


class TestOpenStorage:

    def test_local(self, tmp_path):
        record = DriveRecord(1, "photos", "local", str(tmp_path))
        storage = open_storage(record)
        assert isinstance(storage, LocalStorage)
        assert storage.chunk_size == VHDConfig().storage.chunk_size

    def test_chunk_size_from_config(self, tmp_path):
        config = VHDConfig()
        config.storage.chunk_size = 1024
        storage = open_storage(DriveRecord(1, "photos", "local", str(tmp_path)), config)
        assert storage.chunk_size == 1024

    def test_unknown_kind(self, tmp_path):
        assert open_storage(DriveRecord(1, "photos", "ftp", str(tmp_path))) is None


class FakeBlob:

    def __init__(self, bucket, name):
        self.bucket = bucket
        self.name = name
        self.crc32c = None
        self.size = None

    def upload_from_string(self, data, content_type=None, timeout=None):
        self.bucket.objects[self.name] = bytes(data)

    def reload(self):
        data = self.bucket.objects[self.name]
        checksum = 0 if self.bucket.corrupt_checksums else crc32c(data)
        self.crc32c = base64.b64encode(checksum.to_bytes(4, "big")).decode()
        self.size = len(data)

    def download_as_bytes(self, timeout=None):
        return self.bucket.objects[self.name]


class FakeBucket:

    def __init__(self):
        self.objects = {}
        self.corrupt_checksums = False

    def blob(self, name):
        return FakeBlob(self, name)

    def get_blob(self, name):
        if name not in self.objects:
            return None
        blob = FakeBlob(self, name)
        blob.reload()
        return blob


class FakeClient:

    def __init__(self):
        self.buckets = {}

    def bucket(self, name):
        return self.buckets.setdefault(name, FakeBucket())

    def list_blobs(self, name):
        return [FakeBlob(self.bucket(name), key) for key in sorted(self.bucket(name).objects)]


class TestGoogleCloudStorage:

    @pytest.fixture
    def client(self):
        return FakeClient()

    @pytest.fixture
    def bucket_storage(self, client):
        pytest.importorskip("google.cloud.storage")
        from vhd.storage.gcs import GoogleCloudStorage

        return GoogleCloudStorage("my-bucket", chunk_size=CHUNK_SIZE, client=client, upload_pause=0)

    def test_name(self, bucket_storage):
        assert bucket_storage.name == "gcs::my-bucket"

    def test_upload_inverts_bytes(self, bucket_storage, client, payload):
        """
        Given: A 40 byte file
        When: Uploading it to the bucket
        Then: Three objects hold the inverted bytes
        """
        assert bucket_storage.upload(payload, BEACH_ID) == "3"

        objects = client.bucket("my-bucket").objects
        assert sorted(objects) == [BEACH_PATH + ".000", BEACH_PATH + ".001", BEACH_PATH + ".002"]
        assert objects[BEACH_PATH + ".000"] == negate(bytes(range(16)))

    def test_round_trip(self, bucket_storage, payload, tmp_path):
        metadata = bucket_storage.upload(payload, BEACH_ID)
        destination = tmp_path / "copy.bin"
        bucket_storage.download(BEACH_ID, metadata, destination)
        assert destination.read_bytes() == payload.read_bytes()

    def test_checksum_mismatch(self, bucket_storage, client, payload):
        client.bucket("my-bucket").corrupt_checksums = True
        with pytest.raises(StorageError):
            bucket_storage.upload(payload, BEACH_ID)

    def test_remote_stat(self, bucket_storage, payload):
        metadata = bucket_storage.upload(payload, BEACH_ID)
        stats = bucket_storage.remote_stat(BEACH_ID, metadata)
        assert [s.size for s in stats] == [16, 16, 8]
        assert stats[2].crc32c == crc32c(negate(bytes(range(32, 40))))

    def test_remote_stat_missing(self, bucket_storage):
        with pytest.raises(StorageError):
            bucket_storage.remote_stat(BEACH_ID, "1")

    def test_list_all(self, bucket_storage, payload):
        bucket_storage.upload(payload, BEACH_ID)
        assert len(bucket_storage.list_all()) == 3
