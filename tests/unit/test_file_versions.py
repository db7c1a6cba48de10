"""
Unit tests for the file version chain manager.
"""
import pytest

from app.core.config import settings
from app.core.exceptions import (
    FileNotFound,
    NotAMember,
    PayloadTooLarge,
    StorageError,
    UnsupportedType,
)
from app.crud import file_version_crud
from app.model.file import File
from app.model.file_version import FileVersion
from app.service.file_versions import (
    FileVersionService,
    check_upload,
    content_hash,
    sanitize_filename,
)
from app.storage import BlobStore, LocalBlobStore


class RecordingBlobStore(BlobStore):
    """Keeps blobs in memory; optionally fails every put."""

    def __init__(self, fail_put: bool = False):
        self.blobs = {}
        self.deleted = []
        self.fail_put = fail_put

    def put(self, key, data, content_type):
        if self.fail_put:
            raise StorageError("Failed to store file. Please try again.")
        self.blobs[key] = data

    def get(self, key):
        return self.blobs[key]

    def delete(self, key):
        self.deleted.append(key)
        self.blobs.pop(key, None)


@pytest.fixture
def room_setup(make_user, make_room):
    alice = make_user("Alice")
    bob = make_user("Bob")
    room = make_room(alice, members=[bob])
    return alice, bob, room


class TestSanitizeFilename:
    def test_strips_directories(self):
        assert sanitize_filename("../../etc/passwd") == "passwd"
        assert sanitize_filename("C:\\Users\\me\\plan.pdf") == "plan.pdf"

    def test_replaces_unsafe_characters(self):
        assert sanitize_filename("my plan (final).PDF") == "my_plan_final.pdf"

    def test_never_empty_or_hidden(self):
        assert sanitize_filename("") == "file"
        assert sanitize_filename("...") == "file"
        assert sanitize_filename(".env") == "env"


class TestCheckUpload:
    def test_accepts_allowed_type(self):
        check = check_upload(10, "plan.pdf", "application/pdf")
        assert check.extension == ".pdf"
        assert check.mime_type == "application/pdf"

    def test_generic_mime_is_inferred_from_extension(self):
        assert check_upload(10, "plan.pdf", "application/octet-stream").mime_type == "application/pdf"
        assert check_upload(10, "notes.txt", None).mime_type == "text/plain"

    def test_rejects_disallowed_extension(self):
        with pytest.raises(UnsupportedType):
            check_upload(10, "tool.exe", "application/octet-stream")
        with pytest.raises(UnsupportedType):
            check_upload(10, "no_extension", "application/pdf")

    def test_rejects_mismatched_mime(self):
        with pytest.raises(UnsupportedType):
            check_upload(10, "plan.pdf", "application/x-msdownload")

    def test_size_limit_is_inclusive(self, monkeypatch):
        monkeypatch.setattr(settings, "MAX_UPLOAD_BYTES", 100)
        check_upload(100, "plan.pdf", "application/pdf")
        with pytest.raises(PayloadTooLarge):
            check_upload(101, "plan.pdf", "application/pdf")


class TestCreateOrUpdate:
    def test_new_file_starts_at_v1(self, db, room_setup, tmp_path):
        alice, _, room = room_setup
        service = FileVersionService(db, LocalBlobStore(str(tmp_path)))

        version = service.create_or_update(room.id, alice.id, b"%PDF-1 first", "plan.pdf", "application/pdf")

        assert version.version == "v1"
        assert version.version_number == 1
        assert version.size == len(b"%PDF-1 first")
        assert version.hash == content_hash(b"%PDF-1 first")
        assert version.file.original_name == "plan.pdf"
        assert (tmp_path / version.storage_key).read_bytes() == b"%PDF-1 first"

    def test_update_appends_next_label(self, db, room_setup):
        alice, bob, room = room_setup
        service = FileVersionService(db, RecordingBlobStore())

        v1 = service.create_or_update(room.id, alice.id, b"one", "plan.pdf", "application/pdf")
        v2 = service.create_or_update(
            room.id, bob.id, b"two", "plan.pdf", "application/pdf",
            target_file_id=v1.file_id, comment="  Revised budget  ",
        )

        assert v2.file_id == v1.file_id
        assert v2.version == "v2"
        assert v2.comment == "Revised budget"
        assert v2.hash != v1.hash
        assert [v.version for v in service.list_versions(v1.file_id)] == ["v1", "v2"]

    def test_identical_content_still_adds_version(self, db, room_setup):
        alice, _, room = room_setup
        service = FileVersionService(db, RecordingBlobStore())

        v1 = service.create_or_update(room.id, alice.id, b"same", "plan.pdf", "application/pdf")
        v2 = service.create_or_update(
            room.id, alice.id, b"same", "plan.pdf", "application/pdf", target_file_id=v1.file_id
        )

        assert v2.version == "v2"
        assert v2.hash == v1.hash

    def test_versions_sort_numerically(self, db, room_setup):
        """v10 comes after v9, not after v1."""
        alice, _, room = room_setup
        service = FileVersionService(db, RecordingBlobStore())

        first = service.create_or_update(room.id, alice.id, b"0", "notes.txt", "text/plain")
        for i in range(1, 11):
            service.create_or_update(
                room.id, alice.id, str(i).encode(), "notes.txt", "text/plain", target_file_id=first.file_id
            )

        labels = [v.version for v in service.list_versions(first.file_id)]
        assert labels == [f"v{n}" for n in range(1, 12)]

    def test_non_member_rejected(self, db, room_setup, make_user):
        _, _, room = room_setup
        carol = make_user("Carol")
        blobs = RecordingBlobStore()

        with pytest.raises(NotAMember):
            FileVersionService(db, blobs).create_or_update(room.id, carol.id, b"x", "plan.pdf", "application/pdf")
        assert blobs.blobs == {}

    def test_oversize_never_writes_blob(self, db, room_setup, monkeypatch):
        alice, _, room = room_setup
        monkeypatch.setattr(settings, "MAX_UPLOAD_BYTES", 4)
        blobs = RecordingBlobStore()

        with pytest.raises(PayloadTooLarge):
            FileVersionService(db, blobs).create_or_update(room.id, alice.id, b"too big", "plan.pdf", "application/pdf")

        assert blobs.blobs == {}
        assert db.query(FileVersion).count() == 0

    def test_unsupported_type_leaves_listing_unchanged(self, db, room_setup):
        alice, _, room = room_setup
        service = FileVersionService(db, RecordingBlobStore())
        service.create_or_update(room.id, alice.id, b"one", "plan.pdf", "application/pdf")

        with pytest.raises(UnsupportedType):
            service.create_or_update(room.id, alice.id, b"MZ", "tool.exe", "application/octet-stream")

        files = service.list_files(room.id)
        assert [f.original_name for f in files] == ["plan.pdf"]

    def test_unknown_target_file(self, db, room_setup, make_room):
        alice, _, room = room_setup
        other_room = make_room(alice, name="other")
        service = FileVersionService(db, RecordingBlobStore())
        elsewhere = service.create_or_update(other_room.id, alice.id, b"x", "plan.pdf", "application/pdf")

        # A file from another room is not a valid target
        with pytest.raises(FileNotFound):
            service.create_or_update(
                room.id, alice.id, b"y", "plan.pdf", "application/pdf", target_file_id=elsewhere.file_id
            )

    def test_blob_failure_leaves_no_metadata(self, db, room_setup):
        alice, _, room = room_setup

        with pytest.raises(StorageError):
            FileVersionService(db, RecordingBlobStore(fail_put=True)).create_or_update(
                room.id, alice.id, b"x", "plan.pdf", "application/pdf"
            )

        assert db.query(File).count() == 0
        assert db.query(FileVersion).count() == 0

    def test_label_conflict_retries_with_next_number(self, db, room_setup, monkeypatch):
        """A writer that read a stale count loses on the unique constraint and retries."""
        alice, bob, room = room_setup
        service = FileVersionService(db, RecordingBlobStore())
        v1 = service.create_or_update(room.id, alice.id, b"one", "plan.pdf", "application/pdf")

        original_count = file_version_crud.count_by_file
        calls = {"n": 0}

        def stale_count(session, *, file_id):
            calls["n"] += 1
            if calls["n"] == 1:
                return 0
            return original_count(session, file_id=file_id)

        monkeypatch.setattr(file_version_crud, "count_by_file", stale_count)

        v2 = service.create_or_update(
            room.id, bob.id, b"two", "plan.pdf", "application/pdf", target_file_id=v1.file_id
        )

        assert calls["n"] == 2
        assert v2.version == "v2"
        labels = [v.version for v in service.list_versions(v1.file_id)]
        assert labels == ["v1", "v2"]

    def test_exhausted_retries_discard_blob(self, db, room_setup, monkeypatch):
        alice, _, room = room_setup
        blobs = RecordingBlobStore()
        service = FileVersionService(db, blobs)
        v1 = service.create_or_update(room.id, alice.id, b"one", "plan.pdf", "application/pdf")

        monkeypatch.setattr(file_version_crud, "count_by_file", lambda session, *, file_id: 0)

        with pytest.raises(StorageError):
            service.create_or_update(room.id, alice.id, b"two", "plan.pdf", "application/pdf", target_file_id=v1.file_id)

        assert len(blobs.deleted) == 1
        assert list(blobs.blobs) == [v1.storage_key]
        assert [v.version for v in service.list_versions(v1.file_id)] == ["v1"]


def test_open_version_checks_membership(db, room_setup, make_user):
    alice, bob, room = room_setup
    service = FileVersionService(db, RecordingBlobStore())
    v1 = service.create_or_update(room.id, alice.id, b"payload", "plan.pdf", "application/pdf")

    version, data = service.open_version(bob.id, v1.id)
    assert version.id == v1.id
    assert data == b"payload"

    with pytest.raises(NotAMember):
        service.open_version(make_user("Carol").id, v1.id)
