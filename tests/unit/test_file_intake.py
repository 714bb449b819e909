"""Unit tests for upload validation and storage"""

import asyncio
import re
import pytest

from backend.app.services.file_intake import FileIntake, REQUIRED_FILE_FIELDS
from backend.app.core.exceptions import ValidationException, PayloadTooLargeException
from tests.conftest import make_upload, upload_set

PDF = "application/pdf"


class TestValidate:
    """Checks performed before anything is written"""

    def test_accepts_three_documents(self, file_intake):
        present = file_intake.validate(upload_set())
        assert set(present) == set(REQUIRED_FILE_FIELDS)

    def test_accepts_word_documents(self, file_intake):
        files = upload_set(
            sop=make_upload("sop.docx", content_type="application/vnd.openxmlformats-officedocument.wordprocessingml.document"),
            recommendationLetter=make_upload("letter.DOC", content_type="application/msword"),
        )
        assert len(file_intake.validate(files)) == 3

    def test_missing_slot_is_named(self, file_intake):
        files = [pair for pair in upload_set() if pair[0] != "sop"]

        with pytest.raises(ValidationException) as exc_info:
            file_intake.validate(files)
        assert exc_info.value.details["missing_files"] == ["sop"]

    def test_blank_file_input_counts_as_missing(self, file_intake):
        files = upload_set(resume=make_upload("", data=b""))

        with pytest.raises(ValidationException) as exc_info:
            file_intake.validate(files)
        assert exc_info.value.details["missing_files"] == ["resume"]

    def test_unknown_slot_rejected(self, file_intake):
        files = [pair for pair in upload_set() if pair[0] != "sop"] + [("photo", make_upload("me.pdf"))]

        with pytest.raises(ValidationException) as exc_info:
            file_intake.validate(files)
        assert exc_info.value.details["unknown_files"] == ["photo"]

    def test_fourth_file_is_payload_too_large(self, file_intake):
        files = upload_set() + [("extra", make_upload("extra.pdf"))]

        with pytest.raises(PayloadTooLargeException) as exc_info:
            file_intake.validate(files)
        assert exc_info.value.status_code == 413
        assert exc_info.value.limit_name == "max_files"
        assert exc_info.value.limit == 3

    def test_same_slot_twice_rejected(self, file_intake):
        files = [pair for pair in upload_set() if pair[0] != "sop"] + [("resume", make_upload("again.pdf"))]

        with pytest.raises(ValidationException) as exc_info:
            file_intake.validate(files)
        assert exc_info.value.details["duplicate_files"] == ["resume"]

    @pytest.mark.parametrize("filename,content_type", [
        ("resume.png", "image/png"),
        ("resume.pdf", "image/png"),
        ("resume.exe", PDF),
        ("resume", PDF),
    ])
    def test_wrong_type_rejected(self, file_intake, filename, content_type):
        files = upload_set(resume=make_upload(filename, content_type=content_type))

        with pytest.raises(ValidationException) as exc_info:
            file_intake.validate(files)
        assert exc_info.value.message == "Only PDF and Word documents are allowed"
        assert exc_info.value.details["field"] == "resume"

    def test_declared_size_over_limit(self, upload_dir):
        intake = FileIntake(upload_dir=str(upload_dir), max_file_size=10)
        files = upload_set(sop=make_upload("sop.pdf", data=b"x" * 11))

        with pytest.raises(PayloadTooLargeException) as exc_info:
            intake.validate(files)
        assert exc_info.value.limit_name == "max_file_size"
        assert exc_info.value.limit == 10

    def test_file_at_limit_accepted(self, upload_dir):
        intake = FileIntake(upload_dir=str(upload_dir), max_file_size=10)
        files = upload_set(sop=make_upload("sop.pdf", data=b"x" * 10))

        assert len(intake.validate(files)) == 3


class TestStore:
    """Writing uploads to disk"""

    async def test_store_creates_directory_and_writes_bytes(self, file_intake, upload_dir):
        assert not upload_dir.exists()

        stored = await file_intake.store("resume", make_upload("My CV.PDF", data=b"%PDF content"))

        assert stored.path.parent == upload_dir
        assert stored.path.read_bytes() == b"%PDF content"
        assert stored.size == len(b"%PDF content")
        assert re.fullmatch(r"\d{13}-[0-9a-f]{16}-resume\.pdf", stored.filename)

    async def test_disk_io_runs_in_worker_threads(self, file_intake, monkeypatch):
        offloaded = []
        run_in_thread = asyncio.to_thread

        async def recording_to_thread(func, *args, **kwargs):
            offloaded.append(func.__name__)
            return await run_in_thread(func, *args, **kwargs)

        monkeypatch.setattr(asyncio, "to_thread", recording_to_thread)
        data = b"%PDF" + b"x" * (FileIntake.CHUNK_SIZE + 10)

        stored = await file_intake.store("resume", make_upload("cv.pdf", data=data))

        assert stored.path.read_bytes() == data
        assert offloaded == ["open", "write", "write", "close"]

    async def test_generated_names_are_unique(self, file_intake):
        names = {file_intake.generate_filename("resume", "cv.pdf") for _ in range(200)}
        assert len(names) == 200

    async def test_undeclared_oversize_stream_aborts_and_leaves_nothing(self, upload_dir):
        intake = FileIntake(upload_dir=str(upload_dir), max_file_size=8)
        upload = make_upload("cv.pdf", data=b"x" * 20, declared_size=False)

        with pytest.raises(PayloadTooLargeException):
            await intake.store("resume", upload)

        assert list(upload_dir.iterdir()) == []

    async def test_store_all_cleans_up_after_failure(self, upload_dir):
        intake = FileIntake(upload_dir=str(upload_dir), max_file_size=8)
        files = {
            "resume": make_upload("cv.pdf", data=b"small"),
            "sop": make_upload("sop.pdf", data=b"small"),
            "recommendationLetter": make_upload("letter.pdf", data=b"x" * 20, declared_size=False),
        }

        with pytest.raises(PayloadTooLargeException):
            await intake.store_all(files)

        assert list(upload_dir.iterdir()) == []

    async def test_cleanup_removes_files(self, file_intake, upload_dir):
        stored = await file_intake.store_all({name: make_upload(f"{name}.pdf") for name in REQUIRED_FILE_FIELDS})
        assert len(list(upload_dir.iterdir())) == 3

        file_intake.cleanup(stored)

        assert list(upload_dir.iterdir()) == []

    def test_public_url(self):
        assert FileIntake.public_url("a.pdf", "/uploads/") == "/uploads/a.pdf"
