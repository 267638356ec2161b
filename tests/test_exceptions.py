"""Tests for the exception hierarchy."""
from brain_mcp.exceptions import (
    BrainError,
    ErrorCode,
    FileOperationError,
    LinkError,
    ResourceNotFoundError,
    StorageError,
    ValidationError,
)


class TestExceptions:
    def test_to_dict(self):
        error = ResourceNotFoundError("abc")
        assert error.to_dict() == {
            "error": "ResourceNotFoundError",
            "code": 1001,
            "code_name": "RESOURCE_NOT_FOUND",
            "message": "Resource with ID 'abc' not found",
            "details": {"resource_id": "abc"},
        }

    def test_str_includes_code_and_details(self):
        error = LinkError("nope", source_id="a", target_id="b")
        assert str(error) == "[LINK_INVALID] nope (source_id=a, target_id=b)"
        assert str(BrainError("plain")) == "[VALIDATION_FAILED] plain"

    def test_storage_error_keeps_original(self):
        cause = RuntimeError("x" * 500)
        error = StorageError("failed", operation="upsert", original_error=cause)
        assert error.code == ErrorCode.STORAGE_WRITE_FAILED
        assert error.original_error is cause
        assert len(error.details["original_error"]) == 200

    def test_file_error_hides_directories(self):
        error = FileOperationError("failed", path="/home/me/vault/Secret.md", operation="create")
        assert error.details["path_hint"] == "Secret.md"
        assert "/home/me" not in str(error.to_dict())

    def test_validation_error_truncates_value(self):
        error = ValidationError("bad", field="title", value="y" * 300)
        assert len(error.details["value"]) == 100

    def test_hierarchy(self):
        for error in (
            ResourceNotFoundError("a"),
            StorageError("s"),
            FileOperationError("f"),
            ValidationError("v"),
            LinkError("l"),
        ):
            assert isinstance(error, BrainError)

    def test_error_codes(self):
        assert {code.name for code in ErrorCode} == {
            "RESOURCE_NOT_FOUND",
            "RESOURCE_PATH_CONFLICT",
            "NOTE_TITLE_INVALID",
            "LINK_INVALID",
            "LINK_ALREADY_EXISTS",
            "TAG_INVALID",
            "STORAGE_WRITE_FAILED",
            "STORAGE_CONNECTION_FAILED",
            "STORAGE_LOCK_TIMEOUT",
            "FILE_WRITE_FAILED",
            "FILE_DELETE_FAILED",
            "CONFIG_INVALID",
            "VALIDATION_FAILED",
        }
