import pytest

from utils.file_storage import FileStorage, InvalidFileIdError


class TestFileStorage:
    def test_store_and_read(self, tmp_path):
        storage = FileStorage(tmp_path / "store")
        path = storage.store_file("bulletins_G1_1.zip", b"PK\x03\x04data")
        assert path.is_file()
        assert storage.has_file("bulletins_G1_1.zip")
        assert storage.read_file("bulletins_G1_1.zip") == b"PK\x03\x04data"
        assert storage.get_all_file_ids() == ["bulletins_G1_1.zip"]

    def test_missing_file(self, tmp_path):
        storage = FileStorage(tmp_path)
        assert storage.has_file("nope.zip") is False
        with pytest.raises(FileNotFoundError):
            storage.get_file_path("nope.zip")
        assert storage.delete_file("nope.zip") is False

    def test_delete(self, tmp_path):
        storage = FileStorage(tmp_path)
        storage.store_file("a.zip", b"x")
        assert storage.delete_file("a.zip") is True
        assert storage.get_all_file_ids() == []

    def test_overwrite(self, tmp_path):
        storage = FileStorage(tmp_path)
        storage.store_file("a.zip", b"first")
        storage.store_file("a.zip", b"second")
        assert storage.read_file("a.zip") == b"second"

    @pytest.mark.parametrize("file_id", ["", "../secret", "a/b.zip", ".hidden", "..", "a b.zip"])
    def test_rejects_unsafe_ids(self, tmp_path, file_id):
        storage = FileStorage(tmp_path)
        with pytest.raises(InvalidFileIdError):
            storage.has_file(file_id)

    def test_listing_without_directory(self, tmp_path):
        assert FileStorage(tmp_path / "missing").get_all_file_ids() == []
