"""Settings parsing and validation."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from photo_gallery.config import DEFAULT_MAX_FILE_SIZE, Settings


class TestSettings:

    def test_defaults(self, photo_root):
        settings = Settings(photo_dir=str(photo_root))

        assert settings.max_file_size == DEFAULT_MAX_FILE_SIZE == 52428800
        assert settings.max_files == 10
        assert settings.default_folder == "temp"
        assert settings.port == 3000
        assert settings.allowed_extensions_list == ["jpg", "jpeg", "png", "gif", "bmp", "webp"]

    def test_extension_list_is_normalized(self, photo_root):
        settings = Settings(photo_dir=str(photo_root), allowed_extensions=" JPG, .png,,jpg ,webp")

        assert settings.allowed_extensions_list == ["jpg", "png", "webp"]

    def test_cors_origins(self, photo_root):
        settings = Settings(photo_dir=str(photo_root), cors_origin="http://nas.local, http://localhost:5173")

        assert settings.cors_origins_list == ["http://nas.local", "http://localhost:5173"]

    def test_log_level_uppercased(self, photo_root):
        assert Settings(photo_dir=str(photo_root), log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self, photo_root):
        with pytest.raises(PydanticValidationError):
            Settings(photo_dir=str(photo_root), log_level="VERBOSE")

    @pytest.mark.parametrize("folder", ["", "a/b", "..", "a\\b"])
    def test_invalid_default_folder(self, photo_root, folder):
        with pytest.raises(PydanticValidationError):
            Settings(photo_dir=str(photo_root), default_folder=folder)

    def test_environment_variables(self, photo_root, monkeypatch):
        monkeypatch.setenv("MAX_FILES", "3")
        monkeypatch.setenv("PHOTO_DIR", str(photo_root))

        settings = Settings()

        assert settings.max_files == 3
        assert settings.photo_dir == str(photo_root)

    def test_frozen(self, photo_root):
        settings = Settings(photo_dir=str(photo_root))

        with pytest.raises(PydanticValidationError):
            settings.max_files = 99
