"""
Unit tests for application settings validation
"""

import pytest
from pydantic import ValidationError

from leaktrack.core.settings import AppSettings


def test_week_days_may_not_exceed_month_days():
    with pytest.raises(ValidationError):
        AppSettings(LEAKAGE_FREE_WEEK_DAYS=40, LEAKAGE_FREE_MONTH_DAYS=30)


def test_absolute_public_photo_url_is_accepted():
    settings = AppSettings(PHOTO_PUBLIC_BASE_URL="https://cdn.example/photos")

    assert settings.PHOTO_PUBLIC_BASE_URL == "https://cdn.example/photos"
    assert settings.PHOTO_MOUNT_PATH == "/photos"


def test_mount_path_trailing_slash_is_dropped():
    assert AppSettings(PHOTO_MOUNT_PATH="/media/repairs/").PHOTO_MOUNT_PATH == "/media/repairs"


@pytest.mark.parametrize("path", ["photos", "https://cdn.example/photos", "/", "//photos"])
def test_mount_path_must_be_a_path(path):
    with pytest.raises(ValidationError):
        AppSettings(PHOTO_MOUNT_PATH=path)


def test_cors_origins_from_comma_separated_string():
    settings = AppSettings(CORS_ORIGINS="https://a.example, https://b.example")

    assert settings.CORS_ORIGINS == ["https://a.example", "https://b.example"]
