import pytest

from resumeboost.schemas import PreferencesPayload
from resumeboost.services.errors import NotFound, ValidationError
from resumeboost.services.preferences_repository import PreferencesRepository
from resumeboost.services.preferences_service import PreferencesService
from resumeboost.services.resume_storage import LocalBucketStorage


@pytest.fixture
def storage(tmp_path):
    return LocalBucketStorage(root=tmp_path / "storage", public_base_url="https://files.example.com/storage")


@pytest.fixture
def preferences(database_url, storage):
    return PreferencesService(repository=PreferencesRepository(database_url=database_url), storage=storage)


def test_save_and_fetch_preferences(preferences):
    payload = PreferencesPayload(
        passout_year=2024,
        role_type="internship",
        tech_interests=["python", "ml"],
        preferred_modes=["remote"],
    )

    saved = preferences.save_preferences("user-1", payload)
    fetched = preferences.get_preferences("user-1")

    assert saved.id == fetched.id
    assert fetched.tech_interests == ["python", "ml"]
    assert fetched.role_type == "internship"
    assert not preferences.has_completed_onboarding("user-1")


def test_save_is_an_upsert_keeping_unsent_fields(preferences):
    preferences.save_preferences("user-1", PreferencesPayload(passout_year=2023, tech_interests=["go"]))
    updated = preferences.save_preferences("user-1", PreferencesPayload.model_validate({"role_type": "fulltime"}))

    assert updated.passout_year == 2023
    assert updated.tech_interests == ["go"]
    assert updated.role_type == "fulltime"


def test_update_single_field(preferences):
    preferences.save_preferences("user-1", PreferencesPayload(passout_year=2023))

    updated = preferences.update_preference_field("user-1", "passout_year", 2025)

    assert updated.passout_year == 2025


def test_update_field_validation(preferences):
    preferences.save_preferences("user-1", PreferencesPayload())

    with pytest.raises(ValidationError):
        preferences.update_preference_field("user-1", "favourite_colour", "blue")
    with pytest.raises(ValidationError):
        preferences.update_preference_field("user-1", "passout_year", 1800)
    with pytest.raises(NotFound):
        preferences.update_preference_field("user-2", "passout_year", 2024)


def test_onboarding_completion(preferences):
    with pytest.raises(NotFound):
        preferences.complete_onboarding("user-1")

    preferences.save_preferences("user-1", PreferencesPayload())
    preferences.complete_onboarding("user-1")

    assert preferences.has_completed_onboarding("user-1")


def test_delete_preferences(preferences):
    preferences.save_preferences("user-1", PreferencesPayload())

    assert preferences.delete_preferences("user-1") is True
    assert preferences.get_preferences("user-1") is None
    assert preferences.delete_preferences("user-1") is False


def test_resume_upload_and_delete(preferences, storage):
    url = preferences.upload_resume("user-1", "My Resume.PDF", b"%PDF-1.4")

    assert url.startswith("https://files.example.com/storage/user-resumes/user-1/")
    assert url.endswith(".pdf")
    path = storage.path_from_url(url)
    assert (storage.root / storage.bucket / path).read_bytes() == b"%PDF-1.4"

    assert preferences.delete_resume("user-2", url) is False
    assert preferences.delete_resume("user-1", url) is True
    assert not (storage.root / storage.bucket / path).exists()


def test_resume_upload_rejects_unsupported_files(preferences):
    with pytest.raises(ValidationError):
        preferences.upload_resume("user-1", "resume.exe", b"MZ")
    with pytest.raises(ValidationError):
        preferences.upload_resume("user-1", "resume.pdf", b"")


def test_storage_refuses_paths_outside_bucket(storage):
    with pytest.raises(ValueError):
        storage.upload("../escape.txt", b"x")


def test_resume_upload_outside_bucket_is_a_validation_error(preferences, storage):
    with pytest.raises(ValidationError):
        preferences.upload_resume("../escape", "resume.pdf", b"%PDF-1.4")
    assert not (storage.root / "escape").exists()
