import uuid
from types import SimpleNamespace
from unittest.mock import patch

import pytest
from fastapi import HTTPException

from errors import TransformError
from models.images import Images
from services import image_service, storage_service
from services.image_transform import (
    GeminiImageTransformer,
    ImageTransformer,
    ReferenceImage,
    TransformOptions,
    TransformedImage,
    build_transform_prompt,
)

PHOTO = b"\xff\xd8\xff\xe0fake-jpeg"


class StubTransformer(ImageTransformer):
    def __init__(self, error=None):
        self.error = error
        self.calls = []

    def transform(self, image_bytes, mime_type, options):
        self.calls.append((image_bytes, mime_type, options))
        if self.error:
            raise self.error
        return TransformedImage(data=b"illustration", mime_type="image/png")


@pytest.fixture
def image(db, owner, book):
    return image_service.add_image(db, owner, book.pages[0].id, PHOTO, "image/jpeg")


def test_add_image_stores_original(db, image):
    assert image.generation_status == "pending"
    assert image.order == 1
    assert storage_service.read_bytes(image.original_key) == PHOTO


def test_transform_success(db, image):
    transformer = StubTransformer()

    result = image_service.transform_image(db, image.id, transformer, style="watercolor")

    assert result.generation_status == "completed"
    assert result.last_error is None
    assert storage_service.read_bytes(result.transformed_key) == b"illustration"
    _, mime_type, options = transformer.calls[0]
    assert mime_type == "image/jpeg"
    assert options.style == "watercolor"


def test_transform_failure_is_recorded(db, image):
    result = image_service.transform_image(db, image.id, StubTransformer(error=TransformError("quota exceeded")))

    assert result.generation_status == "failed"
    assert result.last_error == "transform failed: quota exceeded"
    assert result.transformed_key is None


def test_storage_error_marks_image_failed_and_allows_retry(db, owner, image):
    with patch("services.image_service.storage_service.save_bytes", side_effect=PermissionError("read-only volume")):
        result = image_service.transform_image(db, image.id, StubTransformer())

    assert result.generation_status == "failed"
    assert result.last_error == "transform failed: read-only volume"

    retried = image_service.reset_for_transform(db, owner, image.id)
    assert retried.generation_status == "pending"
    assert retried.last_error is None


def test_unexpected_transformer_error_marks_image_failed(db, image):
    result = image_service.transform_image(db, image.id, StubTransformer(error=ValueError("bad response")))

    assert result.generation_status == "failed"
    assert result.last_error == "transform failed: bad response"


def test_transform_uses_character_references(db, owner, book, image):
    key = storage_service.build_key(owner.user_id, book.id, "characters", ".jpg")
    storage_service.save_bytes(key, b"kid-photo")
    book.character_images = [key]
    db.commit()
    transformer = StubTransformer()

    image_service.transform_image(db, image.id, transformer)

    options = transformer.calls[0][2]
    assert [r.data for r in options.character_references] == [b"kid-photo"]


def test_transform_missing_image(db):
    with pytest.raises(ValueError):
        image_service.transform_image(db, uuid.uuid4(), StubTransformer())


def test_options_validation():
    with pytest.raises(ValueError):
        TransformOptions(style="anime")
    with pytest.raises(ValueError):
        TransformOptions(character_references=[ReferenceImage(data=b"x")] * 6)


def test_prompt_mentions_references_only_when_given():
    plain = build_transform_prompt(TransformOptions(style="pixar"))
    assert "Pixar 3D animation style" in plain
    assert "reference images" not in plain

    with_refs = build_transform_prompt(
        TransformOptions(character_references=[ReferenceImage(data=b"x")], additional_prompt="Add a rainbow.")
    )
    assert "reference images" in with_refs
    assert with_refs.endswith("Add a rainbow.")


def test_gemini_transformer_extracts_inline_image():
    inline = SimpleNamespace(data=b"png-bytes", mime_type="image/png")
    response = SimpleNamespace(candidates=[
        SimpleNamespace(content=SimpleNamespace(parts=[SimpleNamespace(inline_data=None, text="here"),
                                                       SimpleNamespace(inline_data=inline)]))
    ])
    with patch("services.image_transform.genai") as genai:
        genai.GenerativeModel.return_value.generate_content.return_value = response
        transformer = GeminiImageTransformer(api_key="key", model_name="gemini-3-pro-image-preview")
        result = transformer.transform(PHOTO, "image/jpeg", TransformOptions())

    assert result.data == b"png-bytes"
    assert result.mime_type == "image/png"
    parts = genai.GenerativeModel.return_value.generate_content.call_args[0][0]
    assert parts[1] == {"mime_type": "image/jpeg", "data": PHOTO}


def test_gemini_transformer_without_image_raises():
    response = SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=[]))])
    with patch("services.image_transform.genai") as genai:
        genai.GenerativeModel.return_value.generate_content.return_value = response
        transformer = GeminiImageTransformer(api_key="key", model_name="m")
        with pytest.raises(TransformError, match="No image generated"):
            transformer.transform(PHOTO, "image/jpeg", TransformOptions())


def test_gemini_transformer_wraps_provider_errors():
    with patch("services.image_transform.genai") as genai:
        genai.GenerativeModel.return_value.generate_content.side_effect = RuntimeError("503 overloaded")
        transformer = GeminiImageTransformer(api_key="key", model_name="m")
        with pytest.raises(TransformError, match="transform failed: 503 overloaded"):
            transformer.transform(PHOTO, "image/jpeg", TransformOptions())


# ============================================
# Endpoints
# ============================================

def test_upload_queues_transform(client, db, book, owner_headers, queued_tasks):
    page = book.pages[0]

    response = client.post(
        f"/pages/{page.id}/images",
        files={"file": ("beach.jpg", PHOTO, "image/jpeg")},
        headers=owner_headers,
    )

    assert response.status_code == 201
    data = response.json()
    assert data["generation_status"] == "pending"
    assert data["original_url"].startswith("http://localhost:8000/media/")
    queued_tasks["page_transform"].delay.assert_called_once_with(data["id"])


def test_upload_refused_for_other_user(client, db, book, other_headers, queued_tasks):
    response = client.post(
        f"/pages/{book.pages[0].id}/images",
        files={"file": ("beach.jpg", PHOTO, "image/jpeg")},
        headers=other_headers,
    )

    assert response.status_code == 403
    assert db.query(Images).count() == 0
    queued_tasks["page_transform"].delay.assert_not_called()


def test_upload_rejects_non_images(client, book, owner_headers, queued_tasks):
    response = client.post(
        f"/pages/{book.pages[0].id}/images",
        files={"file": ("notes.txt", b"hello", "text/plain")},
        headers=owner_headers,
    )
    assert response.status_code == 400


def test_page_holds_at_most_three_images(db, owner, book):
    page_id = book.pages[0].id
    for _ in range(3):
        image_service.add_image(db, owner, page_id, PHOTO, "image/jpeg")

    with pytest.raises(HTTPException) as exc:
        image_service.add_image(db, owner, page_id, PHOTO, "image/jpeg")
    assert exc.value.status_code == 400


def test_retry_transform_endpoint(client, db, image, owner_headers, other_headers, queued_tasks):
    image.generation_status = "failed"
    image.last_error = "transform failed: quota"
    db.commit()

    assert client.post(f"/images/{image.id}/transform", json={}, headers=other_headers).status_code == 403

    response = client.post(f"/images/{image.id}/transform", json={"style": "pixar"}, headers=owner_headers)

    assert response.status_code == 202
    assert response.json()["generation_status"] == "pending"
    assert response.json()["last_error"] is None
    queued_tasks["image_transform"].delay.assert_called_once_with(str(image.id), "pixar")


def test_delete_image(client, db, image, owner_headers, other_headers):
    original_key = image.original_key
    assert client.delete(f"/images/{image.id}", headers=other_headers).status_code == 403

    response = client.delete(f"/images/{image.id}", headers=owner_headers)

    assert response.status_code == 204
    assert db.query(Images).count() == 0
    assert not storage_service.exists(original_key)
