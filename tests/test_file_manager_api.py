"""Tests for the file manager endpoints."""

import io
import math
from datetime import timedelta

import pytest
from fastapi import UploadFile
from fastapi.testclient import TestClient
from starlette.datastructures import Headers

from filemanager.api.deps import validated_upload
from filemanager.api.file_manager import content_disposition
from filemanager.core.config import settings
from filemanager.core.errors import ValidationError
from filemanager.core.security import create_access_token
from filemanager.main import app
from filemanager.services import pagination

from conftest import FILES_URL

RECORD_KEYS = {"id", "name", "mimetype", "size", "uploaded_at", "downloadUrl", "previewUrl"}


# ---------------------------------------------------------------- auth guard

def test_missing_authorization_header(client):
    response = client.get(f"{FILES_URL}/")

    assert response.status_code == 400
    assert response.json() == {"error": "invalid headers"}


def test_non_bearer_authorization_header(client):
    response = client.get(f"{FILES_URL}/", headers={"Authorization": "Basic YTpi"})

    assert response.status_code == 400
    assert response.json() == {"error": "invalid headers"}


def test_invalid_token(client):
    response = client.get(f"{FILES_URL}/", headers={"Authorization": "Bearer nonsense"})

    assert response.status_code == 401
    assert response.json() == {"error": "Invalid token"}


def test_expired_token(client, registered_user):
    token = create_access_token(
        {
            "sub": registered_user["id"],
            "id": registered_user["id"],
            "email": registered_user["email"],
            "first_name": registered_user["first_name"],
            "last_name": registered_user["last_name"],
        },
        expires_delta=timedelta(seconds=-5),
    )
    response = client.get(f"{FILES_URL}/", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
    assert response.json() == {"error": "Token expired"}


def test_token_without_user_claims(client):
    token = create_access_token({"sub": 1})
    response = client.get(f"{FILES_URL}/", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401


# --------------------------------------------------------------------- upload

def test_upload_returns_metadata(client, auth_headers):
    response = client.post(
        f"{FILES_URL}/",
        files={"file": ("report.pdf", b"%PDF-1.4 data", "application/pdf")},
        headers=auth_headers,
    )

    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "File uploaded successfully"
    assert body["data"]["name"] == "report.pdf"
    assert body["data"]["mimetype"] == "application/pdf"
    assert body["data"]["size"] == len(b"%PDF-1.4 data")
    assert set(body["data"]) == {"id", "name", "mimetype", "size"}


def test_upload_without_file(client, auth_headers):
    response = client.post(f"{FILES_URL}/", headers=auth_headers)

    assert response.status_code == 400
    assert response.json() == {"error": "Missing file"}


def test_upload_is_validated_before_token_check(client):
    response = client.post(f"{FILES_URL}/")

    assert response.status_code == 400
    assert response.json() == {"error": "Missing file"}


def test_upload_empty_file(client, auth_headers):
    response = client.post(
        f"{FILES_URL}/",
        files={"file": ("empty.txt", b"", "text/plain")},
        headers=auth_headers,
    )

    assert response.status_code == 400
    assert response.json() == {"error": "File size must be positive"}


def test_upload_too_large(client, auth_headers):
    response = client.post(
        f"{FILES_URL}/",
        files={"file": ("big.bin", b"\0" * (5 * 1024 * 1024 + 1), "application/octet-stream")},
        headers=auth_headers,
    )

    assert response.status_code == 400
    assert response.json() == {"error": "File size cannot exceed 5MB"}


# ---------------------------------------------------------- download/preview

def test_download_returns_identical_bytes(client, auth_headers, upload):
    payload = bytes(range(256)) * 4
    created = upload(name="pixels.png", content=payload, mimetype="image/png")

    response = client.get(f"{FILES_URL}/download/{created['id']}", headers=auth_headers)

    assert response.status_code == 200
    assert response.content == payload
    assert response.headers["content-type"] == "image/png"
    assert response.headers["content-disposition"] == 'attachment; filename="pixels.png"'


def test_preview_is_inline(client, auth_headers, upload):
    created = upload(name="pixels.png", content=b"\x89PNG", mimetype="image/png")

    response = client.get(f"{FILES_URL}/preview/{created['id']}", headers=auth_headers)

    assert response.status_code == 200
    assert response.content == b"\x89PNG"
    assert response.headers["content-disposition"] == 'inline; filename="pixels.png"'


def test_content_disposition_encodes_non_ascii_names():
    assert content_disposition("attachment", "r\u00e9sum\u00e9.txt") == \
        "attachment; filename*=utf-8''r%C3%A9sum%C3%A9.txt"
    assert content_disposition("inline", "plain.txt") == 'inline; filename="plain.txt"'


@pytest.mark.parametrize("method, path", [
    ("get", "download/999999"),
    ("get", "preview/999999"),
    ("delete", "999999"),
])
def test_unknown_id_is_not_found(client, auth_headers, method, path):
    response = getattr(client, method)(f"{FILES_URL}/{path}", headers=auth_headers)

    assert response.status_code == 404
    assert response.json() == {"error": "File not Found make sure to send correct id"}


@pytest.mark.parametrize("file_id", ["abc", "0", "-1", "1.5"])
def test_invalid_id_is_rejected(client, auth_headers, file_id):
    response = client.get(f"{FILES_URL}/download/{file_id}", headers=auth_headers)

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid file ID. ID must be a positive integer."}


# --------------------------------------------------------------------- delete

def test_delete_removes_file(client, auth_headers, upload):
    created = upload()

    response = client.delete(f"{FILES_URL}/{created['id']}", headers=auth_headers)
    assert response.status_code == 200
    assert response.json() == {"message": f"File deleted {created['id']} successfully"}

    response = client.get(f"{FILES_URL}/download/{created['id']}", headers=auth_headers)
    assert response.status_code == 404

    response = client.delete(f"{FILES_URL}/{created['id']}", headers=auth_headers)
    assert response.status_code == 404


# -------------------------------------------------------------------- listing

def test_unpaginated_listing_returns_everything(client, auth_headers, upload):
    ids = [upload(name=f"file{i}.txt")["id"] for i in range(3)]

    response = client.get(f"{FILES_URL}/", headers=auth_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["amount"] == 3
    assert "pagination" not in body
    assert [record["id"] for record in body["data"]] == ids
    for record in body["data"]:
        assert set(record) == RECORD_KEYS
        assert record["downloadUrl"] == f"http://testserver{FILES_URL}/download/{record['id']}"
        assert record["previewUrl"] == f"http://testserver{FILES_URL}/preview/{record['id']}"


def test_paginated_listing_envelope(client, auth_headers, upload):
    for i in range(5):
        upload(name=f"file{i}.txt")

    response = client.get(f"{FILES_URL}/?page=2&limit=2", headers=auth_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["amount"] == 2
    assert len(body["data"]) <= 2
    assert body["pagination"] == {
        "totalFiles": 5,
        "currentPage": 2,
        "limit": 2,
        "totalPages": math.ceil(5 / 2),
    }
    for record in body["data"]:
        assert set(record) == RECORD_KEYS


def test_last_page_is_partial(client, auth_headers, upload):
    for i in range(5):
        upload(name=f"file{i}.txt")

    response = client.get(f"{FILES_URL}/?page=3&limit=2", headers=auth_headers)

    assert response.json()["amount"] == 1


def test_page_past_the_end_is_empty(client, auth_headers, upload):
    upload()

    response = client.get(f"{FILES_URL}/?page=5&limit=10", headers=auth_headers)

    body = response.json()
    assert body["data"] == []
    assert body["pagination"]["totalPages"] == 1


def test_default_order_is_newest_first(client, auth_headers, upload):
    ids = [upload(name=f"file{i}.txt")["id"] for i in range(3)]

    response = client.get(f"{FILES_URL}/?page=1", headers=auth_headers)

    assert [record["id"] for record in response.json()["data"]] == list(reversed(ids))


def test_order_by_size_ascending(client, auth_headers, upload):
    upload(name="medium.txt", content=b"x" * 20)
    upload(name="small.txt", content=b"x")
    upload(name="large.txt", content=b"x" * 300)

    response = client.get(f"{FILES_URL}/?orderBy=size&direction=asc", headers=auth_headers)

    body = response.json()
    assert [record["name"] for record in body["data"]] == ["small.txt", "medium.txt", "large.txt"]
    assert body["pagination"]["limit"] == 10


def test_order_by_name_descending(client, auth_headers, upload):
    for name in ("b.txt", "c.txt", "a.txt"):
        upload(name=name)

    response = client.get(f"{FILES_URL}/?orderBy=name&direction=DESC", headers=auth_headers)

    assert [record["name"] for record in response.json()["data"]] == ["c.txt", "b.txt", "a.txt"]


@pytest.mark.parametrize("query, message", [
    ("page=0", "Page must be a positive integer"),
    ("limit=101", "Limit must be an integer between 1 and 100"),
    ("orderBy=data", "orderBy must be one of: name, size, uploaded_at"),
    ("direction=up", "direction must be ASC or DESC"),
    ("page=100000000000000000000&limit=10", "Page is out of range"),
])
def test_invalid_pagination_is_rejected(client, auth_headers, query, message):
    response = client.get(f"{FILES_URL}/?{query}", headers=auth_headers)

    assert response.status_code == 400
    assert response.json() == {"error": message}


def test_page_beyond_store_range_with_files_present(client, auth_headers, upload):
    upload()

    response = client.get(f"{FILES_URL}/?page=100000000000000000000&limit=10", headers=auth_headers)

    assert response.status_code == 400
    assert response.json() == {"error": "Page is out of range"}


def test_last_page_within_store_range_is_accepted(client, auth_headers, upload):
    upload()

    response = client.get(f"{FILES_URL}/?page=922337203685477581&limit=10", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["data"] == []


# ------------------------------------------------------------- error funnel

def test_unexpected_failure_returns_json_error(client, auth_headers, monkeypatch):
    def broken_apply(query, plan):
        raise RuntimeError("boom")

    monkeypatch.setattr(pagination, "apply", broken_apply)

    with TestClient(app, raise_server_exceptions=False) as failing_client:
        response = failing_client.get(f"{FILES_URL}/", headers=auth_headers)

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}
    assert "boom" not in response.text


# ------------------------------------------------------------ upload reading

def test_oversized_upload_is_read_only_past_the_limit():
    limit = settings.MAX_FILE_SIZE
    upload_file = UploadFile(
        file=io.BytesIO(b"\0" * (limit + 1024)),
        filename="big.bin",
        headers=Headers({"content-type": "application/octet-stream"}),
    )

    with pytest.raises(ValidationError) as exc_info:
        validated_upload(upload_file)

    assert exc_info.value.message == "File size cannot exceed 5MB"
    assert upload_file.file.tell() == limit + 1


def test_oversized_upload_without_token_is_rejected_by_size(client):
    response = client.post(
        f"{FILES_URL}/",
        files={"file": ("big.bin", b"\0" * (5 * 1024 * 1024 + 10), "application/octet-stream")},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "File size cannot exceed 5MB"}
