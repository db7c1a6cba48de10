"""
Integration tests for file uploads, version chains, downloads and the
file-notification push.
"""

from app.core.config import settings
from app.core.exceptions import StorageError
from app.storage import BlobStore, get_blob_store
from main import app as api


PDF = "application/pdf"


def _upload(client, headers, room_id, name, data, content_type=PDF, file_id=None, comment=None):
    form = {"roomId": str(room_id)}
    if file_id:
        form["fileId"] = str(file_id)
    if comment:
        form["comment"] = comment
    return client.post(
        "/api/files/upload",
        data=form,
        files={"file": (name, data, content_type)},
        headers=headers,
    )


def test_upload_then_new_version(client, general):
    room = general["room"]
    _, alice_headers = general["alice_auth"]
    _, bob_headers = general["bob_auth"]

    v1 = _upload(client, alice_headers, room.id, "plan.pdf", b"%PDF-1.4 draft")
    assert v1.status_code == 201
    v1 = v1.json()
    assert v1["version"] == "v1"
    assert v1["originalName"] == "plan.pdf"
    assert v1["fileSize"] == len(b"%PDF-1.4 draft")

    v2 = _upload(
        client, bob_headers, room.id, "plan.pdf", b"%PDF-1.4 final",
        file_id=v1["fileId"], comment="fixed page 3",
    )
    assert v2.status_code == 201
    v2 = v2.json()
    assert v2["fileId"] == v1["fileId"]
    assert v2["version"] == "v2"
    assert v2["comment"] == "fixed page 3"
    assert v2["hash"] != v1["hash"]
    assert v2["user"]["name"] == "Bob"

    chain = client.get(f"/api/files/{v1['fileId']}/versions", headers=alice_headers).json()
    assert [v["version"] for v in chain["items"]] == ["v1", "v2"]

    listing = client.get(f"/api/files?roomId={room.id}", headers=alice_headers).json()["items"]
    assert len(listing) == 1
    assert listing[0]["totalVersions"] == 2
    assert listing[0]["latestVersion"]["version"] == "v2"


def test_download_returns_version_bytes(client, general):
    room = general["room"]
    _, alice_headers = general["alice_auth"]
    _, bob_headers = general["bob_auth"]
    v1 = _upload(client, alice_headers, room.id, "plan.pdf", b"%PDF-1.4 first").json()
    _upload(client, alice_headers, room.id, "plan.pdf", b"%PDF-1.4 second", file_id=v1["fileId"])

    response = client.get(v1["downloadUrl"], headers=bob_headers)

    assert response.status_code == 200
    assert response.content == b"%PDF-1.4 first"
    assert response.headers["content-type"] == PDF
    assert "plan.pdf" in response.headers["content-disposition"]
    assert response.headers["content-disposition"].startswith("attachment;")


def test_download_inline_only_for_previewable_types(client, general):
    room = general["room"]
    _, headers = general["alice_auth"]
    pdf = _upload(client, headers, room.id, "plan.pdf", b"%PDF-1.4").json()
    archive = _upload(client, headers, room.id, "bundle.zip", b"PK\x03\x04", content_type="application/zip").json()

    inline_pdf = client.get(f"{pdf['downloadUrl']}?inline=1", headers=headers)
    inline_zip = client.get(f"{archive['downloadUrl']}?inline=1", headers=headers)

    assert inline_pdf.headers["content-disposition"].startswith("inline;")
    assert inline_zip.headers["content-disposition"].startswith("attachment;")


def test_disallowed_type_leaves_listing_unchanged(client, general):
    room = general["room"]
    _, headers = general["alice_auth"]
    _upload(client, headers, room.id, "plan.pdf", b"%PDF-1.4")

    response = _upload(client, headers, room.id, "setup.exe", b"MZ\x90\x00", content_type="application/octet-stream")

    assert response.status_code == 415
    assert response.json()["detail"]["code"] == "UNSUPPORTED_TYPE"
    listing = client.get(f"/api/files?roomId={room.id}", headers=headers).json()["items"]
    assert [f["originalName"] for f in listing] == ["plan.pdf"]


def test_oversize_upload_is_rejected(client, general, monkeypatch):
    room = general["room"]
    _, headers = general["alice_auth"]
    monkeypatch.setattr(settings, "MAX_UPLOAD_BYTES", 8)

    response = _upload(client, headers, room.id, "plan.pdf", b"%PDF-1.4 way too long")

    assert response.status_code == 413
    assert response.json()["detail"]["code"] == "PAYLOAD_TOO_LARGE"
    assert client.get(f"/api/files?roomId={room.id}", headers=headers).json()["items"] == []


def test_unknown_file_id(client, general):
    room = general["room"]
    _, headers = general["alice_auth"]

    response = _upload(
        client, headers, room.id, "plan.pdf", b"%PDF", file_id="00000000-0000-0000-0000-000000000000"
    )

    assert response.status_code == 404
    assert response.json()["detail"]["code"] == "FILE_NOT_FOUND"


def test_outsider_cannot_upload_or_read(client, general, make_user, login):
    room = general["room"]
    _, alice_headers = general["alice_auth"]
    _, carol_headers = login(make_user("Carol"))
    v1 = _upload(client, alice_headers, room.id, "plan.pdf", b"%PDF").json()

    assert _upload(client, carol_headers, room.id, "plan.pdf", b"%PDF").status_code == 403
    assert client.get(f"/api/files?roomId={room.id}", headers=carol_headers).status_code == 403
    assert client.get(f"/api/files/{v1['fileId']}/versions", headers=carol_headers).status_code == 403
    assert client.get(v1["downloadUrl"], headers=carol_headers).status_code == 403


def test_storage_failure_is_service_error(client, general):
    class FailingBlobStore(BlobStore):
        def put(self, key, data, content_type):
            raise StorageError("Failed to store file. Please try again.")

    api.dependency_overrides[get_blob_store] = FailingBlobStore
    room = general["room"]
    _, headers = general["alice_auth"]

    response = _upload(client, headers, room.id, "plan.pdf", b"%PDF")

    assert response.status_code == 503
    assert response.json()["detail"]["code"] == "SERVICE_ERROR"
    assert client.get(f"/api/files?roomId={room.id}", headers=headers).json()["items"] == []


def test_upload_pushes_file_notification_and_notifies_members(client, general):
    room = general["room"]
    bob_token, bob_headers = general["bob_auth"]
    _, alice_headers = general["alice_auth"]

    with client.websocket_connect(f"/api/ws?token={bob_token}") as ws:
        ws.send_json({"event": "join-room", "roomId": str(room.id)})
        assert ws.receive_json()["event"] == "joined"
        v1 = _upload(client, alice_headers, room.id, "plan.pdf", b"%PDF").json()
        frame = ws.receive_json()

    assert frame["event"] == "file-notification"
    assert frame["payload"] == {
        "fileId": v1["fileId"],
        "fileName": "plan.pdf",
        "version": "v1",
        "userId": str(general["alice"].id),
        "roomId": str(room.id),
    }

    notes = client.get("/api/notifications", headers=bob_headers).json()["items"]
    assert len(notes) == 1
    assert notes[0]["type"] == "file-upload"
    assert notes[0]["title"] == "Alice uploaded plan.pdf (v1)"

    read = client.post(f"/api/notifications/{notes[0]['id']}/read", headers=bob_headers)
    assert read.json()["isRead"] is True
    assert client.get("/api/notifications", headers=alice_headers).json()["items"] == []
