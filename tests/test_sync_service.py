from __future__ import annotations

from pathlib import Path

import httpx
import pytest

from cardsync.clients import LarkClient
from cardsync.core.errors import (
    AuthFailure,
    InsertFailure,
    ParseFailure,
    TransportFailure,
    UploadFailure,
)
from cardsync.schemas import RemoteRow
from cardsync.services import SyncService

HEADER = (
    "名前,会社名,部署,役職,メールアドレス,電話番号,携帯電話,FAX,"
    "郵便番号,住所,URL,備考,画像パス,スキャン日時"
)


class StubLarkClient:
    def __init__(self, *, insert_results: list | None = None, upload_error: Exception | None = None):
        self.uploads: list[Path] = []
        self.inserts: list[tuple[str, str, RemoteRow]] = []
        self._insert_results = list(insert_results or [])
        self._upload_error = upload_error

    def upload_image(self, image_path):
        self.uploads.append(Path(image_path))
        if self._upload_error is not None:
            raise self._upload_error
        return "file_token_123"

    def add_record(self, base_id: str, table_id: str, row: RemoteRow) -> str:
        self.inserts.append((base_id, table_id, row))
        result = self._insert_results.pop(0) if self._insert_results else "record_id"
        if isinstance(result, Exception):
            raise result
        return result


def _row(name: str, *, image: str = "", scan_date: str = "2024-01-15") -> str:
    return f"{name},株式会社テスト,,,{name}@test.com,,,,,,,,{image},{scan_date}"


def test_sync_all_uploads_image_and_inserts(write_csv, make_settings, tmp_path: Path) -> None:
    image_dir = tmp_path / "images"
    image_dir.mkdir()
    (image_dir / "image1.jpg").write_bytes(b"jpeg")
    csv_path = write_csv(HEADER + "\n" + _row("山田太郎", image="image1.jpg") + "\n")
    client = StubLarkClient(insert_results=["record_id_123"])

    summary = SyncService(make_settings(csv_path, image_dir), client).sync_all()

    assert (summary.total, summary.succeeded, summary.failed) == (1, 1, 0)
    assert client.uploads == [image_dir / "image1.jpg"]
    base_id, table_id, row = client.inserts[0]
    assert (base_id, table_id) == ("base_id", "table_id")
    assert row.name == "山田太郎"
    assert row.image == ["file_token_123"]
    assert row.to_payload()["fields"]["image"] == [{"file_token": "file_token_123"}]


def test_records_without_images_skip_upload(write_csv, make_settings) -> None:
    csv_path = write_csv(HEADER + "\n" + _row("田中花子") + "\n")
    client = StubLarkClient()

    summary = SyncService(make_settings(csv_path), client).sync_all()

    assert summary.succeeded == 1
    assert client.uploads == []
    assert client.inserts[0][2].image == []


def test_missing_image_file_is_not_an_error(write_csv, make_settings) -> None:
    csv_path = write_csv(HEADER + "\n" + _row("田中花子", image="missing.jpg") + "\n")
    client = StubLarkClient()

    summary = SyncService(make_settings(csv_path), client).sync_all()

    assert summary.succeeded == 1
    assert client.uploads == []
    assert client.inserts[0][2].image == []


def test_continues_after_insert_failure(write_csv, make_settings) -> None:
    csv_path = write_csv("\n".join([HEADER, _row("成功"), _row("失敗")]) + "\n")
    client = StubLarkClient(
        insert_results=["record_id_1", InsertFailure(500, "API Error")]
    )

    summary = SyncService(make_settings(csv_path), client).sync_all()

    assert summary.succeeded == 1
    assert summary.failed == 1
    assert len(client.inserts) == 2
    assert [insert[2].name for insert in client.inserts] == ["成功", "失敗"]


def test_failed_record_is_logged_with_its_name(write_csv, make_settings, caplog) -> None:
    csv_path = write_csv(HEADER + "\n" + _row("失敗") + "\n")
    client = StubLarkClient(insert_results=[InsertFailure(500, "API Error")])

    with caplog.at_level("INFO", logger="cardsync.services.sync"):
        SyncService(make_settings(csv_path), client).sync_all()

    errors = [r.getMessage() for r in caplog.records if r.levelname == "ERROR"]
    assert errors == ["Failed to sync 失敗: Failed to add record: API Error (code 500)"]


def test_invalid_scan_date_fails_only_that_record(write_csv, make_settings) -> None:
    csv_path = write_csv(
        "\n".join([HEADER, _row("日付不正", scan_date="not-a-date"), _row("正常")]) + "\n"
    )
    client = StubLarkClient()

    summary = SyncService(make_settings(csv_path), client).sync_all()

    assert (summary.succeeded, summary.failed) == (1, 1)
    assert [insert[2].name for insert in client.inserts] == ["正常"]


def test_upload_failure_skips_insert(write_csv, make_settings, tmp_path: Path) -> None:
    (tmp_path / "card.jpg").write_bytes(b"jpeg")
    csv_path = write_csv(HEADER + "\n" + _row("山田", image="card.jpg") + "\n")
    client = StubLarkClient(upload_error=UploadFailure(1061045, "too large"))

    summary = SyncService(make_settings(csv_path, tmp_path), client).sync_all()

    assert (summary.succeeded, summary.failed) == (0, 1)
    assert client.inserts == []


def test_blank_scan_date_uses_current_time(write_csv, make_settings) -> None:
    csv_path = write_csv(HEADER + "\n" + _row("山田", scan_date="") + "\n")
    client = StubLarkClient()

    SyncService(make_settings(csv_path), client).sync_all()

    assert client.inserts[0][2].scan_date > 1_700_000_000_000


def test_parse_failure_aborts_run(make_settings, tmp_path: Path) -> None:
    client = StubLarkClient()

    with pytest.raises(ParseFailure):
        SyncService(make_settings(tmp_path / "missing.csv"), client).sync_all()

    assert client.inserts == []


@pytest.mark.parametrize(
    "error",
    [
        TransportFailure("POST /records failed: connection reset"),
        AuthFailure(99991663, "tenant access token invalid"),
    ],
)
def test_client_failure_only_fails_its_record(write_csv, make_settings, error) -> None:
    csv_path = write_csv("\n".join([HEADER, _row("失敗"), _row("成功")]) + "\n")
    client = StubLarkClient(insert_results=[error, "record_id_2"])

    summary = SyncService(make_settings(csv_path), client).sync_all()

    assert (summary.total, summary.succeeded, summary.failed) == (2, 1, 1)
    assert len(client.inserts) == 2
    assert client.inserts[1][2].name == "成功"


def test_unexpected_error_is_logged_and_counted(write_csv, make_settings, caplog) -> None:
    csv_path = write_csv("\n".join([HEADER, _row("壊れた"), _row("成功")]) + "\n")
    client = StubLarkClient(insert_results=[RuntimeError("boom"), "record_id_2"])

    with caplog.at_level("INFO", logger="cardsync.services.sync"):
        summary = SyncService(make_settings(csv_path), client).sync_all()

    assert (summary.succeeded, summary.failed) == (1, 1)
    assert len(client.inserts) == 2
    errors = [r for r in caplog.records if r.levelname == "ERROR"]
    assert [r.getMessage() for r in errors] == ["Unexpected failure while syncing 壊れた"]
    assert errors[0].exc_info is not None


def test_malformed_token_response_fails_one_record_with_real_client(
    write_csv, make_settings
) -> None:
    token_responses = [
        {"code": 0, "msg": "success", "tenant_access_token": "t-1", "expire": None},
        {"code": 0, "msg": "success", "tenant_access_token": "t-2", "expire": 7200},
    ]
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if request.url.path.endswith("/tenant_access_token/internal"):
            return httpx.Response(200, json=token_responses.pop(0))
        return httpx.Response(
            200,
            json={"code": 0, "msg": "success", "data": {"record": {"record_id": "rec_1"}}},
        )

    csv_path = write_csv("\n".join([HEADER, _row("一人目"), _row("二人目")]) + "\n")
    settings = make_settings(csv_path)

    with LarkClient.from_settings(settings.lark, transport=httpx.MockTransport(handler)) as client:
        summary = SyncService(settings, client).sync_all()

    assert (summary.succeeded, summary.failed) == (1, 1)
    token_calls = [r for r in requests if r.url.path.endswith("/tenant_access_token/internal")]
    assert len(token_calls) == 2
    inserts = [r for r in requests if r.url.path.endswith("/records")]
    assert len(inserts) == 1
    assert inserts[0].headers["Authorization"] == "Bearer t-2"
