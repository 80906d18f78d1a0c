import pytest

from muweb.routes.downloads import format_size


@pytest.fixture
def client_zip(tmp_path):
    downloads = tmp_path / "downloads"
    downloads.mkdir()
    path = downloads / "mu_client_v1.0.0.zip"
    path.write_bytes(b"PK" + b"\0" * 2046)
    return path


class TestDownloads:

    def test_catalog_reports_availability(self, client, client_zip):
        data = {d["id"]: d for d in client.get("/api/downloads").json()["data"]}

        assert data["client"]["isAvailable"] is True
        assert data["client"]["size"] == "2.0 KB"
        assert data["launcher"]["isAvailable"] is False
        assert data["launcher"]["size"] is None

    def test_serves_file(self, client, client_zip):
        response = client.get("/api/downloads/file/client")

        assert response.status_code == 200
        assert response.content == client_zip.read_bytes()
        assert "mu_client_v1.0.0.zip" in response.headers["content-disposition"]

    def test_unknown_id(self, client):
        response = client.get("/api/downloads/file/../../etc/passwd")

        assert response.status_code == 404

    def test_missing_file(self, client):
        response = client.get("/api/downloads/file/patcher")

        assert response.status_code == 404
        assert response.json()["error"] == "File not available for download"

    def test_requirements(self, client):
        data = client.get("/api/downloads/requirements").json()["data"]

        assert set(data) == {"minimum", "recommended"}


@pytest.mark.parametrize("size, text", [
    (512, "512 B"),
    (1536, "1.5 KB"),
    (5 * 1024 * 1024, "5.0 MB"),
    (3 * 1024 ** 3, "3.0 GB"),
])
def test_format_size(size, text):
    assert format_size(size) == text
