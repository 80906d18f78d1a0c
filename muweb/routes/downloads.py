import logging
import os

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse

from muweb.database import get_config
from muweb.envelope import ok
from muweb.errors import NotFoundError

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/downloads", tags=["downloads"])

# id -> file name under downloads_dir plus display metadata
CATALOG = {
    "client": {
        "file": "mu_client_v1.0.0.zip",
        "name": "MU Online Client",
        "description": "Complete MU Online game client - Latest version",
        "version": "1.0.0",
        "type": "client",
        "releaseDate": "2024-01-15",
    },
    "patcher": {
        "file": "mu_patcher_v1.2.3.exe",
        "name": "Game Patcher",
        "description": "Auto-update patcher for the latest game updates",
        "version": "1.2.3",
        "type": "patcher",
        "releaseDate": "2024-01-20",
    },
    "launcher": {
        "file": "mu_launcher_v2.1.0.exe",
        "name": "Game Launcher",
        "description": "Official game launcher with auto-update functionality",
        "version": "2.1.0",
        "type": "launcher",
        "releaseDate": "2024-01-18",
    },
}

REQUIREMENTS = {
    "minimum": {
        "os": "Windows 7 SP1 / Windows 8.1 / Windows 10",
        "processor": "Intel Core 2 Duo 2.4 GHz / AMD Athlon 64 X2 2.8 GHz",
        "memory": "2 GB RAM",
        "graphics": "DirectX 9.0c compatible",
        "directx": "Version 9.0c",
        "storage": "3 GB available space",
        "network": "Broadband Internet connection",
    },
    "recommended": {
        "os": "Windows 10 64-bit",
        "processor": "Intel Core i3-4160 / AMD FX-6300",
        "memory": "4 GB RAM",
        "graphics": "DirectX 11 compatible",
        "directx": "Version 11",
        "storage": "5 GB available space",
        "network": "Broadband Internet connection",
    },
}


def format_size(size):
    for unit in ("B", "KB", "MB", "GB"):
        if size < 1024 or unit == "GB":
            return f"{size:.0f} {unit}" if unit == "B" else f"{size:.1f} {unit}"
        size /= 1024


def file_path(config, file_id):
    entry = CATALOG.get(file_id)
    if entry is None:
        return None
    return os.path.join(config.get("downloads_dir", "uploads/downloads"), entry["file"])


@router.get("")
def list_downloads(config: dict = Depends(get_config)):
    """Catalog with availability and size read from the downloads directory"""
    downloads = []
    for file_id, entry in CATALOG.items():
        path = file_path(config, file_id)
        available = os.path.isfile(path)
        downloads.append({
            "id": file_id,
            "name": entry["name"],
            "description": entry["description"],
            "version": entry["version"],
            "type": entry["type"],
            "releaseDate": entry["releaseDate"],
            "size": format_size(os.path.getsize(path)) if available else None,
            "downloadUrl": f"/api/downloads/file/{file_id}",
            "isAvailable": available,
        })
    return ok(downloads)


@router.get("/requirements")
def system_requirements():
    return ok(REQUIREMENTS)


@router.get("/file/{file_id}")
def download_file(file_id: str, config: dict = Depends(get_config)):
    path = file_path(config, file_id)
    if path is None:
        raise NotFoundError("File not found")
    if not os.path.isfile(path):
        log.warning("Download %s requested but %s is missing", file_id, path)
        raise NotFoundError("File not available for download")

    log.info("Serving download %s", file_id)
    return FileResponse(
        path=path,
        filename=os.path.basename(path),
        media_type="application/octet-stream",
    )
