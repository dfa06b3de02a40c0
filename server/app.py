import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, field_validator
from starlette.background import BackgroundTask
from starlette.responses import JSONResponse

ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from alvr_config.config_store import DEFAULTS, EXIT_FAILURE, SUPPORTED_WIDTHS, ConfigStore
from alvr_config.paths import DriverPaths


LOGGER = logging.getLogger("alvr_config.api")

store: Optional[ConfigStore] = None
last_errors: List[str] = []
pending_exit: Optional[int] = None

# A failed save stops the whole server once the error response is sent.
exit_process = os._exit

router = APIRouter()


def _record_error(message: str) -> None:
    LOGGER.error("%s", message)
    last_errors[:] = [message]


def _schedule_exit(status: int) -> None:
    global pending_exit
    pending_exit = status


def _exit_server(status: int) -> None:
    LOGGER.critical("Settings were not saved; stopping server with status %s", status)
    exit_process(status)


class SettingsPayload(BaseModel):
    bitrate_mbps: int
    render_width: int
    buffer_size: int

    @field_validator("render_width")
    @classmethod
    def _check_width(cls, value: int) -> int:
        if value not in SUPPORTED_WIDTHS:
            raise ValueError(f"render_width must be one of {list(SUPPORTED_WIDTHS)}")
        return value


def _require_store() -> ConfigStore:
    if store is None:
        raise HTTPException(status_code=500, detail="Settings store unavailable")
    return store


@router.get("/healthz")
async def healthz():
    current = _require_store()
    return {"ok": True, "config_path": str(current.paths.config_path())}


@router.get("/config")
async def get_server_config():
    current = _require_store()
    last_errors.clear()
    settings, found = current.load()
    if not found:
        detail = last_errors[-1] if last_errors else "Settings document unavailable"
        raise HTTPException(status_code=404, detail=detail)
    return {
        **settings.as_dict(),
        "render_height": settings.render_height,
        "supported_widths": list(SUPPORTED_WIDTHS),
        "defaults": dict(DEFAULTS),
    }


@router.post("/config")
async def update_server_config(payload: SettingsPayload):
    global pending_exit
    current = _require_store()
    last_errors.clear()
    pending_exit = None
    if not current.save(payload.bitrate_mbps, payload.render_width, payload.buffer_size):
        detail = last_errors[-1] if last_errors else "Settings document unavailable"
        status = pending_exit if pending_exit is not None else EXIT_FAILURE
        return JSONResponse(
            status_code=500,
            content={"detail": detail},
            background=BackgroundTask(_exit_server, status),
        )
    return {
        "bitrate_mbps": payload.bitrate_mbps,
        "render_width": payload.render_width,
        "render_height": payload.render_width // 2,
        "buffer_size": payload.buffer_size,
        "saved": True,
    }


def bootstrap_store(paths: Optional[DriverPaths] = None) -> ConfigStore:
    global store
    store = ConfigStore(paths=paths, report_error=_record_error, terminate=_schedule_exit)
    return store


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="ALVR server settings API")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8082)
    parser.add_argument("--driver-dir", default="", help="ALVR driver folder (defaults to ALVR_DRIVER_DIR)")
    parser.add_argument(
        "--config-path",
        default="",
        help="Settings document path (defaults to ALVR_CONFIG_PATH or the driver's default.vrsettings)",
    )
    parser.add_argument("--log-level", default="info")
    return parser.parse_args()


def main():
    import uvicorn
    from dotenv import load_dotenv
    from fastapi import FastAPI
    from fastapi.middleware.cors import CORSMiddleware

    args = parse_args()
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(message)s")

    dotenv_path = ROOT_DIR / ".env"
    if load_dotenv(dotenv_path):
        LOGGER.info("Loaded environment variables from %s", dotenv_path)

    paths = DriverPaths(
        driver_dir=Path(args.driver_dir) if args.driver_dir else None,
        config_path=Path(args.config_path) if args.config_path else None,
    )
    bootstrap_store(paths)
    LOGGER.info("Serving settings document %s", paths.config_path())

    app = FastAPI()
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(router)

    uvicorn.run(
        app,
        host=args.host,
        port=args.port,
        log_level=args.log_level,
    )


if __name__ == "__main__":
    main()
