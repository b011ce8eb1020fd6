"""
REST API for PeerLink

Design Decision: API Framework
==============================

Decision: FastAPI
- Native async support, the transfer listeners run on the same event loop
- UploadFile for multipart uploads
- Pydantic integration for response models

The API is thin glue: uploads are written to disk and handed to the
FileSharer, downloads connect to the invite code like any other peer.
"""

import asyncio
import logging
import uuid
from pathlib import Path
from typing import Optional
from contextlib import asynccontextmanager

import aiofiles
import aiofiles.os
from fastapi import FastAPI, HTTPException, UploadFile, File
from fastapi.responses import JSONResponse, FileResponse
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
from starlette.background import BackgroundTask

from .. import __version__
from ..config import Config
from ..exceptions import TransferError
from ..sharer import FileSharer
from ..transfer import receive_file

logger = logging.getLogger(__name__)

MAX_PORT = 65535


# === Pydantic Models ===

class UploadResponse(BaseModel):
    """Invite code for an uploaded file."""
    inviteCode: int


class ErrorResponse(BaseModel):
    """Error body, kept compatible with existing frontends."""
    error: int = -1
    message: str


class ServiceStatus(BaseModel):
    """Sharer status response."""
    offers: int
    active_servers: int
    transfers_completed: int
    transfers_failed: int
    bytes_sent: int


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(message=message).model_dump(),
    )


# === API Creation ===

def create_app(sharer: Optional[FileSharer] = None,
               config: Optional[Config] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        sharer: FileSharer instance to expose (created from config if omitted)
        config: Configuration (defaults if omitted)

    Returns:
        FastAPI application
    """
    config = config or (sharer.config if sharer else Config())
    sharer = sharer or FileSharer(config)

    upload_dir = Path(config.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Handle startup and shutdown."""
        logger.info("API server starting...")
        yield
        logger.info("API server stopping...")
        await sharer.shutdown()

    app = FastAPI(
        title="PeerLink API",
        description="Share a file once over TCP using a numeric invite code",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.sharer = sharer

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # === Endpoints ===

    @app.get("/", tags=["General"])
    async def root():
        """API root - basic info."""
        return {
            "name": "PeerLink",
            "version": __version__,
            "status": "running",
        }

    @app.get("/api/status", response_model=ServiceStatus, tags=["General"])
    async def get_status():
        """Get offer and transfer counters."""
        return ServiceStatus(**sharer.get_stats())

    @app.post("/api/upload", response_model=UploadResponse,
              responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
              tags=["Files"])
    async def upload_file(file: Optional[UploadFile] = File(None)):
        """Store an uploaded file and offer it on a fresh invite code."""
        if file is None or not file.filename:
            return _error(400, "No file selected")

        unique_name = f"{uuid.uuid4()}_{Path(file.filename).name or 'untitled'}"
        target_path = upload_dir / unique_name

        try:
            written = 0
            async with aiofiles.open(target_path, 'wb') as out:
                while True:
                    chunk = await file.read(config.chunk_size)
                    if not chunk:
                        break
                    await out.write(chunk)
                    written += len(chunk)
        except OSError as e:
            logger.error(f"Error uploading file: {e}")
            return _error(500, f"Failed to upload file: {e}")
        finally:
            await file.close()

        if written == 0:
            await aiofiles.os.remove(target_path)
            return _error(400, "No file selected")

        # The bind probe loop blocks, keep it off the event loop
        loop = asyncio.get_running_loop()
        invite_code = await loop.run_in_executor(
            None, sharer.offer_file, str(target_path.resolve())
        )
        sharer.start_file_server(invite_code)

        return UploadResponse(inviteCode=invite_code)

    @app.get("/api/download/{invite_code}", tags=["Files"])
    async def download_file(invite_code: int):
        """Fetch the file offered on an invite code and return it."""
        if invite_code < 0 or invite_code > MAX_PORT:
            raise HTTPException(status_code=400, detail="Invalid invite code")

        try:
            received = await receive_file(
                config.download_host,
                invite_code,
                config.temp_dir,
                chunk_size=config.chunk_size,
                timeout=config.connect_timeout,
            )
        except TransferError as e:
            logger.error(f"Error in download endpoint for invite code {invite_code}: {e}")
            raise HTTPException(status_code=500, detail=str(e))

        return FileResponse(
            received.path,
            media_type="application/octet-stream",
            filename=received.file_name,
            background=BackgroundTask(aiofiles.os.remove, received.path),
        )

    return app


async def run_api_server(sharer: FileSharer, host: str = "0.0.0.0", port: int = 8080,
                         log_level: str = "info"):
    """
    Run the API server.

    Args:
        sharer: FileSharer instance
        host: Host to bind to
        port: Port to listen on
    """
    import uvicorn

    app = create_app(sharer)

    config = uvicorn.Config(
        app,
        host=host,
        port=port,
        log_level=log_level,
    )
    server = uvicorn.Server(config)
    await server.serve()
