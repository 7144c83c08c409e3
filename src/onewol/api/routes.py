"""FastAPI routes for the OneWol JSON API."""

import asyncio
import logging
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from onewol import __version__
from onewol.api.models import (
    AddDeviceRequest,
    DeviceModel,
    InterfaceModel,
    RenameDeviceRequest,
    TargetModel,
    WakeRequest,
    WakeResponse,
)
from onewol.config.loader import ConfigError
from onewol.config.store import AddressBook, DeviceExists, DeviceNotFound
from onewol.core.errors import InvalidMacFormat, NoEligibleInterfaces, SendFailure

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = Path.home() / ".config" / "onewol" / "config.yaml"


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


def create_app(
    config_path: Optional[str] = None, book: Optional[AddressBook] = None
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config_path: Path to the OneWol config.yaml. If None, uses the default location.
        book: Address book to serve. Built from *config_path* when omitted.

    Returns:
        FastAPI application instance
    """
    _config_path = Path(config_path) if config_path else DEFAULT_CONFIG

    app = FastAPI(
        title="OneWol",
        version=__version__,
        description="Wake-on-LAN device book and broadcaster",
    )
    app.state.book = book if book is not None else AddressBook(_config_path)
    if not app.state.book.path.exists():
        logger.warning("Config not found at %s, starting with an empty address book", _config_path)

    # ── Errors ────────────────────────────────────────────────────────────────

    @app.exception_handler(RequestValidationError)
    async def bad_request(request: Request, exc: RequestValidationError) -> JSONResponse:
        first = exc.errors()[0] if exc.errors() else {}
        return _error(first.get("msg", "invalid request body"), 400)

    @app.exception_handler(ConfigError)
    async def broken_config(request: Request, exc: ConfigError) -> JSONResponse:
        return _error(str(exc), 500)

    # ── Address book ──────────────────────────────────────────────────────────

    @app.get("/macs", response_model=list[DeviceModel])
    def list_macs() -> list[DeviceModel]:
        return [DeviceModel(mac=d.mac, name=d.name) for d in app.state.book.load_all()]

    @app.post("/macs")
    def add_mac(req: Optional[AddDeviceRequest] = None) -> JSONResponse:
        if req is None or not req.mac:
            return _error("mac required", 400)
        try:
            app.state.book.add(req.mac, req.name or "")
        except InvalidMacFormat as exc:
            return _error(str(exc), 400)
        except DeviceExists:
            return _error("exists", 409)
        return JSONResponse({"ok": True}, status_code=201)

    @app.put("/macs/{mac}")
    def rename_mac(mac: str, req: Optional[RenameDeviceRequest] = None) -> JSONResponse:
        if req is None or req.name is None:
            return _error("name required", 400)
        try:
            app.state.book.rename(mac, req.name)
        except DeviceNotFound:
            return _error("not found", 404)
        return JSONResponse({"ok": True})

    @app.delete("/macs/{mac}")
    def delete_mac(mac: str) -> JSONResponse:
        try:
            app.state.book.remove(mac)
        except DeviceNotFound:
            return _error("not found", 404)
        return JSONResponse({"ok": True})

    # ── Wake ──────────────────────────────────────────────────────────────────

    async def _wake(mac: Optional[str]) -> JSONResponse:
        if not mac:
            return _error("mac required", 400)

        from onewol.core.wol import send_wake

        try:
            outcome = await asyncio.to_thread(send_wake, mac)
        except InvalidMacFormat as exc:
            return _error(str(exc), 400)
        except NoEligibleInterfaces as exc:
            return _error(str(exc), 503)
        except SendFailure as exc:
            return _error(str(exc), 500)

        resp = WakeResponse(
            ok=True,
            mac=outcome.mac,
            targets=[
                TargetModel(
                    iface=r.target.interface_name,
                    address=r.target.source_address,
                    broadcast=r.target.broadcast_address,
                )
                for r in outcome.results
            ],
        )
        return JSONResponse(resp.model_dump())

    @app.post("/wake")
    async def post_wake(req: Optional[WakeRequest] = None) -> JSONResponse:
        return await _wake(req.mac if req else None)

    @app.post("/wake/{mac}")
    async def post_wake_mac(mac: str) -> JSONResponse:
        return await _wake(mac)

    # ── Diagnostics ───────────────────────────────────────────────────────────

    @app.get("/network", response_model=None)
    async def get_network() -> JSONResponse:
        from onewol.core.interfaces import network_summary

        try:
            rows = network_summary()
        except Exception as exc:
            logger.exception("Network summary failed")
            return _error(str(exc), 500)
        return JSONResponse(
            [
                InterfaceModel(
                    iface=r.name, address=r.address, netmask=r.netmask, cidr=r.cidr
                ).model_dump()
                for r in rows
            ]
        )

    return app
