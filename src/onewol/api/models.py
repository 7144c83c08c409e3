"""Pydantic request/response models for the OneWol API."""

from typing import Optional

from pydantic import BaseModel


class DeviceModel(BaseModel):
    mac: str
    name: str = ""


class AddDeviceRequest(BaseModel):
    mac: Optional[str] = None
    name: Optional[str] = None


class RenameDeviceRequest(BaseModel):
    name: Optional[str] = None


class WakeRequest(BaseModel):
    mac: Optional[str] = None


class TargetModel(BaseModel):
    iface: str
    address: str
    broadcast: str


class WakeResponse(BaseModel):
    ok: bool
    mac: str
    targets: list[TargetModel]


class InterfaceModel(BaseModel):
    iface: str
    address: str
    netmask: str
    cidr: str
