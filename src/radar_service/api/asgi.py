"""ASGI entrypoint for the radar service API."""

from radar_service.api.app import create_app
from radar_service.containers import build_container

app = create_app(build_container())
