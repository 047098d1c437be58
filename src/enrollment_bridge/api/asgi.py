"""ASGI entrypoint for the enrollment bridge API."""

from enrollment_bridge.api.app import create_app
from enrollment_bridge.containers import build_container

app = create_app(build_container())
