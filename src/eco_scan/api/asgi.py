"""ASGI entrypoint for the eco scan API."""

from eco_scan.api.app import create_app
from eco_scan.containers import build_container

app = create_app(build_container())
