"""
Entry point for `uvicorn tag_registry.main:app`; settings come from env / config.yaml.
"""
from .api import create_app

app = create_app()
