"""
PhotoShare Gateway - minimal configuration example.

Usage:
    PHOTOSHARE_GITHUB_CLIENT_ID=... PHOTOSHARE_GITHUB_CLIENT_SECRET=... \
        uvicorn example.gateway.main:app --port 4000 --timeout-keep-alive 5
"""

from photoshare import Gateway, load_settings

gateway = Gateway(load_settings("photoshare.yaml"))

app = gateway.app
