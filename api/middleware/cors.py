"""CORS handling with an open policy for public API paths.

Dashboard routes accept only the configured origins. The public
translations API is called from end-user applications on arbitrary
origins, so its paths allow any origin (without credentials).
"""

from typing import Iterable

from starlette.middleware.cors import CORSMiddleware
from starlette.types import ASGIApp, Receive, Scope, Send


class PublicPathCORSMiddleware(CORSMiddleware):
    """CORSMiddleware that switches to allow-all for `public_prefixes`."""

    def __init__(self, app: ASGIApp, public_prefixes: Iterable[str], **kwargs):
        super().__init__(app, **kwargs)
        self.public_prefixes = tuple(public_prefixes)
        self.public = CORSMiddleware(
            app,
            allow_origins=["*"],
            allow_methods=["GET", "POST", "OPTIONS"],
            allow_headers=["*"],
        )

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http" and scope["path"].startswith(self.public_prefixes):
            await self.public(scope, receive, send)
            return
        await super().__call__(scope, receive, send)
