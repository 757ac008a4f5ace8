"""Language server hosting the navigation engine."""

from server.language_server import (
    DocumentBuffer,
    DryckLanguageServer,
    create_server,
    serve,
)

__all__ = ["DocumentBuffer", "DryckLanguageServer", "create_server", "serve"]
