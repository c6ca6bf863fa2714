"""
=============================================================================
STATIC FILES
=============================================================================

Registers every file of a directory tree as an exact-path route.

    Directory on disk                 Routes registered
    ─────────────────                 ─────────────────
    public/
    ├── index.html          ──►       /public/index.html
    ├── style.css           ──►       /public/style.css
    └── img/
        └── logo.png        ──►       /public/img/logo.png

The route prefix is the directory's own name, not the path used to
register it: register_static_dir(routes, "./site/public") serves under
/public/.

Routes are fixed at registration time. A file added to the directory
afterwards is not served; a file deleted afterwards answers 404. File
contents are read on every request, so edits show up immediately.

Because routing is exact-match, requests such as /public/../secret never
reach the filesystem: only the paths enumerated here exist.
=============================================================================
"""

import logging
from pathlib import Path
from typing import List, Union

from ..http.request import Request
from ..http.response import HTTPResponse, not_found
from ..http.router import RouteTable
from ..session import Session


logger = logging.getLogger(__name__)


class StaticFileHandler:
    """
    Route handler serving one file's bytes.

    One instance per registered file; the route path and the file path are
    fixed when the directory is scanned.
    """

    def __init__(self, file_path: Union[str, Path]):
        self.file_path = Path(file_path)
        self.__name__ = f"static:{self.file_path.name}"

    def __call__(self, request: Request, session: Session) -> Union[bytes, HTTPResponse]:
        try:
            return self.file_path.read_bytes()
        except FileNotFoundError:
            logger.warning(f"Static file disappeared: {self.file_path}")
            return not_found()

    def __repr__(self) -> str:
        return f"StaticFileHandler({str(self.file_path)!r})"


def register_static_dir(routes: RouteTable, directory: Union[str, Path]) -> List[str]:
    """
    Register every file under `directory` as /<dirname>/<relative path>.

    Files are walked recursively in sorted order. Paths use forward
    slashes on every platform. A path that is already registered keeps
    its existing handler.

    Args:
        routes: The table to register into.
        directory: Directory to scan.

    Returns:
        The route paths that now serve files from this directory, in
        registration order.

    Raises:
        ValueError: If `directory` is not an existing directory.
    """
    root = Path(directory).resolve()
    if not root.is_dir():
        raise ValueError(f"Static directory does not exist: {directory}")

    registered: List[str] = []
    for file_path in sorted(root.rglob("*")):
        if not file_path.is_file():
            continue

        relative = file_path.relative_to(root).as_posix()
        route_path = f"/{root.name}/{relative}"

        route = routes.register(route_path, StaticFileHandler(file_path))
        if isinstance(route.handler, StaticFileHandler) and route.handler.file_path == file_path:
            registered.append(route_path)
        else:
            logger.debug(f"Skipping {route_path}: path already routed")

    logger.info(f"Serving {len(registered)} static files from {root}")
    return registered
