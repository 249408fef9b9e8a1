"""
Entry point for the slab intersection service.

Running this script with ``python run.py`` will start the FastAPI
server defined in ``backend/app/main.py``.  The application is imported
after adjusting the Python path to include the repository root.
"""

from __future__ import annotations

import sys
from pathlib import Path

import logging
import uvicorn

logging.basicConfig(
    level=logging.DEBUG,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)


def main() -> None:
    """Run the Uvicorn server hosting the intersection API."""
    # Ensure the repository root is on sys.path so that ``backend`` can be
    # imported as a package.
    repo_root = Path(__file__).resolve().parent
    if str(repo_root) not in sys.path:
        sys.path.append(str(repo_root))

    # Import inside main() to avoid modifying sys.path at module import time.
    from backend.app.main import app  # type: ignore

    uvicorn.run(app, host="0.0.0.0", port=8000)


if __name__ == "__main__":
    main()
