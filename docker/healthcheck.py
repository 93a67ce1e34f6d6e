"""Container healthcheck: exit 0 once the API reports ready."""

from __future__ import annotations

import os
import sys
import urllib.error
import urllib.request

PORT = os.environ.get("PEDIBRIEF_API_PORT", "8080")


def main() -> int:
    try:
        with urllib.request.urlopen(f"http://localhost:{PORT}/ready", timeout=5) as resp:
            return 0 if resp.status == 200 else 1
    except (urllib.error.URLError, OSError):
        return 1


if __name__ == "__main__":
    sys.exit(main())
