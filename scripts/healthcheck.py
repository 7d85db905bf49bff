#!/usr/bin/env python
"""Container healthcheck probing the Melodix /healthz endpoint."""

import os
import sys

import requests


def main() -> int:
    host = os.getenv("HEALTHCHECK_HOST", "127.0.0.1")
    port = os.getenv("PORT", "3000")
    target = f"http://{host}:{port}/healthz"
    try:
        response = requests.get(target, timeout=5)
    except requests.RequestException:
        return 1
    return 0 if response.status_code == 200 else 1


if __name__ == "__main__":
    sys.exit(main())
