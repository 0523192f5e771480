from __future__ import annotations

import os
import sys
import tempfile
from pathlib import Path

# Allow running as: python scripts/user_action_smoketest.py
REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT))

from fastapi.testclient import TestClient


def main() -> int:
    with tempfile.TemporaryDirectory() as tmp:
        # Point the API at a throwaway database before the app is imported.
        os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(tmp, "smoke.db")

        from user_admin.main import app

        with TestClient(app) as c:
            r = c.get("/api/usuarios")
            print("/api/usuarios(empty)", r.status_code, r.json())

            r = c.post(
                "/api/user-action",
                json={"action": "create-user", "username": "smoke", "password": "p", "renewalDate": "2025-01-01"},
            )
            print("create-user", r.status_code, r.json())
            if r.status_code != 200:
                return 1

            r = c.post("/api/user-action", json={"action": "set-blocked", "username": "SMOKE", "isBlocked": True})
            print("set-blocked", r.status_code, r.json())
            if r.status_code != 200:
                return 1

            r = c.get("/api/usuarios")
            print("/api/usuarios(after)", r.status_code, r.json())

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
