"""Create (or reset) the administrator account.

Usage: ADMIN_EMAIL=... ADMIN_PASSWORD=... python scripts/seed_admin.py
"""

from __future__ import annotations

import importlib
import os
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
for path in (REPO_ROOT, REPO_ROOT / "src" / "pointage"):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from dotenv import load_dotenv

from config import get_settings_module

from pointage.container import build_container, build_store
from pointage.core.enums import Role


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())

    email = os.getenv("ADMIN_EMAIL")
    password = os.getenv("ADMIN_PASSWORD")
    if not email or not password:
        raise SystemExit("ADMIN_EMAIL and ADMIN_PASSWORD must be set.")

    store = build_store(backend=settings.STORE_BACKEND, db_config=settings.DB_CONFIG)
    container = build_container(store=store)
    admin = container.user_service.ensure_account(
        email=email,
        password=password,
        role=Role.ADMIN,
        name=os.getenv("ADMIN_NAME", "Administrator"),
    )
    print(f"OK: admin account {admin['email']} ({admin['id']})")


if __name__ == "__main__":
    main()
