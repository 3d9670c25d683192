#!/usr/bin/env python3
"""
scripts/setup_admin.py — Admin Credential Setup
================================================

Usage:
  python scripts/setup_admin.py [--username kale] [--password SECRET]

Creates the admin document, or overwrites the existing one, with
bcrypt-hashed username and password. Defaults come from auth.bootstrap_* in
config.yaml. When no password is given or configured, a random one is
generated and printed once.
"""

import argparse
import secrets
import sys
from datetime import datetime, timezone
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from app.dependencies.access_control import hash_secret  # noqa: E402
from config_loader import load_config  # noqa: E402
from db.collections import ADMIN  # noqa: E402
from db.mongo import get_db  # noqa: E402
from db.repository import ContentRepository  # noqa: E402


# ── Terminal colours ──────────────────────────────────────────────────────────

class C:
    RESET  = "\033[0m"
    BOLD   = "\033[1m"
    GREEN  = "\033[32m"
    YELLOW = "\033[33m"

def _bold(s):  return f"{C.BOLD}{s}{C.RESET}"
def _green(s): return f"{C.GREEN}{s}{C.RESET}"
def _yellow(s):return f"{C.YELLOW}{s}{C.RESET}"


def setup_admin(repo: ContentRepository, username: str, password: str) -> bool:
    """Write the admin document. Returns True if one already existed."""
    existing = repo.find_singleton(ADMIN)
    now = datetime.now(timezone.utc)
    admin = {
        "userName": hash_secret(username),
        "password": hash_secret(password),
        "createdAt": existing.get("createdAt", now) if existing else now,
        "updatedAt": now,
    }
    repo.insert_singleton(ADMIN, admin)
    return existing is not None


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="setup_admin",
        description="Create or reset the portfolio admin credentials.",
    )
    p.add_argument("--username", metavar="NAME", help="Admin username (default: auth.bootstrap_username)")
    p.add_argument("--password", metavar="SECRET", help="Admin password (default: auth.bootstrap_password or random)")
    return p


def main(argv=None):
    args = build_parser().parse_args(argv)
    config = load_config(root=ROOT)
    auth_cfg = config.get("auth", {})

    username = args.username or auth_cfg.get("bootstrap_username") or "admin"
    password = args.password or auth_cfg.get("bootstrap_password") or ""
    generated = not password
    if generated:
        password = secrets.token_urlsafe(12)

    repo = ContentRepository(get_db(config))
    updated = setup_admin(repo, username, password)

    print()
    print(_green("  Updated existing admin credentials" if updated else "  Created new admin credentials"))
    print(f"  {_bold('Username')}: {username}")
    if generated:
        print(f"  {_bold('Password')}: {password}")
        print(_yellow("  Save this password now, it is not stored anywhere in plain text."))
    print()


if __name__ == "__main__":
    main()
