#!/usr/bin/env python3
"""
scripts/manage_content.py — Content Maintenance CLI
====================================================

Usage:
  python scripts/manage_content.py list <collection> [--all]
  python scripts/manage_content.py remove-skill-group --match TEXT [--yes]
  python scripts/manage_content.py counts

Commands:
  list                Show documents of a collection (active only unless --all).
  remove-skill-group  Find the active skill group whose title or description
                      contains TEXT (case-insensitive) and delete it for good.
                      Without --yes nothing is deleted.
  counts              Print the same per-collection counts as /getCollectionCounts.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from app.services.content import ContentService  # noqa: E402
from config_loader import load_config  # noqa: E402
from db.cache import ContentCache  # noqa: E402
from db.collections import SKILLS  # noqa: E402
from db.mongo import get_db  # noqa: E402
from db.repository import ContentRepository  # noqa: E402


# ── Terminal colours ──────────────────────────────────────────────────────────

class C:
    RESET  = "\033[0m"
    BOLD   = "\033[1m"
    DIM    = "\033[2m"
    GREEN  = "\033[32m"
    YELLOW = "\033[33m"
    RED    = "\033[31m"

def _bold(s):  return f"{C.BOLD}{s}{C.RESET}"
def _dim(s):   return f"{C.DIM}{s}{C.RESET}"
def _green(s): return f"{C.GREEN}{s}{C.RESET}"
def _yellow(s):return f"{C.YELLOW}{s}{C.RESET}"
def _red(s):   return f"{C.RED}{s}{C.RESET}"


# ── Queries ───────────────────────────────────────────────────────────────────

def list_documents(repo: ContentRepository, collection: str, include_deleted: bool = False) -> List[dict]:
    return repo.find_all(collection) if include_deleted else repo.find_active(collection)


def find_skill_group(repo: ContentRepository, match: str) -> Optional[dict]:
    needle = match.lower()
    for group in repo.find_active(SKILLS):
        title = (group.get("title") or "").lower()
        description = (group.get("description") or "").lower()
        if needle in title or needle in description:
            return group
    return None


def collection_counts(repo: ContentRepository) -> dict:
    return ContentService(repo, ContentCache()).collection_counts()


def _label(doc: dict) -> str:
    for key, value in doc.items():
        if key.endswith("Title") or key == "title":
            return str(value)
    return "Untitled"


# ── Commands ──────────────────────────────────────────────────────────────────

def cmd_list(repo: ContentRepository, args):
    docs = list_documents(repo, args.collection, include_deleted=args.all)
    if not docs:
        print(f"\n  No documents in {args.collection}.\n")
        return

    print()
    print(f"  {_bold('ID'):<34}{_bold('Deleted'):<17}{_bold('Title')}")
    print("  " + "─" * 80)
    for doc in docs:
        deleted = _red("yes") if doc.get("deleted") else _dim("no")
        print(f"  {str(doc['_id']):<26}{deleted:<17}{_label(doc)}")
    print()


def cmd_remove_skill_group(repo: ContentRepository, args):
    group = find_skill_group(repo, args.match)
    if group is None:
        print(_yellow(f"\n  No active skill group matches '{args.match}'.\n"))
        return

    print()
    print(f"  {_bold('Title')}:       {group.get('title') or 'Untitled'}")
    print(f"  {_bold('Description')}: {group.get('description') or 'No description'}")
    print(f"  {_bold('ID')}:          {group['_id']}")
    print(f"  {_bold('Skills')}:      {len(group.get('skills') or [])}")

    if not args.yes:
        print(_dim("\n  Dry run. Re-run with --yes to delete.\n"))
        return

    if repo.hard_delete(SKILLS, group["_id"]):
        print(_green("\n  Deleted skill group.\n"))
    else:
        print(_red("\n  Nothing was deleted.\n"))


def cmd_counts(repo: ContentRepository, args):
    print()
    for name, count in collection_counts(repo).items():
        print(f"  {name:<26}{count}")
    print()


# ── Entry point ───────────────────────────────────────────────────────────────

def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="manage_content",
        description="Inspect and clean up portfolio content.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    sub = p.add_subparsers(dest="command", required=True)

    p_list = sub.add_parser("list", help="List documents of a collection")
    p_list.add_argument("collection", help="MongoDB collection name (e.g. projectTable)")
    p_list.add_argument("--all", action="store_true", help="Include soft-deleted documents")

    p_rm = sub.add_parser("remove-skill-group", help="Hard-delete a skill group by text match")
    p_rm.add_argument("--match", required=True, metavar="TEXT", help="Text to look for in title/description")
    p_rm.add_argument("--yes", action="store_true", help="Actually delete (default is a dry run)")

    sub.add_parser("counts", help="Print per-collection document counts")

    return p


def main(argv=None):
    parser = build_parser()
    args   = parser.parse_args(argv)
    repo   = ContentRepository(get_db(load_config(root=ROOT)))

    dispatch = {
        "list":               cmd_list,
        "remove-skill-group": cmd_remove_skill_group,
        "counts":             cmd_counts,
    }
    dispatch[args.command](repo, args)


if __name__ == "__main__":
    main()
