"""Seed the narrator directory from a JSON file.

Each entry needs ``name_arabic`` and ``credibility`` (trustworthy or weak) and
may carry transliteration, biography, years, region and a list of scholar
``opinions``. Arabic names are stored normalized so that they match the names
the extractor produces. Existing narrators (same Arabic name) are skipped.

Run example:
    python scripts/seed_narrators.py --input data/narrators_sample.json
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, List

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from isnad_engine.config import DEFAULT_DATABASE_URL  # noqa: E402
from isnad_engine.db.session import create_db_engine, create_session_factory, init_schema  # noqa: E402
from isnad_engine.narrators.directory import NarratorDirectory  # noqa: E402
from isnad_engine.preprocessing.normalize import ArabicNormalizer  # noqa: E402

CREDIBILITY_VALUES = {"trustworthy", "weak"}


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed the narrator directory from JSON.")
    parser.add_argument(
        "--input",
        type=Path,
        default=PROJECT_ROOT / "data" / "narrators_sample.json",
        help="JSON file holding a list of narrator entries.",
    )
    parser.add_argument(
        "--database-url",
        type=str,
        default=os.getenv("HADITH_DATABASE_URL", DEFAULT_DATABASE_URL),
        help="SQLAlchemy database URL.",
    )
    parser.add_argument(
        "--keep-diacritics",
        action="store_true",
        help="Store Arabic names exactly as given instead of normalized.",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="Print every narrator in the directory after seeding.",
    )
    return parser.parse_args()


def load_entries(path: Path) -> List[Dict[str, Any]]:
    payload = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(payload, list):
        raise ValueError(f"{path} must contain a JSON list of narrator entries.")

    entries: List[Dict[str, Any]] = []
    for index, entry in enumerate(payload, start=1):
        name = str(entry.get("name_arabic", "")).strip()
        credibility = str(entry.get("credibility", "")).strip().lower()
        if not name or credibility not in CREDIBILITY_VALUES:
            print(f"  [WARN] Skipping entry #{index}: needs name_arabic and credibility trustworthy|weak")
            continue
        entries.append({**entry, "name_arabic": name, "credibility": credibility})
    return entries


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    args = parse_args()

    try:
        entries = load_entries(args.input)
    except (OSError, ValueError) as exc:
        print(f"[ERROR] Could not read {args.input}: {exc}")
        return 1

    engine = create_db_engine(args.database_url)
    init_schema(engine)
    directory = NarratorDirectory(create_session_factory(engine))
    normalizer = ArabicNormalizer()

    added = 0
    try:
        for entry in entries:
            name = entry["name_arabic"] if args.keep_diacritics else normalizer.normalize(entry["name_arabic"])
            if directory.get_by_name(name) is not None:
                print(f"  exists: {name}")
                continue
            profile = directory.add_narrator(
                name,
                entry["credibility"],
                name_transliteration=entry.get("name_transliteration"),
                biography=entry.get("biography"),
                birth_year=entry.get("birth_year"),
                death_year=entry.get("death_year"),
                region=entry.get("region"),
                opinions=entry.get("opinions") or [],
            )
            added += 1
            print(f"  added #{profile.id}: {profile.name_arabic} ({profile.credibility})")

        if args.list:
            print("\nCurrent narrators:")
            for profile in directory.list_all():
                print(f"  {profile.id:>4}  {profile.credibility:<12} {profile.name_arabic}")
    finally:
        engine.dispose()

    print(f"\nSeeded {added} new narrator(s) out of {len(entries)} entries.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
