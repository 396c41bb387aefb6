"""Load multiple-choice questions into the question store."""

import argparse
import json
import sys
from pathlib import Path

# Ensure project root is on sys.path when executed via `python scripts/...`
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from core.config import load_app_config, store_path
from core.types import QuestionRecord
from evaluator.store import QuestionStore


def load_questions(path: str) -> list[QuestionRecord]:
    """Read a JSON list of questions.

    Each entry needs ``question``, ``A``-``D`` (or ``option_a``-``option_d``),
    ``category`` (or ``domain``) and ``answer`` (or ``expected_answer``).
    """

    entries = json.loads(Path(path).read_text(encoding="utf-8"))
    records = []
    for entry in entries:
        records.append(
            QuestionRecord(
                question=entry["question"],
                option_a=entry.get("option_a", entry.get("A", "")),
                option_b=entry.get("option_b", entry.get("B", "")),
                option_c=entry.get("option_c", entry.get("C", "")),
                option_d=entry.get("option_d", entry.get("D", "")),
                category=entry.get("category") or entry["domain"],
                expected_answer=str(entry.get("expected_answer", entry.get("answer", ""))).strip().upper(),
            )
        )
    return records


def main(seeds: str, db: str | None) -> None:
    store = QuestionStore(db or store_path(load_app_config()))
    records = load_questions(seeds)
    store.insert_questions(records)
    for category in store.categories():
        print(f"{category}: {store.count(category)} questions")
    print(f"Seeded {len(records)} questions at {store.path}.")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed the question store.")
    parser.add_argument("--seeds", default="data/seeds/questions.json", help="Path to questions JSON.")
    parser.add_argument("--db", default=None, help="Path to the sqlite database (defaults to config).")
    args = parser.parse_args()
    main(args.seeds, args.db)
