"""
Demo script: ingest OFX/QFX statement files via the public API.

Usage:
    python scripts/run_ingest.py                          # every file in inputs/
    python scripts/run_ingest.py path/to/statement.qfx     # specific files
    python scripts/run_ingest.py --csv                     # CSV instead of Parquet

For each statement a run config is generated and saved as
``outputs/{stem}.yaml``, then ``ingest()`` parses the file and writes
``outputs/{stem}/{stem}.{format}``. Edit a saved YAML (e.g. to set
``encoding: cp1252``) and rerun ``ingest()`` on it directly.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

INPUT_DIR = Path("inputs")
OUTPUT_ROOT = Path("outputs")
STATEMENT_SUFFIXES = {".qfx", ".ofx"}

# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    datefmt="%H:%M:%S",
)
log = logging.getLogger("run_ingest")


def _input_files(args: list[str]) -> list[Path]:
    if args:
        return [Path(a) for a in args]
    if not INPUT_DIR.is_dir():
        return []
    return sorted(p for p in INPUT_DIR.iterdir() if p.suffix.lower() in STATEMENT_SUFFIXES)


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main() -> int:
    import bank_statement_ingest

    args = [a for a in sys.argv[1:] if not a.startswith("--")]
    output_format = "csv" if "--csv" in sys.argv else "parquet"

    files = _input_files(args)
    if not files:
        log.warning("No statement files found (looked in %s)", INPUT_DIR)
        return 1

    failures = 0
    for input_path in files:
        if not input_path.exists():
            log.warning("SKIP  %s  (file not found)", input_path)
            continue

        name = input_path.stem
        config = bank_statement_ingest.generate_default_config(
            str(input_path),
            output_dir=str(OUTPUT_ROOT / name),
            output_format=output_format,
        )
        config_path = OUTPUT_ROOT / f"{name}.yaml"
        bank_statement_ingest.save_config(config, config_path)

        log.info("=" * 70)
        log.info("Processing: %s", input_path)
        log.info("  config_path : %s", config_path)
        log.info("=" * 70)

        try:
            written = bank_statement_ingest.ingest(config_path)
        except bank_statement_ingest.BankStatementError as exc:
            log.error("FAILED  %s: %s", input_path, exc)
            failures += 1
            continue

        log.info("Done: %s -> %s\n", name, written)

    log.info("All files processed (%d failed).", failures)
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
