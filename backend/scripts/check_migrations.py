"""CI guard for the migration history.

Fails when the revision graph has more than one head, or (with --drift)
when `alembic check` finds model changes without a migration.
"""

import argparse
import subprocess
import sys
from pathlib import Path

from alembic.config import Config
from alembic.script import ScriptDirectory

BACKEND_DIR = Path(__file__).resolve().parents[1]


def alembic_heads(backend_dir: Path = BACKEND_DIR) -> list[str]:
    cfg = Config(str(backend_dir / "alembic.ini"))
    cfg.set_main_option("script_location", str(backend_dir / "alembic"))
    return list(ScriptDirectory.from_config(cfg).get_heads())


def check_single_head() -> int:
    heads = alembic_heads()
    if len(heads) != 1:
        print(f"[FAIL] Alembic heads={len(heads)} -> {heads}")
        return 1
    print(f"[OK] Alembic single head: {heads[0]}")
    return 0


def check_drift() -> int:
    # Needs DATABASE_URL pointing at a database migrated to head.
    proc = subprocess.run(
        [sys.executable, "-m", "alembic", "check"],
        cwd=str(BACKEND_DIR),
        capture_output=True,
        text=True,
    )
    if proc.stdout:
        print(proc.stdout.strip())
    if proc.stderr:
        print(proc.stderr.strip(), file=sys.stderr)
    if proc.returncode != 0:
        print("[FAIL] Models and migrations have drifted; add a revision.", file=sys.stderr)
        return proc.returncode
    print("[OK] No schema drift")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--drift", action="store_true", help="also run `alembic check`")
    args = parser.parse_args(argv)

    status = check_single_head()
    if status == 0 and args.drift:
        status = check_drift()
    return status


if __name__ == "__main__":
    raise SystemExit(main())
