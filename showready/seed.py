import argparse
from pathlib import Path
from typing import Optional

from .config import DB_FILENAME, Settings
from .model.order import State, seed_state
from .model.store import StateStore


def seed(data_dir: Path) -> State:
    state = seed_state()
    StateStore(Path(data_dir) / DB_FILENAME).write(state)
    return state


def main(argv: Optional[list] = None):
    ap = argparse.ArgumentParser(description="Write the demo's initial state")
    ap.add_argument("--data-dir", default=None,
                    help="Directory for db.json (default: $DATA_DIR or "
                         "./fixtures)")
    args = ap.parse_args(argv)

    data_dir = Path(args.data_dir) if args.data_dir else \
        Settings.from_env().data_dir
    seed(data_dir)
    print(f'🌱 Seeded demo data in {data_dir / DB_FILENAME}.')


if __name__ == "__main__":
    main()
