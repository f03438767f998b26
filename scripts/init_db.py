from __future__ import annotations

import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from opsdesk import create_app
from opsdesk.bootstrap import list_tables
from opsdesk.extensions import db


def main() -> None:
    app = create_app()
    with app.app_context():
        db.create_all()
        tables = list_tables()
        print(f"OK: Created tables -> {db.engine.url.render_as_string(hide_password=True)} (tables={len(tables)})")


if __name__ == "__main__":
    main()
