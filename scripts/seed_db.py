from __future__ import annotations

import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from opsdesk import create_app
from opsdesk.bootstrap import ensure_demo_users
from opsdesk.extensions import db


def main() -> None:
    app = create_app()
    with app.app_context():
        db.create_all()
        created = ensure_demo_users()
        print(f"OK: Seeded database -> {db.engine.url.render_as_string(hide_password=True)} (new users={len(created)})")


if __name__ == "__main__":
    main()
