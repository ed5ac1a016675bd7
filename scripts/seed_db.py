from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT / "src") not in sys.path:
    sys.path.insert(0, str(REPO_ROOT / "src"))

from dotenv import load_dotenv

from university_admin.container import build_container
from university_admin.core.exceptions import ConfigurationError
from university_admin.database.bootstrap import seed_demo_data
from university_admin.settings import get_settings_module


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)
    jwt_secret = getattr(settings, "JWT_SECRET", "")
    if not jwt_secret:
        raise ConfigurationError("JWT_SECRET is not configured")

    container = build_container(db_config=db_config, jwt_secret=jwt_secret)
    created = seed_demo_data(container)

    print(
        "OK: Seeded database -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')} "
        f"({', '.join(created) or 'already seeded'})"
    )


if __name__ == "__main__":
    main()
