"""Development entry point: ``python app.py`` (APP_ENV selects the settings)."""

import sys
from pathlib import Path

SRC = Path(__file__).resolve().parent / "src" / "hrm_system"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from hrm_system.main import create_app

app = create_app()

if __name__ == "__main__":
    app.run(host="0.0.0.0", port=5000, debug=app.config["DEBUG"])
