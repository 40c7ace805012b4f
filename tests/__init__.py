"""Test package initialisation for NumField."""

from pathlib import Path
import sys

# Ensure the repository root is importable when tests run from an isolated
# working directory. The project ships flat top-level modules such as
# ``number_format_watcher`` which are only importable from the project root.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
