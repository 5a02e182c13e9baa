"""Root conftest: make the repo importable without installing it."""
import os
import sys
from pathlib import Path

root_dir = Path(__file__).parent
if str(root_dir) not in sys.path:
    sys.path.insert(0, str(root_dir))

# tests must not write log files into the checkout
os.environ.setdefault("JOBFLOW_LOG_FILE", "0")
