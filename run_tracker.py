#!/usr/bin/env python3
"""Direct launcher for the Finance Tracker.

This script launches Streamlit with the finance_tracker directory as the app root,
enabling automatic page discovery from the pages/ subdirectory.
"""

import os
import subprocess
import sys
from pathlib import Path

# Get the project root and finance_tracker directory
project_root = Path(__file__).parent.resolve()
app_dir = project_root / "finance_tracker"

if __name__ == "__main__":
    # Streamlit discovers pages/ relative to the script being run
    os.chdir(app_dir)
    sys.path.insert(0, str(project_root))
    result = subprocess.run([
        sys.executable, "-m", "streamlit", "run",
        "Home.py",
        *sys.argv[1:],
    ])
    sys.exit(result.returncode)
