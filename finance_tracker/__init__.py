"""Top‑level package for the Finance Tracker.

This file makes the directory a Python package and exposes
convenient names.  The primary modules are:

* ``aggregation`` – pure functions that summarise transactions, budgets and goals
* ``goals`` – recording goal contributions against the running balance
* ``db`` – the SQLite data layer the pages read from and write to
* ``visualization`` – functions that generate Plotly figures

To run the tracker from the command line you can execute:

```bash
python run_tracker.py
```
"""

from . import aggregation  # noqa: F401  # re-exported for convenience
from . import goals  # noqa: F401  # re-exported for convenience
from . import visualization  # noqa: F401  # re-exported for convenience

__all__ = ["aggregation", "goals", "visualization"]
