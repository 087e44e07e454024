#!/usr/bin/env python
"""Start the pgscope service."""

import os
from pathlib import Path

# Change to script directory so relative paths (cache/, config.yaml) resolve here
script_dir = Path(__file__).parent.resolve()
os.chdir(script_dir)

if __name__ == "__main__":
    if not os.environ.get("PGSCOPE_CONFIG") and (script_dir / "config.yaml").exists():
        os.environ["PGSCOPE_CONFIG"] = str(script_dir / "config.yaml")

    from pgscope_svc.main import run
    run()
