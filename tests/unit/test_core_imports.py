"""The curriculum package must import without the web or SQL stack."""
import os
import subprocess
import sys
from pathlib import Path

import pytest

SRC = Path(__file__).resolve().parents[2] / "src"

CHECK = """
import sys
import curriculum.authoring, curriculum.enrollment, curriculum.progression, curriculum.sweep
leaked = sorted(
    m for m in sys.modules
    if m.split(".")[0] in {"api", "fastapi", "sqlalchemy", "starlette"}
)
print(",".join(leaked))
"""


@pytest.mark.unit
def test_core_has_no_web_or_sql_imports():
    env = {**os.environ, "PYTHONPATH": str(SRC)}
    result = subprocess.run(
        [sys.executable, "-c", CHECK],
        capture_output=True,
        text=True,
        env=env,
        cwd=str(SRC),
        check=True,
    )
    assert result.stdout.strip() == ""
