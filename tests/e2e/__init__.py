"""E2E tests running the runner as a real subprocess."""

import os
import shlex
import subprocess
import sys
from pathlib import Path

SRC_DIR = Path(__file__).resolve().parents[2] / "src"


def runner_command() -> str:
    """Shell command that starts the runner with the current interpreter."""
    return f"{shlex.quote(sys.executable)} -m reciperunner"


def run_runner_cli(args, cwd, env=None) -> subprocess.CompletedProcess:
    """
    Run the runner CLI in a subprocess.

    The call chain of any enclosing runner is cleared so results don't
    depend on how the tests themselves were started.
    """
    run_env = dict(os.environ)
    run_env.pop("RECIPE_RUNNER_CALL_CHAIN", None)
    run_env["NO_COLOR"] = "1"
    # Keep user configuration out of the run
    run_env["XDG_CONFIG_HOME"] = str(Path(cwd) / ".config")
    run_env["PYTHONPATH"] = os.pathsep.join(
        filter(None, [str(SRC_DIR), run_env.get("PYTHONPATH")])
    )
    if env:
        run_env.update(env)

    return subprocess.run(
        [sys.executable, "-m", "reciperunner", *args],
        cwd=cwd,
        capture_output=True,
        text=True,
        env=run_env,
    )
