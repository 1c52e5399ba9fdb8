"""Subprocess process runner implementation."""

import subprocess
from pathlib import Path
from typing import Dict, List, Optional

import structlog

from ..interfaces.process import ProcessResult, ProcessRunner

log = structlog.get_logger(__name__)


class SubprocessRunner(ProcessRunner):
    """Run processes using the subprocess module."""

    def run(
        self,
        command: List[str],
        capture_output: bool = True,
        timeout: Optional[int] = None,
        check: bool = True,
        cwd: Optional[Path] = None,
        env: Optional[Dict[str, str]] = None,
    ) -> ProcessResult:
        """Run a command."""
        log.debug("process.run", command=command)
        result = subprocess.run(
            command,
            capture_output=capture_output,
            timeout=timeout,
            check=check,
            cwd=str(cwd) if cwd else None,
            env=env,
            text=True,
        )
        return ProcessResult(
            returncode=result.returncode,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
        )
