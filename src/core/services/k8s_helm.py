"""Helm operations — local template rendering.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path


logger = logging.getLogger(__name__)

def _helm_available() -> bool:
    """Check if helm CLI is available."""
    import shutil
    return shutil.which("helm") is not None


def helm_template(
    project_root: Path,
    release: str,
    chart: str,
    *,
    namespace: str = "",
    values_files: list[str] | None = None,
    set_values: list[str] | None = None,
) -> dict:
    """Render Helm templates locally (dry-run without cluster).

    ``set_values`` entries are passed through verbatim as ``--set key=value``.

    Returns:
        {"ok": True, "output": str (rendered YAML)} or {"error": "..."}
    """
    if not _helm_available():
        return {"error": "helm CLI not found"}

    cmd = ["helm", "template", release, chart]
    if namespace:
        cmd.extend(["--namespace", namespace])
    for values_file in values_files or []:
        cmd.extend(["--values", values_file])
    for assignment in set_values or []:
        cmd.extend(["--set", assignment])

    logger.debug("Running %s", " ".join(cmd))
    try:
        r = subprocess.run(cmd, capture_output=True, text=True, timeout=60, cwd=project_root)
        if r.returncode != 0:
            return {"error": r.stderr.strip() or "Helm template failed"}
        return {"ok": True, "output": r.stdout}
    except Exception as e:
        return {"error": str(e)}
