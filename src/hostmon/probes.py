"""Best-effort hardware probes that psutil does not cover.

Each probe returns a plain string and never raises: a probe that cannot run
reports a sentinel value so that the rest of a snapshot is unaffected.
"""

import logging
import platform
import subprocess
from collections.abc import Sequence
from pathlib import Path

logger = logging.getLogger(__name__)

MEMORY_TYPE_UNKNOWN = "Unknown"
MEMORY_TYPE_NO_PERMISSION = "Unknown (root required)"

DEFAULT_MEMORY_PROBE_COMMAND = ("dmidecode", "-t", "17")
DEFAULT_CPUINFO_PATH = "/proc/cpuinfo"


def parse_memory_type(output: str) -> str:
    """
    Pick the memory module type out of ``dmidecode -t 17`` output.

    The first ``Type:`` value mentioning DDR wins. Otherwise the first value
    that is not "Unknown" is used, and failing that MEMORY_TYPE_UNKNOWN.
    """
    found = ""
    for line in output.splitlines():
        stripped = line.strip()
        if not stripped.startswith("Type:"):
            continue
        value = stripped[len("Type:"):].strip()
        if "DDR" in value:
            return value
        if not found and value and value != MEMORY_TYPE_UNKNOWN:
            found = value
    return found or MEMORY_TYPE_UNKNOWN


def probe_memory_type(
    command: Sequence[str] = DEFAULT_MEMORY_PROBE_COMMAND,
    timeout: float = 5.0,
) -> str:
    """
    Resolve the memory module type by running a system inventory tool.

    dmidecode needs root on most systems; any failure to run it is reported
    as MEMORY_TYPE_NO_PERMISSION.
    """
    if not command:
        logger.debug("Memory type probe has no command configured")
        return MEMORY_TYPE_NO_PERMISSION
    try:
        result = subprocess.run(
            list(command),
            capture_output=True,
            text=True,
            timeout=timeout,
            check=True,
        )
    except (OSError, subprocess.SubprocessError) as exc:
        logger.debug("Memory type probe %s unavailable: %s", list(command), exc)
        return MEMORY_TYPE_NO_PERMISSION
    return parse_memory_type(result.stdout)


def parse_cpu_model(cpuinfo: str) -> str:
    """Return the first ``model name`` entry of /proc/cpuinfo content."""
    for line in cpuinfo.splitlines():
        key, sep, value = line.partition(":")
        if sep and key.strip() == "model name":
            return value.strip()
    return ""


def probe_cpu_model(cpuinfo_path: str | Path = DEFAULT_CPUINFO_PATH) -> str:
    """Resolve the CPU model name, or an empty string if it cannot be found."""
    try:
        model = parse_cpu_model(Path(cpuinfo_path).read_text(encoding="utf-8", errors="replace"))
    except OSError:
        model = ""
    if model:
        return model
    return platform.processor() or ""
