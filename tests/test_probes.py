"""Tests for the memory-type and CPU-model probes."""

import logging
import subprocess

from hostmon import probes
from hostmon.probes import (
    MEMORY_TYPE_NO_PERMISSION,
    MEMORY_TYPE_UNKNOWN,
    parse_cpu_model,
    parse_memory_type,
    probe_cpu_model,
    probe_memory_type,
)

DMIDECODE_OUTPUT = """\
# dmidecode 3.3
Getting SMBIOS data from sysfs.
SMBIOS 3.2.0 present.

Handle 0x003F, DMI type 17, 84 bytes
Memory Device
\tArray Handle: 0x003E
\tTotal Width: Unknown
\tSize: No Module Installed
\tForm Factor: Unknown
\tType: Unknown
\tType Detail: None

Handle 0x0040, DMI type 17, 84 bytes
Memory Device
\tSize: 16 GB
\tForm Factor: SODIMM
\tType: DDR4
\tType Detail: Synchronous
\tSpeed: 3200 MT/s
"""

CPUINFO = """\
processor\t: 0
vendor_id\t: GenuineIntel
cpu family\t: 6
model\t\t: 142
model name\t: Intel(R) Core(TM) i7-8550U CPU @ 1.80GHz
stepping\t: 10

processor\t: 1
vendor_id\t: GenuineIntel
model name\t: Intel(R) Core(TM) i7-8550U CPU @ 1.80GHz
"""


class TestParseMemoryType:
    """Tests for parse_memory_type."""

    def test_ddr_value_found(self):
        """Test the DDR type is picked over an earlier Unknown entry."""
        assert parse_memory_type(DMIDECODE_OUTPUT) == "DDR4"

    def test_type_detail_not_matched(self):
        """Test 'Type Detail:' lines are not mistaken for the type."""
        assert parse_memory_type("\tType Detail: Synchronous\n") == MEMORY_TYPE_UNKNOWN

    def test_ddr_preferred_over_earlier_value(self):
        """Test a DDR value wins over a non-DDR value seen first."""
        output = "\tType: SDRAM\n\tType: LPDDR5\n"
        assert parse_memory_type(output) == "LPDDR5"

    def test_first_known_value_used_without_ddr(self):
        """Test the first non-Unknown value is used when no DDR entry exists."""
        output = "\tType: Unknown\n\tType: SDRAM\n\tType: RAM\n"
        assert parse_memory_type(output) == "SDRAM"

    def test_only_unknown_values(self):
        """Test output with only Unknown types gives the unknown sentinel."""
        assert parse_memory_type("\tType: Unknown\n\tType: Unknown\n") == MEMORY_TYPE_UNKNOWN

    def test_empty_output(self):
        """Test empty output gives the unknown sentinel."""
        assert parse_memory_type("") == MEMORY_TYPE_UNKNOWN


class TestProbeMemoryType:
    """Tests for probe_memory_type."""

    def test_parses_command_output(self):
        """Test the command's stdout is parsed for the memory type."""
        command = ["sh", "-c", "printf 'Memory Device\\n\\tType: DDR5\\n'"]
        assert probe_memory_type(command=command) == "DDR5"

    def test_missing_binary(self):
        """Test a missing probe binary maps to the permission sentinel."""
        command = ["hostmon-no-such-binary-for-tests", "-t", "17"]
        assert probe_memory_type(command=command) == MEMORY_TYPE_NO_PERMISSION

    def test_non_zero_exit(self):
        """Test a failing probe (e.g. not root) maps to the permission sentinel."""
        command = ["sh", "-c", "echo 'Permission denied' >&2; exit 1"]
        assert probe_memory_type(command=command) == MEMORY_TYPE_NO_PERMISSION

    def test_timeout(self, monkeypatch):
        """Test a hung probe maps to the permission sentinel."""

        def fake_run(cmd, **kwargs):
            raise subprocess.TimeoutExpired(cmd, kwargs["timeout"])

        monkeypatch.setattr(probes.subprocess, "run", fake_run)
        assert probe_memory_type(timeout=0.5) == MEMORY_TYPE_NO_PERMISSION

    def test_permission_error(self, monkeypatch):
        """Test an OS permission error maps to the permission sentinel."""

        def fake_run(cmd, **kwargs):
            raise PermissionError(13, "Permission denied")

        monkeypatch.setattr(probes.subprocess, "run", fake_run)
        assert probe_memory_type() == MEMORY_TYPE_NO_PERMISSION

    def test_empty_command(self, monkeypatch):
        """Test an empty command maps to the permission sentinel without running anything."""
        calls = []
        monkeypatch.setattr(probes.subprocess, "run", lambda cmd, **kwargs: calls.append(cmd))

        assert probe_memory_type(command=[]) == MEMORY_TYPE_NO_PERMISSION
        assert probe_memory_type(command=()) == MEMORY_TYPE_NO_PERMISSION
        assert calls == []

    def test_failure_logs_command(self, caplog):
        """Test a failed run is logged with the full command."""
        command = ["hostmon-no-such-binary-for-tests", "-t", "17"]

        with caplog.at_level(logging.DEBUG, logger="hostmon.probes"):
            assert probe_memory_type(command=command) == MEMORY_TYPE_NO_PERMISSION

        assert "hostmon-no-such-binary-for-tests" in caplog.text


class TestCpuModel:
    """Tests for the CPU model probe."""

    def test_parse_first_model_name(self):
        """Test the first model name entry is returned."""
        assert parse_cpu_model(CPUINFO) == "Intel(R) Core(TM) i7-8550U CPU @ 1.80GHz"

    def test_parse_without_model_name(self):
        """Test cpuinfo without a model name gives an empty string."""
        assert parse_cpu_model("processor\t: 0\nHardware\t: BCM2835\n") == ""

    def test_probe_reads_file(self, tmp_path):
        """Test the probe reads the given cpuinfo file."""
        path = tmp_path / "cpuinfo"
        path.write_text(CPUINFO)
        assert probe_cpu_model(path) == "Intel(R) Core(TM) i7-8550U CPU @ 1.80GHz"

    def test_probe_falls_back_to_platform(self, tmp_path, monkeypatch):
        """Test a missing cpuinfo file falls back to platform.processor()."""
        monkeypatch.setattr(probes.platform, "processor", lambda: "arm")
        assert probe_cpu_model(tmp_path / "missing") == "arm"

    def test_probe_nothing_found(self, tmp_path, monkeypatch):
        """Test the probe returns an empty string when nothing is known."""
        monkeypatch.setattr(probes.platform, "processor", lambda: "")
        assert probe_cpu_model(tmp_path / "missing") == ""
