"""Homebrew formula rendering from the resolver tables."""

from __future__ import annotations

from ostt_overlay.distribution.install import DOC_FILE, post_install_message
from ostt_overlay.distribution.models import TOOL_NAME, Architecture, OperatingSystem
from ostt_overlay.distribution.resolver import (
    BASE_DEPENDENCIES,
    DEFAULT_VERSION,
    OS_DEPENDENCIES,
    TARGET_TRIPLES,
)

FORMULA_DESC = "Open Speech-to-Text: Terminal application for recording and transcribing audio"
FORMULA_HOMEPAGE = "https://github.com/kristoferlund/ostt"
FORMULA_LICENSE = "MIT"

_OS_BLOCKS = {OperatingSystem.MACOS: "on_macos", OperatingSystem.LINUX: "on_linux"}
_OS_PREDICATES = {OperatingSystem.MACOS: "OS.mac?", OperatingSystem.LINUX: "OS.linux?"}
_URL_TEMPLATE = (
    "https://github.com/kristoferlund/ostt/releases/download/v#{{version}}/{tool}-{triple}.tar.gz"
)


def _ruby_string(value: str) -> str:
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"').replace("#{", "\\#{") + '"'


def _url_block(os_name: OperatingSystem) -> list[str]:
    arm = TARGET_TRIPLES[(os_name, Architecture.ARM64)]
    intel = TARGET_TRIPLES[(os_name, Architecture.X86_64)]
    return [
        f"  {_OS_BLOCKS[os_name]} do",
        "    if Hardware::CPU.arm?",
        f'      url "{_URL_TEMPLATE.format(tool=TOOL_NAME, triple=arm)}"',
        '      sha256 "SKIP"',
        "    else",
        f'      url "{_URL_TEMPLATE.format(tool=TOOL_NAME, triple=intel)}"',
        '      sha256 "SKIP"',
        "    end",
        "  end",
    ]


def _arch_dir_expression() -> list[str]:
    lines = ["    arch_dir = if OS.mac?"]
    for index, os_name in enumerate((OperatingSystem.MACOS, OperatingSystem.LINUX)):
        if index:
            lines.append("               else")
        arm = TARGET_TRIPLES[(os_name, Architecture.ARM64)]
        intel = TARGET_TRIPLES[(os_name, Architecture.X86_64)]
        lines.extend(
            [
                "                 if Hardware::CPU.arm?",
                f'                   "{TOOL_NAME}-{arm}"',
                "                 else",
                f'                   "{TOOL_NAME}-{intel}"',
                "                 end",
            ]
        )
    lines.append("               end")
    return lines


def _post_install_block() -> list[str]:
    common = post_install_message(OperatingSystem.MACOS).split("\n")
    linux_only = post_install_message(OperatingSystem.LINUX).split("\n")[len(common) :]
    lines = ["  def post_install"]
    lines.extend(f"    puts {_ruby_string(line)}" for line in common)
    if linux_only:
        lines.append(f"    if {_OS_PREDICATES[OperatingSystem.LINUX]}")
        lines.extend(f"      puts {_ruby_string(line)}" for line in linux_only)
        lines.append("    end")
    lines.append("  end")
    return lines


def render_formula(version: str = DEFAULT_VERSION) -> str:
    """Render the formula so the descriptor cannot drift from ``resolve``."""
    lines = [
        "# frozen_string_literal: true",
        "",
        f"class {TOOL_NAME.capitalize()} < Formula",
        f"  desc {_ruby_string(FORMULA_DESC)}",
        f"  homepage {_ruby_string(FORMULA_HOMEPAGE)}",
        f"  license {_ruby_string(FORMULA_LICENSE)}",
        f"  version {_ruby_string(version)}",
        "",
    ]
    lines.extend(_url_block(OperatingSystem.MACOS))
    lines.append("")
    lines.extend(_url_block(OperatingSystem.LINUX))
    lines.append("")
    lines.extend(f'  depends_on "{name}"' for name in BASE_DEPENDENCIES)
    for os_name, extra in OS_DEPENDENCIES.items():
        lines.append("")
        lines.append(f"  {_OS_BLOCKS[os_name]} do")
        lines.extend(f'    depends_on "{name}"' for name in extra)
        lines.append("  end")
    lines.extend(["", "  def install"])
    lines.extend(_arch_dir_expression())
    lines.extend(
        [
            "",
            f'    bin.install "#{{arch_dir}}/{TOOL_NAME}"',
            f'    doc.install "#{{arch_dir}}/{DOC_FILE}"',
            "  end",
            "",
        ]
    )
    lines.extend(_post_install_block())
    lines.extend(
        [
            "",
            "  test do",
            f'    system "#{{bin}}/{TOOL_NAME}", "help"',
            "  end",
            "end",
        ]
    )
    return "\n".join(lines) + "\n"
