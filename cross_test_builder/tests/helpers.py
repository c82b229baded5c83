from pathlib import Path
from typing import Iterable, List, Optional

from cross_test_builder.core.toolchain import ToolchainLocator
from cross_test_builder.utils.command_runner import CommandResult

ARCH = "thumbv7em-none-eabihf"


class FakeRunner:
    """Stands in for run_command: records calls and fakes cargo/make outputs."""

    def __init__(self, fail: Iterable[str] = (), no_output: Iterable[str] = (), returncode: int = 101,
                 fail_link: Iterable[str] = ()):
        self.fail = set(fail)
        self.fail_link = set(fail_link)
        self.no_output = set(no_output)
        self.returncode = returncode
        self.calls: List[dict] = []

    def __call__(self, cmd, cwd=None, env=None, verbosity=0, check=True):
        cmd = [str(c) for c in cmd]
        cwd = Path(cwd)
        self.calls.append({"cmd": cmd, "cwd": cwd, "env": dict(env or {})})

        if "--example" in cmd:
            name = cmd[cmd.index("--example") + 1]
            arch = cmd[cmd.index("--target") + 1]
            output = cwd / "target" / arch / "debug" / "examples" / f"lib{name}.a"
        else:
            name = env["TEST_NAME"]
            output = cwd / "build" / f"stm32_{name}.elf"

        if name in self.fail or (name in self.fail_link and "--example" not in cmd):
            return CommandResult(args=cmd, returncode=self.returncode)
        if name not in self.no_output:
            output.parent.mkdir(parents=True, exist_ok=True)
            output.write_bytes(b"\x7fELF" if output.suffix == ".elf" else b"!<arch>\n")
        return CommandResult(args=cmd, returncode=0)

    @property
    def cargo_calls(self) -> List[dict]:
        return [c for c in self.calls if "--example" in c["cmd"]]

    @property
    def make_calls(self) -> List[dict]:
        return [c for c in self.calls if "--example" not in c["cmd"]]

    def built(self) -> List[str]:
        return [c["cmd"][c["cmd"].index("--example") + 1] for c in self.cargo_calls]


def make_project(root: Path, sources: Iterable[str] = (), extra: Iterable[str] = (),
                 library_dir: bool = False) -> Path:
    """Lay out a tests project: Cargo.toml, examples/, gcc/."""
    root.mkdir(parents=True, exist_ok=True)
    (root / "Cargo.toml").write_text('[package]\nname = "tests"\n')
    (root / "gcc").mkdir(exist_ok=True)
    examples = root / "examples"
    examples.mkdir(exist_ok=True)
    for name in list(sources) + list(extra):
        (examples / name).write_text("#![no_std]\n")
    if library_dir:
        (root / "target" / ARCH / "debug" / "examples").mkdir(parents=True, exist_ok=True)
    return root


def fake_locator(path: str = "/opt/fake/cargo", output: str = "cargo 1.75.0 (1d8b05cdd 2023-11-20)",
                 seen: Optional[list] = None) -> ToolchainLocator:
    def probe(candidate, flag):
        if seen is not None:
            seen.append((candidate, flag))
        return output
    return ToolchainLocator(resolvers=[lambda: path], probe=probe)
