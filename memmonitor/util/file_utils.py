import shlex
import shutil
from pathlib import Path
from typing import List, Sequence, Union


def resolve_cmd(cmd: str) -> str:
    p = Path(cmd)
    if p.is_file() or ("/" in cmd or "\\" in cmd):
        return str(p.absolute())
    found = shutil.which(cmd)
    if found:
        return found
    raise FileNotFoundError(
        f"Executable '{cmd}' not found. "
        f"Either provide a path (e.g. './worker') or ensure it's in PATH."
    )


def split_command(command: Union[str, Sequence[str]]) -> List[str]:
    """
    Normalize a command into an argv list.

    A single string (or a one-element list holding a whole command line such
    as "python -c 'print(1)'") is split shell-style; a longer sequence is
    taken as argv verbatim.

    Raises:
        ValueError: If the command is empty
    """
    if isinstance(command, str):
        argv = shlex.split(command)
    elif len(command) == 1 and not Path(command[0]).exists():
        argv = shlex.split(command[0])
    else:
        argv = list(command)

    if not argv:
        raise ValueError("Command must not be empty")
    return argv
