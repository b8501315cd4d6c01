"""Stand-in for the converter, interpreter, prover and runner binaries.

Test files are JSON documents describing how the tool should behave:
``exit`` (status), ``stdout``, ``stderr``, ``output`` (interpreter output
file contents) and ``convert_exit`` (converter status).
"""

import json
import sys
from pathlib import Path


def _load(path: str) -> dict:
    return json.loads(Path(path).read_text(encoding="utf-8"))


def _emit(doc: dict, role: str, argv: list) -> None:
    sys.stdout.write(doc.get("stdout", ""))
    sys.stderr.write(f"{role}: {' '.join(argv)}\n")
    sys.stderr.write(doc.get("stderr", ""))


def converter(argv: list) -> int:
    doc = _load(argv[0])
    if doc.get("convert_exit", 0):
        sys.stderr.write("conversion failed\n")
        return int(doc["convert_exit"])
    sys.stdout.write(json.dumps(doc))
    return 0


def interpreter(argv: list) -> int:
    _definition, converted, schedule_token, mode_token, output = argv
    if not (schedule_token.endswith("(.KList)") and mode_token.endswith("(.KList)")):
        sys.stderr.write("malformed schedule/mode token\n")
        return 64
    doc = _load(converted)
    Path(output).write_text(doc.get("output", ""), encoding="utf-8")
    _emit(doc, "interpreter", argv)
    return int(doc.get("exit", 0))


def prover(argv: list) -> int:
    doc = _load(argv[0])
    _emit(doc, "prover", argv)
    return int(doc.get("exit", 0))


def runner(argv: list) -> int:
    flags = [arg for arg in argv if arg.startswith("-")]
    program = next(arg for arg in argv[2:] if not arg.startswith("-"))
    doc = _load(program)
    _emit(doc, "runner", argv)
    if "--search" in flags:
        sys.stdout.write("search\n")
    return int(doc.get("exit", 0))


ROLES = {
    "converter": converter,
    "interpreter": interpreter,
    "prover": prover,
    "runner": runner,
}


if __name__ == "__main__":
    sys.exit(ROLES[sys.argv[1]](sys.argv[2:]))
