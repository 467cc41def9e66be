"""
Command line entry point.

    tagscope render TEMPLATE_FILE [DATA_FILE]
    tagscope find TAG [DATA_FILE]

Add --verbose (or -v) anywhere to log resolution at DEBUG level.
"""
import logging
import sys
from pathlib import Path

import yaml

from tagscope.tagscope_context import Context
from tagscope.tagscope_datatypes import TagscopeError, PathSyntaxError
from tagscope.tagscope_renderer import Renderer
from tagscope.tagscope_serialize import load_data_file

USAGE = "usage: tagscope render TEMPLATE [DATA] | tagscope find TAG [DATA] [--verbose]"


def _load(data_path):
    if data_path is None:
        return None
    return load_data_file(data_path)


def run_render(template_path: str, data=None) -> str:
    template = Path(template_path).read_text(encoding="utf-8")
    return Renderer().render(template, data)


def run_find(tag: str, data=None):
    return Context(data).resolve(tag)


def main(argv=None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    verbose = False
    for flag in ("--verbose", "-v"):
        while flag in args:
            args.remove(flag)
            verbose = True
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    if len(args) < 2 or len(args) > 3 or args[0] not in ("render", "find"):
        print(USAGE, file=sys.stderr)
        return 2

    command, target = args[0], args[1]
    data_path = args[2] if len(args) == 3 else None
    try:
        data = _load(data_path)
    except FileNotFoundError as e:
        print(f"Error: file not found: {e.filename}", file=sys.stderr)
        return 1
    except (yaml.YAMLError, ValueError) as e:
        print(f"Error: cannot load data from {data_path}: {e}", file=sys.stderr)
        return 1

    try:
        if command == "render":
            sys.stdout.write(run_render(target, data))
        else:
            print(run_find(target, data))
    except FileNotFoundError as e:
        print(f"Error: file not found: {e.filename}", file=sys.stderr)
        return 1
    except PathSyntaxError as e:
        print(e.format(), file=sys.stderr)
        return 1
    except TagscopeError as e:
        print(f"{type(e).__name__}: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
