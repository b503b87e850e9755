#!/usr/bin/env python3
import argparse
import logging
import sys

from bf_errors import BFError
from bf_loader import load_program
from bf_runner import CLOSE, DEFAULT_TAPE_SIZE, OPEN
from debugger import Debugger

DEFAULT_TRACE_STEPS = 2000000


def trace(filename, steps=DEFAULT_TRACE_STEPS, tape_size=DEFAULT_TAPE_SIZE, stdin=None, stdout=None, log=None):
    """Run a program for at most `steps` instructions, reporting every loop event."""
    log = log if log is not None else sys.stderr
    code = load_program(filename)

    dbg = Debugger(code, tape_size=tape_size, stdin=stdin, stdout=stdout)
    m = dbg.machine
    print(f"Loaded {len(m.code)} ops", file=log)

    for i in range(steps):
        if m.finished:
            break

        pc = m.pc
        op = m.code[pc]
        if op == OPEN:
            event = "skip" if m.cell == 0 else "enter"
            print(f"Step {i}: {event} loop at {pc} (ptr={m.ptr}, cell={m.cell})", file=log)
        elif op == CLOSE and m.loop_stack:
            print(f"Step {i}: back to loop at {m.loop_stack[-1]} from {pc}", file=log)

        if not dbg.run_step():
            print(f"Error/Halt at step {i}", file=log)
            break

    if m.finished and dbg.error is None:
        print(f"Finished at step {m.step_count}", file=log)
    print(f"Final PC: {m.pc} Ptr: {m.ptr} Steps: {m.step_count}", file=log)
    return dbg


def main(argv=None):
    parser = argparse.ArgumentParser(prog='bf-trace', description='Trace loop activity of a program')
    parser.add_argument('file', help='program source file')
    parser.add_argument('--steps', type=int, default=DEFAULT_TRACE_STEPS)
    parser.add_argument('--tape-size', type=int, default=DEFAULT_TAPE_SIZE)
    parser.add_argument('--verbose', action='store_true')
    args = parser.parse_args(argv)

    if args.tape_size < 1:
        parser.error("--tape-size must be positive")

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format='%(name)s: %(message)s')

    try:
        dbg = trace(args.file, steps=args.steps, tape_size=args.tape_size)
    except BFError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 1 if dbg.error is not None else 0


if __name__ == "__main__":
    sys.exit(main())
