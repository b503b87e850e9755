#!/usr/bin/env python3
import argparse
import logging
import sys

from bf_errors import BFError, InputExhausted, StreamError, UnclosedLoop, UnmatchedLoopClose
from bf_loader import load_program

logger = logging.getLogger(__name__)

DEFAULT_TAPE_SIZE = 4096

RIGHT, LEFT, INC, DEC, WRITE, READ, OPEN, CLOSE = b"><+-.,[]"


def skip_loop(code, start):
    """
    Find the ']' matching the '[' at code[start].

    Returns the offset of that ']' relative to start. Nested loops are
    honoured by counting depth, so the scan is linear in the skipped body.
    """
    depth = 0
    for i in range(start, len(code)):
        c = code[i]
        if c == OPEN:
            depth += 1
        elif c == CLOSE:
            depth -= 1
            if depth == 0:
                return i - start
    raise UnclosedLoop(start)


class Machine:
    def __init__(self, code, tape_size=DEFAULT_TAPE_SIZE, stdin=None, stdout=None):
        if tape_size < 1:
            raise ValueError(f"tape_size must be positive, got {tape_size}")
        self.code = bytes(code)
        self.tape = bytearray(tape_size)
        self.ptr = 0
        self.pc = 0
        self.loop_stack = []
        self.step_count = 0

        # None means the process streams, looked up on each access
        self.stdin = stdin
        self.stdout = stdout

    @property
    def finished(self):
        return self.pc >= len(self.code)

    @property
    def cell(self):
        """Value of the cell under the data pointer."""
        return self.tape[self.ptr]

    def read_byte(self):
        stream = self.stdin if self.stdin is not None else sys.stdin.buffer
        try:
            data = stream.read(1)
        except OSError as e:
            raise StreamError(self.pc, e) from e
        if not data:
            raise InputExhausted(self.pc)
        self.tape[self.ptr] = data[0]

    def write_byte(self):
        stream = self.stdout if self.stdout is not None else sys.stdout.buffer
        try:
            stream.write(bytes((self.tape[self.ptr],)))
            stream.flush()
        except OSError as e:
            raise StreamError(self.pc, e) from e

    def run_step(self):
        """Executes one instruction. Returns False once the program has ended."""
        if self.finished:
            return False

        op = self.code[self.pc]
        self.step_count += 1

        if op == RIGHT:
            self.ptr = (self.ptr + 1) % len(self.tape)
        elif op == LEFT:
            self.ptr = (self.ptr - 1) % len(self.tape)
        elif op == INC:
            self.tape[self.ptr] = (self.tape[self.ptr] + 1) % 256
        elif op == DEC:
            self.tape[self.ptr] = (self.tape[self.ptr] - 1) % 256
        elif op == READ:
            self.read_byte()
        elif op == WRITE:
            self.write_byte()
        elif op == OPEN:
            if self.tape[self.ptr] == 0:
                self.pc += skip_loop(self.code, self.pc)
            else:
                self.loop_stack.append(self.pc)
        elif op == CLOSE:
            if not self.loop_stack:
                raise UnmatchedLoopClose(self.pc)
            # Back to the '[' which decides whether to go round again
            self.pc = self.loop_stack.pop()
            return True

        self.pc += 1
        return True

    def run(self):
        """Runs program until it ends."""
        logger.debug("Running %d instructions on a %d cell tape", len(self.code), len(self.tape))
        while self.run_step():
            pass
        logger.debug("Finished after %d steps", self.step_count)


def run_bf(code, tape_size=DEFAULT_TAPE_SIZE, stdin=None, stdout=None):
    machine = Machine(code, tape_size=tape_size, stdin=stdin, stdout=stdout)
    machine.run()
    return machine


def main(argv=None):
    parser = argparse.ArgumentParser(prog='bf', description='Run a program on a byte tape')
    parser.add_argument('file', help='program source file')
    parser.add_argument('--tape-size', type=int, default=DEFAULT_TAPE_SIZE,
                        help=f'number of tape cells (default: {DEFAULT_TAPE_SIZE})')
    parser.add_argument('--verbose', action='store_true', help='log engine activity to stderr')
    args = parser.parse_args(argv)

    if args.tape_size < 1:
        parser.error("--tape-size must be positive")

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format='%(name)s: %(message)s')

    try:
        code = load_program(args.file)
        run_bf(code, tape_size=args.tape_size)
    except BFError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
