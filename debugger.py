#!/usr/bin/env python3
import argparse
import logging
import sys

from bf_errors import BFError
from bf_loader import load_program, sanitize
from bf_runner import DEFAULT_TAPE_SIZE, Machine


class Colors:
    BLUE = '\033[94m'
    CYAN = '\033[96m'
    GREEN = '\033[92m'
    FAIL = '\033[91m'
    ENDC = '\033[0m'
    BOLD = '\033[1m'
    REVERSE = '\033[7m'


class Debugger:
    def __init__(self, code, tape_size=DEFAULT_TAPE_SIZE, stdin=None, stdout=None):
        self.machine = Machine(sanitize(code), tape_size=tape_size, stdin=stdin, stdout=stdout)
        self.breakpoints = set()
        self.error = None

    @property
    def finished(self):
        return self.error is not None or self.machine.finished

    def run_step(self):
        if self.error is not None:
            return False
        try:
            return self.machine.run_step()
        except BFError as e:
            self.error = e
            print(f"{Colors.FAIL}Error: {e}{Colors.ENDC}")
            return False

    def continue_run(self):
        """
        Step until a breakpoint, the end of the program, or an error.
        Returns True if stopped on a breakpoint.
        """
        while self.run_step():
            if self.machine.pc in self.breakpoints:
                print(f"Breakpoint hit at {self.machine.pc}")
                return True
        return False

    def toggle_breakpoint(self, pc):
        if pc in self.breakpoints:
            self.breakpoints.remove(pc)
            print(f"Breakpoint removed at {pc}")
        else:
            self.breakpoints.add(pc)
            print(f"Breakpoint set at {pc}")

    def snapshot(self, window=8):
        m = self.machine
        start = max(0, m.ptr - window)
        end = min(len(m.tape), m.ptr + window + 1)
        return {
            'pc': m.pc,
            'ptr': m.ptr,
            'step_count': m.step_count,
            'finished': self.finished,
            'tape_size': len(m.tape),
            'loop_stack': list(m.loop_stack),
            'error': str(self.error) if self.error is not None else None,
            'local_tape': {
                'start': start,
                'data': list(m.tape[start:end]),
            },
        }

    def dump_memory(self, addr, count):
        tape = self.machine.tape
        print("Memory Dump:")
        for i in range(addr, min(len(tape), addr + count)):
            print(f"[{i:04}]: {tape[i]}")

    def print_state(self):
        m = self.machine
        state = self.snapshot()
        print(f"\n{Colors.BOLD}--- Step {m.step_count} ---{Colors.ENDC}")
        print(f"PC: {m.pc} / {len(m.code)}")
        print(f"Ptr: {m.ptr}")

        tape_str = ""
        local = state['local_tape']
        for i, cell in enumerate(local['data'], start=local['start']):
            val = f"{cell:03}"
            if i == m.ptr:
                tape_str += f"{Colors.REVERSE}[{val}]{Colors.ENDC} "
            else:
                tape_str += f" {val}  "
        print(f"Loc: {tape_str}")
        print(f"{Colors.CYAN}Loops: {state['loop_stack']}{Colors.ENDC}")

        context_window = 2
        start_op = max(0, m.pc - context_window)
        end_op = min(len(m.code), m.pc + context_window + 1)
        for i in range(start_op, end_op):
            op_str = chr(m.code[i])
            if i == m.pc:
                print(f"{Colors.GREEN}-> {i:04}: {op_str}{Colors.ENDC}")
            else:
                print(f"   {i:04}: {op_str}")

    def read_command(self):
        prompt = f"{Colors.BLUE}(bf-dbg){Colors.ENDC} "
        if self.machine.stdin is not None:
            return input(prompt)

        # ',' reads sys.stdin.buffer too, so the text layer must not read ahead
        print(prompt, end='', flush=True)
        line = sys.stdin.buffer.readline()
        if not line:
            raise EOFError
        return line.decode('utf-8', errors='replace')

    def run(self):
        print("BF Debugger started. Commands: (s)tep, (c)ontinue, (b)reak <pc>, (m)em dump, (q)uit, enter to repeat last")
        last_cmd = 's'
        while not self.finished:
            self.print_state()
            try:
                cmd = self.read_command().strip()
            except EOFError:
                break

            if cmd == '':
                cmd = last_cmd
            last_cmd = cmd

            if cmd.startswith('s'):
                self.run_step()
            elif cmd.startswith('c'):
                self.continue_run()
            elif cmd.startswith('q'):
                break
            elif cmd.startswith('m'):
                try:
                    parts = cmd.split()
                    addr = int(parts[1]) if len(parts) > 1 else self.machine.ptr
                    count = int(parts[2]) if len(parts) > 2 else 20
                except ValueError:
                    print("Usage: m [addr] [count]")
                    continue
                self.dump_memory(addr, count)
            elif cmd.startswith('b'):
                try:
                    self.toggle_breakpoint(int(cmd.split()[1]))
                except (IndexError, ValueError):
                    print("Usage: b <pc>")
            else:
                print(f"Unknown command: {cmd}")

        print("Execution finished.")


def main(argv=None):
    parser = argparse.ArgumentParser(prog='bf-debug', description='Step through a program interactively')
    parser.add_argument('file', help='program source file')
    parser.add_argument('--tape-size', type=int, default=DEFAULT_TAPE_SIZE)
    parser.add_argument('--input', help='read program input from this file instead of stdin')
    parser.add_argument('--verbose', action='store_true')
    args = parser.parse_args(argv)

    if args.tape_size < 1:
        parser.error("--tape-size must be positive")

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format='%(name)s: %(message)s')

    try:
        code = load_program(args.file)
    except BFError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.input:
        try:
            with open(args.input, 'rb') as f:
                dbg = Debugger(code, tape_size=args.tape_size, stdin=f)
                dbg.run()
        except OSError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
    else:
        dbg = Debugger(code, tape_size=args.tape_size)
        dbg.run()
    return 1 if dbg.error is not None else 0


if __name__ == '__main__':
    sys.exit(main())
