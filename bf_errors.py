class BFError(Exception):
    """Base class for everything that can stop a program from running."""

    def __init__(self, message):
        self.message = message
        super().__init__(message)


class LoadError(BFError):
    def __init__(self, path, reason):
        self.path = path
        super().__init__(f"Cannot load '{path}': {reason}")


class UnmatchedLoopClose(BFError):
    def __init__(self, pc):
        self.pc = pc
        super().__init__(f"Undeclared loop: ']' at {pc} has no matching '['")


class UnclosedLoop(BFError):
    def __init__(self, pc):
        self.pc = pc
        super().__init__(f"Unclosed loop: '[' at {pc} has no matching ']'")


class StreamError(BFError):
    def __init__(self, pc, reason):
        self.pc = pc
        super().__init__(f"I/O error at {pc}: {reason}")


class InputExhausted(StreamError):
    def __init__(self, pc):
        super().__init__(pc, "unexpected end of input")
