"""Error kinds raised by the parser, the statement engine and the run loop."""


class BasicError(RuntimeError):
    """Base class for every error the interpreter reports."""
    kind = "Error"

    def __init__(self, message):
        self.message = message
        super().__init__(message)


class BasicSyntaxError(BasicError):
    kind = "SyntaxError"


class UndefinedVariable(BasicError):
    kind = "UndefinedVariable"

    def __init__(self, name):
        self.name = name
        super().__init__(f"undefined variable '{name}'")


class UnknownFunction(BasicError):
    kind = "UnknownFunction"

    def __init__(self, name):
        self.name = name
        super().__init__(f"unknown function '{name}'")


class ArityMismatch(BasicError):
    kind = "ArityMismatch"

    def __init__(self, name, expected, got):
        self.name = name
        self.expected = expected
        self.got = got
        super().__init__(f"function '{name}' expects {expected} arguments, got {got}")


class DivisionByZero(BasicError):
    kind = "DivisionByZero"

    def __init__(self):
        super().__init__("division by zero")


class ControlFlowError(BasicError):
    kind = "ControlFlowError"


class InvalidLineNumber(BasicError):
    kind = "InvalidLineNumber"


class LineNotFound(BasicError):
    kind = "LineNotFound"

    def __init__(self, line_number):
        self.line_number = line_number
        super().__init__(f"line {line_number} not found")


class ResourceExhausted(BasicError):
    kind = "ResourceExhausted"


class HostFunctionError(BasicError):
    kind = "FunctionError"

    def __init__(self, name, cause):
        self.name = name
        self.cause = cause
        super().__init__(f"function '{name}' failed: {cause}")


class FunctionAlreadyExists(BasicError):
    kind = "AlreadyExists"

    def __init__(self, name):
        self.name = name
        super().__init__(f"function '{name}' already registered")
