class FmsatError(Exception):
    """Base exception for all fmsat related errors."""
    pass

class ValidationError(FmsatError):
    """Raised when a feature model or configuration fails validation."""
    pass

class TranslationError(FmsatError):
    """Raised when a logical constraint cannot be represented in the backend."""
    pass

class SolverError(FmsatError):
    """Raised when the satisfiability backend fails during a query."""
    pass

class SolverTimeout(SolverError):
    """Raised when a query exceeds its time or conflict budget. The answer is unknown."""
    pass

class SolverUnavailable(SolverError):
    """Raised when the backend cannot be constructed or configured."""
    pass

class StackImbalance(FmsatError):
    """Raised when push/pop scoping on the constraint stack is violated."""
    pass

class EmptyStackError(StackImbalance):
    """Raised when popping from an empty constraint stack."""
    pass
