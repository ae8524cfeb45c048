"""Error classes raised by grammars and engines"""

__all__ = ["GrammarError", "SemanticFailure"]


class GrammarError(Exception):
    """Grammar was used in a way the engines cannot run.

    This is a programming error in the grammar or its caller, like an
    unanchored pattern or an empty needle. It is raised immediately and is
    never folded into a parse result.
    """


class SemanticFailure(Exception):
    """Raised by a grammar when the text matched but its meaning is invalid.

    The parse engine reports this like an ordinary mismatch at the step where
    the computation stopped. During inversion it rejects the branch.

    Args:
        message: (str) Description of the rejected value

    Attributes:
        message: (str) Description of the rejected value
    """

    def __init__(self, message):
        self.message = message
        super().__init__(message)

    def __eq__(self, other):
        return type(other) is type(self) and other.message == self.message

    def __hash__(self):
        return hash((type(self), self.message))
