"""
Parcook parser combinators

Grammars are plain Python functions that call `session.match(node)` for each
piece of input they expect. The same grammar can parse text into a value with
`parcook.parse`, or synthesize the text for a value with `parcook.invert`.
"""

__version__ = "0.2.0"


from ._error import *
from ._grammar import *
from ._engine import *
from ._invert import *
from ._combinators import *
