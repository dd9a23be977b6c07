from typing import Optional

from eelios.errors import UndefinedVariable
from eelios.span import Span
from eelios.types import DataType
from eelios.value import Value


class Variable:
    """A named slot holding the current `Value` of an Eelios variable."""
    def __init__(self, name: str, value: Value):
        self.name = name
        self.value = value

    @property
    def datatype(self) -> DataType:
        return self.value.datatype

    def __repr__(self) -> str:
        return f"Variable({self.name!r}, {self.value!r})"


class Environment:
    """One link in a chain of variable bindings.

    Each node holds a single variable and a pointer to its parent. Chains are
    only ever extended by prepending a new node, so a node can be shared by
    any number of evaluators and closures.
    """
    def __init__(self, parent: Optional['Environment'], variable: Variable):
        self.parent = parent
        self.variable = variable

    def get_variable(self, name: str, span: Span) -> Variable:
        env: Optional[Environment] = self
        while env is not None:
            if env.variable.name == name:
                return env.variable
            env = env.parent
        raise UndefinedVariable(name, span)

    def has_variable(self, name: str) -> bool:
        env: Optional[Environment] = self
        while env is not None:
            if env.variable.name == name:
                return True
            env = env.parent
        return False

