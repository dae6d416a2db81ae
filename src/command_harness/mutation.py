"""Build the parameterized write request submitted for a command."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable

from .errors import SchemaError
from .schema.fields import FieldSpec, validate_fields

_NAME_PATTERN = re.compile(r"^[_A-Za-z][_0-9A-Za-z]*$")


@dataclass(frozen=True)
class MutationParameter:
    """One declared variable of the mutation document."""

    name: str
    graphql_type: str

    @property
    def declaration(self) -> str:
        return f"${self.name}: {self.graphql_type}"


@dataclass(frozen=True)
class CommandMutation:
    """Reusable mutation document for one command.

    The same instance is submitted with every input variant; variables not
    supplied in a submission are simply left out of the request.
    """

    command_name: str
    parameters: tuple[MutationParameter, ...]
    document: str

    @property
    def parameter_names(self) -> list[str]:
        return [param.name for param in self.parameters]


def _graphql_type(field: FieldSpec) -> str:
    return f"{field.type.value}!" if field.required else field.type.value


def build_command_mutation(command_name: str, fields: Iterable[FieldSpec]) -> CommandMutation:
    """Build the mutation document for a command and its input schema.

    Args:
        command_name: Name of the command as exposed by the backend
        fields: Accepted inputs of the command

    Returns:
        CommandMutation whose variables match the field names and types exactly

    Raises:
        SchemaError: If the command name is not an identifier or the schema is malformed
    """
    if not isinstance(command_name, str) or not _NAME_PATTERN.match(command_name):
        raise SchemaError(f"Command name must be a GraphQL identifier, got {command_name!r}.")

    schema = validate_fields(fields)
    parameters = tuple(
        MutationParameter(name=field.name, graphql_type=_graphql_type(field)) for field in schema
    )

    if not parameters:
        document = f"mutation {command_name} {{\n  {command_name}\n}}"
    else:
        declarations = ", ".join(param.declaration for param in parameters)
        arguments = ", ".join(f"{param.name}: ${param.name}" for param in parameters)
        document = (
            f"mutation {command_name}({declarations}) {{\n"
            f"  {command_name}(input: {{ {arguments} }})\n"
            f"}}"
        )

    return CommandMutation(command_name=command_name, parameters=parameters, document=document)
