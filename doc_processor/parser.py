import json
import re
from typing import Any, List, Sequence

from pydantic import ValidationError as PydanticValidationError

from .exceptions import SchemaError
from .pydantic_schemas import TableResponse

_CODEBLOCK_RE = re.compile(r"^\s*```(?:json)?\s*(.*?)\s*```\s*$", re.DOTALL)
_NEEDS_QUOTING_RE = re.compile(r'[",\n]')


def strip_json_codeblock(text: str) -> str:
    """Remove a surrounding ```json ... ``` fence if the model added one."""
    match = _CODEBLOCK_RE.match(text)
    if match:
        return match.group(1)
    return text.strip()


def parse_table_response(text: str) -> List[List[Any]]:
    """
    Parse the JSON body of a table extraction response.

    Raises:
        SchemaError: if the text is not JSON or has no sequence-of-sequences 'table'.
    """
    try:
        data = json.loads(strip_json_codeblock(text or ""))
    except json.JSONDecodeError as e:
        raise SchemaError(f"Could not parse table data from AI response: {e}", cause=e) from e
    if not isinstance(data, dict) or "table" not in data:
        raise SchemaError("Could not parse table data from AI response. Expected a 'table' property with an array of arrays.")
    try:
        return TableResponse.model_validate(data).table
    except PydanticValidationError as e:
        raise SchemaError(
            "Could not parse table data from AI response. Expected a 'table' property with an array of arrays.",
            cause=e,
        ) from e


def _cell_to_str(cell: Any) -> str:
    if cell is None:
        return ""
    if isinstance(cell, bool):
        return "true" if cell else "false"
    if isinstance(cell, float) and cell.is_integer():
        return str(int(cell))
    return str(cell)


def escape_csv_cell(cell: Any) -> str:
    """Double embedded quotes; quote the cell iff it holds a comma, quote or newline."""
    escaped = _cell_to_str(cell).replace('"', '""')
    if _NEEDS_QUOTING_RE.search(escaped):
        escaped = f'"{escaped}"'
    return escaped


def table_to_csv(table: Sequence[Sequence[Any]]) -> str:
    """Serialize rows to CSV text without a trailing newline."""
    return "\n".join(",".join(escape_csv_cell(cell) for cell in row) for row in table)
