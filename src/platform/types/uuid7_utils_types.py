"""
Pydantic integration for uuid_utils.UUID

https://docs.pydantic.dev/latest/concepts/types/#customizing-validation-with-__get_pydantic_core_schema__

```python
class MatchResponse(BaseModel):
    id: UtilsUUID7  # JSON string in, uuid_utils.UUID inside, string out
```
"""

from typing import Any
import uuid

from pydantic import GetCoreSchemaHandler, GetJsonSchemaHandler
from pydantic.json_schema import JsonSchemaValue
from pydantic_core import core_schema
from uuid_utils import UUID


def to_uuid(value: Any) -> UUID:
    """Coerce str / stdlib uuid.UUID / uuid_utils.UUID into uuid_utils.UUID"""
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except Exception as e:
        raise ValueError(f'Invalid UUID: {value}') from e


class UtilsUUID7(UUID):
    """Pydantic-compatible uuid_utils.UUID used in request/response schemas"""

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        # json_or_python_schema keeps the schema convertible to OpenAPI JSON schema
        return core_schema.json_or_python_schema(
            json_schema=core_schema.chain_schema(
                [
                    core_schema.str_schema(),
                    core_schema.no_info_plain_validator_function(to_uuid),
                ]
            ),
            python_schema=core_schema.union_schema(
                [
                    core_schema.is_instance_schema(UUID),
                    core_schema.chain_schema(
                        [
                            core_schema.union_schema(
                                [core_schema.str_schema(), core_schema.is_instance_schema(uuid.UUID)]
                            ),
                            core_schema.no_info_plain_validator_function(to_uuid),
                        ]
                    ),
                ]
            ),
            serialization=core_schema.plain_serializer_function_ser_schema(
                str,
                when_used='always',
                return_schema=core_schema.str_schema(),
            ),
        )

    @classmethod
    def __get_pydantic_json_schema__(
        cls, schema: core_schema.CoreSchema, handler: GetJsonSchemaHandler
    ) -> JsonSchemaValue:
        # Bypass handler(schema): the validator chain is irrelevant to OpenAPI
        return {'type': 'string', 'format': 'uuid'}
