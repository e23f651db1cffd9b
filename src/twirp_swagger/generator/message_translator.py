"""Translate proto messages and enums into Swagger definitions.

Swagger object properties are unordered, so every field carries an
``x-order`` extension and every message description ends with a
``Fields: a, b, c`` line listing the fields in declaration order.
"""

from __future__ import annotations

import logging
from typing import Iterator, List, Optional

from twirp_swagger.comments import description, title_and_example
from twirp_swagger.generator.context import TranslationContext
from twirp_swagger.models import Schema, ref_schema
from twirp_swagger.parser.proto_ast import (
    Comment,
    Enum,
    EnumField,
    Field,
    MapField,
    Message,
    MessageElement,
    NormalField,
    OneOf,
    OneOfField,
)
from twirp_swagger.type_aliases import lookup

logger = logging.getLogger(__name__)

ORDER_EXTENSION = "x-order"


def translate_field(
    field: Field,
    context: TranslationContext,
    field_order: List[str],
    order: int,
    map_key_type: str = "",
    repeated: bool = False,
) -> Schema:
    """Build the property schema of one field and record its name in ``field_order``."""
    # a trailing comment documents the field when there is no leading one
    doc = field.comment or field.inline_comment
    title, example = title_and_example(doc)
    field_description = description(doc)
    extensions = {ORDER_EXTENSION: order}
    field_order.append(field.name)

    if map_key_type:
        value_alias = lookup(field.type_name)
        additional: Optional[Schema] = None
        if value_alias is not None:
            additional = Schema(type=value_alias.type)
        else:
            # only map<key, scalar> is supported
            logger.debug(
                "map field %s has non-scalar value type %s, emitting a plain object",
                field.name,
                field.type_name,
            )
        return Schema(
            title=title,
            description=field_description,
            type="object",
            additional_properties=additional,
            example=example,
            extensions=extensions,
        )

    alias = lookup(field.type_name)
    if alias is not None:
        if repeated:
            return Schema(
                title=title,
                description=field_description,
                type="array",
                format=alias.format,
                items=Schema(type=alias.type, example=example),
                extensions=extensions,
            )
        return Schema(
            title=title,
            description=field_description,
            type=alias.type,
            format=alias.format,
            example=example,
            extensions=extensions,
        )

    ref = ref_schema(context.qualify(field.type_name))
    if repeated:
        return Schema(
            title=title,
            description=field_description,
            type="array",
            items=ref,
            example=example,
            extensions=extensions,
        )
    ref.title = title
    ref.description = field_description
    ref.example = example
    ref.extensions = extensions
    return ref


def _flatten(elements: List[MessageElement]) -> Iterator[object]:
    """Yield message elements with one-of members spliced in at the block position."""
    for element in elements:
        if isinstance(element, OneOf):
            for member in element.elements:
                if isinstance(member, Comment):
                    continue
                if isinstance(member, OneOfField):
                    yield member
                else:
                    logger.debug("oneof %s: unknown element %s", element.name, type(member).__name__)
        else:
            yield element


def translate_message(message: Message, context: TranslationContext) -> str:
    """Add the definition of ``message`` to the context and return its name."""
    definition_name = context.qualify(message.name)
    properties = {}
    field_order: List[str] = []

    for element in _flatten(message.elements):
        order = len(field_order)
        if isinstance(element, MapField):
            schema = translate_field(element, context, field_order, order, map_key_type=element.key_type)
        elif isinstance(element, NormalField):
            schema = translate_field(element, context, field_order, order, repeated=element.repeated)
        elif isinstance(element, OneOfField):
            schema = translate_field(element, context, field_order, order)
        elif isinstance(element, (Comment, Message, Enum)):
            # nested declarations become definitions of their own
            continue
        else:
            logger.debug("message %s: unknown element %s", message.name, type(element).__name__)
            continue
        properties[element.name] = schema

    schema_description = description(message.comment)
    if field_order:
        # JSON object keys have no order, keep it readable in the description
        schema_description += "\n\nFields: " + ", ".join(field_order)

    title, example = title_and_example(message.comment)
    context.definitions[definition_name] = Schema(
        title=title,
        description=schema_description.strip(),
        type="object",
        properties=properties,
        example=example,
    )
    return definition_name


def translate_enum(enum: Enum, context: TranslationContext) -> str:
    """Add ``enum`` as a string definition listing its value names."""
    definition_name = context.qualify(enum.name)
    values: List[str] = []

    for element in enum.elements:
        if isinstance(element, EnumField):
            values.append(element.name)
        elif not isinstance(element, Comment):
            logger.debug("enum %s: unknown element %s", enum.name, type(element).__name__)

    title, _ = title_and_example(enum.comment)
    context.definitions[definition_name] = Schema(
        title=title,
        description=description(enum.comment),
        type="string",
        enum=values,
    )
    return definition_name
