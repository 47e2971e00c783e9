import typing

import sqlalchemy as sa  # type: ignore
from sqlalchemy import orm  # type: ignore


def is_alien_clause(sa_mapper: orm.Mapper, expression: sa.sql.ClauseElement) -> bool:
    if not isinstance(expression, sa.Column):
        return True
    if expression.table is None:
        return True
    return expression.table not in sa_mapper.tables


def is_foreign_key_column(column: sa.Column) -> bool:
    return any(column.key in c.column_keys for c in column.table.foreign_key_constraints)


def default_extract_properties(
    sa_mapper: orm.Mapper,
) -> typing.Iterator[orm.interfaces.MapperProperty]:
    """
    Yields the mapped properties that serializers are built from.

    Foreign key columns are skipped as they are rendered through the
    relationships that use them.
    """
    for prop in sa_mapper.attrs:
        if isinstance(prop, orm.ColumnProperty):
            if is_alien_clause(sa_mapper, prop.expression):
                continue
            if is_foreign_key_column(prop.expression):
                continue
        yield prop


def column_attribute_names(
    properties: typing.Iterable[orm.interfaces.MapperProperty],
) -> typing.List[str]:
    return [
        prop.key
        for prop in properties
        if isinstance(prop, (orm.ColumnProperty, orm.CompositeProperty))
    ]


def relationship_properties(
    properties: typing.Iterable[orm.interfaces.MapperProperty],
) -> typing.List[orm.RelationshipProperty]:
    return [prop for prop in properties if isinstance(prop, orm.RelationshipProperty)]


def identity_key_name(sa_mapper: orm.Mapper) -> str:
    """
    Returns the attribute that identifies instances of the mapped class.

    Classes with a composite primary key fall back to ``id``.
    """
    pkey = sa_mapper.primary_key
    if len(pkey) == 1:
        return sa_mapper.get_property_by_column(pkey[0]).key
    return "id"
