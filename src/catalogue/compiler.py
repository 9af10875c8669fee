"""Compile a ``FilterState`` into a product query and its trace.

The store query and the trace text are built side by side, one clause at a
time, so the query shown to the user is always the query that runs. Clause
order is fixed: search, category, colors, storage, sort.

    >>> compiled = compile_filters(FilterState(category="Laptops", sort_by="price-desc"))
    >>> print(compiled.text)
    SELECT * FROM products WHERE 1=1
    AND category = '<category>'
    ORDER BY price DESC
"""

from pydantic import BaseModel, ConfigDict

from catalogue.filters import ALL_CATEGORIES, FilterState
from storefront.store.query import Op, Predicate, Query
from storefront.trace import TraceLog, TraceValue, format_query

FILTER_ACTION = "Filter and Sort Products"
PRODUCTS = "products"

_BASE_CLAUSE = f"SELECT * FROM {PRODUCTS} WHERE 1=1"


class CompiledQuery(BaseModel):
    model_config = ConfigDict(frozen=True)

    query: Query
    clauses: tuple[str, ...]
    params: dict[str, TraceValue]

    @property
    def text(self) -> str:
        return "\n".join(self.clauses)

    @property
    def rendered(self) -> str:
        return format_query(self.text, self.params)


def compile_filters(state: FilterState, trace_log: TraceLog | None = None) -> CompiledQuery:
    """Build the product query for ``state``; record it on ``trace_log`` if given."""
    query = Query()
    clauses = [_BASE_CLAUSE]
    params: dict[str, TraceValue] = {}

    if state.search:
        query = query.where(Predicate(field="name", op=Op.ICONTAINS, value=state.search))
        clauses.append("AND name ILIKE '%<search>%'")
        params["search"] = state.search

    if state.category != ALL_CATEGORIES:
        query = query.where(Predicate(field="category", op=Op.EQ, value=state.category))
        clauses.append("AND category = '<category>'")
        params["category"] = state.category

    if state.colors:
        query = query.where(Predicate(field="color", op=Op.IN, value=state.colors))
        placeholders = ", ".join(f"'<color{i}>'" for i in range(len(state.colors)))
        clauses.append(f"AND color IN ({placeholders})")
        params.update({f"color{i}": color for i, color in enumerate(state.colors)})

    if state.storage:
        # Derived values, inlined rather than parameterised
        capacities = state.storage_gb
        query = query.where(Predicate(field="storage", op=Op.IN, value=capacities))
        clauses.append(f"AND storage IN ({', '.join(str(gb) for gb in capacities)})")

    sort = state.sort
    query = query.sorted_by(sort)
    clauses.append(f"ORDER BY {sort.field} {sort.direction.value}")

    compiled = CompiledQuery(query=query, clauses=tuple(clauses), params=params)
    if trace_log is not None:
        trace_log.log_action(FILTER_ACTION, compiled.text, compiled.params)
    return compiled
