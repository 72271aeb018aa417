from typing import (
    Any,
    AsyncIterator,
    Awaitable,
    Callable,
    Dict,
    Generic,
    List,
    Optional,
    TypeVar,
)

from .constants import NEXT_KEY, PREVIOUS_KEY, RESULTS_KEY

T = TypeVar("T")


class Page(Generic[T]):
    """One page of a cursor paginated listing.

    ``next`` and ``previous`` are opaque URLs. A page without ``next`` is the last one.
    """

    def __init__(
        self,
        results: List[T],
        next: Optional[str] = None,  # pylint: disable=redefined-builtin
        previous: Optional[str] = None,
        parse_result: Optional[Callable[[Any], T]] = None,
    ):
        self.results = results
        self.next = next
        self.previous = previous
        self.parse_result = parse_result

    def __repr__(self):
        return f"Page(results=<{len(self.results)} results>, next={self.next!r}, previous={self.previous!r})"

    def __iter__(self):
        return iter(self.results)

    def __len__(self):
        return len(self.results)

    @classmethod
    def from_json(
        cls,
        payload: Dict[str, Any],
        parse_result: Optional[Callable[[Any], T]] = None,
    ) -> "Page[T]":
        results = payload.get(RESULTS_KEY) or []
        if parse_result is not None:
            results = [parse_result(result) for result in results]
        return cls(
            results=results,
            next=payload.get(NEXT_KEY),
            previous=payload.get(PREVIOUS_KEY),
            parse_result=parse_result,
        )


async def paginate(
    connection, first_page: Callable[[], Awaitable[Page[T]]]
) -> AsyncIterator[List[T]]:
    """Yields the results of each page, following ``next`` cursors to the end.

    The next page is only requested once the previous batch has been consumed,
    with a GET to the cursor URL exactly as the server returned it. Results of
    later pages are parsed the same way as the first page's.
    """
    page = await first_page()
    while True:
        yield page.results
        if not page.next:
            return
        payload = await connection.get(page.next)
        page = Page.from_json(payload, page.parse_result)
