import pytest

from replicate_client import Page, Prediction

from .helpers import TEST_BASE_URL, FakeResponse, job_json

NEXT_URL = f"{TEST_BASE_URL}/predictions?cursor=cD0yMDIy"


def test_page_from_json():
    page = Page.from_json(
        {"results": [{"id": "a"}, {"id": "b"}], "next": NEXT_URL, "previous": None}
    )
    assert len(page) == 2
    assert [result["id"] for result in page] == ["a", "b"]
    assert page.next == NEXT_URL
    assert page.previous is None


def test_empty_page():
    page = Page.from_json({"results": [], "next": None})
    assert list(page) == []


@pytest.mark.asyncio
async def test_paginate_follows_cursors(client, fetch):
    fetch.add(
        FakeResponse(
            json_body={"results": [job_json("succeeded", job_id="a")], "next": NEXT_URL}
        ),
        FakeResponse(
            json_body={"results": [job_json("failed", job_id="b")], "next": None}
        ),
    )

    batches = [batch async for batch in client.paginate(client.predictions.list)]

    assert [[p.id for p in batch] for batch in batches] == [["a"], ["b"]]
    assert all(isinstance(p, Prediction) for batch in batches for p in batch)
    assert [call.url for call in fetch.calls] == [
        f"{TEST_BASE_URL}/predictions",
        NEXT_URL,
    ]


@pytest.mark.asyncio
async def test_paginate_is_lazy(client, fetch):
    fetch.add(
        FakeResponse(json_body={"results": [{"id": "m"}], "next": NEXT_URL}),
    )
    async for batch in client.paginate(client.models.list):
        assert batch == [{"id": "m"}]
        break
    assert len(fetch.calls) == 1


@pytest.mark.asyncio
async def test_paginate_empty_listing(client, fetch):
    fetch.add(FakeResponse(json_body={"results": [], "next": None}))
    batches = [batch async for batch in client.paginate(client.collections.list)]
    assert batches == [[]]
