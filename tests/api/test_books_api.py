"""Books API: the generated handlers behind real FastAPI routes.

Tests cover:
    - The create -> read -> count -> patch -> put -> bulk patch -> delete walkthrough
    - /books/count is not captured by the /books/{bookId} route
    - Malformed JSON bodies get a 400 validation envelope
    - Repeated query parameters filter with $in
    - Health probes
"""


async def _create(client, **fields):
    res = await client.post("/books", json=fields)
    assert res.status_code == 201
    return res.json()["data"]


async def test_books_walkthrough(client):
    brothers = await _create(client, title="Brothers Karamazov", author="Feodor Dostoevsky")
    assert brothers["__v"] == 0

    res = await client.get("/books")
    assert res.json() == {"meta": {}, "data": [brothers]}

    res = await client.get(f"/books/{brothers['_id']}")
    assert res.json() == {"meta": {}, "data": brothers}

    crime = await _create(client, title="Crime and Punishment", author="Feodor Dostoevsky")

    res = await client.get("/books/count")
    assert res.json() == {"meta": {}, "data": 2}

    res = await client.patch(f"/books/{brothers['_id']}", json={"author": "Fyodor Dostoevsky"})
    assert res.json()["data"] == {**brothers, "author": "Fyodor Dostoevsky", "__v": 1}

    res = await client.put(
        f"/books/{crime['_id']}",
        json={"author": "Fyodor Dostoevsky", "title": "Crime & Punishment"},
    )
    assert res.json()["data"] == {
        "_id": crime["_id"], "title": "Crime & Punishment",
        "author": "Fyodor Dostoevsky", "__v": 0,
    }

    res = await client.patch("/books", json={"author": "Greatest Russian Author Ever!"})
    assert res.status_code == 200
    assert res.json() == {"meta": {}}

    res = await client.delete("/books")
    assert res.status_code == 200
    assert res.json() == {"meta": {}}

    res = await client.get("/books/count")
    assert res.json()["data"] == 0


async def test_delete_then_read_is_not_found(client):
    book = await _create(client, title="X", author="Y")

    res = await client.delete(f"/books/{book['_id']}")
    assert res.status_code == 200
    assert res.json() == {"meta": {}}

    res = await client.get(f"/books/{book['_id']}")
    assert res.status_code == 404
    assert res.json()["error"]["code"] == "RESOURCE_NOT_FOUND"


async def test_malformed_json_body(client):
    res = await client.post(
        "/books", content=b"{not json", headers={"Content-Type": "application/json"},
    )
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_empty_body_rejected_for_create(client):
    res = await client.post("/books")
    assert res.status_code == 400


async def test_repeated_query_param_filters_with_in(client):
    await _create(client, title="A", author="Gogol")
    await _create(client, title="B", author="Tolstoy")
    await _create(client, title="C", author="Chekhov")

    res = await client.get("/books", params=[("author", "Gogol"), ("author", "Tolstoy"), ("sort", "title")])

    assert [b["title"] for b in res.json()["data"]] == ["A", "B"]


async def test_garbage_query_string_is_success(client):
    await _create(client, title="A")
    res = await client.get("/books?limit=-1&skip=abc&title__bogus=1&__v__gte=x")
    assert res.status_code == 200
    assert res.json()["data"] == []


async def test_health_probes(client):
    res = await client.get("/health/")
    assert res.json()["data"]["status"] == "healthy"
    res = await client.get("/health/ready")
    assert res.status_code == 200
    assert res.json()["data"]["status"] == "ready"
