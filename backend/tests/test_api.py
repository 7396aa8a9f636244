def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}
    assert "X-Request-ID" in r.headers


def test_request_id_is_echoed(client):
    r = client.get("/health", headers={"X-Request-ID": "abc123"})
    assert r.headers["X-Request-ID"] == "abc123"


def test_v1_lists_all_members(client, members):
    r = client.get("/v1/members")
    assert r.status_code == 200
    data = r.json()
    assert [m["username"] for m in data] == ["member1", "member2", "member3", "member4"]
    assert set(data[0]) == {"member_id", "username", "age", "team_id", "team_name"}


def test_v1_filters(client, members):
    r = client.get("/v1/members", params={"teamName": "teamB", "ageGoe": 35})
    assert r.status_code == 200
    assert [m["username"] for m in r.json()] == ["member4"]
    r = client.get("/v1/members", params={"ageGoe": 15, "ageLoe": 30})
    assert [m["age"] for m in r.json()] == [20, 30]
    r = client.get("/v1/members", params={"username": "member2"})
    assert [m["team_name"] for m in r.json()] == ["teamA"]


def test_v2_page_with_sort(client, members):
    r = client.get("/v2/members", params={"page": 0, "size": 3, "sort": "age,desc"})
    assert r.status_code == 200
    page = r.json()
    assert [m["age"] for m in page["content"]] == [40, 30, 20]
    assert page["total_elements"] == 4
    assert page["total_pages"] == 2
    assert page["has_next"] is True


def test_v3_last_page(client, members):
    r = client.get("/v3/members", params={"page": 1, "size": 3})
    assert r.status_code == 200
    page = r.json()
    assert [m["username"] for m in page["content"]] == ["member4"]
    assert page["total_elements"] == 4
    assert page["last"] is True


def test_v2_and_v3_agree(client, members):
    for params in ({"page": 0, "size": 2}, {"page": 1, "size": 2}, {"page": 5, "size": 2}, {"size": 10, "teamName": "teamA"}):
        assert client.get("/v2/members", params=params).json() == client.get("/v3/members", params=params).json()


def test_multiple_sort_params(client, members):
    r = client.get("/v3/members", params=[("sort", "teamName,desc"), ("sort", "age,asc")])
    assert [m["username"] for m in r.json()["content"]] == ["member3", "member4", "member1", "member2"]


def test_bad_paging_input_is_400(client, members):
    assert client.get("/v2/members", params={"sort": "password,asc"}).status_code == 400
    assert client.get("/v2/members", params={"size": 0}).status_code == 400
    assert client.get("/v2/members", params={"page": -1}).status_code == 400
    assert client.get("/v3/members", params={"size": 100000}).status_code == 400


def test_bulk_update_endpoint(client, members):
    r = client.post("/v1/members/bulk-update", json={"condition": {"age_loe": 27}, "username": "비회원"})
    assert r.status_code == 200
    assert r.json() == {"count": 2}
    names = [m["username"] for m in client.get("/v1/members").json()]
    assert names == ["비회원", "비회원", "member3", "member4"]


def test_bulk_update_age_endpoint(client, members):
    r = client.post("/v1/members/bulk-update", json={"condition": {"team_name": "teamA"}, "age_add": 5})
    assert r.json() == {"count": 2}
    assert [m["age"] for m in client.get("/v1/members").json()] == [15, 25, 30, 40]


def test_bulk_update_rejects_bad_payloads(client, members):
    assert client.post("/v1/members/bulk-update", json={}).status_code == 400
    r = client.post("/v1/members/bulk-update", json={"age_add": 1, "age_multiply": 2})
    assert r.status_code == 400


def test_bulk_delete_endpoint(client, members):
    r = client.post("/v1/members/bulk-delete", json={"age_goe": 19})
    assert r.json() == {"count": 3}
    remaining = client.get("/v1/members").json()
    assert [m["age"] for m in remaining] == [10]


def test_bulk_bodies_accept_camel_case_keys(client, members):
    r = client.post("/v1/members/bulk-delete", json={"ageGoe": 19})
    assert r.json() == {"count": 3}
    r = client.post("/v1/members/bulk-update", json={"condition": {"teamName": "teamA"}, "ageAdd": 5})
    assert r.json() == {"count": 1}
    assert [m["age"] for m in client.get("/v1/members").json()] == [15]


def test_bulk_bodies_reject_unknown_keys(client, members):
    r = client.post("/v1/members/bulk-update", json={"condition": {"age_lt": 28}, "username": "x"})
    assert r.status_code == 422
    r = client.post("/v1/members/bulk-update", json={"username": "x", "ageMultiplier": 2})
    assert r.status_code == 422
    r = client.post("/v1/members/bulk-delete", json={"ageGreaterThan": 19})
    assert r.status_code == 422
    names = [m["username"] for m in client.get("/v1/members").json()]
    assert names == ["member1", "member2", "member3", "member4"]
